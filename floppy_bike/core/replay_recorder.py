"""
Replay Recorder
===============

Records Floppy Bike episodes as (seed, flap sequence) pairs.

The simulation is deterministic for a seed and an action sequence, so a
replay stores no frames: re-running the actions through a fresh env must
reproduce the recorded score trace frame by frame.

Usage:
    from floppy_bike.core import FloppyBikeEnv, ReplayRecorder

    with ReplayRecorder(FloppyBikeEnv(), agent_name="me") as recorder:
        obs, info = recorder.reset(seed=42)
        done = False
        while not done:
            obs, _, terminated, truncated, info = recorder.step(my_agent(obs))
            done = terminated or truncated
        recorder.save("me_seed42.json")
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
import gymnasium as gym

from floppy_bike.core.config_loader import GameConfig, get_config


REPLAY_VERSION = 1


@dataclass
class Replay:
    """One recorded episode."""
    seed: Optional[int]
    agent: str
    config_hash: str
    frame_dt: float
    actions: List[int] = field(default_factory=list)
    scores: List[int] = field(default_factory=list)
    termination_reason: str = ""

    @property
    def final_score(self) -> int:
        return self.scores[-1] if self.scores else 0

    @property
    def total_steps(self) -> int:
        return len(self.actions)

    @property
    def flaps(self) -> int:
        return sum(self.actions)

    @property
    def duration(self) -> float:
        """Simulated seconds covered by the replay."""
        return self.total_steps * self.frame_dt

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["version"] = REPLAY_VERSION
        data["final_score"] = self.final_score
        data["total_steps"] = self.total_steps
        data["flaps"] = self.flaps
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Replay":
        version = data.get("version", REPLAY_VERSION)
        if version != REPLAY_VERSION:
            raise ValueError(f"Unsupported replay version: {version}")
        if len(data["actions"]) != len(data["scores"]):
            raise ValueError(
                f"Replay has {len(data['actions'])} actions but "
                f"{len(data['scores'])} scores"
            )
        return Replay(
            seed=data["seed"],
            agent=data.get("agent", "unknown"),
            config_hash=data["config_hash"],
            frame_dt=float(data["frame_dt"]),
            actions=[int(a) for a in data["actions"]],
            scores=[int(s) for s in data["scores"]],
            termination_reason=data.get("termination_reason", "")
        )


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Timestamped replay path: {agent_name}_{YYYYMMDD_HHMMSS}[_s{seed}].json
    """
    stem = f"{agent_name}_{datetime.now():%Y%m%d_%H%M%S}"
    if seed is not None:
        stem += f"_s{seed}"
    return Path(directory or ".") / f"{stem}.json"


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Short hash of every gameplay parameter, for replay validation."""
    if config is None:
        config = get_config()
    payload = json.dumps(dataclasses.asdict(config), sort_keys=True)
    return hashlib.md5(payload.encode()).hexdigest()[:8]


def _env_config(env: gym.Env) -> GameConfig:
    return getattr(env.unwrapped, "config", None) or get_config()


def _action_value(action: Union[int, np.ndarray]) -> int:
    if isinstance(action, np.ndarray):
        return int(action.item() if action.ndim == 0 else action[0])
    return int(action)


class ReplayRecorder:
    """
    Env wrapper that records every action and the score after it.

    Recording starts on reset() and stops when the episode terminates or
    truncates; further steps pass through unrecorded.
    """

    def __init__(
        self,
        env: gym.Env,
        agent_name: str = "unknown",
        auto_save_dir: Optional[Union[str, Path]] = None
    ):
        """
        Args:
            env: FloppyBikeEnv (or a wrapper around one).
            agent_name: Stored in the replay.
            auto_save_dir: If set, each finished episode is saved here under
                a generated filename.
        """
        self.env = env
        self.agent_name = agent_name
        self.auto_save_dir = auto_save_dir

        config = _env_config(env)
        self._config_hash = compute_config_hash(config)
        self._frame_dt = config.observation.frame_dt
        self._replay = self._new_replay(None)
        self._recording = False
        self.last_saved: Optional[Path] = None

    def _new_replay(self, seed: Optional[int]) -> Replay:
        return Replay(
            seed=seed,
            agent=self.agent_name,
            config_hash=self._config_hash,
            frame_dt=self._frame_dt
        )

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def replay(self) -> Replay:
        """Episode recorded so far."""
        return self._replay

    @property
    def observation_space(self):
        return self.env.observation_space

    @property
    def action_space(self):
        return self.env.action_space

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Any, Dict]:
        """Reset the env and start a new recording."""
        self._replay = self._new_replay(seed)
        self._recording = True
        return self.env.reset(seed=seed, options=options)

    def step(self, action: Union[int, np.ndarray]) -> Tuple[Any, float, bool, bool, Dict]:
        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            self._replay.actions.append(_action_value(action))
            self._replay.scores.append(int(info["score"]))

            if terminated or truncated:
                reason = info.get("terminated_reason", "") if terminated else ""
                self._replay.termination_reason = reason or "truncated"
                self._recording = False

                if self.auto_save_dir is not None:
                    self.save(directory=self.auto_save_dir)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """Recorded episode as a JSON-ready dict."""
        return self._replay.to_dict()

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Write the replay as JSON.

        Args:
            path: Target file. Generated from agent name and seed if None.
            overwrite: If False, refuse to replace an existing file.
            directory: Directory for the generated filename.

        Returns:
            Path written.

        Raises:
            FileExistsError: If path exists and overwrite is False.
        """
        if path is None:
            path = generate_replay_filename(self.agent_name, self._replay.seed, directory)
        path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.get_replay_data(), f, indent=2)

        self.last_saved = path
        return path

    def close(self) -> None:
        self.env.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def load_replay(path: Union[str, Path]) -> Replay:
    """
    Load a replay written by ReplayRecorder.save().

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a usable replay.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Replay file not found: {path}")

    with open(path, "r") as f:
        return Replay.from_dict(json.load(f))


def find_divergence(replay: Replay, env: gym.Env) -> Optional[int]:
    """
    Re-simulate a replay and locate the first frame that disagrees.

    A frame disagrees when its score differs from the recording, or when the
    episode ends earlier or later than recorded. A replay with no
    termination reason was cut off by its host and only its prefix is checked.

    Args:
        replay: Replay to check.
        env: Env built from the same config as the recording.

    Returns:
        Index of the first diverging step, or None if the run matches.

    Raises:
        ValueError: If the replay was recorded with a different config.
    """
    config_hash = compute_config_hash(_env_config(env))
    if replay.config_hash != config_hash:
        raise ValueError(
            f"Replay config hash {replay.config_hash} does not match "
            f"current config {config_hash}"
        )

    env.reset(seed=replay.seed)
    last = replay.total_steps - 1
    for i, (action, expected) in enumerate(zip(replay.actions, replay.scores)):
        _, _, terminated, truncated, info = env.step(action)
        if info["score"] != expected:
            return i
        ended = terminated or truncated
        if ended and i != last:
            return i
        if i == last and ended != bool(replay.termination_reason):
            return i
        if terminated and info["terminated_reason"] != replay.termination_reason:
            return i

    return None


def verify_replay(replay: Replay, env: gym.Env) -> bool:
    """True if re-simulating the replay reproduces it exactly."""
    return find_divergence(replay, env) is None


def record_episode(
    env: gym.Env,
    agent_fn: Callable[[Dict[str, np.ndarray]], int],
    seed: Optional[int],
    save_path: Optional[Union[str, Path]] = None,
    agent_name: str = "unknown"
) -> Replay:
    """
    Run one episode to the end while recording it.

    Args:
        env: Environment to play in.
        agent_fn: Maps an observation to 0 (glide) or 1 (flap).
        seed: Episode seed.
        save_path: If provided, the replay is also written here.
        agent_name: Stored in the replay.

    Returns:
        The recorded replay.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)
    obs, _ = recorder.reset(seed=seed)

    done = False
    while not done:
        obs, _, terminated, truncated, _ = recorder.step(agent_fn(obs))
        done = terminated or truncated

    if save_path:
        recorder.save(save_path)

    return recorder.replay
