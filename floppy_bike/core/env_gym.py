"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the Floppy Bike game.
Reward is always 0.0 - agents must compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from floppy_bike.core.config_loader import GameConfig, load_config
from floppy_bike.core.game import CoreGame
from floppy_bike.core.state_snapshot import GameSnapshot, GameState


class FloppyBikeEnv(gym.Env):
    """
    Floppy Bike as a Gymnasium environment.

    Action Space:
        Discrete(2). 0 = glide, 1 = flap before the frame is simulated.

    Observation Space:
        Dict containing vehicle, next-gap and padded obstacle arrays.

    Step:
        One fixed frame of 1 / observation.frame_rate seconds.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, frames, terminated_reason, etc.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 60,
    }

    GLIDE = 0
    FLAP = 1

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        playfield_width: Optional[int] = None,
        playfield_height: Optional[int] = None,
        image_obs: bool = False,
        debug: bool = False,
    ):
        """
        Initialize Floppy Bike environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "rgb_array" for numpy frames, None for headless.
            playfield_width: Override playfield width.
            playfield_height: Override playfield height.
            image_obs: If True, include board_rgb in observations.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode: {render_mode}")

        # Load config
        self._config = load_config(config_path)

        self.render_mode = render_mode
        self._image_obs = image_obs
        self._debug = debug

        obs_cfg = self._config.observation
        self._width = float(playfield_width or obs_cfg.playfield_width)
        self._height = float(playfield_height or obs_cfg.playfield_height)
        self._frame_dt = obs_cfg.frame_dt
        self._max_frames = self._config.caps.max_frames

        # Initialize game
        self._game = CoreGame(config=self._config)

        # Initialize renderer (lazy)
        self._renderer = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] FloppyBikeEnv initialized")
            print(f"[DEBUG]   Playfield: {self._width:.0f}x{self._height:.0f}")
            print(f"[DEBUG]   Frame dt: {self._frame_dt:.4f}s")
            print(f"[DEBUG]   Max obstacles: {obs_cfg.max_obstacles}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obs = self._config.observation.max_obstacles
        w = self._width
        h = self._height

        def scalar(low: float, high: float, dtype=np.float32) -> spaces.Box:
            return spaces.Box(low=low, high=high, shape=(), dtype=dtype)

        def row(low: float, high: float) -> spaces.Box:
            return spaces.Box(low=low, high=high, shape=(max_obs,), dtype=np.float32)

        obs_dict = {
            # Core state
            "state": scalar(0, len(GameState) - 1, np.int32),
            "score": scalar(0, np.iinfo(np.int64).max, np.int64),
            "frames": scalar(0, np.iinfo(np.int64).max, np.int64),
            "spawn_timer": scalar(-np.inf, np.inf),

            # Playfield
            "playfield_width": scalar(0, np.inf),
            "playfield_height": scalar(0, np.inf),
            "ground_y": scalar(0, h),

            # Vehicle
            "vehicle_x": scalar(0, w),
            "vehicle_y": scalar(0, h),
            "vehicle_width": scalar(0, w),
            "vehicle_height": scalar(0, h),
            "vehicle_velocity": scalar(-np.inf, np.inf),
            "flap_phase": scalar(0, 1),

            # Next obstacle
            "next_obstacle_x": scalar(-np.inf, np.inf),
            "next_gap_top": scalar(0, h),
            "next_gap_bottom": scalar(0, h),

            # Obstacle arrays
            "obs_x": row(-np.inf, np.inf),
            "obs_width": row(0, np.inf),
            "obs_gap_top": row(0, h),
            "obs_gap_bottom": row(0, h),
            "obs_speed": row(0, np.inf),
            "obs_passed": spaces.MultiBinary(max_obs),
            "obs_mask": spaces.MultiBinary(max_obs),
        }

        if self._image_obs:
            obs_dict["board_rgb"] = spaces.Box(
                low=0,
                high=255,
                shape=(
                    self._config.observation.image_height,
                    self._config.observation.image_width,
                    3
                ),
                dtype=np.uint8
            )

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and start a new run.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.start(self._width, self._height, seed=seed)

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 1 to flap, 0 to glide.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])
        action = int(action)
        if action not in (self.GLIDE, self.FLAP):
            raise ValueError(f"Action must be 0 or 1, got {action}")

        if action == self.FLAP:
            self._game.flap()
        frame = self._game.update(self._frame_dt)

        snapshot = self._game.snapshot()
        obs = self._snapshot_to_obs(snapshot)

        reward = 0.0
        terminated = snapshot.is_over
        truncated = not terminated and snapshot.frames >= self._max_frames

        info = self._game.get_info()
        info["delta_score"] = frame.delta_score
        info["spawned"] = frame.spawned

        if self._debug:
            print(f"[DEBUG] Step: action={action}, y={snapshot.vehicle.y:.1f}, "
                  f"vy={snapshot.vehicle.velocity:.1f}, score={snapshot.score}")
            if terminated:
                print(f"[DEBUG] TERMINATED: {info.get('terminated_reason', 'unknown')}")

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        obs = self._game.observation(snapshot)

        if self._image_obs:
            obs["board_rgb"] = self._render_to_array(
                self._config.observation.image_width,
                self._config.observation.image_height
            )

        return obs

    def _render_to_array(self, width: int, height: int) -> np.ndarray:
        """Render board to RGB array."""
        if self._renderer is None:
            from floppy_bike.core.render_solid import SolidRenderer
            self._renderer = SolidRenderer()

        return self._renderer.render(self._game.get_render_data(), width, height)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array at playfield resolution if render_mode is "rgb_array",
            None otherwise.
        """
        if self.render_mode == "rgb_array":
            return self._render_to_array(int(self._width), int(self._height))
        return None

    def close(self) -> None:
        """Clean up resources."""
        self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
