"""
Evaluation Harness
==================

Plays an agent through every seed of the seed bank and reports how far it
got: obstacles passed, frames survived and what ended each run.

Usage:
    python -m floppy_bike.evaluation.run_eval --agent contestants/baseline_gap_follower
    python -m floppy_bike.evaluation.run_eval --agent my_agent.py --max-frames 3600 \\
        --replay-dir replays/ --output results.json
"""

from __future__ import annotations

import argparse
import dataclasses
import importlib.util
import json
import os
import sys
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
import numpy as np

from floppy_bike.core.env_gym import FloppyBikeEnv
from floppy_bike.core.replay_recorder import ReplayRecorder


AgentFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class EvalResult:
    """Outcome of one seed."""
    seed: int
    final_score: int
    frames: int
    flaps: int
    survival_time: float
    termination_reason: str
    wall_time: float
    actions: Optional[List[int]] = None


@dataclass
class EvalSummary:
    """Aggregate over all seeds."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_survival_time: float
    best_seed: int
    endings: Dict[str, int]
    total_time: float
    results: List[EvalResult] = field(default_factory=list)


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """
    Load the evaluation seed bank.

    Args:
        path: Path to seed_bank.json. Uses the bundled bank if None.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    if not os.path.exists(path):
        raise FileNotFoundError(f"Seed bank not found: {path}")

    with open(path, "r") as f:
        return [int(s) for s in json.load(f)["seeds"]]


def _import_agent_module(agent_file: Path):
    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)
    return module


def load_agent(agent_path: Union[str, Path]) -> AgentFn:
    """
    Load an agent's act function.

    The module (agent.py inside a directory, or the file itself) may provide,
    in order of preference, a FloppyAgent class, a create_agent() factory or
    a plain act(obs) function.

    Raises:
        FileNotFoundError: If there is no agent file.
        ImportError: If the file cannot be imported.
        AttributeError: If the module exposes none of the above.
    """
    agent_path = Path(agent_path)
    agent_file = agent_path / "agent.py" if agent_path.is_dir() else agent_path

    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module = _import_agent_module(agent_file)

    if hasattr(module, "FloppyAgent"):
        agent = module.FloppyAgent()
    elif hasattr(module, "create_agent"):
        agent = module.create_agent()
    elif hasattr(module, "act"):
        return module.act
    else:
        raise AttributeError(
            "Agent module must define a 'FloppyAgent' class, a 'create_agent' "
            "factory or an 'act' function"
        )

    if not hasattr(agent, "act"):
        raise AttributeError(f"{type(agent).__name__} has no 'act' method")
    return agent.act


def evaluate_single_seed(
    agent_fn: AgentFn,
    seed: int,
    record_actions: bool = False,
    max_frames: Optional[int] = None,
    verbose: bool = False,
    replay_dir: Optional[Union[str, Path]] = None,
    agent_name: str = "agent"
) -> EvalResult:
    """
    Play one seed until the bike crashes or the frame limit is hit.

    Args:
        agent_fn: Maps an observation to 0 (glide) or 1 (flap).
        seed: Episode seed.
        record_actions: Keep the action list on the result.
        max_frames: Stop after this many frames. Uses the config cap if None.
        verbose: Print a one-line result.
        replay_dir: If set, save a replay of the run in this directory.
        agent_name: Name stored in saved replays.

    Returns:
        EvalResult for this seed.
    """
    env = FloppyBikeEnv()
    frame_dt = env.config.observation.frame_dt
    runner = ReplayRecorder(env, agent_name=agent_name) if replay_dir else env

    obs, info = runner.reset(seed=seed)

    actions: List[int] = []
    start_time = time.time()

    while True:
        action = int(agent_fn(obs))
        actions.append(action)

        obs, _, terminated, truncated, info = runner.step(action)
        if terminated or truncated:
            break
        if max_frames is not None and len(actions) >= max_frames:
            break

    reason = info["terminated_reason"] if terminated else "truncated"

    if replay_dir:
        runner.save(directory=replay_dir)

    result = EvalResult(
        seed=seed,
        final_score=int(info["score"]),
        frames=len(actions),
        flaps=sum(actions),
        survival_time=len(actions) * frame_dt,
        termination_reason=reason,
        wall_time=time.time() - start_time,
        actions=actions if record_actions else None
    )

    runner.close()

    if verbose:
        print(f"  Seed {seed}: score={result.final_score}, "
              f"survived={result.survival_time:.1f}s, flaps={result.flaps}, "
              f"ended by {reason}")

    return result


def summarize(results: List[EvalResult], total_time: float = 0.0) -> EvalSummary:
    """Aggregate per-seed results."""
    if not results:
        raise ValueError("Cannot summarize an empty result list")

    scores = [r.final_score for r in results]
    best = max(results, key=lambda r: (r.final_score, r.frames))

    return EvalSummary(
        mean_score=float(np.mean(scores)),
        std_score=float(np.std(scores)),
        min_score=int(min(scores)),
        max_score=int(max(scores)),
        median_score=float(np.median(scores)),
        mean_survival_time=float(np.mean([r.survival_time for r in results])),
        best_seed=best.seed,
        endings=dict(Counter(r.termination_reason for r in results)),
        total_time=total_time,
        results=results
    )


def print_summary(summary: EvalSummary) -> None:
    print()
    print("=" * 50)
    print("EVALUATION SUMMARY")
    print("=" * 50)
    print(f"Seeds evaluated: {len(summary.results)}")
    print(f"Mean score:      {summary.mean_score:.2f} (std {summary.std_score:.2f})")
    print(f"Min / max:       {summary.min_score} / {summary.max_score}")
    print(f"Median score:    {summary.median_score:.2f}")
    print(f"Mean survival:   {summary.mean_survival_time:.1f}s")
    print(f"Best seed:       {summary.best_seed}")
    for reason, count in sorted(summary.endings.items()):
        print(f"Ended by {reason + ':':<8}{count}")
    print(f"Total time:      {summary.total_time:.2f}s")
    print("=" * 50)


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    record_actions: bool = False,
    max_frames: Optional[int] = None,
    verbose: bool = True,
    replay_dir: Optional[Union[str, Path]] = None,
    agent_name: str = "agent"
) -> EvalSummary:
    """
    Evaluate an agent on every seed.

    Args:
        agent_fn: Maps an observation to 0 (glide) or 1 (flap).
        seeds: Seeds to play. Uses seed_bank.json if None.
        record_actions: Keep action lists on the results.
        max_frames: Per-seed frame limit. Uses the config cap if None.
        verbose: Print progress and the summary.
        replay_dir: If set, save one replay per seed here.
        agent_name: Name stored in saved replays.
    """
    if seeds is None:
        seeds = load_seed_bank()

    if verbose:
        print(f"Evaluating on {len(seeds)} seeds...")

    total_start = time.time()
    results = []
    for i, seed in enumerate(seeds):
        if verbose:
            print(f"[{i+1}/{len(seeds)}] Running seed {seed}...")
        results.append(evaluate_single_seed(
            agent_fn,
            seed,
            record_actions=record_actions,
            max_frames=max_frames,
            verbose=verbose,
            replay_dir=replay_dir,
            agent_name=agent_name
        ))

    summary = summarize(results, total_time=time.time() - total_start)

    if verbose:
        print_summary(summary)

    return summary


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and per-seed results (without actions) as JSON."""
    data = dataclasses.asdict(summary)
    for result in data["results"]:
        result.pop("actions", None)
    data["agent"] = agent_name
    data["timestamp"] = time.strftime("%Y-%m-%d %H:%M:%S")

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate a Floppy Bike agent")
    parser.add_argument(
        "--agent",
        type=str,
        required=True,
        help="Path to agent directory or agent.py file"
    )
    parser.add_argument(
        "--seeds",
        type=str,
        default=None,
        help="Path to seed bank JSON (uses default if not specified)"
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Per-seed frame limit (uses config cap if not specified)"
    )
    parser.add_argument(
        "--replay-dir",
        type=str,
        default=None,
        help="Save a replay of every seed in this directory"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )

    args = parser.parse_args()
    agent_name = Path(args.agent).stem if Path(args.agent).is_file() else Path(args.agent).name

    print(f"Loading agent from {args.agent}...")
    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    seeds = load_seed_bank(args.seeds) if args.seeds else None

    summary = evaluate_agent(
        agent_fn,
        seeds=seeds,
        max_frames=args.max_frames,
        verbose=not args.quiet,
        replay_dir=args.replay_dir,
        agent_name=agent_name
    )

    if args.output:
        save_results(summary, agent_name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
