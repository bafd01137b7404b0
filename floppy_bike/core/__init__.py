"""
Floppy Bike Core - The simulation engine.

This module provides the core game simulation, Gymnasium environment wrapper,
and all supporting systems (physics, collision, spawning, scoring, RNG).

Main exports:
- CoreGame: The simulation engine (start / flap / update / restart)
- GameState: IDLE, RUNNING, GAME_OVER
- GameSnapshot: Read-only state pulled by hosts after each update
- FloppyBikeEnv: Gymnasium environment for agent training
- GameConfig: Configuration loaded from game_config.yaml
"""

from floppy_bike.core.config_loader import GameConfig, load_config
from floppy_bike.core.game import CoreGame, FrameResult
from floppy_bike.core.rules import Obstacle
from floppy_bike.core.physics import Vehicle
from floppy_bike.core.state_snapshot import GameSnapshot, GameState
from floppy_bike.core.env_gym import FloppyBikeEnv
from floppy_bike.core.replay_recorder import (
    Replay,
    ReplayRecorder,
    record_episode,
    load_replay,
    verify_replay,
    find_divergence,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "CoreGame",
    "FrameResult",
    "Obstacle",
    "Vehicle",
    "GameSnapshot",
    "GameState",
    "FloppyBikeEnv",
    "Replay",
    "ReplayRecorder",
    "record_episode",
    "load_replay",
    "verify_replay",
    "find_divergence",
    "generate_replay_filename",
]
