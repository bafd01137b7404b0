"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class VehicleConfig:
    """Vehicle geometry and starting position."""
    x: float                      # Fixed horizontal position
    width: float
    height: float
    start_height_fraction: float  # Start y as a fraction of playfield height


@dataclass(frozen=True)
class PhysicsConfig:
    """Integration parameters."""
    gravity: float          # Downward acceleration (units/s^2)
    flap_impulse: float     # Velocity assigned on flap (negative is up)
    min_step_rate: float    # Slow frames integrate no coarser than 1 / rate
    flap_decay_rate: float  # Flap phase lost per second

    @property
    def max_dt(self) -> float:
        """Step ceiling for slow frames."""
        return 1.0 / self.min_step_rate


@dataclass(frozen=True)
class BoardConfig:
    """Playfield furniture."""
    ground_thickness: float

    def ground_y(self, playfield_height: float) -> float:
        """Y coordinate of the ground line."""
        return playfield_height - self.ground_thickness


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle geometry and spawn timing."""
    width: float
    spawn_offset_x: float
    despawn_x: float
    min_gap_top: float
    ground_margin: float
    spawn_interval_min: float
    spawn_interval_max: float


@dataclass(frozen=True)
class DifficultyConfig:
    """Score-driven speed and gap scaling."""
    base_speed: float
    speed_per_point: float
    max_speed_bonus: float
    base_gap: float
    gap_shrink_per_point: float
    max_gap_shrink: float
    min_gap: float

    @property
    def max_speed(self) -> float:
        return self.base_speed + self.max_speed_bonus


@dataclass(frozen=True)
class ObservationConfig:
    """Gymnasium observation parameters."""
    max_obstacles: int
    frame_rate: float
    playfield_width: int
    playfield_height: int
    image_width: int
    image_height: int

    @property
    def frame_dt(self) -> float:
        """Simulated seconds per env step."""
        return 1.0 / self.frame_rate


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits."""
    max_frames: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    vehicle: VehicleConfig
    physics: PhysicsConfig
    board: BoardConfig
    obstacles: ObstacleConfig
    difficulty: DifficultyConfig
    observation: ObservationConfig
    caps: CapsConfig


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    vehicle = config.vehicle
    if vehicle.width <= 0 or vehicle.height <= 0:
        raise ValueError(
            f"Vehicle size must be positive, got {vehicle.width}x{vehicle.height}"
        )
    if not 0.0 <= vehicle.start_height_fraction <= 1.0:
        raise ValueError(
            f"start_height_fraction must be in [0, 1], got {vehicle.start_height_fraction}"
        )

    if config.physics.min_step_rate <= 0:
        raise ValueError(
            f"min_step_rate must be positive, got {config.physics.min_step_rate}"
        )

    obstacles = config.obstacles
    if obstacles.width <= 0:
        raise ValueError(f"Obstacle width must be positive, got {obstacles.width}")
    if obstacles.spawn_interval_min > obstacles.spawn_interval_max:
        raise ValueError(
            f"spawn_interval_min ({obstacles.spawn_interval_min}) exceeds "
            f"spawn_interval_max ({obstacles.spawn_interval_max})"
        )

    difficulty = config.difficulty
    if difficulty.min_gap <= 0:
        raise ValueError(f"min_gap must be positive, got {difficulty.min_gap}")
    if difficulty.min_gap > difficulty.base_gap:
        raise ValueError(
            f"min_gap ({difficulty.min_gap}) exceeds base_gap ({difficulty.base_gap})"
        )

    if config.observation.max_obstacles <= 0:
        raise ValueError(
            f"max_obstacles must be positive, got {config.observation.max_obstacles}"
        )
    if config.observation.frame_rate <= 0:
        raise ValueError(
            f"frame_rate must be positive, got {config.observation.frame_rate}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    vehicle_data = raw["vehicle"]
    vehicle = VehicleConfig(
        x=float(vehicle_data["x"]),
        width=float(vehicle_data["width"]),
        height=float(vehicle_data["height"]),
        start_height_fraction=float(vehicle_data.get("start_height_fraction", 0.4))
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        flap_impulse=float(physics_data["flap_impulse"]),
        min_step_rate=float(physics_data["min_step_rate"]),
        flap_decay_rate=float(physics_data.get("flap_decay_rate", 3.5))
    )

    board_data = raw["board"]
    board = BoardConfig(
        ground_thickness=float(board_data["ground_thickness"])
    )

    obstacle_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        width=float(obstacle_data["width"]),
        spawn_offset_x=float(obstacle_data["spawn_offset_x"]),
        despawn_x=float(obstacle_data["despawn_x"]),
        min_gap_top=float(obstacle_data["min_gap_top"]),
        ground_margin=float(obstacle_data["ground_margin"]),
        spawn_interval_min=float(obstacle_data["spawn_interval_min"]),
        spawn_interval_max=float(obstacle_data["spawn_interval_max"])
    )

    difficulty_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        base_speed=float(difficulty_data["base_speed"]),
        speed_per_point=float(difficulty_data["speed_per_point"]),
        max_speed_bonus=float(difficulty_data["max_speed_bonus"]),
        base_gap=float(difficulty_data["base_gap"]),
        gap_shrink_per_point=float(difficulty_data["gap_shrink_per_point"]),
        max_gap_shrink=float(difficulty_data["max_gap_shrink"]),
        min_gap=float(difficulty_data["min_gap"])
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_obstacles=int(obs_data.get("max_obstacles", 8)),
        frame_rate=float(obs_data.get("frame_rate", 60)),
        playfield_width=int(obs_data.get("playfield_width", 400)),
        playfield_height=int(obs_data.get("playfield_height", 700)),
        image_width=int(obs_data.get("image_width", 200)),
        image_height=int(obs_data.get("image_height", 350))
    )

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_frames=int(caps_data.get("max_frames", 36000))
    )

    config = GameConfig(
        vehicle=vehicle,
        physics=physics,
        board=board,
        obstacles=obstacles,
        difficulty=difficulty,
        observation=observation,
        caps=caps
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
