"""
State Snapshot
==============

Pull-based, read-only copies of the game state for hosts and renderers,
plus fixed-size numpy packing for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Sequence, Tuple, TYPE_CHECKING
import numpy as np

from floppy_bike.core.config_loader import GameConfig, get_config

if TYPE_CHECKING:
    from floppy_bike.core.physics import Vehicle
    from floppy_bike.core.rules import Obstacle


class GameState(IntEnum):
    """Lifecycle of a run."""
    IDLE = 0
    RUNNING = 1
    GAME_OVER = 2


@dataclass(frozen=True)
class VehicleState:
    """Frozen copy of the vehicle."""
    x: float
    y: float
    width: float
    height: float
    velocity: float
    flap_phase: float

    @staticmethod
    def of(vehicle: "Vehicle") -> "VehicleState":
        return VehicleState(
            x=vehicle.x,
            y=vehicle.y,
            width=vehicle.width,
            height=vehicle.height,
            velocity=vehicle.velocity,
            flap_phase=vehicle.flap_phase
        )

    @property
    def tilt(self) -> float:
        """Cosmetic rotation in radians for drawing."""
        return max(-0.7, min(0.7, self.velocity / 600.0)) - self.flap_phase * 0.15


@dataclass(frozen=True)
class ObstacleState:
    """Frozen copy of an obstacle."""
    x: float
    width: float
    gap_top: float
    gap_bottom: float
    speed: float
    passed: bool

    @staticmethod
    def of(obstacle: "Obstacle") -> "ObstacleState":
        return ObstacleState(
            x=obstacle.x,
            width=obstacle.width,
            gap_top=obstacle.gap_top,
            gap_bottom=obstacle.gap_bottom,
            speed=obstacle.speed,
            passed=obstacle.passed
        )


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete game state at the end of a frame.

    Holds copies only; mutating the game afterwards does not change it.
    """
    state: GameState
    score: int
    frames: int
    elapsed_time: float
    playfield_width: float
    playfield_height: float
    ground_y: float
    spawn_timer: float
    vehicle: VehicleState
    obstacles: Tuple[ObstacleState, ...]
    termination_reason: str = ""

    @property
    def is_over(self) -> bool:
        return self.state == GameState.GAME_OVER

    def next_obstacle(self) -> Optional[ObstacleState]:
        """First obstacle whose right edge has not yet passed the vehicle."""
        for obstacle in self.obstacles:
            if obstacle.x + obstacle.width >= self.vehicle.x:
                return obstacle
        return None


class SnapshotBuilder:
    """Builds game state snapshots and observation dicts with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_obstacles = config.observation.max_obstacles
        self._ground_thickness = config.board.ground_thickness

        # Pre-allocate arrays
        self._obs_x = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_width = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_gap_top = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_gap_bottom = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_speed = np.zeros(self._max_obstacles, dtype=np.float32)
        self._obs_passed = np.zeros(self._max_obstacles, dtype=bool)
        self._obs_mask = np.zeros(self._max_obstacles, dtype=bool)

    @property
    def max_obstacles(self) -> int:
        return self._max_obstacles

    def build(
        self,
        state: GameState,
        score: int,
        frames: int,
        elapsed_time: float,
        playfield_width: float,
        playfield_height: float,
        spawn_timer: float,
        vehicle: "Vehicle",
        obstacles: Sequence["Obstacle"],
        termination_reason: str = ""
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        return GameSnapshot(
            state=state,
            score=score,
            frames=frames,
            elapsed_time=elapsed_time,
            playfield_width=playfield_width,
            playfield_height=playfield_height,
            ground_y=playfield_height - self._ground_thickness,
            spawn_timer=spawn_timer,
            vehicle=VehicleState.of(vehicle),
            obstacles=tuple(ObstacleState.of(o) for o in obstacles),
            termination_reason=termination_reason
        )

    def to_obs_dict(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """
        Pack a snapshot into a Gymnasium observation dictionary.

        Obstacles beyond max_obstacles are dropped (oldest first are kept).
        """
        self._obs_x.fill(0)
        self._obs_width.fill(0)
        self._obs_gap_top.fill(0)
        self._obs_gap_bottom.fill(0)
        self._obs_speed.fill(0)
        self._obs_passed.fill(False)
        self._obs_mask.fill(False)

        count = min(len(snapshot.obstacles), self._max_obstacles)
        for i in range(count):
            o = snapshot.obstacles[i]
            self._obs_x[i] = o.x
            self._obs_width[i] = o.width
            self._obs_gap_top[i] = o.gap_top
            self._obs_gap_bottom[i] = o.gap_bottom
            self._obs_speed[i] = o.speed
            self._obs_passed[i] = o.passed
            self._obs_mask[i] = True

        vehicle = snapshot.vehicle
        upcoming = snapshot.next_obstacle()
        if upcoming is not None:
            next_x = upcoming.x
            next_gap_top = upcoming.gap_top
            next_gap_bottom = upcoming.gap_bottom
        else:
            # No obstacle ahead: report a full-height opening at the far edge
            next_x = snapshot.playfield_width
            next_gap_top = 0.0
            next_gap_bottom = snapshot.ground_y

        return {
            # Core state
            "state": np.array(int(snapshot.state), dtype=np.int32),
            "score": np.array(snapshot.score, dtype=np.int64),
            "frames": np.array(snapshot.frames, dtype=np.int64),
            "spawn_timer": np.array(snapshot.spawn_timer, dtype=np.float32),

            # Playfield
            "playfield_width": np.array(snapshot.playfield_width, dtype=np.float32),
            "playfield_height": np.array(snapshot.playfield_height, dtype=np.float32),
            "ground_y": np.array(snapshot.ground_y, dtype=np.float32),

            # Vehicle
            "vehicle_x": np.array(vehicle.x, dtype=np.float32),
            "vehicle_y": np.array(vehicle.y, dtype=np.float32),
            "vehicle_width": np.array(vehicle.width, dtype=np.float32),
            "vehicle_height": np.array(vehicle.height, dtype=np.float32),
            "vehicle_velocity": np.array(vehicle.velocity, dtype=np.float32),
            "flap_phase": np.array(vehicle.flap_phase, dtype=np.float32),

            # Next obstacle ahead of the vehicle
            "next_obstacle_x": np.array(next_x, dtype=np.float32),
            "next_gap_top": np.array(next_gap_top, dtype=np.float32),
            "next_gap_bottom": np.array(next_gap_bottom, dtype=np.float32),

            # Obstacle arrays
            "obs_x": self._obs_x.copy(),
            "obs_width": self._obs_width.copy(),
            "obs_gap_top": self._obs_gap_top.copy(),
            "obs_gap_bottom": self._obs_gap_bottom.copy(),
            "obs_speed": self._obs_speed.copy(),
            "obs_passed": self._obs_passed.copy(),
            "obs_mask": self._obs_mask.copy(),
        }
