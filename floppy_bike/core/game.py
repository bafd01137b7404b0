"""
Core Game
=========

Simulation engine combining vehicle physics, spawning, scoring and rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import numpy as np

from floppy_bike.core.collision import hits_obstacle
from floppy_bike.core.config_loader import GameConfig, get_config
from floppy_bike.core.physics import Vehicle, VehiclePhysics
from floppy_bike.core.rng import SpawnRng
from floppy_bike.core.rules import GameRules, Obstacle
from floppy_bike.core.scoring import ScoreEvent, ScoreTracker
from floppy_bike.core.state_snapshot import (
    GameSnapshot,
    GameState,
    SnapshotBuilder,
    VehicleState,
)


@dataclass
class FrameResult:
    """What happened during one update() call."""
    dt: float
    spawned: bool = False
    scored: List[ScoreEvent] = field(default_factory=list)
    removed: int = 0
    game_over: bool = False
    termination_reason: str = ""

    @property
    def delta_score(self) -> int:
        return sum(event.points for event in self.scored)


class CoreGame:
    """
    Main game simulation class.

    Owns all mutable state and exposes the host operations:
    start(), flap(), update(), restart(). Hosts read state through
    properties or snapshot() after each update; nothing is pushed.

    Lifecycle: IDLE -> RUNNING (start) -> GAME_OVER (crash) -> RUNNING (restart).
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        playfield_width: float = 0.0,
        playfield_height: float = 0.0
    ):
        """
        Initialize game in the IDLE state.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for obstacle placement and timing.
            playfield_width: Initial playfield width; start() may replace it.
            playfield_height: Initial playfield height; start() may replace it.
        """
        if config is None:
            config = get_config()

        self._config = config

        # Initialize subsystems
        self._rng = SpawnRng(config, seed)
        self._physics = VehiclePhysics(config)
        self._rules = GameRules(self._rng, config)
        self._scorer = ScoreTracker()
        self._snapshot_builder = SnapshotBuilder(config)

        self._playfield_width = float(playfield_width)
        self._playfield_height = float(playfield_height)

        # Game state
        self._vehicle: Vehicle = self._physics.create_vehicle(self._playfield_height)
        self._obstacles: List[Obstacle] = []
        self._state = GameState.IDLE
        self._termination_reason: str = ""
        self._frames: int = 0
        self._elapsed_time: float = 0.0

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def state(self) -> GameState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == GameState.RUNNING

    @property
    def is_over(self) -> bool:
        """True if the vehicle has crashed."""
        return self._state == GameState.GAME_OVER

    @property
    def termination_reason(self) -> str:
        """Reason for game end, or empty string."""
        return self._termination_reason

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def vehicle(self) -> Vehicle:
        """Live vehicle (read access for hosts)."""
        return self._vehicle

    @property
    def obstacles(self) -> Tuple[Obstacle, ...]:
        """Live obstacles in spawn order."""
        return tuple(self._obstacles)

    @property
    def playfield_width(self) -> float:
        return self._playfield_width

    @property
    def playfield_height(self) -> float:
        return self._playfield_height

    @property
    def ground_y(self) -> float:
        """Y coordinate of the lethal ground line."""
        return self._physics.ground_y(self._playfield_height)

    @property
    def spawn_timer(self) -> float:
        """Seconds until the next obstacle spawns."""
        return self._rules.spawn.timer

    @property
    def frames(self) -> int:
        """Number of update() calls that advanced the simulation."""
        return self._frames

    @property
    def elapsed_time(self) -> float:
        """Simulated seconds since start, after dt clamping."""
        return self._elapsed_time

    @property
    def rules(self) -> GameRules:
        return self._rules

    @property
    def rng(self) -> SpawnRng:
        return self._rng

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Return to IDLE with the stored playfield.

        Args:
            seed: New random seed. Keeps the current stream if None.

        Returns:
            Idle game snapshot.
        """
        self._rng.reset(seed)
        self._rules.reset()
        self._scorer.reset()

        self._vehicle = self._physics.create_vehicle(self._playfield_height)
        self._obstacles = []
        self._state = GameState.IDLE
        self._termination_reason = ""
        self._frames = 0
        self._elapsed_time = 0.0

        return self.snapshot()

    def start(
        self,
        playfield_width: float,
        playfield_height: float,
        seed: Optional[int] = None
    ) -> GameSnapshot:
        """
        Start a fresh run on a playfield of the given size.

        Always restarts, even mid-run. Dimensions must be positive; they are
        not validated here.

        Args:
            playfield_width: Width of the playfield.
            playfield_height: Height of the playfield.
            seed: New random seed. Keeps the current stream if None.

        Returns:
            Snapshot of the fresh running state.
        """
        self._playfield_width = float(playfield_width)
        self._playfield_height = float(playfield_height)
        self.reset(seed)
        self._state = GameState.RUNNING
        return self.snapshot()

    def restart(self, seed: Optional[int] = None) -> GameSnapshot:
        """Start again on the last playfield."""
        return self.start(self._playfield_width, self._playfield_height, seed)

    def flap(self) -> None:
        """Register a flap intent. Ignored after a crash."""
        if self._state == GameState.GAME_OVER:
            return
        self._physics.flap(self._vehicle)

    def update(self, dt: float) -> FrameResult:
        """
        Advance the simulation by one frame.

        No-op unless RUNNING. dt is clamped to [0, max_dt]. A crash ends the
        game but the frame still completes so every live obstacle is moved,
        scored and checked exactly once.

        Args:
            dt: Seconds since the previous frame.

        Returns:
            FrameResult describing the frame.
        """
        if self._state != GameState.RUNNING:
            return FrameResult(dt=0.0)

        dt = self._physics.clamp_dt(dt)
        result = FrameResult(dt=dt)
        vehicle = self._vehicle
        height = self._playfield_height

        # Physics
        self._physics.integrate(vehicle, dt)
        grounded = self._physics.apply_bounds(vehicle, height)

        # Spawning
        if self._rules.spawn.tick(dt):
            self.spawn_obstacle()
            result.spawned = True

        # Movement, scoring, removal marks and collision in one pass
        despawn_x = self._config.obstacles.despawn_x
        collided = False
        to_remove: List[Obstacle] = []
        for obstacle in self._obstacles:
            obstacle.x -= obstacle.speed * dt

            event = self._scorer.check_pass(obstacle, vehicle.x)
            if event is not None:
                result.scored.append(event)

            if obstacle.right < despawn_x:
                to_remove.append(obstacle)

            if hits_obstacle(vehicle, obstacle, height):
                collided = True

        if to_remove:
            removed_ids = {id(o) for o in to_remove}
            self._obstacles = [o for o in self._obstacles if id(o) not in removed_ids]
            result.removed = len(to_remove)

        # Difficulty applies to everything on screen
        speed = self._rules.difficulty.obstacle_speed(self._scorer.score)
        for obstacle in self._obstacles:
            obstacle.speed = speed

        self._frames += 1
        self._elapsed_time += dt

        termination = self._rules.termination.check(grounded, collided)
        if termination.terminated:
            self._game_over(termination.reason)
            result.game_over = True
            result.termination_reason = termination.reason

        return result

    def spawn_obstacle(self) -> Obstacle:
        """Append a new obstacle sized for the current score."""
        obstacle = self._rules.spawn.create_obstacle(
            self._scorer.score,
            self._playfield_width,
            self._playfield_height
        )
        self._obstacles.append(obstacle)
        return obstacle

    def add_obstacle(self, obstacle: Obstacle) -> None:
        """Insert a hand-built obstacle (for tools and tests)."""
        self._obstacles.append(obstacle)

    def _game_over(self, reason: str) -> None:
        self._state = GameState.GAME_OVER
        self._termination_reason = reason

    def snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            state=self._state,
            score=self._scorer.score,
            frames=self._frames,
            elapsed_time=self._elapsed_time,
            playfield_width=self._playfield_width,
            playfield_height=self._playfield_height,
            spawn_timer=self._rules.spawn.timer,
            vehicle=self._vehicle,
            obstacles=self._obstacles,
            termination_reason=self._termination_reason
        )

    def observation(self, snapshot: Optional[GameSnapshot] = None) -> Dict[str, np.ndarray]:
        """Pack a snapshot (current state if None) into numpy arrays."""
        if snapshot is None:
            snapshot = self.snapshot()
        return self._snapshot_builder.to_obs_dict(snapshot)

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._scorer.score,
            "state": self._state.name.lower(),
            "frames": self._frames,
            "elapsed_time": self._elapsed_time,
            "obstacle_count": len(self._obstacles),
            "terminated_reason": self._termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with playfield, vehicle and obstacle geometry.
        """
        vehicle = self._vehicle
        tilt = VehicleState.of(vehicle).tilt
        return {
            "playfield_width": self._playfield_width,
            "playfield_height": self._playfield_height,
            "ground_y": self.ground_y,
            "vehicle": {
                "x": vehicle.x,
                "y": vehicle.y,
                "width": vehicle.width,
                "height": vehicle.height,
                "tilt": tilt,
            },
            "obstacles": [
                {
                    "x": o.x,
                    "width": o.width,
                    "gap_top": o.gap_top,
                    "gap_bottom": o.gap_bottom,
                }
                for o in self._obstacles
            ],
            "score": self._scorer.score,
            "state": self._state.name.lower(),
        }
