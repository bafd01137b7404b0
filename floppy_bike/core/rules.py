"""
Game Rules
==========

Handles difficulty scaling, obstacle spawning and termination conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from floppy_bike.core.config_loader import GameConfig, get_config
from floppy_bike.core.rng import SpawnRng


@dataclass
class Obstacle:
    """A pair of pipes with a vertical gap between them."""
    x: float
    width: float
    gap_top: float
    gap_bottom: float
    speed: float
    passed: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def gap_size(self) -> float:
        return self.gap_bottom - self.gap_top

    @property
    def gap_center(self) -> float:
        return (self.gap_top + self.gap_bottom) / 2.0


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class DifficultyRules:
    """
    Score-driven difficulty.

    Obstacle speed grows with score up to a cap and the gap shrinks down to
    a floor. Both are pure functions of the current score.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._cfg = config.difficulty

    def obstacle_speed(self, score: int) -> float:
        """Horizontal speed shared by every live obstacle."""
        cfg = self._cfg
        return cfg.base_speed + min(cfg.max_speed_bonus, score * cfg.speed_per_point)

    def gap_size(self, score: int) -> float:
        """Vertical opening for a newly spawned obstacle."""
        cfg = self._cfg
        shrink = min(cfg.max_gap_shrink, score * cfg.gap_shrink_per_point)
        return max(cfg.min_gap, cfg.base_gap - shrink)


class SpawnRules:
    """
    Handles spawn timing and obstacle placement.

    The countdown starts at zero so the first obstacle appears on the first
    running frame.
    """

    def __init__(
        self,
        rng: SpawnRng,
        difficulty: DifficultyRules,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize spawn rules.

        Args:
            rng: Random source for gap placement and intervals.
            difficulty: Difficulty rules used for gap size and speed.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng
        self._difficulty = difficulty
        self._timer: float = 0.0

    @property
    def timer(self) -> float:
        """Seconds until the next spawn."""
        return self._timer

    def reset(self) -> None:
        """Reset the countdown."""
        self._timer = 0.0

    def tick(self, dt: float) -> bool:
        """
        Advance the countdown.

        Returns:
            True if an obstacle is due. The countdown is rearmed with a
            fresh random interval.
        """
        self._timer -= dt
        if self._timer <= 0:
            self._timer = self._rng.spawn_interval()
            return True
        return False

    def create_obstacle(
        self,
        score: int,
        playfield_width: float,
        playfield_height: float
    ) -> Obstacle:
        """
        Build an obstacle just off the right edge.

        Args:
            score: Current score, drives gap size and speed.
            playfield_width: Width of the playfield.
            playfield_height: Height of the playfield.

        Returns:
            New obstacle, not yet passed.
        """
        cfg = self._config.obstacles
        gap = self._difficulty.gap_size(score)

        min_top = cfg.min_gap_top
        max_top = playfield_height - gap - cfg.ground_margin
        gap_top = min_top + self._rng.gap_fraction() * max(1.0, max_top - min_top)

        return Obstacle(
            x=playfield_width + cfg.spawn_offset_x,
            width=cfg.width,
            gap_top=gap_top,
            gap_bottom=gap_top + gap,
            speed=self._difficulty.obstacle_speed(score)
        )

    def set_timer(self, value: float) -> None:
        """Override the countdown (for tools and tests)."""
        self._timer = value


class TerminationRules:
    """
    Handles game termination conditions.

    - Ground: vehicle bottom edge at or below the ground line
    - Pipe: vehicle box overlaps a pipe
    """

    GROUND = "ground"
    PIPE = "pipe"

    def check(self, grounded: bool, collided: bool) -> TerminationResult:
        """
        Check all termination conditions.

        Args:
            grounded: True if the vehicle reached the ground this frame.
            collided: True if the vehicle overlapped a pipe this frame.

        Returns:
            TerminationResult indicating game state.
        """
        if grounded:
            return TerminationResult.game_over(self.GROUND)
        if collided:
            return TerminationResult.game_over(self.PIPE)
        return TerminationResult.none()


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, rng: SpawnRng, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            rng: Random source shared with the spawner.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.difficulty = DifficultyRules(config)
        self.spawn = SpawnRules(rng, self.difficulty, config)
        self.termination = TerminationRules()

    def reset(self) -> None:
        """Reset all rule state."""
        self.spawn.reset()
