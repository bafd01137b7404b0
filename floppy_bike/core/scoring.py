"""
Scoring System
==============

Awards one point per obstacle the vehicle gets past.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from floppy_bike.core.rules import Obstacle


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    total: int
    obstacle_x: float

    def __repr__(self) -> str:
        return f"ScoreEvent(+{self.points}, total={self.total})"


class ScoreTracker:
    """
    Tracks game score.

    An obstacle counts once its right edge is strictly left of the
    vehicle's x. The obstacle's passed flag guarantees it is counted once.
    """

    POINTS_PER_OBSTACLE = 1

    def __init__(self):
        self._score: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    def check_pass(self, obstacle: Obstacle, vehicle_x: float) -> Optional[ScoreEvent]:
        """
        Score an obstacle if it has just been passed.

        Args:
            obstacle: Obstacle after this frame's movement.
            vehicle_x: Fixed x of the vehicle.

        Returns:
            ScoreEvent if a point was awarded, else None.
        """
        if obstacle.passed or obstacle.right >= vehicle_x:
            return None

        obstacle.passed = True
        self._score += self.POINTS_PER_OBSTACLE
        return ScoreEvent(
            points=self.POINTS_PER_OBSTACLE,
            total=self._score,
            obstacle_x=obstacle.x
        )

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
