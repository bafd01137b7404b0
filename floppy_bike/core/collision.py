"""
Collision Detection
===================

Axis-aligned rectangle overlap between the vehicle and obstacle pipes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from floppy_bike.core.physics import Vehicle
    from floppy_bike.core.rules import Obstacle


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle from its top-left corner, y grows downward."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def overlaps(self, other: "Rect") -> bool:
        """
        True if the interiors intersect.

        Rectangles that only share an edge do not overlap.
        """
        if self.right <= other.left or other.right <= self.left:
            return False
        if self.bottom <= other.top or other.bottom <= self.top:
            return False
        return True


def vehicle_rect(vehicle: "Vehicle") -> Rect:
    """Bounding box of the vehicle."""
    return Rect(vehicle.x, vehicle.y, vehicle.width, vehicle.height)


def pipe_rects(obstacle: "Obstacle", playfield_height: float) -> Tuple[Rect, Rect]:
    """
    Solid parts of an obstacle.

    Returns:
        (top_pipe, bottom_pipe). The top pipe spans y=0 to gap_top, the
        bottom pipe spans gap_bottom to the playfield bottom.
    """
    top = Rect(obstacle.x, 0.0, obstacle.width, obstacle.gap_top)
    bottom = Rect(
        obstacle.x,
        obstacle.gap_bottom,
        obstacle.width,
        playfield_height - obstacle.gap_bottom
    )
    return top, bottom


def hits_obstacle(
    vehicle: "Vehicle",
    obstacle: "Obstacle",
    playfield_height: float
) -> bool:
    """True if the vehicle overlaps either pipe of the obstacle."""
    box = vehicle_rect(vehicle)
    top, bottom = pipe_rects(obstacle, playfield_height)
    return box.overlaps(top) or box.overlaps(bottom)
