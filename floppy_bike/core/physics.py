"""
Vehicle Physics
===============

Semi-implicit Euler integration of the vehicle plus playfield bounds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from floppy_bike.core.config_loader import GameConfig, get_config


@dataclass
class Vehicle:
    """Player vehicle. Only y, velocity and flap_phase change during a run."""
    x: float
    y: float
    width: float
    height: float
    velocity: float = 0.0
    flap_phase: float = 0.0  # Cosmetic tilt hint in [0, 1]

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2.0


class VehiclePhysics:
    """
    Integrates the vehicle and enforces the ground and ceiling.

    The ground is lethal, the ceiling only stops the vehicle.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize physics.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._gravity = config.physics.gravity
        self._flap_impulse = config.physics.flap_impulse
        self._max_dt = config.physics.max_dt
        self._flap_decay_rate = config.physics.flap_decay_rate
        self._ground_thickness = config.board.ground_thickness

    @property
    def max_dt(self) -> float:
        """Largest step integrated in one update."""
        return self._max_dt

    def clamp_dt(self, dt: float) -> float:
        """Clamp a frame delta to [0, max_dt]."""
        return max(0.0, min(self._max_dt, dt))

    def create_vehicle(self, playfield_height: float) -> Vehicle:
        """Vehicle at rest at its starting height."""
        cfg = self._config.vehicle
        return Vehicle(
            x=cfg.x,
            y=playfield_height * cfg.start_height_fraction,
            width=cfg.width,
            height=cfg.height
        )

    def flap(self, vehicle: Vehicle) -> None:
        """Apply the upward impulse."""
        vehicle.velocity = self._flap_impulse
        vehicle.flap_phase = 1.0

    def integrate(self, vehicle: Vehicle, dt: float) -> None:
        """
        Advance velocity then position, and decay the flap phase.

        Args:
            vehicle: Vehicle to mutate.
            dt: Already clamped time step.
        """
        vehicle.velocity += self._gravity * dt
        vehicle.y += vehicle.velocity * dt
        vehicle.flap_phase = max(0.0, vehicle.flap_phase - dt * self._flap_decay_rate)

    def ground_y(self, playfield_height: float) -> float:
        return playfield_height - self._ground_thickness

    def apply_bounds(self, vehicle: Vehicle, playfield_height: float) -> bool:
        """
        Clamp the vehicle to the playfield.

        Args:
            vehicle: Vehicle to mutate.
            playfield_height: Height of the playfield.

        Returns:
            True if the vehicle reached the ground.
        """
        grounded = False
        ground_y = self.ground_y(playfield_height)
        if vehicle.bottom >= ground_y:
            vehicle.y = ground_y - vehicle.height
            grounded = True

        if vehicle.y < 0:
            vehicle.y = 0.0
            vehicle.velocity = 0.0

        return grounded
