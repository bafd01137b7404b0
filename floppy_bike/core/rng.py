"""
RNG - Obstacle Placement
========================

Provides deterministic obstacle placement and spawn timing from a seed.
"""

from __future__ import annotations

import random
from typing import Any, Optional, Tuple

from floppy_bike.core.config_loader import GameConfig, get_config


class SpawnRng:
    """
    Seeded random source for the obstacle spawner.

    Two draws are made per spawn: one for the vertical gap placement and one
    for the delay until the next spawn. Given the same seed and the same
    sequence of spawns the layout is identical.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize spawn RNG.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._rng = random.Random(seed)
        self._draws: int = 0

    @property
    def seed(self) -> Optional[int]:
        """Seed the generator was last reset with."""
        return self._seed

    @property
    def draws(self) -> int:
        """Number of values drawn since the last reset."""
        return self._draws

    def unit(self) -> float:
        """Uniform draw in [0, 1)."""
        self._draws += 1
        return self._rng.random()

    def gap_fraction(self) -> float:
        """Fraction of the free vertical range above the gap."""
        return self.unit()

    def spawn_interval(self) -> float:
        """Seconds until the next obstacle spawns."""
        cfg = self._config.obstacles
        span = cfg.spawn_interval_max - cfg.spawn_interval_min
        return cfg.spawn_interval_min + self.unit() * span

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the generator with optional new seed.

        Args:
            seed: New random seed. Keeps the current stream if None.
        """
        if seed is not None:
            self._seed = seed
            self._rng = random.Random(seed)
            self._draws = 0

    def get_state(self) -> Tuple[Optional[int], int, Any]:
        """
        Get state for replay/checkpointing.

        Returns:
            Tuple of (seed, draws, generator_state).
        """
        return (self._seed, self._draws, self._rng.getstate())

    def set_state(self, state: Tuple[Optional[int], int, Any]) -> None:
        """
        Restore generator state captured by get_state().

        Args:
            state: Tuple of (seed, draws, generator_state).
        """
        seed, draws, rng_state = state
        self._seed = seed
        self._draws = draws
        self._rng.setstate(rng_state)
