"""
Team Template Agent
===================

Your agent must provide one of:
1. A `FloppyAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are integers: 1 flaps this frame, 0 glides.

See floppy_bike/core/state_snapshot.py for the observation keys.
"""

from __future__ import annotations

from typing import Dict
import numpy as np


class FloppyAgent:
    """
    Your Floppy Bike agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: 1 to flap, 0 to glide.
        """
        # Flap about every tenth frame
        return int(self.rng.random() < 0.1)

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return int(np.random.random() < 0.1)
