"""
Baseline Gap-Follower Agent - Flaps to stay above the next gap's floor.

This is a simple heuristic agent that reads the next_gap_* observations
(the first obstacle whose right edge is still ahead of the vehicle) and
flaps whenever the vehicle's bottom edge sinks close to the bottom of that
gap while falling.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark to compare against
3. A verification that the environment API works correctly

Strategy:
- Read vehicle_y, vehicle_height and vehicle_velocity
- Read next_gap_bottom (the ground line when no obstacle is ahead)
- Flap if falling and the bottom edge is within `margin` of the gap floor
"""

from typing import Any, Dict


# Distance kept between the vehicle's bottom edge and the gap floor
DEFAULT_MARGIN = 18.0


class FloppyAgent:
    """
    Simple baseline agent that follows the floor of the next gap.

    A flap lifts the vehicle roughly 72 units, so narrow late-game gaps
    eventually defeat it.
    """

    def __init__(self, margin: float = DEFAULT_MARGIN, debug: bool = False):
        """
        Initialize the agent.

        Args:
            margin: Clearance above the gap floor that triggers a flap.
            debug: If True, print decisions to stdout.
        """
        self.margin = margin
        self.debug = debug

    def reset(self) -> None:
        """Stateless; nothing to reset."""
        pass

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Decide whether to flap this frame.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            1 to flap, 0 to glide.
        """
        bottom = float(observation["vehicle_y"]) + float(observation["vehicle_height"])
        velocity = float(observation["vehicle_velocity"])
        floor = float(observation["next_gap_bottom"])

        action = int(velocity >= 0.0 and bottom > floor - self.margin)

        if debug or self.debug:
            print(f"[GapFollower] bottom={bottom:.1f}, floor={floor:.1f}, "
                  f"vy={velocity:.1f}, action={action}")

        return action


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> FloppyAgent:
    """Factory function to create an agent instance."""
    return FloppyAgent(**kwargs)
