"""
Baseline Gap-Follower Agent Package

A simple heuristic agent that flaps whenever the vehicle sinks towards the
bottom of the next gap. Serves as a benchmark and example.
"""

from .agent import FloppyAgent, create_agent

__all__ = ["FloppyAgent", "create_agent"]
