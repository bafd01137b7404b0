"""
Evaluation Package
==================

Contains the seed bank and evaluation harness for scoring agents.
"""

from floppy_bike.evaluation.run_eval import evaluate_agent, load_agent, load_seed_bank

__all__ = ["evaluate_agent", "load_agent", "load_seed_bank"]
