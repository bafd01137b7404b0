"""
Floppy Bike
===========

A single-screen arcade game: keep a gravity-bound vehicle flying through a
stream of gapped obstacles.

- core: the deterministic simulation engine and its Gymnasium wrapper
- evaluation: seed-bank harness for scripted agents

All tunable parameters are in game_config.yaml.
"""
