"""
Tests for configuration loading and validation.
"""

import os

import pytest
import yaml

import floppy_bike
from floppy_bike.core.config_loader import load_config


DEFAULT_PATH = os.path.join(os.path.dirname(floppy_bike.__file__), "game_config.yaml")


def write_config(tmp_path, section, key, value):
    """Copy the default config with one value replaced."""
    with open(DEFAULT_PATH, "r") as f:
        raw = yaml.safe_load(f)
    raw[section][key] = value

    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestDefaults:
    """Test the shipped configuration."""

    def test_loads(self):
        config = load_config()

        assert config.vehicle.x == 100.0
        assert config.physics.gravity == 900.0
        assert config.physics.flap_impulse == -360.0
        assert config.obstacles.width == 62.0
        assert config.difficulty.min_gap == 110.0

    def test_derived_values(self):
        config = load_config()

        assert config.physics.max_dt == pytest.approx(1.0 / 30.0)
        assert config.observation.frame_dt == pytest.approx(1.0 / 60.0)
        assert config.difficulty.max_speed == 310.0
        assert config.board.ground_y(700) == 680.0

    def test_frozen(self):
        config = load_config()
        with pytest.raises(AttributeError):
            config.physics.gravity = 1.0


class TestValidation:
    """Test that inconsistent values are rejected."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    @pytest.mark.parametrize("section,key,value", [
        ("vehicle", "width", 0),
        ("vehicle", "start_height_fraction", 1.5),
        ("physics", "min_step_rate", 0),
        ("obstacles", "width", -1),
        ("obstacles", "spawn_interval_min", 3.0),
        ("difficulty", "min_gap", 0),
        ("difficulty", "min_gap", 200.0),
        ("observation", "max_obstacles", 0),
        ("observation", "frame_rate", 0),
    ])
    def test_rejects(self, tmp_path, section, key, value):
        path = write_config(tmp_path, section, key, value)
        with pytest.raises(ValueError):
            load_config(path)

    def test_accepts_custom_values(self, tmp_path):
        path = write_config(tmp_path, "physics", "gravity", 1200.0)
        assert load_config(path).physics.gravity == 1200.0
