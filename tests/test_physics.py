"""
Tests for vehicle physics and playfield bounds.
"""

import pytest

from floppy_bike.core.config_loader import load_config
from floppy_bike.core.game import CoreGame
from floppy_bike.core.physics import VehiclePhysics
from floppy_bike.core.state_snapshot import GameState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def physics(config):
    return VehiclePhysics(config)


@pytest.fixture
def game(config):
    game = CoreGame(config=config, seed=42)
    game.start(400, 700)
    return game


class TestIntegration:
    """Test gravity and flap integration."""

    def test_vehicle_starts_at_rest(self, game):
        """Fresh run puts the vehicle at 40% height with no velocity."""
        vehicle = game.vehicle
        assert vehicle.x == 100
        assert vehicle.y == pytest.approx(280.0)
        assert vehicle.velocity == 0.0
        assert vehicle.flap_phase == 0.0

    def test_velocity_then_position(self, game):
        """Velocity is updated before position."""
        game.update(0.01)

        assert game.vehicle.velocity == pytest.approx(9.0)
        assert game.vehicle.y == pytest.approx(280.09)

    def test_large_dt_is_clamped(self, game):
        """A long stall is integrated as at most 1/30 s."""
        result = game.update(1.0)

        assert result.dt == pytest.approx(1.0 / 30.0)
        assert game.vehicle.velocity == pytest.approx(30.0)
        assert game.vehicle.y == pytest.approx(281.0)

    def test_negative_dt_is_zero(self, game):
        """Negative deltas do not move the vehicle."""
        result = game.update(-0.5)

        assert result.dt == 0.0
        assert game.vehicle.velocity == 0.0
        assert game.vehicle.y == pytest.approx(280.0)

    def test_flap_sets_velocity(self, game):
        """Flap replaces velocity rather than adding to it."""
        game.vehicle.velocity = 250.0
        game.flap()

        assert game.vehicle.velocity == -360.0
        assert game.vehicle.flap_phase == 1.0

    def test_flap_phase_decays(self, game):
        """Flap phase decays at 3.5 per second of clamped time."""
        game.flap()
        game.update(0.1)

        assert game.vehicle.flap_phase == pytest.approx(1.0 - 3.5 / 30.0)

    def test_flap_phase_floors_at_zero(self, game):
        game.flap()
        for _ in range(20):
            game.update(1.0 / 30.0)

        assert game.vehicle.flap_phase == 0.0

    def test_clamp_dt(self, physics):
        assert physics.clamp_dt(-1.0) == 0.0
        assert physics.clamp_dt(0.01) == 0.01
        assert physics.clamp_dt(5.0) == pytest.approx(1.0 / 30.0)


class TestBounds:
    """Test ground and ceiling handling."""

    def test_ground_contact_ends_game(self, game):
        """Touching the ground ends the run on the same update."""
        game.vehicle.y = 640.0
        game.update(0.0)

        assert game.state == GameState.GAME_OVER
        assert game.termination_reason == "ground"
        assert game.vehicle.y == 640.0

    def test_ground_is_lethal_while_rising(self, game):
        """Direction of travel does not matter at the ground line."""
        game.vehicle.y = 640.0
        game.vehicle.velocity = -100.0
        game.update(0.0)

        assert game.is_over

    def test_just_above_ground_survives(self, game):
        game.vehicle.y = 639.0
        game.update(0.0)

        assert game.state == GameState.RUNNING

    def test_ceiling_clamps_and_stops(self, game):
        """Crossing the top edge pins the vehicle and zeroes velocity."""
        game.vehicle.y = 5.0
        game.vehicle.velocity = -600.0
        game.update(1.0 / 60.0)

        assert game.vehicle.y == 0.0
        assert game.vehicle.velocity == 0.0
        assert game.state == GameState.RUNNING

    def test_apply_bounds_reports_ground(self, physics):
        vehicle = physics.create_vehicle(700)
        vehicle.y = 650.0

        assert physics.apply_bounds(vehicle, 700)
        assert vehicle.bottom == 680.0

    def test_flap_ignored_after_crash(self, game):
        """Flap is a no-op once the game is over."""
        game.vehicle.y = 640.0
        game.update(0.0)
        velocity = game.vehicle.velocity

        game.flap()

        assert game.vehicle.velocity == velocity
        assert game.vehicle.flap_phase == 0.0
