"""
Tests for the game lifecycle and snapshots.
"""

import dataclasses

import pytest

from floppy_bike.core.config_loader import load_config
from floppy_bike.core.game import CoreGame
from floppy_bike.core.state_snapshot import GameState


FRAME = 1.0 / 60.0


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    return CoreGame(config=config, seed=42)


def crash(game):
    """Drop the vehicle onto the ground."""
    game.vehicle.y = game.ground_y - game.vehicle.height
    game.update(0.0)
    assert game.is_over


class TestIdle:
    """Test behaviour before the first start()."""

    def test_constructed_idle(self, game):
        assert game.state == GameState.IDLE
        assert game.score == 0
        assert game.obstacles == ()

    def test_update_is_noop_when_idle(self, game):
        result = game.update(FRAME)

        assert result.dt == 0.0
        assert game.frames == 0
        assert game.obstacles == ()

    def test_playfield_from_constructor(self, config):
        game = CoreGame(config=config, playfield_width=320, playfield_height=480)

        assert game.playfield_width == 320.0
        assert game.ground_y == 460.0
        assert game.vehicle.y == pytest.approx(480 * 0.4)


class TestStart:
    """Test start() and restart()."""

    def test_start_state(self, game):
        snapshot = game.start(400, 700)

        assert snapshot.state == GameState.RUNNING
        assert snapshot.score == 0
        assert snapshot.frames == 0
        assert snapshot.obstacles == ()
        assert snapshot.spawn_timer == 0.0
        assert snapshot.vehicle.velocity == 0.0
        assert snapshot.vehicle.flap_phase == 0.0
        assert snapshot.ground_y == 680.0

    def test_start_mid_run_resets(self, game):
        game.start(400, 700)
        for _ in range(30):
            game.update(FRAME)
        assert game.frames == 30

        game.start(400, 700)

        assert game.frames == 0
        assert game.obstacles == ()
        assert game.vehicle.y == pytest.approx(280.0)

    def test_restart_matches_fresh_start(self, game, config):
        game.start(400, 700)
        for _ in range(40):
            game.update(FRAME)
        crash(game)

        restarted = game.restart()

        fresh = CoreGame(config=config, seed=99)
        assert restarted == fresh.start(400, 700)

    def test_restart_with_seed_reproduces_run(self, game):
        game.start(400, 700, seed=5)
        game.update(FRAME)
        first_gap = game.obstacles[0].gap_top
        crash(game)

        game.restart(seed=5)
        game.update(FRAME)

        assert game.obstacles[0].gap_top == first_gap

    def test_restart_keeps_playfield(self, game):
        game.start(320, 480)
        crash(game)
        game.restart()

        assert game.playfield_width == 320.0
        assert game.playfield_height == 480.0

    def test_reset_returns_to_idle(self, game):
        game.start(400, 700)
        game.update(FRAME)
        snapshot = game.reset()

        assert snapshot.state == GameState.IDLE
        assert snapshot.playfield_height == 700.0
        assert snapshot.obstacles == ()


class TestGameOver:
    """Test behaviour after a crash."""

    def test_update_is_noop_after_crash(self, game):
        game.start(400, 700)
        game.update(FRAME)
        crash(game)
        before = game.snapshot()

        game.update(FRAME)

        assert game.snapshot() == before

    def test_score_frozen_after_crash(self, game):
        game.start(400, 700)
        crash(game)
        score = game.score
        for _ in range(10):
            game.update(FRAME)

        assert game.score == score

    def test_info(self, game):
        game.start(400, 700)
        crash(game)
        info = game.get_info()

        assert info["state"] == "game_over"
        assert info["terminated_reason"] == "ground"


class TestSnapshot:
    """Test read-only snapshots."""

    def test_snapshot_is_a_copy(self, game):
        game.start(400, 700)
        game.update(FRAME)
        snapshot = game.snapshot()
        y = snapshot.vehicle.y
        x = snapshot.obstacles[0].x

        for _ in range(5):
            game.update(FRAME)

        assert snapshot.vehicle.y == y
        assert snapshot.obstacles[0].x == x

    def test_snapshot_is_frozen(self, game):
        snapshot = game.start(400, 700)

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.score = 10

    def test_next_obstacle(self, game):
        game.start(400, 700)
        assert game.snapshot().next_obstacle() is None

        game.update(FRAME)
        upcoming = game.snapshot().next_obstacle()
        assert upcoming is not None
        assert upcoming.x == game.obstacles[0].x

    def test_tilt_is_clamped(self, game):
        game.start(400, 700)
        game.vehicle.velocity = 5000.0
        assert game.snapshot().vehicle.tilt == pytest.approx(0.7)

        game.flap()
        tilt = game.snapshot().vehicle.tilt
        assert tilt == pytest.approx(-0.6 - 0.15)

    def test_render_data(self, game):
        game.start(400, 700)
        game.update(FRAME)
        data = game.get_render_data()

        assert data["ground_y"] == 680.0
        assert data["vehicle"]["width"] == 60.0
        assert len(data["obstacles"]) == 1
        assert data["state"] == "running"
