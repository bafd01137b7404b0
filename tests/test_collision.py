"""
Tests for pipe collision.
"""

import pytest

from floppy_bike.core.collision import Rect, pipe_rects
from floppy_bike.core.config_loader import load_config
from floppy_bike.core.game import CoreGame
from floppy_bike.core.rules import Obstacle
from floppy_bike.core.state_snapshot import GameState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    """Running game with the spawner held off and the vehicle at y=280."""
    game = CoreGame(config=config, seed=42)
    game.start(400, 700)
    game.rules.spawn.set_timer(100.0)
    game.vehicle.y = 280.0
    return game


def make_obstacle(x=100.0, gap_top=100.0, gap_bottom=600.0, width=62.0, speed=0.0):
    return Obstacle(x=x, width=width, gap_top=gap_top, gap_bottom=gap_bottom, speed=speed)


class TestRect:
    """Test strict rectangle overlap."""

    def test_overlapping(self):
        assert Rect(0, 0, 10, 10).overlaps(Rect(5, 5, 10, 10))

    def test_touching_edges_do_not_overlap(self):
        assert not Rect(0, 0, 10, 10).overlaps(Rect(10, 0, 10, 10))
        assert not Rect(0, 0, 10, 10).overlaps(Rect(0, 10, 10, 10))

    def test_separate(self):
        assert not Rect(0, 0, 10, 10).overlaps(Rect(20, 20, 5, 5))

    def test_pipe_rects(self):
        """Top pipe spans 0..gap_top, bottom pipe gap_bottom..playfield bottom."""
        top, bottom = pipe_rects(make_obstacle(x=50, gap_top=120, gap_bottom=300), 700)

        assert (top.left, top.top, top.width, top.height) == (50, 0, 62, 120)
        assert (bottom.left, bottom.top, bottom.width, bottom.height) == (50, 300, 62, 400)


class TestPipeCollision:
    """Test vehicle against pipes at unit precision."""

    def test_top_pipe_overlap_by_one(self, game):
        game.add_obstacle(make_obstacle(gap_top=281.0))
        game.update(0.0)

        assert game.state == GameState.GAME_OVER
        assert game.termination_reason == "pipe"

    def test_top_pipe_clear_by_one(self, game):
        game.add_obstacle(make_obstacle(gap_top=279.0))
        game.update(0.0)

        assert game.state == GameState.RUNNING

    def test_top_pipe_touching_is_safe(self, game):
        """Pipe edge exactly on the vehicle edge is not a hit."""
        game.add_obstacle(make_obstacle(gap_top=280.0))
        game.update(0.0)

        assert game.state == GameState.RUNNING

    def test_bottom_pipe_overlap_by_one(self, game):
        game.add_obstacle(make_obstacle(gap_bottom=319.0))
        game.update(0.0)

        assert game.state == GameState.GAME_OVER
        assert game.termination_reason == "pipe"

    def test_bottom_pipe_clear_by_one(self, game):
        game.add_obstacle(make_obstacle(gap_bottom=321.0))
        game.update(0.0)

        assert game.state == GameState.RUNNING

    def test_horizontal_overlap_by_one(self, game):
        """Closed pipe whose left edge is one unit inside the vehicle."""
        game.add_obstacle(make_obstacle(x=159.0, gap_top=600.0, gap_bottom=650.0))
        game.update(0.0)

        assert game.is_over

    def test_horizontal_clear_by_one(self, game):
        game.add_obstacle(make_obstacle(x=161.0, gap_top=600.0, gap_bottom=650.0))
        game.update(0.0)

        assert not game.is_over

    def test_ground_reported_before_pipe(self, game):
        """A frame that both grounds and hits a pipe reports the ground."""
        game.vehicle.y = 640.0
        game.add_obstacle(make_obstacle(gap_top=100.0, gap_bottom=300.0))
        game.update(0.0)

        assert game.termination_reason == "ground"

    def test_crash_frame_completes(self, game):
        """Every obstacle still moves on the frame the game ends."""
        game.add_obstacle(make_obstacle(gap_top=281.0))
        game.add_obstacle(make_obstacle(x=300.0, speed=180.0))
        game.update(1.0 / 60.0)

        assert game.is_over
        assert game.obstacles[1].x < 300.0
