"""
Tests for scoring, obstacle removal and speed rescaling.
"""

import pytest

from floppy_bike.core.config_loader import load_config
from floppy_bike.core.game import CoreGame
from floppy_bike.core.rules import Obstacle
from floppy_bike.core.scoring import ScoreTracker


FRAME = 1.0 / 60.0


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    """Running game with the spawner held off."""
    game = CoreGame(config=config, seed=42)
    game.start(400, 700)
    game.rules.spawn.set_timer(100.0)
    return game


def open_obstacle(x, speed=180.0):
    """Obstacle with a gap wide enough that the falling vehicle never hits it."""
    return Obstacle(x=x, width=62.0, gap_top=100.0, gap_bottom=600.0, speed=speed)


class TestScoreTracker:
    """Test the pass check in isolation."""

    def test_scores_once(self):
        tracker = ScoreTracker()
        obstacle = open_obstacle(x=0.0)

        event = tracker.check_pass(obstacle, vehicle_x=100.0)
        assert event is not None
        assert event.total == 1
        assert obstacle.passed

        assert tracker.check_pass(obstacle, vehicle_x=100.0) is None
        assert tracker.score == 1

    def test_edge_equal_does_not_score(self):
        """Right edge exactly at the vehicle x is not yet a pass."""
        tracker = ScoreTracker()
        obstacle = open_obstacle(x=38.0)

        assert tracker.check_pass(obstacle, vehicle_x=100.0) is None
        assert tracker.score == 0

    def test_reset(self):
        tracker = ScoreTracker()
        tracker.check_pass(open_obstacle(x=0.0), vehicle_x=100.0)
        tracker.reset()

        assert tracker.score == 0


class TestScoringInGame:
    """Test scoring as obstacles scroll past."""

    def test_each_obstacle_scores_exactly_once(self, game):
        obstacle = open_obstacle(x=50.0)
        game.add_obstacle(obstacle)

        scores = []
        rights = []
        for _ in range(30):
            game.update(FRAME)
            scores.append(game.score)
            rights.append(obstacle.right)

        assert scores[-1] == 1
        assert obstacle.passed

        # Score changes once, on the first frame the right edge is behind the vehicle
        jump = scores.index(1)
        assert all(s == 0 for s in scores[:jump])
        assert all(s == 1 for s in scores[jump:])
        assert rights[jump] < game.vehicle.x
        assert rights[jump - 1] >= game.vehicle.x

    def test_frame_result_reports_points(self, game):
        game.add_obstacle(open_obstacle(x=-20.0))
        result = game.update(FRAME)

        assert result.delta_score == 1
        assert len(result.scored) == 1

    def test_two_obstacles_same_frame(self, game):
        game.add_obstacle(open_obstacle(x=-20.0))
        game.add_obstacle(open_obstacle(x=-10.0))
        result = game.update(FRAME)

        assert result.delta_score == 2
        assert game.score == 2


class TestRemoval:
    """Test off-screen removal."""

    def test_removed_past_despawn_line(self, game):
        """Right edge below -50 is removed, but still scores on the way out."""
        game.add_obstacle(open_obstacle(x=-110.0))
        result = game.update(FRAME)

        assert result.removed == 1
        assert game.obstacles == ()
        assert game.score == 1

    def test_kept_before_despawn_line(self, game):
        game.add_obstacle(open_obstacle(x=-100.0))
        game.update(FRAME)

        assert len(game.obstacles) == 1

    def test_removal_keeps_order(self, game):
        game.add_obstacle(open_obstacle(x=-110.0))
        game.add_obstacle(open_obstacle(x=200.0))
        game.add_obstacle(open_obstacle(x=300.0))
        game.update(FRAME)

        xs = [o.x for o in game.obstacles]
        assert len(xs) == 2
        assert xs == sorted(xs)


class TestSpeedRescale:
    """Test that every live obstacle tracks the score-driven speed."""

    def test_speed_rewritten_after_frame(self, game):
        game.add_obstacle(open_obstacle(x=300.0, speed=999.0))
        game.add_obstacle(open_obstacle(x=350.0, speed=1.0))
        game.update(FRAME)

        speeds = {o.speed for o in game.obstacles}
        assert speeds == {180.0}

    def test_speed_follows_score(self, game):
        game.add_obstacle(open_obstacle(x=-20.0))
        game.add_obstacle(open_obstacle(x=300.0))
        game.update(FRAME)

        assert game.score == 1
        expected = game.rules.difficulty.obstacle_speed(1)
        assert expected == 186.0
        assert all(o.speed == expected for o in game.obstacles)
