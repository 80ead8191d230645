import unittest

from conftest import build_level, make_bullet, make_enemy, make_game, make_rocket, make_unit
from arenabot.config import ControllerConfig
from arenabot.evasion import EvasionPlanner
from arenabot.snapshot import JumpState, Vec2
from arenabot.threat import ThreatPredictor
from arenabot.world import WorldQuery


def planner_for(game, config=None):
    config = config or ControllerConfig()
    predictor = ThreatPredictor(game, config)
    return EvasionPlanner(predictor, config), predictor


class TestEvasionPlanner(unittest.TestCase):

    def setUp(self):
        self.me = make_unit(10.5, 1.0)
        self.game = make_game(build_level(), units=[self.me])
        self.query = WorldQuery(self.game, self.me)

    def test_safe_target_is_kept(self):
        bullet = make_bullet(7.5, 1.9, -50.0, 0.0)
        planner, _ = planner_for(self.game)
        target = Vec2(15.5, 1.0)
        self.assertIs(planner.plan(self.query, bullet, target), target)

    def test_dodges_rocket_along_one_axis(self):
        rocket = make_rocket(6.5, 1.9, 20.0, 0.0)
        planner, predictor = planner_for(self.game)
        target = self.me.position
        self.assertTrue(predictor.will_collide(self.me, rocket, target))

        dodge = planner.plan(self.query, rocket, target)

        self.assertNotEqual(dodge, target)
        changed = [dodge.x != target.x, dodge.y != target.y]
        self.assertEqual(changed.count(True), 1)
        self.assertFalse(predictor.will_collide(self.me, rocket, dodge))

    def test_runs_away_from_bullet_when_standing_still(self):
        rocket = make_rocket(6.5, 1.9, 20.0, 0.0)
        planner, _ = planner_for(self.game)
        dodge = planner.plan(self.query, rocket, self.me.position)
        self.assertGreater(dodge.x, self.me.position.x)
        self.assertEqual(dodge.y, self.me.position.y)

    def test_cuts_jump_short(self):
        me = make_unit(10.5, 3.0, on_ground=False,
                       jump_state=JumpState(can_jump=True, speed=10.0, max_time=0.5, can_cancel=True))
        game = make_game(build_level(), units=[me])
        bullet = make_bullet(6.5, 4.5, 50.0, 0.0)
        planner, predictor = planner_for(game)
        target = Vec2(10.5, 8.0)
        self.assertTrue(predictor.will_collide(me, bullet, target))

        dodge = planner.plan(WorldQuery(game, me), bullet, target)

        self.assertEqual(dodge.x, target.x)
        self.assertLessEqual(dodge.y, 3.0)
        self.assertFalse(predictor.will_collide(me, bullet, dodge))

    def test_gives_up_gracefully(self):
        config = ControllerConfig(evasion_max_iterations=1, evasion_step=0.01)
        rocket = make_rocket(6.5, 1.9, 20.0, 0.0)
        planner, _ = planner_for(self.game, config)
        target = self.me.position
        self.assertEqual(planner.plan(self.query, rocket, target), target)

    def test_offsets_stay_on_the_grid(self):
        rocket = make_rocket(6.5, 1.9, 20.0, 0.0)
        planner, _ = planner_for(self.game)
        dodge = planner.plan(self.query, rocket, self.me.position)
        level = self.game.level
        self.assertTrue(0 <= dodge.x < level.width)
        self.assertTrue(0 <= dodge.y < level.height)


class EdgeOnlyPredictor:
    """Reports every candidate unsafe except those on or past the far edges."""

    def __init__(self, game):
        self.game = game
        self.checked = []

    def will_collide(self, unit, bullet, target):
        self.checked.append(target)
        level = self.game.level
        return not (target.x >= level.width or target.y >= level.height)


class TestSearchBounds(unittest.TestCase):

    def test_candidates_never_reach_the_far_edge(self):
        level = build_level(width=12, height=4, border=False)
        me = make_unit(10.5, 1.0)
        game = make_game(level, units=[me])
        predictor = EdgeOnlyPredictor(game)
        planner = EvasionPlanner(predictor, ControllerConfig())
        bullet = make_bullet(6.5, 1.9, 50.0, 0.0)

        dodge = planner.plan(WorldQuery(game, me), bullet, me.position)

        self.assertEqual(dodge, me.position)
        for candidate in predictor.checked[1:]:
            self.assertTrue(0 <= candidate.x < level.width, candidate)
            self.assertTrue(0 <= candidate.y < level.height, candidate)


class TestSearchOrder(unittest.TestCase):

    def test_stretches_rising_jump(self):
        # Just off the floor, so cutting the jump short is not an option
        me = make_unit(10.5, 1.2, on_ground=False,
                       jump_state=JumpState(can_jump=True, speed=10.0, max_time=0.5, can_cancel=True))
        game = make_game(build_level(), units=[me])
        bullet = make_bullet(2.5, 1.5, 50.0, 0.0)
        planner, predictor = planner_for(game)
        target = Vec2(10.5, 2.0)
        self.assertTrue(predictor.will_collide(me, bullet, target))

        dodge = planner.plan(WorldQuery(game, me), bullet, target)

        self.assertEqual(dodge.x, target.x)
        self.assertGreater(dodge.y, target.y)
        self.assertFalse(predictor.will_collide(me, bullet, dodge))

    def test_runs_forward_when_clear(self):
        me = make_unit(10.5, 1.0)
        game = make_game(build_level(), units=[me])
        bullet = make_bullet(10.5, 6.0, 0.0, -50.0)
        planner, predictor = planner_for(game)
        target = Vec2(15.5, 1.0)

        dodge = planner.plan(WorldQuery(game, me), bullet, target)

        self.assertGreater(dodge.x, me.position.x)
        self.assertEqual(dodge.y, target.y)
        self.assertFalse(predictor.will_collide(me, bullet, dodge))

    def test_turns_back_at_wall(self):
        me = make_unit(10.5, 1.0)
        game = make_game(build_level(walls=[(11, 1)]), units=[me])
        bullet = make_bullet(10.5, 6.0, 0.0, -50.0)
        planner, predictor = planner_for(game)
        target = Vec2(15.5, 1.0)
        self.assertTrue(predictor.will_collide(me, bullet, target))

        dodge = planner.plan(WorldQuery(game, me), bullet, target)

        self.assertLess(dodge.x, me.position.x)
        self.assertEqual(dodge.y, target.y)
        self.assertFalse(predictor.will_collide(me, bullet, dodge))

    def test_turns_back_at_enemy(self):
        me = make_unit(10.5, 1.0)
        game = make_game(build_level(), units=[me, make_enemy(11.5, 1.0)])
        bullet = make_bullet(10.5, 6.0, 0.0, -50.0)
        planner, predictor = planner_for(game)
        query = WorldQuery(game, me)
        self.assertTrue(query.unit_occupies_adjacent_column(1))

        dodge = planner.plan(query, bullet, Vec2(15.5, 1.0))

        self.assertLess(dodge.x, me.position.x)
        self.assertFalse(predictor.will_collide(me, bullet, dodge))

    def test_jumps_when_boxed_in(self):
        level = build_level(walls=[(9, 1), (11, 1)])
        me = make_unit(10.5, 1.0)
        game = make_game(level, units=[me])
        bullet = make_bullet(1.5, 2.5, 50.0, 0.0)
        planner, predictor = planner_for(game)
        self.assertTrue(predictor.will_collide(me, bullet, me.position))

        dodge = planner.plan(WorldQuery(game, me), bullet, me.position)

        self.assertEqual(dodge.x, me.position.x)
        self.assertGreater(dodge.y, me.position.y)
        self.assertFalse(predictor.will_collide(me, bullet, dodge))

    def test_no_jump_while_falling(self):
        level = build_level(walls=[(9, 1), (11, 1)])
        me = make_unit(10.5, 1.5, on_ground=False, jump_state=JumpState())
        game = make_game(level, units=[me])
        query = WorldQuery(game, me)
        self.assertTrue(query.is_falling())
        bullet = make_bullet(1.5, 2.5, 50.0, 0.0)
        planner, predictor = planner_for(game)
        self.assertTrue(predictor.will_collide(me, bullet, me.position))

        self.assertEqual(planner.plan(query, bullet, me.position), me.position)

    def test_no_jump_when_bullet_is_not_closing_in(self):
        level = build_level(walls=[(9, 1), (11, 1)])
        me = make_unit(10.5, 1.0)
        game = make_game(level, units=[me])
        bullet = make_bullet(10.5, 6.0, 0.0, -50.0)
        planner, predictor = planner_for(game)
        self.assertTrue(predictor.will_collide(me, bullet, me.position))

        self.assertEqual(planner.plan(WorldQuery(game, me), bullet, me.position), me.position)


if __name__ == '__main__':
    unittest.main()
