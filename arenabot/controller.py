"""
Tactical controller - one command per tick for one unit.

Pipeline:
    WorldQuery      resolve nearest enemy / weapon / health pack
    GoalArbiter     pick the primary goal and its target position
    ThreatPredictor + EvasionPlanner
                    override the target when a bullet is about to hit us
    CommandShaper   velocity, jump and aim toward the final target;
                    shoot / reload / swap flags from the arbiter

Usage:
    controller = TacticalController(ControllerConfig.from_env())
    action = controller.get_action(unit, game)

The controller keeps no state between ticks: the same (unit, game) pair
always produces the same command.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .arbiter import GoalArbiter
from .config import ControllerConfig
from .defs import Goal
from .diagnostics import TickReport, emit_safely
from .evasion import EvasionPlanner
from .shaper import CommandShaper, aim_to
from .snapshot import UnitAction, Vec2
from .threat import ThreatPredictor
from .world import WorldQuery

logger = logging.getLogger('arenabot.controller')


@dataclass(frozen=True)
class TickDecision:
    action: UnitAction
    goal: Goal
    target: Vec2
    secondary_goal: Optional[Goal] = None
    primary_target: Optional[Vec2] = None


class TacticalController:

    def __init__(self, config=None, diagnostics=None):
        self.config = config or ControllerConfig()
        self.diagnostics = diagnostics
        self.arbiter = GoalArbiter(self.config)
        self.shaper = CommandShaper(self.config)

    def get_action(self, unit, game):
        """The command for this tick."""
        return self.decide(unit, game).action

    def decide(self, unit, game):
        """Run the whole pipeline and return the command with its reasoning."""
        started = time.perf_counter()

        query = WorldQuery(game, unit)
        decision = self.arbiter.choose_goal(query)
        target = decision.target

        secondary = None
        threat = self.arbiter.select_threat(query)
        if threat is not None:
            predictor = ThreatPredictor(game, self.config)
            planner = EvasionPlanner(predictor, self.config)
            target = planner.plan(query, threat.bullet, target)
            secondary = threat.goal
            if target != decision.target:
                logger.debug(f"unit {unit.id}: {threat.goal.value} moves target "
                             f"({decision.target.x:.2f}, {decision.target.y:.2f}) -> "
                             f"({target.x:.2f}, {target.y:.2f})")

        enemy = decision.enemy
        aim = aim_to(unit, enemy)
        shoot = self.arbiter.should_shoot(query, enemy, aim)
        velocity, jump, jump_down = self.shaper.shape(query, target)

        action = UnitAction(
            velocity=velocity,
            jump=jump,
            jump_down=jump_down,
            aim=aim,
            shoot=shoot,
            reload=self.arbiter.should_reload(unit, shoot),
            swap_weapon=self.arbiter.should_swap_weapon(unit, decision.weapon_box),
            plant_mine=False,
        )

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        if elapsed_ms > self.config.tick_budget_ms:
            logger.warning(f"Tick {game.current_tick} took {elapsed_ms:.1f}ms "
                           f"(budget {self.config.tick_budget_ms:.1f}ms)")

        if self.diagnostics is not None:
            emit_safely(self.diagnostics, TickReport(
                tick=game.current_tick,
                unit_id=unit.id,
                goal=decision.goal.value,
                secondary_goal=secondary.value if secondary else None,
                position=(unit.position.x, unit.position.y),
                target=(target.x, target.y),
                aim=(aim.x, aim.y),
                velocity=velocity,
                jump=jump,
                shoot=shoot,
                reload=action.reload,
                swap_weapon=action.swap_weapon,
                elapsed_ms=elapsed_ms,
            ))

        return TickDecision(
            action=action,
            goal=decision.goal,
            target=target,
            secondary_goal=secondary,
            primary_target=decision.target,
        )
