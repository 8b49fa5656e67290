"""Covert point accrual and covert operations."""

from __future__ import annotations

import math
from dataclasses import dataclass

from dominion.domain.enums import CIVIL_STATUS_ORDER, CovertOperation
from dominion.domain.errors import PreconditionError
from dominion.domain.models import Empire, GameState
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream


@dataclass(slots=True)
class CovertOutcome:
    operation: CovertOperation
    success: bool
    chance: float
    effect: int = 0


def accrue_covert_points(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    covert = rules.covert
    before = empire.covert_points
    empire.covert_points = min(covert.max_points, before + covert.points_per_turn)
    return empire.covert_points - before


def success_chance(actor: Empire, target: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Agent advantage shifts the base chance, clamped to the configured range."""

    covert = rules.covert
    mine = actor.forces.covert_agents
    theirs = target.forces.covert_agents
    edge = (mine - theirs) / max(1, mine + theirs)
    return min(covert.max_success, max(covert.min_success, covert.base_success + 0.4 * edge))


def perform_operation(
    state: GameState,
    actor: Empire,
    target: Empire,
    operation: CovertOperation,
    *,
    rng: RngStream,
    rules: RulesConfig = DEFAULT_RULES,
) -> CovertOutcome:
    covert = rules.covert
    if actor.id == target.id:
        raise PreconditionError("self_target", "covert operations need a foreign target")
    if target.is_eliminated:
        raise PreconditionError("target_eliminated", "target empire is already eliminated")
    if actor.covert_points < covert.operation_cost:
        raise PreconditionError(
            "insufficient_covert_points",
            f"operation needs {covert.operation_cost} covert points",
        )

    actor.covert_points -= covert.operation_cost
    chance = success_chance(actor, target, rules=rules)
    outcome = CovertOutcome(operation=operation, success=rng.chance(chance), chance=chance)
    if outcome.success:
        if operation == CovertOperation.SABOTAGE:
            lost = math.floor(target.resources.credits * covert.sabotage_fraction)
            target.resources.credits -= lost
            outcome.effect = lost
        else:
            index = CIVIL_STATUS_ORDER.index(target.civil_status)
            target.civil_status = CIVIL_STATUS_ORDER[min(len(CIVIL_STATUS_ORDER) - 1, index + 1)]
            outcome.effect = 1
    state.record("covert_ops")
    return outcome
