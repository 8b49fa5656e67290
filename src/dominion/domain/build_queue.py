"""Multi-turn unit construction queue."""

from __future__ import annotations

import math
from dataclasses import dataclass

from dominion.domain.enums import UnitType
from dominion.domain.errors import PreconditionError, ValidationError
from dominion.domain.models import BuildOrderID, BuildQueueEntry, Empire, GameState
from dominion.domain.networth import refresh_networth
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class CancelOutcome:
    entry: BuildQueueEntry
    refund: int


def order_cost(unit: UnitType, quantity: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return math.ceil(rules.build.unit_costs.value(unit) * quantity)


def affordable_quantity(
    empire: Empire, unit: UnitType, budget: int, *, rules: RulesConfig = DEFAULT_RULES
) -> int:
    unit_cost = rules.build.unit_costs.value(unit)
    if unit_cost <= 0:
        return 0
    return max(0, min(budget, empire.resources.credits) // math.ceil(unit_cost))


def queue_build(
    state: GameState,
    empire: Empire,
    unit: UnitType,
    quantity: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> BuildQueueEntry:
    """Pay for and enqueue a construction order."""

    build = rules.build
    if quantity <= 0 or quantity > build.max_order_quantity:
        raise ValidationError(
            "invalid_quantity", f"quantity must be between 1 and {build.max_order_quantity}"
        )
    if empire.is_eliminated:
        raise PreconditionError("empire_eliminated", "eliminated empires cannot build")
    if unit not in empire.unlocked_units:
        raise PreconditionError("unit_locked", f"{unit} has not been researched")
    if len(empire.build_queue) >= build.max_queue_size:
        raise PreconditionError("queue_full", f"build queue full (max {build.max_queue_size})")

    cost = order_cost(unit, quantity, rules=rules)
    if empire.resources.credits < cost:
        raise PreconditionError(
            "insufficient_credits", f"order costs {cost} credits, {empire.resources.credits} held"
        )

    empire.resources.credits -= cost
    entry = BuildQueueEntry(
        id=BuildOrderID(state.next_id("build_order")),
        unit_type=unit,
        quantity=quantity,
        turns_remaining=max(1, int(build.build_turns.value(unit))),
        total_cost=cost,
        ordered_turn=state.turn,
    )
    empire.build_queue.append(entry)
    state.record("build_units")
    return entry


def advance_build_queue(
    empire: Empire, *, rules: RulesConfig = DEFAULT_RULES
) -> list[BuildQueueEntry]:
    """Tick every order by one turn and credit completed units."""

    completed: list[BuildQueueEntry] = []
    remaining: list[BuildQueueEntry] = []
    for entry in empire.build_queue:
        entry.turns_remaining -= 1
        if entry.turns_remaining <= 0:
            entry.turns_remaining = 0
            empire.forces.add(entry.unit_type, entry.quantity)
            completed.append(entry)
        else:
            remaining.append(entry)
    empire.build_queue = remaining
    if completed:
        refresh_networth(empire, rules=rules)
    return completed


def cancel_build(
    empire: Empire, entry_id: BuildOrderID, *, rules: RulesConfig = DEFAULT_RULES
) -> CancelOutcome:
    """Remove an order immediately and refund the configured fraction."""

    for index, entry in enumerate(empire.build_queue):
        if entry.id == entry_id:
            del empire.build_queue[index]
            refund = math.floor(entry.total_cost * rules.build.cancel_refund_fraction)
            empire.resources.credits += refund
            return CancelOutcome(entry=entry, refund=refund)
    raise PreconditionError("unknown_order", f"build order {int(entry_id)} not found")
