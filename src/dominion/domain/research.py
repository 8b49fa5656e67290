"""Research accrual and level-up unlocks."""

from __future__ import annotations

from dominion.domain.enums import UnitType
from dominion.domain.models import Empire
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig


def level_cost(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Points needed to advance from ``level`` to ``level + 1``."""

    return rules.research.base_cost * 2**level


def unlocked_units_for(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> list[UnitType]:
    units = list(rules.research.base_units)
    for threshold in sorted(rules.research.unlocks):
        if threshold <= level:
            for unit in rules.research.unlocks[threshold]:
                if unit not in units:
                    units.append(unit)
    return units


def advance_research(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> list[int]:
    """Spend accumulated points on as many levels as they cover.

    Unlocks apply immediately, so units unlocked here can be ordered by the
    build-queue phase of the same turn. Returns the levels reached.
    """

    reached: list[int] = []
    research = rules.research
    while empire.research_level < research.max_level:
        cost = level_cost(empire.research_level, rules=rules)
        if empire.resources.research_points < cost:
            break
        empire.resources.research_points -= cost
        empire.research_level += 1
        reached.append(empire.research_level)
        for unit in research.unlocks.get(empire.research_level, ()):
            if unit not in empire.unlocked_units:
                empire.unlocked_units.append(unit)
    return reached
