"""Networth ranking metric."""

from __future__ import annotations

from dominion.domain.enums import UnitType
from dominion.domain.models import Empire
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig


def calculate_networth(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Derive networth from sectors and forces; never stored independently."""

    weights = rules.networth.unit_weights
    unit_score = sum(empire.forces.get(unit) * weights.value(unit) for unit in UnitType)
    return round(empire.sector_count * rules.networth.per_sector + unit_score, 4)


def refresh_networth(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    empire.networth = calculate_networth(empire, rules=rules)
    return empire.networth


def ranked_by_networth(empires: list[Empire]) -> list[Empire]:
    """Order empires by networth descending, then name for a stable tie-break."""

    return sorted(empires, key=lambda e: (-e.networth, e.name, int(e.id)))
