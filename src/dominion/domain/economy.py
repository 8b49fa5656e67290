"""Per-empire economy: income, upkeep, population, and civil status."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from dominion.domain.enums import (
    CIVIL_STATUS_ORDER,
    CivilStatus,
    ResourceType,
    SectorType,
    UnitType,
)
from dominion.domain.errors import PreconditionError, ValidationError
from dominion.domain.models import Empire, GameState, Resources, Sector, SectorID
from dominion.domain.networth import refresh_networth
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class IncomeReport:
    """Resource deltas computed for one empire for one turn."""

    production: Resources = field(default_factory=Resources)
    sector_upkeep: int = 0
    unit_upkeep: int = 0
    food_consumed: int = 0
    civil_multiplier: float = 1.0
    bankrupt: bool = False
    starving: bool = False

    @property
    def upkeep(self) -> int:
        return self.sector_upkeep + self.unit_upkeep


def sector_production(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> Resources:
    """Raw yields from every sector, before civil-status scaling."""

    produced = Resources()
    yields = rules.economy.sector_yields
    for sector in empire.sectors:
        for resource, amount in yields.get(sector.type, {}).items():
            produced.add(resource, amount)
    return produced


def unit_upkeep(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    maintenance = rules.economy.unit_maintenance
    return math.ceil(
        sum(empire.forces.get(unit) * maintenance.value(unit) for unit in UnitType)
    )


def calculate_income(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> IncomeReport:
    """Compute income and upkeep without touching balances."""

    economy = rules.economy
    production = sector_production(empire, rules=rules)
    multiplier = economy.civil_income_multipliers.get(empire.civil_status, 1.0)
    production.credits = math.floor(production.credits * multiplier)
    return IncomeReport(
        production=production,
        sector_upkeep=empire.sector_count * economy.sector_maintenance,
        unit_upkeep=unit_upkeep(empire, rules=rules),
        food_consumed=math.ceil(empire.population * economy.food_per_citizen),
        civil_multiplier=multiplier,
    )


def apply_income(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> IncomeReport:
    """Credit production, charge upkeep and food, and track shortfall streaks."""

    report = calculate_income(empire, rules=rules)
    balances = empire.resources
    for resource in ResourceType:
        balances.add(resource, report.production.get(resource))

    balances.credits -= report.upkeep
    if balances.credits < 0:
        balances.credits = 0
        empire.bankrupt_turns += 1
        report.bankrupt = True
    else:
        empire.bankrupt_turns = 0

    food_balance = report.production.food - report.food_consumed
    balances.food -= report.food_consumed
    if balances.food < 0:
        balances.food = 0
        empire.starving_turns += 1
        report.starving = True
    else:
        empire.starving_turns = 0

    empire.last_income = report.production.credits
    empire.last_upkeep = report.upkeep
    empire.last_food_balance = food_balance
    return report


def population_cap(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return empire.sector_count * rules.economy.population_per_sector


def grow_population(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Grow toward the sector cap, or shrink while starving. Returns the delta."""

    economy = rules.economy
    before = empire.population
    if empire.starving_turns > 0:
        empire.population = max(0, before - math.ceil(before * economy.starvation_loss_rate))
    else:
        cap = population_cap(empire, rules=rules)
        if before < cap:
            growth = max(1, math.floor(before * economy.population_growth_rate))
            empire.population = min(cap, before + growth)
        elif before > cap:
            empire.population = cap
    return empire.population - before


def maintenance_ratio(empire: Empire) -> float:
    if empire.last_income <= 0:
        return math.inf if empire.last_upkeep > 0 else 0.0
    return empire.last_upkeep / empire.last_income


def update_civil_status(
    empire: Empire, *, rules: RulesConfig = DEFAULT_RULES
) -> CivilStatus | None:
    """Move civil status one step; returns the new level when it changed.

    Reads this turn's income ledger and starvation streak, so it must run
    after income and population growth.
    """

    economy = rules.economy
    index = CIVIL_STATUS_ORDER.index(empire.civil_status)
    ratio = maintenance_ratio(empire)

    if empire.starving_turns > 0 or ratio > economy.high_maintenance_ratio:
        index = min(len(CIVIL_STATUS_ORDER) - 1, index + 1)
    elif empire.last_food_balance >= 0 and (
        empire.sectors_of_type(SectorType.EDUCATION) > 0 or ratio < economy.low_maintenance_ratio
    ):
        index = max(0, index - 1)

    new_status = CIVIL_STATUS_ORDER[index]
    if new_status == CivilStatus.REVOLTING:
        empire.revolting_turns += 1
    else:
        empire.revolting_turns = 0

    if new_status == empire.civil_status:
        return None
    empire.civil_status = new_status
    return new_status


def sector_purchase_cost(
    empire: Empire, sector_type: SectorType, *, rules: RulesConfig = DEFAULT_RULES
) -> int:
    """Base cost grows with the number of sectors already held."""

    economy = rules.economy
    base = economy.sector_costs[sector_type]
    return math.ceil(base * (1.0 + economy.sector_cost_growth * empire.sector_count))


def buy_sector(
    state: GameState,
    empire: Empire,
    sector_type: SectorType | str,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Sector:
    """Colonise a new sector for credits."""

    try:
        kind = SectorType(sector_type)
    except ValueError:
        raise ValidationError(
            "invalid_sector_type", f"unknown sector type: {sector_type}"
        ) from None
    if empire.is_eliminated:
        raise PreconditionError("empire_eliminated", "eliminated empires cannot expand")

    cost = sector_purchase_cost(empire, kind, rules=rules)
    if empire.resources.credits < cost:
        raise PreconditionError(
            "insufficient_credits", f"sector costs {cost} credits, {empire.resources.credits} held"
        )
    empire.resources.credits -= cost
    sector = Sector(id=SectorID(state.next_id("sector")), type=kind, acquired_turn=state.turn)
    empire.sectors.append(sector)
    refresh_networth(empire, rules=rules)
    state.record("sectors_bought")
    return sector
