"""Declarative rule configuration for the engine.

Every numeric the engine uses lives here as data. A ``RulesConfig`` is chosen
once (per game or per simulation) and passed by reference through the call
chain; no helper reads global configuration on its own.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from .enums import CivilStatus, Material, ResourceType, Ruleset, SectorType, Stance, UnitType


@dataclass(frozen=True, slots=True)
class UnitTable:
    """Per-unit-type numeric table."""

    soldiers: float = 0.0
    fighters: float = 0.0
    stations: float = 0.0
    light_cruisers: float = 0.0
    heavy_cruisers: float = 0.0
    carriers: float = 0.0
    covert_agents: float = 0.0

    def value(self, unit: UnitType) -> float:
        return getattr(self, unit.value)


@dataclass(frozen=True, slots=True)
class StanceModifiers:
    """Multipliers applied to the side that chose a stance."""

    power: float = 1.0
    casualties: float = 1.0


@dataclass(frozen=True, slots=True)
class CombatRules:
    """Combat formula parameters for one ruleset variant."""

    ruleset: Ruleset = Ruleset.UNIFIED
    defender_bonus: float = 0.10
    unit_power: UnitTable = UnitTable(
        soldiers=1.0,
        fighters=3.0,
        stations=30.0,
        light_cruisers=5.0,
        heavy_cruisers=8.0,
        carriers=2.0,
    )
    station_defense_multiplier: float = 1.0
    underdog_enabled: bool = True
    underdog_threshold: float = 0.5
    underdog_max_bonus: float = 0.25
    diversity_enabled: bool = False
    diversity_min_types: int = 4
    diversity_bonus: float = 1.15
    capture_min_pct: float = 0.05
    capture_max_pct: float = 0.15
    capture_full_margin: float = 3.0
    winner_casualty_multiplier: float = 0.5
    loser_casualty_multiplier: float = 1.5
    draw_casualty_multiplier: float = 1.0
    draw_margin: float = 0.05
    base_casualty_rate: float = 0.25
    min_casualty_rate: float = 0.15
    max_casualty_rate: float = 0.35
    bad_attack_threshold: float = 0.5
    bad_attack_penalty: float = 1.4
    overwhelming_threshold: float = 2.0
    overwhelming_bonus: float = 0.6
    variance_min: float = 0.9
    variance_max: float = 1.1
    retreat_rate: float = 0.15
    aggressive: StanceModifiers = StanceModifiers(power=1.10, casualties=1.20)
    balanced: StanceModifiers = StanceModifiers()
    defensive: StanceModifiers = StanceModifiers(power=0.90, casualties=0.80)

    def stance(self, stance: Stance) -> StanceModifiers:
        return getattr(self, stance.value)


UNIFIED_COMBAT = CombatRules()

LEGACY_COMBAT = CombatRules(
    ruleset=Ruleset.LEGACY,
    defender_bonus=0.20,
    # Soldiers fight on the ground only and add nothing to fleet power.
    unit_power=UnitTable(
        soldiers=0.0,
        fighters=1.0,
        stations=50.0,
        light_cruisers=4.0,
        heavy_cruisers=6.0,
        carriers=12.0,
    ),
    station_defense_multiplier=2.0,
    underdog_enabled=False,
    diversity_enabled=True,
    variance_min=0.8,
    variance_max=1.2,
)


def _default_sector_yields() -> dict[SectorType, dict[ResourceType, int]]:
    return {
        SectorType.FOOD: {ResourceType.FOOD: 160},
        SectorType.ORE: {ResourceType.ORE: 112},
        SectorType.FUEL: {ResourceType.FUEL: 92},
        SectorType.COMMERCE: {ResourceType.CREDITS: 8000},
        SectorType.URBAN: {ResourceType.CREDITS: 1000},
        SectorType.EDUCATION: {},
        SectorType.GOVERNMENT: {},
        SectorType.RESEARCH: {ResourceType.RESEARCH_POINTS: 100},
        SectorType.LOGISTICS: {ResourceType.CREDITS: 500},
        SectorType.RECLAMATION: {ResourceType.FOOD: 80, ResourceType.ORE: 56},
        SectorType.INDUSTRIAL: {},
    }


def _default_sector_costs() -> dict[SectorType, int]:
    return {
        SectorType.FOOD: 8000,
        SectorType.ORE: 6000,
        SectorType.FUEL: 11500,
        SectorType.COMMERCE: 8000,
        SectorType.URBAN: 8000,
        SectorType.EDUCATION: 8000,
        SectorType.GOVERNMENT: 7500,
        SectorType.RESEARCH: 23000,
        SectorType.LOGISTICS: 10000,
        SectorType.RECLAMATION: 9000,
        SectorType.INDUSTRIAL: 15000,
    }


def _default_civil_multipliers() -> dict[CivilStatus, float]:
    return {
        CivilStatus.ECSTATIC: 1.5,
        CivilStatus.HAPPY: 1.25,
        CivilStatus.CONTENT: 1.1,
        CivilStatus.NEUTRAL: 1.0,
        CivilStatus.UNHAPPY: 0.9,
        CivilStatus.ANGRY: 0.75,
        CivilStatus.RIOTING: 0.5,
        CivilStatus.REVOLTING: 0.25,
    }


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Income, upkeep, population, and civil-status tuning."""

    sector_yields: dict[SectorType, dict[ResourceType, int]] = field(
        default_factory=_default_sector_yields
    )
    sector_costs: dict[SectorType, int] = field(default_factory=_default_sector_costs)
    sector_cost_growth: float = 0.05
    sector_maintenance: int = 168
    unit_maintenance: UnitTable = UnitTable(
        soldiers=1.0,
        fighters=2.0,
        stations=20.0,
        light_cruisers=6.0,
        heavy_cruisers=12.0,
        carriers=20.0,
        covert_agents=10.0,
    )
    starting_credits: int = 100_000
    starting_food: int = 1000
    starting_ore: int = 500
    starting_fuel: int = 200
    starting_population: int = 10_000
    starting_soldiers: int = 100
    starting_sectors: tuple[SectorType, ...] = (
        SectorType.FOOD,
        SectorType.FOOD,
        SectorType.ORE,
        SectorType.FUEL,
        SectorType.COMMERCE,
        SectorType.URBAN,
        SectorType.RESEARCH,
        SectorType.GOVERNMENT,
        SectorType.EDUCATION,
    )
    starting_civil_status: CivilStatus = CivilStatus.CONTENT
    population_growth_rate: float = 0.03
    population_per_sector: int = 5000
    food_per_citizen: float = 0.02
    starvation_loss_rate: float = 0.05
    civil_income_multipliers: dict[CivilStatus, float] = field(
        default_factory=_default_civil_multipliers
    )
    high_maintenance_ratio: float = 0.8
    low_maintenance_ratio: float = 0.3
    bankruptcy_turns: int = 5
    starvation_turns: int = 5
    collapse_turns: int = 3


@dataclass(frozen=True, slots=True)
class BuildRules:
    """Unit purchase costs and construction queue limits."""

    unit_costs: UnitTable = UnitTable(
        soldiers=50,
        fighters=200,
        stations=5000,
        light_cruisers=500,
        heavy_cruisers=1000,
        carriers=2500,
        covert_agents=4000,
    )
    build_turns: UnitTable = UnitTable(
        soldiers=1,
        fighters=2,
        stations=5,
        light_cruisers=3,
        heavy_cruisers=4,
        carriers=4,
        covert_agents=2,
    )
    max_queue_size: int = 10
    cancel_refund_fraction: float = 0.5
    max_order_quantity: int = 1_000_000


def _default_unlocks() -> dict[int, tuple[UnitType, ...]]:
    return {
        2: (UnitType.LIGHT_CRUISERS,),
        4: (UnitType.HEAVY_CRUISERS,),
        5: (UnitType.CARRIERS,),
    }


@dataclass(frozen=True, slots=True)
class ResearchRules:
    base_cost: int = 1000
    max_level: int = 7
    base_units: tuple[UnitType, ...] = (
        UnitType.SOLDIERS,
        UnitType.FIGHTERS,
        UnitType.STATIONS,
        UnitType.COVERT_AGENTS,
    )
    unlocks: dict[int, tuple[UnitType, ...]] = field(default_factory=_default_unlocks)


def _default_recipes() -> dict[Material, dict[Material, int]]:
    return {
        Material.ELECTRONICS: {Material.REFINED_METALS: 2, Material.POLYMERS: 1},
        Material.ARMOR_PLATING: {Material.REFINED_METALS: 3, Material.LABOR_UNITS: 1},
        Material.PROPULSION_UNITS: {Material.FUEL_CELLS: 2, Material.REFINED_METALS: 1},
    }


def _default_craft_turns() -> dict[Material, int]:
    return {
        Material.ELECTRONICS: 2,
        Material.ARMOR_PLATING: 2,
        Material.PROPULSION_UNITS: 3,
    }


@dataclass(frozen=True, slots=True)
class CraftingRules:
    """Tier-1 auto production ratios and tier-2 recipes."""

    refined_metals_ratio: float = 0.10
    fuel_cells_ratio: float = 0.10
    processed_food_ratio: float = 0.05
    labor_units_per_urban: int = 1
    polymers_per_industrial: int = 10
    industrial_research_bonus: float = 0.05
    recipes: dict[Material, dict[Material, int]] = field(default_factory=_default_recipes)
    craft_turns: dict[Material, int] = field(default_factory=_default_craft_turns)
    max_queue_size: int = 5


@dataclass(frozen=True, slots=True)
class CovertRules:
    points_per_turn: int = 5
    max_points: int = 50
    operation_cost: int = 20
    sabotage_fraction: float = 0.05
    base_success: float = 0.5
    min_success: float = 0.1
    max_success: float = 0.9


def _default_base_prices() -> dict[ResourceType, float]:
    return {
        ResourceType.FOOD: 10.0,
        ResourceType.ORE: 15.0,
        ResourceType.FUEL: 20.0,
    }


@dataclass(frozen=True, slots=True)
class MarketRules:
    base_prices: dict[ResourceType, float] = field(default_factory=_default_base_prices)
    baseline_volume: int = 10_000
    min_multiplier: float = 0.4
    max_multiplier: float = 1.6
    recovery_rate: float = 0.1
    sell_spread: float = 0.9


@dataclass(frozen=True, slots=True)
class DiplomacyRules:
    min_coalition_size: int = 2
    coalition_check_interval: int = 5
    base_acceptance: float = 0.3


@dataclass(frozen=True, slots=True)
class BotRules:
    """Autonomous empire tuning shared by every archetype."""

    actions_per_turn: int = 2
    max_attacks_per_turn: int = 1
    attack_force_min: float = 0.3
    attack_force_max: float = 0.7
    build_budget_fraction: float = 0.4
    trade_quantity: int = 500
    food_reserve_turns: int = 3
    emotion_decay_rate: float = 0.02
    message_chance: float = 0.25
    grudge_memory_turns: int = 20
    max_messages_kept: int = 500


@dataclass(frozen=True, slots=True)
class EventRules:
    event_chance: float = 0.15
    pirate_raid_fraction: float = 0.10
    plague_fraction: float = 0.10
    breakthrough_points: int = 500
    market_shift_fraction: float = 0.30


@dataclass(frozen=True, slots=True)
class GalaxyRules:
    """Procedural galaxy generation parameters."""

    min_regions: int = 4
    max_regions: int = 15
    empires_per_region: int = 10
    capacity_jitter: int = 2
    coordinate_max: float = 100.0
    adjacent_distance: float = 30.0
    trade_distance: float = 50.0
    trade_bonus: float = 0.2
    trade_route_chance: float = 0.5
    danger_jitter: int = 10
    hazardous_chance: float = 0.15
    hazardous_force_multiplier: float = 1.5
    hazardous_travel_cost: int = 1000
    contested_chance: float = 0.10
    contested_force_multiplier: float = 1.25
    wormhole_min_distance: float = 50.0
    wormholes_per_ten_empires: int = 2
    wormhole_collapse_chance: float = 0.05
    influence_radius: int = 3

    def __post_init__(self) -> None:
        # A lone region has no neighbour to connect to.
        if self.min_regions < 2:
            raise ValueError(f"min_regions must be at least 2, got {self.min_regions}")
        if self.max_regions < self.min_regions:
            raise ValueError(
                f"max_regions ({self.max_regions}) cannot be below min_regions "
                f"({self.min_regions})"
            )


@dataclass(frozen=True, slots=True)
class VictoryRules:
    conquest_share: float = 0.6
    economic_multiplier: float = 1.5
    economic_min_turn: int = 30
    technology_level: int = 7
    coalition_share: float = 0.5
    checkpoint_interval: int = 10


@dataclass(frozen=True, slots=True)
class NetworthRules:
    per_sector: float = 10.0
    unit_weights: UnitTable = UnitTable(
        soldiers=0.0005,
        fighters=0.001,
        stations=0.002,
        light_cruisers=0.001,
        heavy_cruisers=0.002,
        carriers=0.005,
        covert_agents=0.001,
    )


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    unified: CombatRules = UNIFIED_COMBAT
    legacy: CombatRules = LEGACY_COMBAT
    economy: EconomyRules = EconomyRules()
    build: BuildRules = BuildRules()
    research: ResearchRules = ResearchRules()
    crafting: CraftingRules = CraftingRules()
    covert: CovertRules = CovertRules()
    market: MarketRules = MarketRules()
    diplomacy: DiplomacyRules = DiplomacyRules()
    bots: BotRules = BotRules()
    events: EventRules = EventRules()
    galaxy: GalaxyRules = GalaxyRules()
    victory: VictoryRules = VictoryRules()
    networth: NetworthRules = NetworthRules()

    def combat_for(self, ruleset: Ruleset) -> CombatRules:
        return self.legacy if ruleset == Ruleset.LEGACY else self.unified


DEFAULT_RULES = RulesConfig()

_RULES_ADAPTER: TypeAdapter[RulesConfig] = TypeAdapter(RulesConfig)


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def rules_document(rules: RulesConfig = DEFAULT_RULES) -> dict[str, Any]:
    """Return a JSON-compatible dump of a rules configuration."""

    return json.loads(_RULES_ADAPTER.dump_json(rules))


def rules_from_mapping(
    overrides: dict[str, Any], *, base: RulesConfig = DEFAULT_RULES
) -> RulesConfig:
    """Validate a (possibly partial) rules document on top of ``base``.

    Nested sections merge key by key, so ``{"unified": {"defender_bonus": 0}}``
    changes one number and keeps the rest of the unified ruleset.
    """

    return _RULES_ADAPTER.validate_python(_merge(rules_document(base), overrides))


def rules_from_json(payload: str | bytes, *, base: RulesConfig = DEFAULT_RULES) -> RulesConfig:
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("rules document must be a JSON object")
    return rules_from_mapping(data, base=base)


def load_rules(path: Path | str, *, base: RulesConfig = DEFAULT_RULES) -> RulesConfig:
    """Load a rules document from disk."""

    return rules_from_json(Path(path).read_bytes(), base=base)
