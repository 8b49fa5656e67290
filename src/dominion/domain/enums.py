"""Enumerations for the Nexus Dominion domain."""

from __future__ import annotations

from enum import StrEnum


class EmpireKind(StrEnum):
    """Who drives an empire's decisions."""

    PLAYER = "player"
    BOT = "bot"


class Archetype(StrEnum):
    """Behavioural profiles available to autonomous empires."""

    WARLORD = "warlord"
    DIPLOMAT = "diplomat"
    MERCHANT = "merchant"
    SCHEMER = "schemer"
    TURTLE = "turtle"
    BLITZKRIEG = "blitzkrieg"
    TECH_RUSH = "tech_rush"
    OPPORTUNIST = "opportunist"


class UnitType(StrEnum):
    """Unit types; values match the field names on ``Forces``."""

    SOLDIERS = "soldiers"
    FIGHTERS = "fighters"
    STATIONS = "stations"
    LIGHT_CRUISERS = "light_cruisers"
    HEAVY_CRUISERS = "heavy_cruisers"
    CARRIERS = "carriers"
    COVERT_AGENTS = "covert_agents"


COMBAT_UNITS: tuple[UnitType, ...] = (
    UnitType.SOLDIERS,
    UnitType.FIGHTERS,
    UnitType.STATIONS,
    UnitType.LIGHT_CRUISERS,
    UnitType.HEAVY_CRUISERS,
    UnitType.CARRIERS,
)


class SectorType(StrEnum):
    """Sector specialisations (formerly planet types)."""

    FOOD = "food"
    ORE = "ore"
    FUEL = "fuel"
    COMMERCE = "commerce"
    URBAN = "urban"
    EDUCATION = "education"
    GOVERNMENT = "government"
    RESEARCH = "research"
    LOGISTICS = "logistics"
    RECLAMATION = "reclamation"
    INDUSTRIAL = "industrial"


class CivilStatus(StrEnum):
    """Ordered civil-status levels, best first."""

    ECSTATIC = "ecstatic"
    HAPPY = "happy"
    CONTENT = "content"
    NEUTRAL = "neutral"
    UNHAPPY = "unhappy"
    ANGRY = "angry"
    RIOTING = "rioting"
    REVOLTING = "revolting"


CIVIL_STATUS_ORDER: tuple[CivilStatus, ...] = tuple(CivilStatus)


class ResourceType(StrEnum):
    """Resource balances held by an empire."""

    CREDITS = "credits"
    FOOD = "food"
    ORE = "ore"
    FUEL = "fuel"
    RESEARCH_POINTS = "research_points"


TRADABLE_RESOURCES: tuple[ResourceType, ...] = (
    ResourceType.FOOD,
    ResourceType.ORE,
    ResourceType.FUEL,
)


class Material(StrEnum):
    """Crafted materials (tier 1 produced automatically, tier 2 crafted)."""

    REFINED_METALS = "refined_metals"
    FUEL_CELLS = "fuel_cells"
    POLYMERS = "polymers"
    PROCESSED_FOOD = "processed_food"
    LABOR_UNITS = "labor_units"
    ELECTRONICS = "electronics"
    ARMOR_PLATING = "armor_plating"
    PROPULSION_UNITS = "propulsion_units"


class Ruleset(StrEnum):
    """Combat formula variants; one per game, never mixed."""

    UNIFIED = "unified"
    LEGACY = "legacy"


class AttackType(StrEnum):
    INVASION = "invasion"
    GUERILLA = "guerilla"


class Stance(StrEnum):
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    DEFENSIVE = "defensive"


class CombatSide(StrEnum):
    ATTACKER = "attacker"
    DEFENDER = "defender"


class RegionType(StrEnum):
    CORE = "core"
    INNER = "inner"
    OUTER = "outer"
    RIM = "rim"


class ConnectionType(StrEnum):
    ADJACENT = "adjacent"
    HAZARDOUS = "hazardous"
    CONTESTED = "contested"
    TRADE_ROUTE = "trade_route"
    WORMHOLE = "wormhole"


class WormholeStatus(StrEnum):
    UNDISCOVERED = "undiscovered"
    DISCOVERED = "discovered"
    COLLAPSED = "collapsed"


class TreatyType(StrEnum):
    NON_AGGRESSION = "non_aggression"
    ALLIANCE = "alliance"


class CovertOperation(StrEnum):
    SABOTAGE = "sabotage"
    INCITE_UNREST = "incite_unrest"


class TradeSide(StrEnum):
    BUY = "buy"
    SELL = "sell"


class BotActionType(StrEnum):
    """Decision categories weighted by archetype profiles."""

    BUILD_UNITS = "build_units"
    BUY_SECTOR = "buy_sector"
    ATTACK = "attack"
    DIPLOMACY = "diplomacy"
    TRADE = "trade"
    CRAFT = "craft"
    COVERT = "covert"
    DO_NOTHING = "do_nothing"


class EmotionalState(StrEnum):
    CONFIDENT = "confident"
    ARROGANT = "arrogant"
    DESPERATE = "desperate"
    VENGEFUL = "vengeful"
    FEARFUL = "fearful"
    TRIUMPHANT = "triumphant"


class EventType(StrEnum):
    """Galactic random events."""

    MARKET_BOOM = "market_boom"
    RESOURCE_SHORTAGE = "resource_shortage"
    PIRATE_RAID = "pirate_raid"
    PLAGUE = "plague"
    TECH_BREAKTHROUGH = "tech_breakthrough"
    WORMHOLE_DISCOVERY = "wormhole_discovery"


class VictoryType(StrEnum):
    CONQUEST = "conquest"
    ECONOMIC = "economic"
    TECHNOLOGICAL = "technological"
    DOMINATION = "domination"
    COALITION = "coalition"
    SURVIVAL = "survival"


class DefeatType(StrEnum):
    ELIMINATION = "elimination"
    BANKRUPTCY = "bankruptcy"
    STARVATION = "starvation"
    CIVIL_COLLAPSE = "civil_collapse"


class GameStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TurnPhase(StrEnum):
    """Phases of the turn pipeline, in execution order."""

    INCOME = "income"
    TIER1_PRODUCTION = "tier1_production"
    POPULATION = "population"
    CIVIL_STATUS = "civil_status"
    RESEARCH = "research"
    BUILD_QUEUE = "build_queue"
    COVERT_POINTS = "covert_points"
    CRAFTING = "crafting"
    BOT_DECISIONS = "bot_decisions"
    EMOTIONAL_DECAY = "emotional_decay"
    MARKET = "market"
    BOT_MESSAGING = "bot_messaging"
    GALACTIC_EVENTS = "galactic_events"
    COALITION_CHECKPOINT = "coalition_checkpoint"
    VICTORY = "victory"
    CHECKPOINT = "checkpoint"
