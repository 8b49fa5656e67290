"""Archetype weight records for autonomous empires.

Archetypes are data, not code paths: the decision engine runs one procedure
for every bot and only looks up the profile below.
"""

from __future__ import annotations

from dataclasses import dataclass

from dominion.domain.enums import (
    Archetype,
    BotActionType,
    CovertOperation,
    SectorType,
    Stance,
    TreatyType,
    UnitType,
)


@dataclass(frozen=True, slots=True)
class ArchetypeProfile:
    """Named bundle of decision weights for one archetype."""

    archetype: Archetype
    weights: dict[BotActionType, float]
    aggressiveness: float
    risk_tolerance: float
    economic_priority: float
    diplomatic_propensity: float
    preferred_units: tuple[UnitType, ...]
    preferred_sectors: tuple[SectorType, ...]
    preferred_stance: Stance = Stance.BALANCED
    favoured_treaty: TreatyType = TreatyType.NON_AGGRESSION
    covert_operation: CovertOperation = CovertOperation.SABOTAGE
    prefers_raids: bool = False
    targets_weakest: bool = True


def _weights(
    build: float,
    sector: float,
    attack: float,
    diplomacy: float,
    trade: float,
    idle: float,
    craft: float,
    covert: float,
) -> dict[BotActionType, float]:
    return {
        BotActionType.BUILD_UNITS: build,
        BotActionType.BUY_SECTOR: sector,
        BotActionType.ATTACK: attack,
        BotActionType.DIPLOMACY: diplomacy,
        BotActionType.TRADE: trade,
        BotActionType.DO_NOTHING: idle,
        BotActionType.CRAFT: craft,
        BotActionType.COVERT: covert,
    }


_FLEET = (UnitType.FIGHTERS, UnitType.LIGHT_CRUISERS, UnitType.HEAVY_CRUISERS)

ARCHETYPE_PROFILES: dict[Archetype, ArchetypeProfile] = {
    Archetype.WARLORD: ArchetypeProfile(
        archetype=Archetype.WARLORD,
        weights=_weights(0.28, 0.08, 0.32, 0.04, 0.04, 0.04, 0.10, 0.10),
        aggressiveness=0.9,
        risk_tolerance=0.7,
        economic_priority=0.3,
        diplomatic_propensity=0.2,
        preferred_units=(*_FLEET, UnitType.SOLDIERS, UnitType.CARRIERS),
        preferred_sectors=(SectorType.ORE, SectorType.FUEL, SectorType.INDUSTRIAL),
        preferred_stance=Stance.AGGRESSIVE,
        targets_weakest=False,
    ),
    Archetype.DIPLOMAT: ArchetypeProfile(
        archetype=Archetype.DIPLOMAT,
        weights=_weights(0.22, 0.22, 0.04, 0.22, 0.12, 0.04, 0.08, 0.06),
        aggressiveness=0.1,
        risk_tolerance=0.2,
        economic_priority=0.7,
        diplomatic_propensity=0.9,
        preferred_units=(UnitType.STATIONS, UnitType.FIGHTERS),
        preferred_sectors=(SectorType.COMMERCE, SectorType.URBAN, SectorType.EDUCATION),
        preferred_stance=Stance.DEFENSIVE,
        favoured_treaty=TreatyType.ALLIANCE,
        covert_operation=CovertOperation.INCITE_UNREST,
    ),
    Archetype.MERCHANT: ArchetypeProfile(
        archetype=Archetype.MERCHANT,
        weights=_weights(0.15, 0.27, 0.08, 0.08, 0.15, 0.04, 0.15, 0.08),
        aggressiveness=0.2,
        risk_tolerance=0.4,
        economic_priority=0.9,
        diplomatic_propensity=0.6,
        preferred_units=(UnitType.FIGHTERS, UnitType.STATIONS),
        preferred_sectors=(SectorType.COMMERCE, SectorType.FOOD, SectorType.URBAN),
    ),
    Archetype.SCHEMER: ArchetypeProfile(
        archetype=Archetype.SCHEMER,
        weights=_weights(0.20, 0.10, 0.22, 0.06, 0.06, 0.03, 0.12, 0.21),
        aggressiveness=0.6,
        risk_tolerance=0.5,
        economic_priority=0.5,
        diplomatic_propensity=0.4,
        preferred_units=(UnitType.COVERT_AGENTS, UnitType.FIGHTERS, UnitType.LIGHT_CRUISERS),
        preferred_sectors=(SectorType.GOVERNMENT, SectorType.COMMERCE),
        covert_operation=CovertOperation.INCITE_UNREST,
        prefers_raids=True,
    ),
    Archetype.TURTLE: ArchetypeProfile(
        archetype=Archetype.TURTLE,
        weights=_weights(0.35, 0.20, 0.04, 0.08, 0.08, 0.04, 0.12, 0.09),
        aggressiveness=0.1,
        risk_tolerance=0.1,
        economic_priority=0.6,
        diplomatic_propensity=0.5,
        preferred_units=(UnitType.STATIONS, UnitType.SOLDIERS),
        preferred_sectors=(SectorType.FOOD, SectorType.ORE, SectorType.GOVERNMENT),
        preferred_stance=Stance.DEFENSIVE,
    ),
    Archetype.BLITZKRIEG: ArchetypeProfile(
        archetype=Archetype.BLITZKRIEG,
        weights=_weights(0.20, 0.08, 0.40, 0.04, 0.04, 0.04, 0.08, 0.12),
        aggressiveness=1.0,
        risk_tolerance=0.8,
        economic_priority=0.2,
        diplomatic_propensity=0.1,
        preferred_units=(UnitType.FIGHTERS, UnitType.SOLDIERS, UnitType.LIGHT_CRUISERS),
        preferred_sectors=(SectorType.FUEL, SectorType.ORE),
        preferred_stance=Stance.AGGRESSIVE,
        targets_weakest=False,
    ),
    Archetype.TECH_RUSH: ArchetypeProfile(
        archetype=Archetype.TECH_RUSH,
        weights=_weights(0.18, 0.27, 0.08, 0.08, 0.10, 0.04, 0.15, 0.10),
        aggressiveness=0.3,
        risk_tolerance=0.3,
        economic_priority=0.8,
        diplomatic_propensity=0.5,
        preferred_units=(UnitType.HEAVY_CRUISERS, UnitType.LIGHT_CRUISERS, UnitType.FIGHTERS),
        preferred_sectors=(SectorType.RESEARCH, SectorType.EDUCATION, SectorType.INDUSTRIAL),
    ),
    Archetype.OPPORTUNIST: ArchetypeProfile(
        archetype=Archetype.OPPORTUNIST,
        weights=_weights(0.20, 0.15, 0.28, 0.08, 0.04, 0.04, 0.10, 0.11),
        aggressiveness=0.7,
        risk_tolerance=0.4,
        economic_priority=0.5,
        diplomatic_propensity=0.3,
        preferred_units=(UnitType.FIGHTERS, UnitType.LIGHT_CRUISERS, UnitType.SOLDIERS),
        preferred_sectors=(SectorType.COMMERCE, SectorType.ORE),
    ),
}


def profile_for(archetype: Archetype | None) -> ArchetypeProfile:
    """Return the profile for ``archetype``; unknown or missing maps to merchant."""

    if archetype is None:
        return ARCHETYPE_PROFILES[Archetype.MERCHANT]
    return ARCHETYPE_PROFILES[archetype]


def action_weights(
    profile: ArchetypeProfile,
    *,
    protected: bool,
    aggression: float = 1.0,
) -> dict[BotActionType, float]:
    """Decision weights for this turn.

    While the protection period lasts the attack weight is zero and its share
    is spread proportionally over the other actions.
    """

    weights = dict(profile.weights)
    weights[BotActionType.ATTACK] = weights[BotActionType.ATTACK] * aggression
    if not protected:
        return weights

    attack_weight = weights[BotActionType.ATTACK]
    others = sum(value for key, value in weights.items() if key != BotActionType.ATTACK)
    factor = 1.0 + attack_weight / others if others > 0 else 1.0
    return {
        key: 0.0 if key == BotActionType.ATTACK else value * factor
        for key, value in weights.items()
    }
