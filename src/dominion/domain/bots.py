"""Decision engine for autonomous empires.

One procedure serves every archetype: the archetype only selects the weight
record (see ``dominion.domain.archetypes``). Bots produce the same request
objects a player submits, and those requests go through the shared action
boundary, so both sides play by identical rules.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from dominion.domain.actions import (
    ActionRequest,
    AttackRequest,
    BuildRequest,
    BuySectorRequest,
    CovertRequest,
    CraftRequest,
    TradeRequest,
    TreatyRequest,
)
from dominion.domain.archetypes import ArchetypeProfile, action_weights, profile_for
from dominion.domain.build_queue import affordable_quantity
from dominion.domain.combat import fleet_power
from dominion.domain.crafting import missing_materials
from dominion.domain.diplomacy import find_treaty, treaty_partners
from dominion.domain.economy import sector_purchase_cost
from dominion.domain.emotions import current_modifiers
from dominion.domain.enums import (
    COMBAT_UNITS,
    AttackType,
    BotActionType,
    EmotionalState,
    ResourceType,
    SectorType,
    TradeSide,
    TreatyType,
    UnitType,
)
from dominion.domain.models import Empire, Forces, GameState
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream

# Stations never leave home; covert agents cannot fight.
_MOBILE_UNITS: tuple[UnitType, ...] = tuple(u for u in COMBAT_UNITS if u != UnitType.STATIONS)

Planner = Callable[
    [Empire, GameState, ArchetypeProfile, RngStream, RulesConfig], ActionRequest | None
]


def decide(
    empire: Empire,
    state: GameState,
    rng: RngStream,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[ActionRequest]:
    """Pick this turn's requests for one autonomous empire.

    Eliminated empires and player empires never act. At most
    ``actions_per_turn`` requests are produced, of which at most
    ``max_attacks_per_turn`` are attacks.
    """

    if empire.is_eliminated or not empire.is_bot:
        return []

    profile = profile_for(empire.archetype)
    modifiers = current_modifiers(empire.emotion)
    weights = action_weights(
        profile,
        protected=state.turn <= state.protection_turns,
        aggression=modifiers.aggression,
    )
    options = list(BotActionType)
    option_weights = [weights[option] for option in options]

    requests: list[ActionRequest] = []
    attacks = 0
    for _ in range(rules.bots.actions_per_turn):
        choice = rng.weighted_choice(options, option_weights)
        if choice == BotActionType.ATTACK and attacks >= rules.bots.max_attacks_per_turn:
            continue
        request = _PLANNERS[choice](empire, state, profile, rng, rules)
        if request is None:
            continue
        if isinstance(request, AttackRequest):
            attacks += 1
        requests.append(request)
    return requests


def _rivals(empire: Empire, state: GameState) -> list[Empire]:
    """Alive empires this one could legally attack (no treaty in force)."""

    partners = treaty_partners(state, empire.id)
    return [
        other
        for other in state.alive_empires()
        if other.id != empire.id and other.id not in partners
    ]


def _grudge_target(empire: Empire, candidates: list[Empire]) -> Empire | None:
    held = [c for c in candidates if c.id in empire.grudges]
    if not held:
        return None
    return max(held, key=lambda c: (empire.grudges[c.id], -int(c.id)))


def _plan_build(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    if len(empire.build_queue) >= rules.build.max_queue_size:
        return None
    unit = next(
        (u for u in profile.preferred_units if u in empire.unlocked_units),
        UnitType.SOLDIERS,
    )
    budget = math.floor(empire.resources.credits * rules.bots.build_budget_fraction)
    quantity = min(
        affordable_quantity(empire, unit, budget, rules=rules), rules.build.max_order_quantity
    )
    if quantity <= 0:
        return None
    return BuildRequest(empire_id=empire.id, unit_type=unit, quantity=quantity)


def _plan_buy_sector(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    if empire.last_food_balance < 0:
        sector_type = SectorType.FOOD
    else:
        sector_type = rng.choice(profile.preferred_sectors)
    if sector_purchase_cost(empire, sector_type, rules=rules) > empire.resources.credits:
        return None
    return BuySectorRequest(empire_id=empire.id, sector_type=sector_type)


def _plan_attack(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    if state.turn <= state.protection_turns:
        return None
    candidates = _rivals(empire, state)
    if not candidates:
        return None

    target = None
    if empire.emotion.state == EmotionalState.VENGEFUL:
        target = _grudge_target(empire, candidates)
    if target is None:
        if profile.targets_weakest:
            target = min(candidates, key=lambda c: (c.networth, int(c.id)))
        else:
            weaker = [c for c in candidates if c.networth < empire.networth]
            target = rng.choice(weaker or candidates)

    committed = Forces()
    bots = rules.bots
    for unit in _MOBILE_UNITS:
        held = empire.forces.get(unit)
        if held > 0:
            share = rng.uniform(bots.attack_force_min, bots.attack_force_max)
            committed.set(unit, math.floor(held * share))
    if committed.total() <= 0:
        return None

    combat = rules.combat_for(state.ruleset)
    power = fleet_power(committed, combat) * combat.stance(profile.preferred_stance).power
    defense = fleet_power(target.forces.combat_units(), combat, defending=True) * (
        1.0 + combat.defender_bonus
    )
    if power < defense * (1.2 - profile.risk_tolerance):
        return None

    return AttackRequest(
        empire_id=empire.id,
        target_id=target.id,
        forces=committed,
        attack_type=AttackType.GUERILLA if profile.prefers_raids else AttackType.INVASION,
        stance=profile.preferred_stance,
    )


def _plan_diplomacy(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    wanted = profile.favoured_treaty
    candidates = []
    for other in state.alive_empires():
        if other.id == empire.id or other.id in empire.grudges:
            continue
        existing = find_treaty(state, empire.id, other.id)
        if existing is None or (
            existing.type == TreatyType.NON_AGGRESSION and wanted == TreatyType.ALLIANCE
        ):
            candidates.append(other)
    if not candidates:
        return None
    target = rng.choice(candidates)
    return TreatyRequest(empire_id=empire.id, target_id=target.id, treaty_type=wanted)


def _plan_trade(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    bots = rules.bots
    upkeep = math.ceil(empire.population * rules.economy.food_per_citizen)
    reserve = upkeep * bots.food_reserve_turns
    if empire.last_food_balance < 0 and empire.resources.food < reserve:
        price = state.market.prices.get(ResourceType.FOOD, 0.0)
        quantity = min(bots.trade_quantity, math.floor(empire.resources.credits / max(price, 1e-9)))
        if quantity <= 0:
            return None
        return TradeRequest(
            empire_id=empire.id, resource=ResourceType.FOOD, quantity=quantity, side=TradeSide.BUY
        )

    surplus = [
        (empire.resources.get(resource), resource)
        for resource in (ResourceType.ORE, ResourceType.FUEL)
        if empire.resources.get(resource) > bots.trade_quantity * 2
    ]
    if not surplus:
        return None
    _, resource = max(surplus)
    return TradeRequest(
        empire_id=empire.id, resource=resource, quantity=bots.trade_quantity, side=TradeSide.SELL
    )


def _plan_craft(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    crafting = rules.crafting
    if len(empire.crafting_queue) >= crafting.max_queue_size:
        return None
    for product in sorted(crafting.recipes):
        if missing_materials(empire, product, 1, rules=rules):
            continue
        recipe = crafting.recipes[product]
        quantity = min(
            empire.materials.get(ingredient, 0) // per_unit
            for ingredient, per_unit in recipe.items()
        )
        return CraftRequest(empire_id=empire.id, material=product, quantity=min(quantity, 10))
    return None


def _plan_covert(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    if empire.covert_points < rules.covert.operation_cost:
        return None
    candidates = _rivals(empire, state)
    if not candidates:
        return None
    target = _grudge_target(empire, candidates) or max(
        candidates, key=lambda c: (c.networth, -int(c.id))
    )
    return CovertRequest(
        empire_id=empire.id, target_id=target.id, operation=profile.covert_operation
    )


def _plan_nothing(
    empire: Empire, state: GameState, profile: ArchetypeProfile, rng: RngStream, rules: RulesConfig
) -> ActionRequest | None:
    return None


_PLANNERS: dict[BotActionType, Planner] = {
    BotActionType.BUILD_UNITS: _plan_build,
    BotActionType.BUY_SECTOR: _plan_buy_sector,
    BotActionType.ATTACK: _plan_attack,
    BotActionType.DIPLOMACY: _plan_diplomacy,
    BotActionType.TRADE: _plan_trade,
    BotActionType.CRAFT: _plan_craft,
    BotActionType.COVERT: _plan_covert,
    BotActionType.DO_NOTHING: _plan_nothing,
}
