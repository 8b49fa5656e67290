"""Global resource market."""

from __future__ import annotations

import math

from dominion.domain.enums import TRADABLE_RESOURCES, ResourceType, TradeSide
from dominion.domain.errors import PreconditionError, ValidationError
from dominion.domain.models import Empire, GameState, MarketState
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig


def create_market(*, rules: RulesConfig = DEFAULT_RULES) -> MarketState:
    volume = rules.market.baseline_volume
    return MarketState(
        prices={r: rules.market.base_prices[r] for r in TRADABLE_RESOURCES},
        supply={r: volume for r in TRADABLE_RESOURCES},
        demand={r: volume for r in TRADABLE_RESOURCES},
    )


def price_multiplier(supply: int, demand: int, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Piecewise-linear curve of supply/demand.

    Ratio 0.5 or below gives the maximum multiplier, 1.0 gives 1.0, and 2.0 or
    above gives the minimum.
    """

    market = rules.market
    ratio = supply / max(1, demand)
    if ratio <= 0.5:
        return market.max_multiplier
    if ratio <= 1.0:
        return market.max_multiplier - (market.max_multiplier - 1.0) * (ratio - 0.5) / 0.5
    if ratio <= 2.0:
        return 1.0 - (1.0 - market.min_multiplier) * (ratio - 1.0)
    return market.min_multiplier


def reprice(market: MarketState, *, rules: RulesConfig = DEFAULT_RULES) -> None:
    for resource in TRADABLE_RESOURCES:
        multiplier = price_multiplier(
            market.supply[resource], market.demand[resource], rules=rules
        )
        market.prices[resource] = round(rules.market.base_prices[resource] * multiplier, 4)


def update_market(market: MarketState, *, rules: RulesConfig = DEFAULT_RULES) -> None:
    """Relax supply and demand toward the baseline, then reprice."""

    baseline = rules.market.baseline_volume
    rate = rules.market.recovery_rate
    for resource in TRADABLE_RESOURCES:
        for book in (market.supply, market.demand):
            gap = baseline - book[resource]
            book[resource] += math.trunc(gap * rate)
    reprice(market, rules=rules)


def trade(
    state: GameState,
    empire: Empire,
    resource: ResourceType | str,
    quantity: int,
    side: TradeSide | str,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Buy or sell at the current price. Returns credits paid (negative when selling)."""

    try:
        kind = ResourceType(resource)
        direction = TradeSide(side)
    except ValueError as exc:
        raise ValidationError("invalid_trade", str(exc)) from None
    if kind not in TRADABLE_RESOURCES:
        raise ValidationError("invalid_trade", f"{kind} is not traded on the market")
    if quantity <= 0:
        raise ValidationError("invalid_quantity", "quantity must be positive")
    if empire.is_eliminated:
        raise PreconditionError("empire_eliminated", "eliminated empires cannot trade")

    market = state.market
    price = market.prices[kind]
    if direction == TradeSide.BUY:
        cost = math.ceil(price * quantity)
        if empire.resources.credits < cost:
            raise PreconditionError("insufficient_credits", f"purchase costs {cost} credits")
        empire.resources.credits -= cost
        empire.resources.add(kind, quantity)
        market.demand[kind] += quantity
        state.record("market_buys")
        delta = cost
    else:
        if empire.resources.get(kind) < quantity:
            raise PreconditionError("insufficient_resources", f"not enough {kind} to sell")
        gain = math.floor(price * quantity * rules.market.sell_spread)
        empire.resources.add(kind, -quantity)
        empire.resources.credits += gain
        market.supply[kind] += quantity
        state.record("market_sells")
        delta = -gain
    reprice(market, rules=rules)
    return delta
