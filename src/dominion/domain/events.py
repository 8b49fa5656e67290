"""Galactic random events."""

from __future__ import annotations

import math

from dominion.domain.enums import TRADABLE_RESOURCES, EventType
from dominion.domain.galaxy import discover_wormhole
from dominion.domain.market import reprice
from dominion.domain.models import EventID, GalacticEvent, GameState
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream

# Average of 2d6; a roll of 7 applies the configured fraction unchanged.
_MEAN_ROLL = 7.0


def roll_event(
    state: GameState,
    rng: RngStream,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> GalacticEvent | None:
    """Maybe trigger one event this turn.

    Draw order: trigger chance, event type, severity roll (2d6), then the
    event's own target or resource pick.
    """

    events = rules.events
    if not rng.chance(events.event_chance):
        return None

    event_type = rng.choice(list(EventType))
    severity = rng.roll("2d6")["total"] / _MEAN_ROLL
    target = None
    description = ""

    if event_type in (EventType.MARKET_BOOM, EventType.RESOURCE_SHORTAGE):
        resource = rng.choice(TRADABLE_RESOURCES)
        shift = math.floor(rules.market.baseline_volume * events.market_shift_fraction * severity)
        if event_type == EventType.MARKET_BOOM:
            state.market.supply[resource] += shift
            description = f"A production boom floods the market with {resource.value}."
        else:
            state.market.supply[resource] = max(1, state.market.supply[resource] - shift)
            description = f"A shortage of {resource.value} drives prices up."
        reprice(state.market, rules=rules)
    elif event_type == EventType.WORMHOLE_DISCOVERY:
        wormhole = discover_wormhole(state.galaxy, rng)
        if wormhole is None:
            description = "Scouts chart the void but find no hidden passages."
        else:
            description = (
                f"A wormhole between regions {int(wormhole.from_region_id)} and "
                f"{int(wormhole.to_region_id)} has been discovered."
            )
    else:
        alive = state.alive_empires()
        if not alive:
            return None
        target = rng.choice(alive)
        if event_type == EventType.PIRATE_RAID:
            lost = min(
                target.resources.credits,
                math.floor(target.resources.credits * events.pirate_raid_fraction * severity),
            )
            target.resources.credits -= lost
            description = f"Pirates raid {target.name} and make off with {lost} credits."
        elif event_type == EventType.PLAGUE:
            lost = min(
                target.population,
                math.floor(target.population * events.plague_fraction * severity),
            )
            target.population -= lost
            description = f"A plague sweeps through {target.name}, killing {lost} citizens."
        else:
            gained = math.floor(events.breakthrough_points * severity)
            target.resources.research_points += gained
            description = f"Scientists of {target.name} achieve a breakthrough (+{gained} RP)."

    event = GalacticEvent(
        id=EventID(state.next_id("event")),
        turn=state.turn,
        type=event_type,
        description=description,
        target_empire_id=target.id if target is not None else None,
        magnitude=round(severity, 4),
    )
    state.events.append(event)
    state.record("events")
    return event
