"""Rules layer for Nexus Dominion.

This package hosts every game rule and operates purely in memory. It exposes:

* Dataclasses describing every game entity (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions, the shared action boundary (:mod:`actions`), and the
  turn pipeline (:mod:`turn`).

Persistence lives behind a thin repository adapter; nothing here performs I/O
except loading rules documents on request.
"""

from . import (
    actions,
    archetypes,
    bots,
    build_queue,
    combat,
    covert,
    crafting,
    diplomacy,
    economy,
    emotions,
    enums,
    errors,
    events,
    galaxy,
    market,
    messaging,
    models,
    networth,
    research,
    rules_config,
    setup,
    simulation,
    turn,
    victory,
)

__all__ = [
    "actions",
    "archetypes",
    "bots",
    "build_queue",
    "combat",
    "covert",
    "crafting",
    "diplomacy",
    "economy",
    "emotions",
    "enums",
    "errors",
    "events",
    "galaxy",
    "market",
    "messaging",
    "models",
    "networth",
    "research",
    "rules_config",
    "setup",
    "simulation",
    "turn",
    "victory",
]
