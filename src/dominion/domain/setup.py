"""Game creation: empires, starting holdings, galaxy, and market."""

from __future__ import annotations

from dominion.domain.enums import Archetype, EmpireKind, Ruleset, SectorType
from dominion.domain.galaxy import EmpireSeat, generate_galaxy
from dominion.domain.market import create_market
from dominion.domain.models import (
    Empire,
    EmpireID,
    Forces,
    GameID,
    GameState,
    Resources,
    Sector,
    SectorID,
)
from dominion.domain.networth import refresh_networth
from dominion.domain.research import unlocked_units_for
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream, generate_seed

NAME_PREFIXES: tuple[str, ...] = (
    "Crimson",
    "Azure",
    "Iron",
    "Golden",
    "Shadow",
    "Stellar",
    "Obsidian",
    "Silver",
    "Ember",
    "Radiant",
    "Frost",
    "Verdant",
)

NAME_SUFFIXES: tuple[str, ...] = (
    "Dominion",
    "Hegemony",
    "Collective",
    "Federation",
    "Imperium",
    "Concord",
    "Syndicate",
    "Union",
    "Directorate",
    "Assembly",
)


def bot_names(count: int, stream: RngStream, *, reserved: set[str] | None = None) -> list[str]:
    """Unique empire names; numbered once the combinations run out."""

    taken = set(reserved or ())
    pool = stream.shuffled([f"{p} {s}" for p in NAME_PREFIXES for s in NAME_SUFFIXES])
    names: list[str] = []
    for index in range(count):
        name = pool[index % len(pool)]
        if index >= len(pool):
            name = f"{name} {index // len(pool) + 1}"
        if name in taken:
            name = f"{name} {index + 1}"
        taken.add(name)
        names.append(name)
    return names


def assign_archetypes(count: int, stream: RngStream) -> list[Archetype]:
    """Deal archetypes from repeatedly shuffled full decks, keeping the mix even."""

    dealt: list[Archetype] = []
    while len(dealt) < count:
        dealt.extend(stream.shuffled(list(Archetype)))
    return dealt[:count]


def starting_empire(
    state: GameState,
    empire_id: EmpireID,
    name: str,
    kind: EmpireKind,
    archetype: Archetype | None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Empire:
    economy = rules.economy
    empire = Empire(
        id=empire_id,
        name=name,
        kind=kind,
        archetype=archetype,
        resources=Resources(
            credits=economy.starting_credits,
            food=economy.starting_food,
            ore=economy.starting_ore,
            fuel=economy.starting_fuel,
        ),
        forces=Forces(soldiers=economy.starting_soldiers),
        sectors=[
            Sector(id=SectorID(state.next_id("sector")), type=SectorType(sector_type))
            for sector_type in economy.starting_sectors
        ],
        population=economy.starting_population,
        civil_status=economy.starting_civil_status,
        unlocked_units=unlocked_units_for(0, rules=rules),
    )
    refresh_networth(empire, rules=rules)
    return empire


def create_game(
    game_id: int,
    seed: str,
    *,
    name: str | None = None,
    empire_count: int = 10,
    include_player: bool = False,
    ruleset: Ruleset = Ruleset.UNIFIED,
    turn_limit: int = 200,
    protection_turns: int = 20,
    player_name: str = "Player",
    rules: RulesConfig = DEFAULT_RULES,
) -> GameState:
    """Create a ready-to-play game.

    ``empire_count`` counts every empire, including the player when one is
    included. The player, if any, gets empire id 1.
    """

    if empire_count < 2:
        raise ValueError(f"a game needs at least two empires, got {empire_count}")
    if turn_limit < 1:
        raise ValueError(f"turn_limit must be positive, got {turn_limit}")
    if protection_turns < 0:
        raise ValueError(f"protection_turns cannot be negative, got {protection_turns}")

    state = GameState(
        id=GameID(game_id),
        name=name or f"Game {game_id}",
        seed=seed,
        ruleset=Ruleset(ruleset),
        turn_limit=turn_limit,
        protection_turns=protection_turns,
        market=create_market(rules=rules),
    )
    stream = RngStream(generate_seed(game_id, 0, "setup", seed))

    bot_count = empire_count - 1 if include_player else empire_count
    archetypes = assign_archetypes(bot_count, stream)
    names = bot_names(bot_count, stream, reserved={player_name} if include_player else None)

    if include_player:
        player_id = EmpireID(state.next_id("empire"))
        state.empires[player_id] = starting_empire(
            state, player_id, player_name, EmpireKind.PLAYER, None, rules=rules
        )
    for archetype, bot_name in zip(archetypes, names, strict=True):
        empire_id = EmpireID(state.next_id("empire"))
        state.empires[empire_id] = starting_empire(
            state, empire_id, bot_name, EmpireKind.BOT, archetype, rules=rules
        )

    seats = [
        EmpireSeat(empire_id=empire.id, is_player=not empire.is_bot)
        for empire in state.empires.values()
    ]
    layout = generate_galaxy(game_id, seats, seed, rules=rules)
    state.galaxy = layout.to_galaxy()
    for empire_id, region_id in layout.assignments.items():
        state.empires[empire_id].home_region_id = region_id
    return state
