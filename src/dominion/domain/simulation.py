"""Headless batch simulation used for balance testing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from dominion.domain.enums import GameStatus, Ruleset
from dominion.domain.models import Empire, GameState, VictoryResult
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.domain.setup import create_game
from dominion.domain.turn import advance_turn, turn_stream

logger = logging.getLogger(__name__)

COVERAGE_COUNTERS: tuple[str, ...] = (
    "build_units",
    "sectors_bought",
    "attacks",
    "invasions",
    "guerilla_raids",
    "retreats",
    "treaties",
    "naps",
    "alliances",
    "trades",
    "market_buys",
    "market_sells",
    "covert_ops",
    "crafts",
    "combats_resolved",
    "research_advanced",
    "civil_status_changed",
    "starvation_occurred",
    "bankruptcy_occurred",
    "eliminations",
    "events",
    "messages",
    "phase_faults",
    "victory_checks",
)


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    empire_count: int = 10
    turn_limit: int = 200
    protection_turns: int = 20
    include_player: bool = False
    seed: str = "1"
    ruleset: Ruleset = Ruleset.UNIFIED
    game_id: int = 1


@dataclass(slots=True)
class SimulationResult:
    turns_played: int
    winner: Empire | None
    victory: VictoryResult | None
    final_state: GameState
    coverage: dict[str, int] = field(default_factory=dict)


def run_simulation(
    config: SimulationConfig,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> SimulationResult:
    """Create a game and advance it until a victory or the turn limit.

    The player seat, when included, never issues actions, so the run is
    fully unattended. Turns advance in place to keep large runs cheap.
    """

    state = create_game(
        config.game_id,
        str(config.seed),
        name=f"Simulation {config.seed}",
        empire_count=config.empire_count,
        include_player=config.include_player,
        ruleset=config.ruleset,
        turn_limit=config.turn_limit,
        protection_turns=config.protection_turns,
        rules=rules,
    )

    turns_played = 0
    while state.status == GameStatus.ACTIVE and turns_played < config.turn_limit:
        state = advance_turn(state, turn_stream(state), rules=rules, copy_state=False)
        turns_played += 1
        if turns_played % 50 == 0:
            logger.info(
                "simulation %s: turn %s, %s empires alive",
                config.seed,
                turns_played,
                len(state.alive_empires()),
            )

    winner = state.empires[state.victory.winner_id] if state.victory else None
    coverage = {name: state.stats.get(name, 0) for name in COVERAGE_COUNTERS}
    for name, value in sorted(state.stats.items()):
        coverage.setdefault(name, value)

    logger.info(
        "simulation %s finished after %s turns; winner=%s",
        config.seed,
        turns_played,
        winner.name if winner else None,
    )
    return SimulationResult(
        turns_played=turns_played,
        winner=winner,
        victory=state.victory,
        final_state=state,
        coverage=coverage,
    )
