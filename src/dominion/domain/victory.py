"""Defeat and victory evaluation."""

from __future__ import annotations

import logging
from collections.abc import Callable

from dominion.domain.combat import mark_eliminated
from dominion.domain.enums import DefeatType, GameStatus, VictoryType
from dominion.domain.models import Empire, GameState, VictoryResult
from dominion.domain.networth import ranked_by_networth, refresh_networth
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


def defeat_reason(empire: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> DefeatType | None:
    """First defeat condition the empire meets, or ``None``."""

    economy = rules.economy
    if empire.sector_count == 0:
        return DefeatType.ELIMINATION
    if empire.bankrupt_turns >= economy.bankruptcy_turns:
        return DefeatType.BANKRUPTCY
    if empire.starving_turns >= economy.starvation_turns or empire.population <= 0:
        return DefeatType.STARVATION
    if empire.revolting_turns >= economy.collapse_turns:
        return DefeatType.CIVIL_COLLAPSE
    return None


def apply_defeats(state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> list[Empire]:
    """Eliminate every empire meeting a defeat condition; their sectors are released."""

    defeated: list[Empire] = []
    for empire in state.alive_empires():
        reason = defeat_reason(empire, rules=rules)
        if reason is None:
            continue
        mark_eliminated(state, empire, reason)
        empire.sectors.clear()
        refresh_networth(empire, rules=rules)
        defeated.append(empire)
    return defeated


def _sector_total(empires: list[Empire]) -> int:
    return sum(empire.sector_count for empire in empires)


def _conquest(state: GameState, rules: RulesConfig) -> VictoryResult | None:
    alive = state.alive_empires()
    total = _sector_total(alive)
    # A lone survivor is a domination victory, not a conquest.
    if total <= 0 or len(alive) < 2:
        return None
    leader = max(alive, key=lambda e: (e.sector_count, e.networth, -int(e.id)))
    if leader.sector_count / total >= rules.victory.conquest_share:
        return VictoryResult(VictoryType.CONQUEST, leader.id, state.turn)
    return None


def _economic(state: GameState, rules: RulesConfig) -> VictoryResult | None:
    alive = state.alive_empires()
    if state.turn < rules.victory.economic_min_turn or len(alive) < 2:
        return None
    first, second = ranked_by_networth(alive)[:2]
    if first.networth >= rules.victory.economic_multiplier * second.networth:
        return VictoryResult(VictoryType.ECONOMIC, first.id, state.turn)
    return None


def _technological(state: GameState, rules: RulesConfig) -> VictoryResult | None:
    masters = [
        e for e in state.alive_empires() if e.research_level >= rules.victory.technology_level
    ]
    if not masters:
        return None
    return VictoryResult(VictoryType.TECHNOLOGICAL, ranked_by_networth(masters)[0].id, state.turn)


def _domination(state: GameState, rules: RulesConfig) -> VictoryResult | None:
    alive = state.alive_empires()
    if len(alive) == 1 and len(state.empires) > 1:
        return VictoryResult(VictoryType.DOMINATION, alive[0].id, state.turn)
    return None


def _coalition(state: GameState, rules: RulesConfig) -> VictoryResult | None:
    total = _sector_total(state.alive_empires())
    if total <= 0:
        return None
    for coalition in state.coalitions:
        members = [
            state.empires[m]
            for m in coalition.member_ids
            if m in state.empires and not state.empires[m].is_eliminated
        ]
        if len(members) < rules.diplomacy.min_coalition_size:
            continue
        if _sector_total(members) / total >= rules.victory.coalition_share:
            leader = ranked_by_networth(members)[0]
            return VictoryResult(
                VictoryType.COALITION,
                leader.id,
                state.turn,
                coalition_member_ids=[m.id for m in members],
            )
    return None


def _survival(state: GameState, rules: RulesConfig) -> VictoryResult | None:
    if state.turn < state.turn_limit:
        return None
    contenders = state.alive_empires() or list(state.empires.values())
    if not contenders:
        return None
    return VictoryResult(VictoryType.SURVIVAL, ranked_by_networth(contenders)[0].id, state.turn)


# Fixed priority order; the first condition met wins.
VICTORY_CHECKS: tuple[Callable[[GameState, RulesConfig], VictoryResult | None], ...] = (
    _conquest,
    _economic,
    _technological,
    _domination,
    _coalition,
    _survival,
)


def check_victory(state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> VictoryResult | None:
    """Evaluate victory conditions without mutating the game."""

    for check in VICTORY_CHECKS:
        result = check(state, rules)
        if result is not None:
            return result
    return None


def evaluate_victory(
    state: GameState, *, rules: RulesConfig = DEFAULT_RULES
) -> VictoryResult | None:
    """Record a victory on the game and close it when one is found."""

    state.record("victory_checks")
    if state.victory is not None:
        return state.victory
    result = check_victory(state, rules=rules)
    if result is None:
        return None
    state.victory = result
    state.status = GameStatus.COMPLETED
    winner = state.empires[result.winner_id]
    logger.info(
        "game %s won by %s (%s) on turn %s",
        int(state.id),
        winner.name,
        result.type.value,
        state.turn,
    )
    return result
