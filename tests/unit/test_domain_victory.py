"""Unit tests for defeat and victory evaluation."""

from __future__ import annotations

from dominion.domain import models as dm
from dominion.domain import victory
from dominion.domain.enums import DefeatType, EmpireKind, GameStatus, SectorType, VictoryType
from dominion.domain.networth import refresh_networth
from dominion.domain.rules_config import DEFAULT_RULES


def _empire(empire_id: int, sectors: int, **overrides) -> dm.Empire:
    empire = dm.Empire(
        id=dm.EmpireID(empire_id),
        name=f"Empire {empire_id}",
        kind=EmpireKind.BOT,
        sectors=[
            dm.Sector(id=dm.SectorID(empire_id * 1000 + i), type=SectorType.ORE)
            for i in range(sectors)
        ],
        population=10_000,
    )
    for key, value in overrides.items():
        setattr(empire, key, value)
    refresh_networth(empire)
    return empire


def _state(*empires: dm.Empire, turn: int = 10, turn_limit: int = 200) -> dm.GameState:
    state = dm.GameState(id=dm.GameID(1), name="Victory", seed="v", turn_limit=turn_limit)
    state.turn_state.turn = turn
    for empire in empires:
        state.empires[empire.id] = empire
    return state


def test_defeat_conditions_in_order():
    assert victory.defeat_reason(_empire(1, 0)) == DefeatType.ELIMINATION
    assert victory.defeat_reason(_empire(1, 3, bankrupt_turns=5)) == DefeatType.BANKRUPTCY
    assert victory.defeat_reason(_empire(1, 3, starving_turns=5)) == DefeatType.STARVATION
    assert victory.defeat_reason(_empire(1, 3, population=0)) == DefeatType.STARVATION
    assert victory.defeat_reason(_empire(1, 3, revolting_turns=3)) == DefeatType.CIVIL_COLLAPSE
    assert victory.defeat_reason(_empire(1, 3, bankrupt_turns=4)) is None


def test_apply_defeats_releases_sectors():
    broke = _empire(2, 5, bankrupt_turns=5)
    state = _state(_empire(1, 5), broke, _empire(3, 5))

    defeated = victory.apply_defeats(state)

    assert defeated == [broke]
    assert broke.is_eliminated
    assert broke.sectors == []
    assert broke.networth == 0
    assert broke.eliminated_turn == 10


def test_conquest_needs_sixty_percent_of_sectors():
    state = _state(_empire(1, 12), _empire(2, 4), _empire(3, 4))
    result = victory.check_victory(state)
    assert result is not None
    assert result.type == VictoryType.CONQUEST
    assert result.winner_id == dm.EmpireID(1)

    close = _state(_empire(1, 11), _empire(2, 5), _empire(3, 4))
    assert victory.check_victory(close) is None


def test_lone_survivor_wins_by_domination():
    fallen = _empire(2, 0, is_eliminated=True)
    state = _state(_empire(1, 3), fallen)
    result = victory.check_victory(state)
    assert result is not None
    assert result.type == VictoryType.DOMINATION


def test_economic_victory_after_minimum_turn():
    rich = _empire(1, 9)
    rich.networth = 300.0
    poor = _empire(2, 8)
    poor.networth = 100.0
    third = _empire(3, 8)
    third.networth = 90.0

    early = _state(rich, poor, third, turn=10)
    assert victory.check_victory(early) is None

    late = _state(rich, poor, third, turn=30)
    result = victory.check_victory(late)
    assert result is not None and result.type == VictoryType.ECONOMIC


def test_conquest_outranks_economic_when_both_hold():
    leader = _empire(1, 12)
    leader.networth = 1000.0
    rivals = [_empire(2, 4), _empire(3, 4)]
    for rival in rivals:
        rival.networth = 100.0
    state = _state(leader, *rivals, turn=30)

    assert victory._economic(state, DEFAULT_RULES) is not None
    result = victory.check_victory(state)
    assert result is not None
    assert result.type == VictoryType.CONQUEST
    assert result.winner_id == dm.EmpireID(1)


def test_technological_victory():
    state = _state(_empire(1, 5, research_level=7), _empire(2, 5), _empire(3, 5))
    result = victory.check_victory(state)
    assert result is not None
    assert result.type == VictoryType.TECHNOLOGICAL
    assert result.winner_id == dm.EmpireID(1)


def test_coalition_victory():
    state = _state(_empire(1, 4), _empire(2, 4), _empire(3, 3), _empire(4, 3))
    state.coalitions.append(
        dm.Coalition(
            id=dm.CoalitionID(1),
            member_ids=[dm.EmpireID(1), dm.EmpireID(2)],
            formed_turn=5,
        )
    )
    result = victory.check_victory(state)
    assert result is not None
    assert result.type == VictoryType.COALITION
    assert result.coalition_member_ids == [dm.EmpireID(1), dm.EmpireID(2)]


def test_survival_at_turn_limit_picks_highest_networth():
    state = _state(_empire(1, 5), _empire(2, 6), _empire(3, 5), turn=50, turn_limit=50)
    result = victory.check_victory(state)
    assert result is not None
    assert result.type == VictoryType.SURVIVAL
    assert result.winner_id == dm.EmpireID(2)


def test_evaluate_victory_completes_the_game():
    state = _state(_empire(1, 5), _empire(2, 5), turn=50, turn_limit=50)
    result = victory.evaluate_victory(state)

    assert result is not None
    assert state.status == GameStatus.COMPLETED
    assert state.victory == result
    assert state.stats["victory_checks"] == 1
    # A decided game keeps its first result.
    assert victory.evaluate_victory(state) is result


def test_no_victory_in_a_balanced_early_game():
    state = _state(_empire(1, 5), _empire(2, 5), _empire(3, 5))
    assert victory.evaluate_victory(state) is None
    assert state.status == GameStatus.ACTIVE
