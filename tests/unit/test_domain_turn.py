"""Unit tests for the turn pipeline."""

from __future__ import annotations

import copy

import pytest

from dominion.domain import models as dm
from dominion.domain import turn as turn_module
from dominion.domain.actions import AttackRequest
from dominion.domain.enums import AttackType, GameStatus, TurnPhase
from dominion.domain.rules_config import DEFAULT_RULES
from dominion.domain.setup import create_game
from dominion.domain.turn import TURN_PHASES, advance_turn, turn_stream
from dominion.utils.rng import RngStream


def _game(**kwargs) -> dm.GameState:
    kwargs.setdefault("empire_count", 5)
    return create_game(3, "turns", **kwargs)


def test_phase_order_covers_every_phase_once():
    assert len(TURN_PHASES) == len(set(TURN_PHASES)) == len(TurnPhase)
    assert TURN_PHASES[0] == TurnPhase.INCOME
    assert TURN_PHASES[-2:] == (TurnPhase.VICTORY, TurnPhase.CHECKPOINT)


def test_advance_returns_new_state_and_keeps_input():
    state = _game()
    before = copy.deepcopy(state)

    after = advance_turn(state, turn_stream(state))

    assert state == before
    assert after is not state
    assert after.turn == state.turn + 1
    assert after.turn_state.completed_phases == []


def test_same_state_same_seed_same_outcome():
    state = _game(protection_turns=0)
    for _ in range(5):
        state = advance_turn(state, turn_stream(state))

    first = advance_turn(state, turn_stream(state))
    second = advance_turn(state, turn_stream(state))

    assert first == second


def test_income_changes_resources():
    state = _game()
    after = advance_turn(state, turn_stream(state))
    for empire_id, empire in after.empires.items():
        assert empire.resources != state.empires[empire_id].resources


def test_completed_game_cannot_advance():
    state = _game()
    state.status = GameStatus.COMPLETED
    with pytest.raises(ValueError, match="completed"):
        advance_turn(state, turn_stream(state))


def test_checkpoint_flagged_on_interval():
    state = _game()
    state.turn_state.turn = 10
    after = advance_turn(state, turn_stream(state))
    assert after.turn_state.checkpoint_due
    assert after.turn_state.last_checkpoint_turn == 10

    later = advance_turn(after, turn_stream(after))
    assert not later.turn_state.checkpoint_due


def test_failing_empire_is_isolated(monkeypatch, caplog):
    state = _game()
    broken = dm.EmpireID(2)
    real_income = turn_module.apply_income

    def flaky_income(empire, **kwargs):
        if empire.id == broken:
            raise RuntimeError("ledger corrupted")
        return real_income(empire, **kwargs)

    monkeypatch.setattr(turn_module, "apply_income", flaky_income)

    after = advance_turn(state, turn_stream(state))

    assert after.stats["phase_faults"] == 1
    assert after.turn == state.turn + 1
    assert after.empires[dm.EmpireID(1)].resources != state.empires[dm.EmpireID(1)].resources
    assert "phase income failed for empire 2" in caplog.text


def test_in_place_advance_mutates_input():
    state = _game()
    start = state.turn
    result = advance_turn(state, turn_stream(state), copy_state=False)
    assert result is state
    assert state.turn == start + 1


def _invasion_setup(monkeypatch) -> dm.GameState:
    state = create_game(5, "raid", empire_count=4, protection_turns=0)
    state.empires[dm.EmpireID(1)].forces = dm.Forces(fighters=5000)

    def scripted(empire, game, rng, **kwargs):
        if empire.id != dm.EmpireID(1):
            return []
        return [
            AttackRequest(
                empire_id=empire.id,
                target_id=dm.EmpireID(2),
                forces={"fighters": 5000},
                attack_type=AttackType.INVASION,
            )
        ]

    monkeypatch.setattr(turn_module.bots, "decide", scripted)
    return state


def _sector_total(state: dm.GameState) -> int:
    return sum(empire.sector_count for empire in state.empires.values())


def test_bot_attack_lands_when_phase_succeeds(monkeypatch):
    state = _invasion_setup(monkeypatch)
    defender_sectors = state.empires[dm.EmpireID(2)].sector_count

    turn_module._bot_decisions(state, RngStream("bots"), DEFAULT_RULES)

    assert len(state.attacks) == 1
    assert state.empires[dm.EmpireID(2)].sector_count < defender_sectors
    assert state.stats["bot_actions"] == 1


def test_bot_fault_after_attack_rolls_back_both_sides(monkeypatch, caplog):
    state = _invasion_setup(monkeypatch)
    attacker = copy.deepcopy(state.empires[dm.EmpireID(1)])
    defender = copy.deepcopy(state.empires[dm.EmpireID(2)])
    sectors = _sector_total(state)
    stats = dict(state.stats)
    real_execute = turn_module.execute_action

    def execute_then_fail(game, request, **kwargs):
        result = real_execute(game, request, **kwargs)
        if isinstance(request, AttackRequest):
            assert result.success
            raise RuntimeError("report writer crashed")
        return result

    monkeypatch.setattr(turn_module, "execute_action", execute_then_fail)

    turn_module._bot_decisions(state, RngStream("bots"), DEFAULT_RULES)

    assert state.empires[dm.EmpireID(1)] == attacker
    assert state.empires[dm.EmpireID(2)] == defender
    assert _sector_total(state) == sectors
    assert state.attacks == []
    assert state.stats == {**stats, "phase_faults": 1}
    assert "phase bot_decisions failed for empire 1" in caplog.text
