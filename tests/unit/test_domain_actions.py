"""Unit tests for the shared action boundary."""

from __future__ import annotations

import copy

from dominion.domain import models as dm
from dominion.domain.actions import (
    ActionResult,
    AttackRequest,
    BuildRequest,
    BuySectorRequest,
    CancelBuildRequest,
    QueryRequest,
    RetreatRequest,
    TradeRequest,
    action_stream,
    execute_action,
    parse_forces,
)
from dominion.domain.enums import AttackType, UnitType
from dominion.domain.setup import create_game
from dominion.utils.rng import RngStream


def _game(*, turn: int = 1) -> dm.GameState:
    state = create_game(7, "actions", empire_count=4, include_player=True, protection_turns=10)
    state.turn_state.turn = turn
    return state


PLAYER = dm.EmpireID(1)
BOT = dm.EmpireID(2)


def _run(state: dm.GameState, request) -> ActionResult:
    return execute_action(state, request, rng=RngStream("action"))


def test_build_then_cancel():
    state = _game()
    credits = state.empires[PLAYER].resources.credits

    built = _run(state, BuildRequest(empire_id=PLAYER, unit_type="fighters", quantity=5))
    assert built.success
    assert built.data["total_cost"] == 1000
    assert state.empires[PLAYER].resources.credits == credits - 1000

    cancelled = _run(
        state, CancelBuildRequest(empire_id=PLAYER, order_id=built.data["order_id"])
    )
    assert cancelled.success
    assert cancelled.data["refund"] == 500
    assert state.empires[PLAYER].build_queue == []


def test_rejected_request_leaves_state_untouched():
    state = _game()
    before = copy.deepcopy(state)

    result = _run(state, BuildRequest(empire_id=PLAYER, unit_type="carriers", quantity=1))

    assert not result.success
    assert result.code == "unit_locked"
    assert result.category == "precondition"
    assert state == before


def test_malformed_input_is_a_validation_failure():
    state = _game()
    for request in (
        BuildRequest(empire_id=PLAYER, unit_type="dreadnought", quantity=1),
        BuildRequest(empire_id=PLAYER, unit_type="fighters", quantity=-3),
        BuildRequest(empire_id=PLAYER, unit_type="fighters", quantity="3"),
        BuildRequest(empire_id=dm.EmpireID(99), unit_type="fighters", quantity=1),
        AttackRequest(empire_id=PLAYER, target_id=BOT, forces={"soldiers": -1}),
        AttackRequest(empire_id=PLAYER, target_id=BOT, forces={"tanks": 1}),
    ):
        result = _run(state, request)
        assert not result.success
        assert result.category == "validation", request
        assert result.error


def test_unsupported_request_type():
    result = _run(_game(), object())
    assert not result.success
    assert result.code == "unsupported_action"


def test_attack_blocked_during_protection():
    state = _game(turn=3)
    result = _run(
        state, AttackRequest(empire_id=PLAYER, target_id=BOT, forces={"soldiers": 10})
    )
    assert not result.success
    assert result.code == "protection_period"


def test_attack_resolves_after_protection():
    state = _game(turn=11)
    state.empires[PLAYER].forces = dm.Forces(soldiers=100, fighters=500)

    result = _run(
        state,
        AttackRequest(
            empire_id=PLAYER,
            target_id=BOT,
            forces={"fighters": 500},
            attack_type=AttackType.INVASION,
            stance="aggressive",
        ),
    )

    assert result.success
    assert result.data["winner"] == "attacker"
    assert result.data["stance"] == "aggressive"
    assert result.data["sectors_transferred"] >= 1
    assert state.stats["attacks"] == 1
    assert len(state.attacks) == 1
    # The losing bot now holds a grudge.
    assert PLAYER in state.empires[BOT].grudges


def test_retreat_applies_flat_losses():
    state = _game()
    state.empires[PLAYER].forces = dm.Forces(soldiers=100)

    result = _run(state, RetreatRequest(empire_id=PLAYER, forces={"soldiers": 40}))

    assert result.success
    assert result.data["casualties"]["soldiers"] == 6
    assert state.empires[PLAYER].forces.soldiers == 94
    assert "winner" not in result.data


def test_retreat_cannot_exceed_holdings():
    state = _game()
    result = _run(state, RetreatRequest(empire_id=PLAYER, forces={"fighters": 1}))
    assert not result.success
    assert result.code == "insufficient_forces"


def test_eliminated_empires_may_only_query():
    state = _game()
    state.empires[BOT].is_eliminated = True

    blocked = _run(state, BuySectorRequest(empire_id=BOT, sector_type="food"))
    assert not blocked.success
    assert blocked.code == "empire_eliminated"

    query = _run(state, QueryRequest(empire_id=BOT))
    assert query.success
    assert query.data["is_eliminated"] is True


def test_trade_and_buy_sector():
    state = _game()
    traded = _run(
        state, TradeRequest(empire_id=PLAYER, resource="food", quantity=100, side="buy")
    )
    assert traded.success
    assert traded.data["credits_delta"] < 0

    bought = _run(state, BuySectorRequest(empire_id=PLAYER, sector_type="research"))
    assert bought.success
    assert bought.data["sector_type"] == "research"


def test_result_envelope_shape():
    assert ActionResult.ok({"x": 1}).to_dict() == {"success": True, "data": {"x": 1}}
    failed = ActionResult.failure("nope", "not allowed").to_dict()
    assert failed == {
        "success": False,
        "error": "not allowed",
        "code": "nope",
        "category": "precondition",
    }


def test_parse_forces_accepts_records_and_mappings():
    assert parse_forces({"fighters": 3}) == dm.Forces(fighters=3)
    assert parse_forces(dm.Forces(stations=2)) == dm.Forces(stations=2)
    assert parse_forces({UnitType.CARRIERS: 1}) == dm.Forces(carriers=1)


def test_action_streams_are_reproducible_per_sequence():
    first = _game()
    second = _game()
    a1, b1 = action_stream(first, PLAYER), action_stream(second, PLAYER)
    assert a1.seed == b1.seed
    assert action_stream(first, PLAYER).seed != a1.seed
