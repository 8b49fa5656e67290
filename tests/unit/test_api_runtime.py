"""Tests for API runtime helpers (game service and turn manager)."""

from __future__ import annotations

import pytest

from dominion.api.runtime import ApiState, GameService, TurnManager
from dominion.config import Settings
from dominion.domain import models as dm
from dominion.domain.actions import BuildRequest, QueryRequest
from dominion.domain.enums import GameStatus, Ruleset
from dominion.domain.simulation import SimulationConfig
from dominion.repository import JsonGameRepository


def _service(tmp_path) -> tuple[JsonGameRepository, GameService]:
    repo = JsonGameRepository(tmp_path)
    settings = Settings(data_dir=tmp_path, turn_limit=120, protection_turns=5)
    return repo, GameService(repo, settings=settings)


def test_game_service_create_and_list(tmp_path):
    _, service = _service(tmp_path)

    alpha = service.create_game(name="Alpha", empire_count=4)
    beta = service.create_game(name="Beta", empire_count=3, include_player=False)

    assert [g.name for g in service.list_games()] == ["Alpha", "Beta"]
    assert (int(alpha.id), int(beta.id)) == (1, 2)
    assert alpha.seed == "game-1"
    assert alpha.turn_limit == 120
    assert alpha.protection_turns == 5

    summary = service.to_summary_dict(alpha)
    assert summary["id"] == 1
    assert summary["empire_count"] == 4
    assert summary["alive_empires"] == 4
    assert summary["victory"] is None

    detail = service.to_detail_dict(beta)
    assert len(detail["empires"]) == 3
    assert all(e["kind"] == "bot" for e in detail["empires"])
    assert detail["galaxy"]["region_count"] > 0
    assert detail["recent_events"] == []


def test_game_service_respects_explicit_options(tmp_path):
    _, service = _service(tmp_path)
    game = service.create_game(
        seed="fixed", ruleset=Ruleset.LEGACY, turn_limit=30, protection_turns=0
    )
    assert game.seed == "fixed"
    assert game.ruleset == Ruleset.LEGACY
    assert (game.turn_limit, game.protection_turns) == (30, 0)


def test_empire_detail(tmp_path):
    _, service = _service(tmp_path)
    game = service.create_game(empire_count=3, player_name="Ada")

    detail = service.to_empire_dict(game, dm.EmpireID(1))
    assert detail["name"] == "Ada"
    assert detail["kind"] == "player"
    assert detail["home_region_id"] is not None
    with pytest.raises(KeyError):
        service.to_empire_dict(game, dm.EmpireID(42))


def test_apply_action_saves_only_on_success(tmp_path):
    repo, service = _service(tmp_path)
    game = service.create_game(empire_count=3)

    ok = service.apply_action(
        game.id, BuildRequest(empire_id=dm.EmpireID(1), unit_type="soldiers", quantity=10)
    )
    assert ok.success
    stored = repo.load(game.id)
    assert len(stored.empires[dm.EmpireID(1)].build_queue) == 1

    rejected = service.apply_action(
        game.id, BuildRequest(empire_id=dm.EmpireID(1), unit_type="carriers", quantity=1)
    )
    assert not rejected.success
    assert repo.load(game.id) == stored


def test_apply_action_refuses_finished_games(tmp_path):
    repo, service = _service(tmp_path)
    game = service.create_game(empire_count=3)
    game.status = GameStatus.COMPLETED
    repo.save(game)

    result = service.apply_action(game.id, QueryRequest(empire_id=dm.EmpireID(1)))
    assert not result.success
    assert result.code == "game_completed"


@pytest.mark.asyncio
async def test_turn_manager_advances_game(tmp_path):
    repo, service = _service(tmp_path)
    game = service.create_game(empire_count=4)
    manager = TurnManager(repo, service)

    advanced = await manager.advance(game.id, turns=3)

    assert advanced is not None
    assert advanced.turn == game.turn + 3
    assert repo.load(game.id).turn == game.turn + 3
    assert not manager.is_busy(game.id)
    assert await manager.advance(game.id, turns=0) is None

    await manager.stop()


@pytest.mark.asyncio
async def test_turn_manager_missing_game(tmp_path):
    repo, service = _service(tmp_path)
    manager = TurnManager(repo, service)
    assert await manager.advance(dm.GameID(9)) is None


@pytest.mark.asyncio
async def test_turn_manager_stops_at_completion(tmp_path):
    repo, service = _service(tmp_path)
    game = service.create_game(empire_count=3, turn_limit=2, protection_turns=0)
    manager = TurnManager(repo, service)

    final = await manager.advance(game.id, turns=10)

    assert final is not None
    assert final.status == GameStatus.COMPLETED
    assert final.turn <= 3


@pytest.mark.asyncio
async def test_turn_manager_submit_and_simulate(tmp_path):
    repo, service = _service(tmp_path)
    game = service.create_game(empire_count=3)
    manager = TurnManager(repo, service)

    result = await manager.submit(game.id, QueryRequest(empire_id=dm.EmpireID(1)))
    assert result.success
    assert result.data["id"] == 1

    outcome = await manager.simulate(
        SimulationConfig(empire_count=3, turn_limit=5, protection_turns=2, seed="s")
    )
    assert outcome.turns_played <= 5


@pytest.mark.asyncio
async def test_api_state_wires_services(tmp_path):
    state = ApiState(settings=Settings(data_dir=tmp_path))
    assert state.repository.base_path == tmp_path
    assert state.games.list_games() == []
    await state.shutdown()
