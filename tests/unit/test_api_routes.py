"""Tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from dominion.api.app import create_app
from dominion.api.runtime import ApiState
from dominion.config import Settings
from dominion.domain import models as dm
from dominion.repository import JsonGameRepository


def _make_app(tmp_path):
    def factory() -> ApiState:
        settings = Settings(data_dir=tmp_path, max_empires=12, protection_turns=3)
        return ApiState(settings=settings)

    app = create_app(state_factory=factory)
    transport = ASGITransport(app=app)
    return app, transport


async def _create_game(client: AsyncClient, **overrides) -> int:
    body = {"name": "Dev Game", "seed": "dev", "empire_count": 4, **overrides}
    response = await client.post("/games", json=body)
    assert response.status_code == 201
    payload = response.json()
    assert payload["turn"] == 1
    assert payload["status"] == "active"
    return payload["id"]


@pytest.mark.asyncio
async def test_game_lifecycle_via_api(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

        game_id = await _create_game(client)

        response = await client.get("/games")
        assert [g["id"] for g in response.json()] == [game_id]

        response = await client.get(f"/games/{game_id}")
        detail = response.json()
        assert detail["protection_turns"] == 3
        assert len(detail["empires"]) == 4
        assert detail["empires"][0]["kind"] == "player"

        response = await client.post(f"/games/{game_id}/turns/advance", json={"turns": 2})
        assert response.status_code == 200
        assert response.json()["turn"] == 3

        response = await client.get(f"/games/{game_id}/empires/1")
        assert response.status_code == 200
        assert response.json()["id"] == 1

    repo = JsonGameRepository(tmp_path)
    assert repo.load(dm.GameID(game_id)).turn == 3


@pytest.mark.asyncio
async def test_missing_resources_return_404(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        assert (await client.get("/games/77")).status_code == 404
        game_id = await _create_game(client)
        assert (await client.get(f"/games/{game_id}/empires/40")).status_code == 404
        response = await client.post(
            "/games/77/actions/build",
            json={"empire_id": 1, "unit_type": "soldiers", "quantity": 1},
        )
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_game_limits(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.post("/games", json={"empire_count": 50})
        assert response.status_code == 400
        response = await client.post("/games", json={"empire_count": 1})
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_action_endpoints_via_api(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        game_id = await _create_game(client)

        response = await client.post(
            f"/games/{game_id}/actions/build",
            json={"empire_id": 1, "unit_type": "fighters", "quantity": 5},
        )
        assert response.status_code == 200
        order = response.json()["data"]
        assert order["total_cost"] == 1000

        response = await client.post(
            f"/games/{game_id}/actions/cancel-build",
            json={"empire_id": 1, "order_id": order["order_id"]},
        )
        assert response.status_code == 200
        assert response.json()["data"]["refund"] == 500

        response = await client.post(
            f"/games/{game_id}/actions/retreat",
            json={"empire_id": 1, "forces": {"soldiers": 20}},
        )
        assert response.status_code == 200
        assert response.json()["data"]["casualties"]["soldiers"] == 3

        # Rule violations are conflicts; malformed input is a bad request.
        response = await client.post(
            f"/games/{game_id}/actions/attack",
            json={"empire_id": 1, "target_id": 2, "forces": {"soldiers": 10}},
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "protection_period"

        response = await client.post(
            f"/games/{game_id}/actions/build",
            json={"empire_id": 99, "unit_type": "soldiers", "quantity": 1},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["category"] == "validation"

        response = await client.post(
            f"/games/{game_id}/actions/build",
            json={"empire_id": 1, "unit_type": "dreadnought", "quantity": 1},
        )
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_attack_after_protection(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        game_id = await _create_game(client, protection_turns=0)

        response = await client.post(
            f"/games/{game_id}/actions/attack",
            json={
                "empire_id": 1,
                "target_id": 2,
                "forces": {"soldiers": 50},
                "attack_type": "guerilla",
                "stance": "defensive",
            },
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["attack_type"] == "guerilla"
        assert data["sectors_transferred"] == 0


@pytest.mark.asyncio
async def test_rules_and_simulation_endpoints(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/rules")
        assert response.status_code == 200
        assert {"unified", "legacy", "economy"} <= set(response.json())

        response = await client.post(
            "/simulations",
            json={"empire_count": 4, "turn_limit": 6, "protection_turns": 2, "seed": "sim"},
        )
        assert response.status_code == 200
        payload = response.json()
        assert payload["turns_played"] <= 6
        assert "attacks" in payload["coverage"]
        assert payload["final"]["empire_count"] == 4
