"""HTTP routes for the Nexus Dominion API."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from dominion.api.runtime import ApiState
from dominion.domain import models as dm
from dominion.domain.actions import (
    ActionRequest,
    ActionResult,
    AttackRequest,
    BuildRequest,
    CancelBuildRequest,
    RetreatRequest,
)
from dominion.domain.enums import AttackType, GameStatus, Ruleset, Stance, UnitType
from dominion.domain.rules_config import rules_document
from dominion.domain.simulation import SimulationConfig

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


class VictorySummary(BaseModel):
    type: str
    winner_id: int
    turn: int


class GameSummary(BaseModel):
    id: int
    name: str
    turn: int
    status: str
    ruleset: str
    turn_limit: int
    protection_turns: int
    empire_count: int
    alive_empires: int
    victory: VictorySummary | None


class GameDetail(GameSummary):
    checkpoint_due: bool
    galaxy: dict[str, int]
    empires: list[dict[str, Any]]
    recent_events: list[dict[str, Any]]


class CreateGameRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    seed: str | None = Field(default=None, min_length=1)
    empire_count: int = Field(default=10, ge=2)
    include_player: bool = True
    ruleset: Ruleset | None = None
    turn_limit: int | None = Field(default=None, ge=1)
    protection_turns: int | None = Field(default=None, ge=0)
    player_name: str = Field(default="Player", min_length=1)


class TurnAdvanceRequest(BaseModel):
    turns: int = Field(default=1, ge=1, le=100)


class AttackBody(BaseModel):
    empire_id: int
    target_id: int
    forces: dict[UnitType, int]
    attack_type: AttackType = AttackType.INVASION
    stance: Stance | None = None


class RetreatBody(BaseModel):
    empire_id: int
    forces: dict[UnitType, int]


class BuildBody(BaseModel):
    empire_id: int
    unit_type: UnitType
    quantity: int


class CancelBuildBody(BaseModel):
    empire_id: int
    order_id: int


class ActionResponse(BaseModel):
    success: bool
    data: dict[str, Any] = Field(default_factory=dict)


class SimulationRequest(BaseModel):
    empire_count: int = Field(default=10, ge=2)
    turn_limit: int = Field(default=200, ge=1)
    protection_turns: int = Field(default=20, ge=0)
    include_player: bool = False
    seed: str = Field(default="1", min_length=1)
    ruleset: Ruleset = Ruleset.UNIFIED


class SimulationResponse(BaseModel):
    turns_played: int
    winner_id: int | None
    winner_name: str | None
    victory_type: str | None
    coverage: dict[str, int]
    final: GameSummary


def _load_game(state: ApiState, game_id: int) -> dm.GameState:
    try:
        return state.games.get_game(dm.GameID(game_id))
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="game not found") from exc


def _forces_payload(forces: dict[UnitType, int]) -> dict[str, int]:
    return {unit.value: count for unit, count in forces.items()}


async def _submit(state: ApiState, game_id: int, request: ActionRequest) -> ActionResponse:
    _load_game(state, game_id)
    result: ActionResult = await state.turns.submit(dm.GameID(game_id), request)
    if not result.success:
        code = (
            status.HTTP_400_BAD_REQUEST
            if result.category == "validation"
            else status.HTTP_409_CONFLICT
        )
        raise HTTPException(status_code=code, detail=result.to_dict())
    return ActionResponse(success=True, data=result.data)


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "default_ruleset": state.settings.default_ruleset.value,
        "data_dir": str(state.settings.data_dir),
    }


@router.get("/rules")
async def get_rules(state: ApiStateDep) -> dict[str, Any]:
    return rules_document(state.rules)


@router.get("/games", response_model=list[GameSummary])
async def list_games(state: ApiStateDep) -> list[GameSummary]:
    games = state.games.list_games()
    return [GameSummary.model_validate(state.games.to_summary_dict(g)) for g in games]


@router.post("/games", response_model=GameDetail, status_code=status.HTTP_201_CREATED)
async def create_game(request: CreateGameRequest, state: ApiStateDep) -> GameDetail:
    if request.empire_count > state.settings.max_empires:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"empire_count cannot exceed {state.settings.max_empires}",
        )
    game = state.games.create_game(**request.model_dump())
    return GameDetail.model_validate(state.games.to_detail_dict(game))


@router.get("/games/{game_id}", response_model=GameDetail)
async def get_game(game_id: int, state: ApiStateDep) -> GameDetail:
    game = _load_game(state, game_id)
    return GameDetail.model_validate(state.games.to_detail_dict(game))


@router.get("/games/{game_id}/empires/{empire_id}")
async def get_empire(game_id: int, empire_id: int, state: ApiStateDep) -> dict[str, Any]:
    game = _load_game(state, game_id)
    try:
        return state.games.to_empire_dict(game, dm.EmpireID(empire_id))
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="empire not found"
        ) from exc


@router.post("/games/{game_id}/turns/advance", response_model=GameSummary)
async def advance_turns(
    game_id: int,
    request: TurnAdvanceRequest,
    state: ApiStateDep,
) -> GameSummary:
    game = _load_game(state, game_id)
    if game.status != GameStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="game already completed")

    updated = await state.turns.advance(game.id, turns=request.turns)
    if updated is None:  # pragma: no cover - deleted between the two reads
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="game not found")
    return GameSummary.model_validate(state.games.to_summary_dict(updated))


@router.post("/games/{game_id}/actions/attack", response_model=ActionResponse)
async def attack(game_id: int, body: AttackBody, state: ApiStateDep) -> ActionResponse:
    request = AttackRequest(
        empire_id=dm.EmpireID(body.empire_id),
        target_id=dm.EmpireID(body.target_id),
        forces=_forces_payload(body.forces),
        attack_type=body.attack_type,
        stance=body.stance,
    )
    return await _submit(state, game_id, request)


@router.post("/games/{game_id}/actions/retreat", response_model=ActionResponse)
async def retreat(game_id: int, body: RetreatBody, state: ApiStateDep) -> ActionResponse:
    request = RetreatRequest(
        empire_id=dm.EmpireID(body.empire_id), forces=_forces_payload(body.forces)
    )
    return await _submit(state, game_id, request)


@router.post("/games/{game_id}/actions/build", response_model=ActionResponse)
async def build(game_id: int, body: BuildBody, state: ApiStateDep) -> ActionResponse:
    request = BuildRequest(
        empire_id=dm.EmpireID(body.empire_id), unit_type=body.unit_type, quantity=body.quantity
    )
    return await _submit(state, game_id, request)


@router.post("/games/{game_id}/actions/cancel-build", response_model=ActionResponse)
async def cancel_build(game_id: int, body: CancelBuildBody, state: ApiStateDep) -> ActionResponse:
    request = CancelBuildRequest(
        empire_id=dm.EmpireID(body.empire_id), order_id=dm.BuildOrderID(body.order_id)
    )
    return await _submit(state, game_id, request)


@router.post("/simulations", response_model=SimulationResponse)
async def run_simulation(request: SimulationRequest, state: ApiStateDep) -> SimulationResponse:
    if request.empire_count > state.settings.max_empires:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"empire_count cannot exceed {state.settings.max_empires}",
        )
    config = SimulationConfig(**request.model_dump())
    result = await state.turns.simulate(config)
    return SimulationResponse(
        turns_played=result.turns_played,
        winner_id=int(result.winner.id) if result.winner else None,
        winner_name=result.winner.name if result.winner else None,
        victory_type=result.victory.type.value if result.victory else None,
        coverage=result.coverage,
        final=GameSummary.model_validate(state.games.to_summary_dict(result.final_state)),
    )
