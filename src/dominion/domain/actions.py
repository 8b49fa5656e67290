"""Action boundary shared by players and autonomous empires.

Every request is sanitised here before it reaches the rules modules, and
every outcome leaves through the same ``ActionResult`` envelope. Rejected
requests never mutate the game.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeVar

from dominion.domain import build_queue, covert, crafting, diplomacy, economy, market
from dominion.domain.combat import (
    apply_combat_result,
    normalize_stance,
    resolve_attack,
    resolve_retreat,
    validate_attack,
)
from dominion.domain.emotions import react_to_combat
from dominion.domain.enums import (
    AttackType,
    CombatSide,
    CovertOperation,
    Material,
    ResourceType,
    SectorType,
    Stance,
    TradeSide,
    TreatyType,
    UnitType,
)
from dominion.domain.errors import ActionError, PreconditionError, ValidationError
from dominion.domain.models import BuildOrderID, Empire, EmpireID, Forces, GameState
from dominion.domain.networth import refresh_networth
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream, generate_seed

E = TypeVar("E", bound=StrEnum)

ForcesInput = Forces | Mapping[str, Any]


@dataclass(slots=True)
class AttackRequest:
    empire_id: EmpireID
    target_id: EmpireID
    forces: ForcesInput
    attack_type: AttackType | str = AttackType.INVASION
    stance: Stance | str | None = None


@dataclass(slots=True)
class RetreatRequest:
    empire_id: EmpireID
    forces: ForcesInput


@dataclass(slots=True)
class BuildRequest:
    empire_id: EmpireID
    unit_type: UnitType | str
    quantity: int


@dataclass(slots=True)
class CancelBuildRequest:
    empire_id: EmpireID
    order_id: BuildOrderID


@dataclass(slots=True)
class BuySectorRequest:
    empire_id: EmpireID
    sector_type: SectorType | str


@dataclass(slots=True)
class TradeRequest:
    empire_id: EmpireID
    resource: ResourceType | str
    quantity: int
    side: TradeSide | str


@dataclass(slots=True)
class TreatyRequest:
    empire_id: EmpireID
    target_id: EmpireID
    treaty_type: TreatyType | str


@dataclass(slots=True)
class CovertRequest:
    empire_id: EmpireID
    target_id: EmpireID
    operation: CovertOperation | str


@dataclass(slots=True)
class CraftRequest:
    empire_id: EmpireID
    material: Material | str
    quantity: int


@dataclass(slots=True)
class QueryRequest:
    empire_id: EmpireID


ActionRequest = (
    AttackRequest
    | RetreatRequest
    | BuildRequest
    | CancelBuildRequest
    | BuySectorRequest
    | TradeRequest
    | TreatyRequest
    | CovertRequest
    | CraftRequest
    | QueryRequest
)


@dataclass(slots=True)
class ActionResult:
    """Uniform ``{success, error?}`` envelope returned for every request."""

    success: bool
    error: str | None = None
    code: str | None = None
    # "validation" for malformed input, "precondition" for rule violations.
    category: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: dict[str, Any] | None = None) -> ActionResult:
        return cls(success=True, data=data or {})

    @classmethod
    def failure(cls, code: str, error: str, *, category: str = "precondition") -> ActionResult:
        return cls(success=False, error=error, code=code, category=category)

    @classmethod
    def from_error(cls, exc: ActionError) -> ActionResult:
        category = "validation" if isinstance(exc, ValidationError) else "precondition"
        return cls.failure(exc.code, exc.detail, category=category)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if not self.success:
            payload["error"] = self.error
            payload["code"] = self.code
            payload["category"] = self.category
        if self.data:
            payload["data"] = self.data
        return payload


# --- Input sanitation -----------------------------------------------------------


def _parse_enum(enum_cls: type[E], value: object, code: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(code, f"unknown {enum_cls.__name__}: {value!r}") from None


def _parse_count(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("invalid_quantity", f"{name} must be an integer, got {value!r}")
    return value


def _parse_id(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("invalid_identifier", f"{name} must be a non-negative integer")
    return value


def parse_forces(raw: ForcesInput) -> Forces:
    """Validate a forces payload into a ``Forces`` record.

    Keys must be unit types; counts must be non-negative integers.
    """

    if isinstance(raw, Forces):
        raw = {unit.value: raw.get(unit) for unit in UnitType}
    if not isinstance(raw, Mapping):
        raise ValidationError("invalid_forces", "forces must be a mapping of unit counts")

    forces = Forces()
    for key, value in raw.items():
        unit = _parse_enum(UnitType, key, "invalid_forces")
        count = _parse_count(value, unit.value)
        if count < 0:
            raise ValidationError("invalid_forces", f"{unit.value} count cannot be negative")
        forces.set(unit, count)
    return forces


def forces_dict(forces: Forces) -> dict[str, int]:
    return {unit.value: forces.get(unit) for unit in UnitType}


def _target(state: GameState, raw_id: object) -> Empire:
    target_id = EmpireID(_parse_id(raw_id, "target_id"))
    target = state.empires.get(target_id)
    if target is None:
        raise ValidationError("unknown_empire", f"empire {target_id} not found")
    return target


def empire_summary(empire: Empire) -> dict[str, Any]:
    return {
        "id": int(empire.id),
        "name": empire.name,
        "kind": empire.kind.value,
        "archetype": empire.archetype.value if empire.archetype else None,
        "resources": {r.value: empire.resources.get(r) for r in ResourceType},
        "forces": forces_dict(empire.forces),
        "sector_count": empire.sector_count,
        "population": empire.population,
        "civil_status": empire.civil_status.value,
        "research_level": empire.research_level,
        "unlocked_units": [unit.value for unit in empire.unlocked_units],
        "covert_points": empire.covert_points,
        "networth": empire.networth,
        "build_queue": [
            {
                "id": int(entry.id),
                "unit_type": entry.unit_type.value,
                "quantity": entry.quantity,
                "turns_remaining": entry.turns_remaining,
                "total_cost": entry.total_cost,
            }
            for entry in empire.build_queue
        ],
        "is_eliminated": empire.is_eliminated,
        "defeat_reason": empire.defeat_reason.value if empire.defeat_reason else None,
    }


# --- Handlers -------------------------------------------------------------------

ActionHandler = Callable[[GameState, Empire, Any, RngStream, RulesConfig], dict[str, Any]]


def _handle_attack(
    state: GameState, empire: Empire, request: AttackRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    attack_type = _parse_enum(AttackType, request.attack_type, "invalid_attack_type")
    committed = parse_forces(request.forces)
    target = _target(state, request.target_id)
    attacker, defender = validate_attack(state, empire.id, target.id, committed)

    result = resolve_attack(
        attacker,
        defender,
        committed,
        attack_type,
        normalize_stance(request.stance),
        rng=rng,
        combat=rules.combat_for(state.ruleset),
    )
    record = apply_combat_result(state, attacker, defender, result, rules=rules)
    react_to_combat(attacker, CombatSide.ATTACKER, result.winner, defender, state.turn)
    react_to_combat(defender, CombatSide.DEFENDER, result.winner, attacker, state.turn)
    state.record("attacks")
    return {
        "attack_id": int(record.id),
        "attack_type": result.attack_type.value,
        "stance": result.stance.value,
        "winner": result.winner.value,
        "attacker_power": round(result.attacker_power, 4),
        "defender_power": round(result.defender_power, 4),
        "attacker_casualties": forces_dict(result.attacker_casualties),
        "defender_casualties": forces_dict(result.defender_casualties),
        "sectors_transferred": result.sectors_transferred,
        "defender_eliminated": defender.is_eliminated,
    }


def _handle_retreat(
    state: GameState, empire: Empire, request: RetreatRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    withdrawing = parse_forces(request.forces)
    if not empire.forces.covers(withdrawing):
        raise PreconditionError("insufficient_forces", "retreating forces exceed holdings")

    result = resolve_retreat(withdrawing, combat=rules.combat_for(state.ruleset))
    empire.forces = empire.forces.minus(result.casualties)
    refresh_networth(empire, rules=rules)
    state.record("retreats")
    return {
        "casualties": forces_dict(result.casualties),
        "survivors": forces_dict(result.survivors),
        "rate": result.rate,
    }


def _handle_build(
    state: GameState, empire: Empire, request: BuildRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    unit = _parse_enum(UnitType, request.unit_type, "invalid_unit_type")
    quantity = _parse_count(request.quantity, "quantity")
    entry = build_queue.queue_build(state, empire, unit, quantity, rules=rules)
    return {
        "order_id": int(entry.id),
        "unit_type": entry.unit_type.value,
        "quantity": entry.quantity,
        "turns_remaining": entry.turns_remaining,
        "total_cost": entry.total_cost,
    }


def _handle_cancel_build(
    state: GameState,
    empire: Empire,
    request: CancelBuildRequest,
    rng: RngStream,
    rules: RulesConfig,
) -> dict[str, Any]:
    order_id = BuildOrderID(_parse_id(request.order_id, "order_id"))
    outcome = build_queue.cancel_build(empire, order_id, rules=rules)
    state.record("build_cancellations")
    return {"order_id": int(outcome.entry.id), "refund": outcome.refund}


def _handle_buy_sector(
    state: GameState, empire: Empire, request: BuySectorRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    sector = economy.buy_sector(state, empire, request.sector_type, rules=rules)
    return {
        "sector_id": int(sector.id),
        "sector_type": sector.type.value,
        "credits": empire.resources.credits,
    }


def _handle_trade(
    state: GameState, empire: Empire, request: TradeRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    quantity = _parse_count(request.quantity, "quantity")
    delta = market.trade(state, empire, request.resource, quantity, request.side, rules=rules)
    state.record("trades")
    return {"credits_delta": -delta, "credits": empire.resources.credits}


def _handle_treaty(
    state: GameState, empire: Empire, request: TreatyRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    treaty_type = _parse_enum(TreatyType, request.treaty_type, "invalid_treaty_type")
    target = _target(state, request.target_id)
    treaty = diplomacy.propose_treaty(state, empire, target, treaty_type, rng=rng, rules=rules)
    if treaty is None:
        return {"accepted": False}
    state.record("treaties")
    return {"accepted": True, "treaty_id": int(treaty.id), "treaty_type": treaty.type.value}


def _handle_covert(
    state: GameState, empire: Empire, request: CovertRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    operation = _parse_enum(CovertOperation, request.operation, "invalid_operation")
    target = _target(state, request.target_id)
    outcome = covert.perform_operation(state, empire, target, operation, rng=rng, rules=rules)
    return {
        "operation": outcome.operation.value,
        "success": outcome.success,
        "chance": round(outcome.chance, 4),
        "effect": outcome.effect,
    }


def _handle_craft(
    state: GameState, empire: Empire, request: CraftRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    quantity = _parse_count(request.quantity, "quantity")
    entry = crafting.queue_craft(state, empire, request.material, quantity, rules=rules)
    return {
        "order_id": int(entry.id),
        "material": entry.material.value,
        "quantity": entry.quantity,
        "turns_remaining": entry.turns_remaining,
    }


def _handle_query(
    state: GameState, empire: Empire, request: QueryRequest, rng: RngStream, rules: RulesConfig
) -> dict[str, Any]:
    return empire_summary(empire)


_ACTION_HANDLERS: dict[type, ActionHandler] = {
    AttackRequest: _handle_attack,
    RetreatRequest: _handle_retreat,
    BuildRequest: _handle_build,
    CancelBuildRequest: _handle_cancel_build,
    BuySectorRequest: _handle_buy_sector,
    TradeRequest: _handle_trade,
    TreatyRequest: _handle_treaty,
    CovertRequest: _handle_covert,
    CraftRequest: _handle_craft,
    QueryRequest: _handle_query,
}

# Requests that an eliminated empire may still issue.
_READ_ONLY = (QueryRequest,)


def execute_action(
    state: GameState,
    request: ActionRequest,
    *,
    rng: RngStream,
    rules: RulesConfig = DEFAULT_RULES,
) -> ActionResult:
    """Validate and apply one request, returning the uniform envelope."""

    handler = _ACTION_HANDLERS.get(type(request))
    if handler is None:
        return ActionResult.failure(
            "unsupported_action",
            f"unsupported request {type(request).__name__}",
            category="validation",
        )

    try:
        empire_id = EmpireID(_parse_id(request.empire_id, "empire_id"))
        empire = state.empires.get(empire_id)
        if empire is None:
            raise ValidationError("unknown_empire", f"empire {empire_id} not found")
        if empire.is_eliminated and not isinstance(request, _READ_ONLY):
            raise PreconditionError("empire_eliminated", "eliminated empires cannot act")
        data = handler(state, empire, request, rng, rules)
    except ActionError as exc:
        return ActionResult.from_error(exc)
    return ActionResult.ok(data)


def action_stream(state: GameState, empire_id: EmpireID) -> RngStream:
    """Stream for an action issued between turns (player actions).

    Each call advances a per-game counter so successive actions draw fresh,
    reproducible randomness.
    """

    sequence = state.next_id("player_action")
    context = f"{state.seed}:{int(empire_id)}:{sequence}"
    return RngStream(generate_seed(int(state.id), state.turn, "action", context))
