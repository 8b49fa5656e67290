"""Combat resolution between two empires.

Both rulesets ("unified" and "legacy") share one interface; the variant is
selected by handing the matching ``CombatRules`` to the resolver. Outcomes are
decided by a deterministic power comparison (ties go to the defender); the
random stream only supplies the bounded casualty variance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from dominion.domain.enums import (
    AttackType,
    CombatSide,
    DefeatType,
    Stance,
    TreatyType,
    UnitType,
)
from dominion.domain.errors import PreconditionError, ValidationError
from dominion.domain.models import AttackID, AttackRecord, Empire, EmpireID, Forces, GameState
from dominion.domain.networth import refresh_networth
from dominion.domain.rules_config import DEFAULT_RULES, CombatRules, RulesConfig
from dominion.utils.rng import RngStream


@dataclass(slots=True)
class CombatResult:
    """Outcome of a resolved attack, before it is applied to the game."""

    attack_type: AttackType
    stance: Stance
    committed: Forces
    attacker_power: float
    defender_power: float
    winner: CombatSide
    attacker_casualty_rate: float
    defender_casualty_rate: float
    attacker_casualties: Forces
    defender_casualties: Forces
    capture_pct: float = 0.0
    sectors_transferred: int = 0
    underdog_multiplier: float = 1.0
    notes: list[str] = field(default_factory=list)

    @property
    def loser(self) -> CombatSide:
        if self.winner == CombatSide.ATTACKER:
            return CombatSide.DEFENDER
        return CombatSide.ATTACKER


@dataclass(slots=True)
class RetreatResult:
    """Withdrawal losses; retreat has no opposing side and no winner."""

    forces: Forces
    casualties: Forces
    survivors: Forces
    rate: float


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def normalize_stance(stance: Stance | str | None) -> Stance:
    """Return a valid stance, falling back to balanced for unknown input."""

    if isinstance(stance, Stance):
        return stance
    try:
        return Stance(stance)
    except ValueError:
        return Stance.BALANCED


def fleet_power(forces: Forces, combat: CombatRules, *, defending: bool = False) -> float:
    """Sum of unit count times unit power, with ruleset-specific adjustments."""

    total = 0.0
    for unit in UnitType:
        count = forces.get(unit)
        if count <= 0:
            continue
        multiplier = combat.unit_power.value(unit)
        if unit == UnitType.STATIONS and defending:
            multiplier *= combat.station_defense_multiplier
        total += count * multiplier

    if combat.diversity_enabled and forces.distinct_types() >= combat.diversity_min_types:
        total *= combat.diversity_bonus
    return total


def underdog_multiplier(attacker_power: float, defender_power: float, combat: CombatRules) -> float:
    """Boost for an attacker well below the defender, scaled linearly and capped."""

    if not combat.underdog_enabled or defender_power <= 0:
        return 1.0
    ratio = attacker_power / defender_power
    if ratio >= combat.underdog_threshold:
        return 1.0
    shortfall = 1.0 - ratio / combat.underdog_threshold
    return 1.0 + min(combat.underdog_max_bonus, combat.underdog_max_bonus * shortfall)


def determine_winner(attacker_power: float, defender_power: float) -> CombatSide:
    """Greater effective power wins; equal power is a defender win."""

    if attacker_power > defender_power:
        return CombatSide.ATTACKER
    return CombatSide.DEFENDER


def _is_draw(attacker_power: float, defender_power: float, combat: CombatRules) -> bool:
    stronger = max(attacker_power, defender_power)
    if stronger <= 0:
        return True
    return abs(attacker_power - defender_power) <= combat.draw_margin * stronger


def casualty_rate(
    side: CombatSide,
    *,
    winner: CombatSide,
    draw: bool,
    power_ratio: float,
    stance_factor: float,
    variance: float,
    combat: CombatRules,
) -> float:
    """Casualty rate for one side, clamped to the configured range."""

    if draw:
        outcome = combat.draw_casualty_multiplier
    elif side == winner:
        outcome = combat.winner_casualty_multiplier
    else:
        outcome = combat.loser_casualty_multiplier

    rate = combat.base_casualty_rate * outcome * stance_factor
    if side == CombatSide.ATTACKER:
        if power_ratio < combat.bad_attack_threshold:
            rate *= combat.bad_attack_penalty
        elif power_ratio > combat.overwhelming_threshold:
            rate *= combat.overwhelming_bonus
    rate *= variance
    return min(combat.max_casualty_rate, max(combat.min_casualty_rate, rate))


def apply_casualty_rate(forces: Forces, rate: float) -> Forces:
    """Integer losses per unit type; never more than the units present."""

    losses = Forces()
    for unit in UnitType:
        count = forces.get(unit)
        if count > 0:
            losses.set(unit, min(count, round_half_up(count * rate)))
    return losses


def capture_percentage(attacker_power: float, defender_power: float, combat: CombatRules) -> float:
    """Share of defender sectors taken, scaled by the attacker's power margin."""

    if defender_power <= 0:
        return combat.capture_max_pct
    margin = attacker_power / defender_power
    span = max(combat.capture_full_margin - 1.0, 1e-9)
    scale = min(1.0, max(0.0, (margin - 1.0) / span))
    return combat.capture_min_pct + (combat.capture_max_pct - combat.capture_min_pct) * scale


def sectors_to_capture(defender_sectors: int, pct: float) -> int:
    if defender_sectors <= 0:
        return 0
    return min(defender_sectors, max(1, math.floor(defender_sectors * pct)))


def resolve_attack(
    attacker: Empire,
    defender: Empire,
    committed: Forces,
    attack_type: AttackType,
    stance: Stance | str | None = None,
    *,
    rng: RngStream,
    combat: CombatRules,
) -> CombatResult:
    """Resolve an attack without mutating either empire.

    The defender fights with every combat unit it holds. Draw order on the
    stream is fixed: attacker variance, then defender variance.
    """

    chosen_stance = normalize_stance(stance)
    stance_mods = combat.stance(chosen_stance)
    defender_forces = defender.forces.combat_units()
    notes: list[str] = []

    attacker_power = fleet_power(committed, combat) * stance_mods.power
    defender_power = fleet_power(defender_forces, combat, defending=True) * (
        1.0 + combat.defender_bonus
    )

    boost = underdog_multiplier(attacker_power, defender_power, combat)
    if boost > 1.0:
        attacker_power *= boost
        notes.append(f"underdog bonus x{boost:.3f}")

    winner = determine_winner(attacker_power, defender_power)
    draw = _is_draw(attacker_power, defender_power, combat)
    ratio = attacker_power / defender_power if defender_power > 0 else math.inf

    attacker_variance = rng.uniform(combat.variance_min, combat.variance_max)
    defender_variance = rng.uniform(combat.variance_min, combat.variance_max)

    attacker_rate = casualty_rate(
        CombatSide.ATTACKER,
        winner=winner,
        draw=draw,
        power_ratio=ratio,
        stance_factor=stance_mods.casualties,
        variance=attacker_variance,
        combat=combat,
    )
    defender_rate = casualty_rate(
        CombatSide.DEFENDER,
        winner=winner,
        draw=draw,
        power_ratio=ratio,
        stance_factor=combat.balanced.casualties,
        variance=defender_variance,
        combat=combat,
    )

    capture_pct = 0.0
    transferred = 0
    if attack_type == AttackType.INVASION and winner == CombatSide.ATTACKER:
        capture_pct = capture_percentage(attacker_power, defender_power, combat)
        transferred = sectors_to_capture(defender.sector_count, capture_pct)

    return CombatResult(
        attack_type=attack_type,
        stance=chosen_stance,
        committed=committed.copy(),
        attacker_power=attacker_power,
        defender_power=defender_power,
        winner=winner,
        attacker_casualty_rate=attacker_rate,
        defender_casualty_rate=defender_rate,
        attacker_casualties=apply_casualty_rate(committed, attacker_rate),
        defender_casualties=apply_casualty_rate(defender_forces, defender_rate),
        capture_pct=capture_pct,
        sectors_transferred=transferred,
        underdog_multiplier=boost,
        notes=notes,
    )


def resolve_retreat(forces: Forces, *, combat: CombatRules) -> RetreatResult:
    """Flat-rate losses for withdrawing forces."""

    casualties = Forces()
    for unit in UnitType:
        count = forces.get(unit)
        if count > 0:
            casualties.set(unit, min(count, round_half_up(count * combat.retreat_rate)))
    return RetreatResult(
        forces=forces.copy(),
        casualties=casualties,
        survivors=forces.minus(casualties),
        rate=combat.retreat_rate,
    )


def validate_attack(
    state: GameState,
    attacker_id: EmpireID,
    defender_id: EmpireID,
    committed: Forces,
) -> tuple[Empire, Empire]:
    """Check every attack precondition; raises before anything is mutated."""

    if attacker_id == defender_id:
        raise PreconditionError("self_attack", "an empire cannot attack itself")
    attacker = state.empires.get(attacker_id)
    defender = state.empires.get(defender_id)
    if attacker is None:
        raise ValidationError("unknown_empire", f"empire {int(attacker_id)} not found")
    if defender is None:
        raise ValidationError("unknown_empire", f"empire {int(defender_id)} not found")
    if attacker.is_eliminated:
        raise PreconditionError("attacker_eliminated", "eliminated empires cannot attack")
    if defender.is_eliminated:
        raise PreconditionError("target_eliminated", "target empire is already eliminated")
    if state.turn <= state.protection_turns:
        raise PreconditionError(
            "protection_period", f"attacks are disabled until turn {state.protection_turns + 1}"
        )
    if committed.covert_agents:
        raise ValidationError("invalid_forces", "covert agents cannot join an attack")
    if committed.total() <= 0:
        raise PreconditionError("empty_commitment", "no forces committed to the attack")
    if not attacker.forces.covers(committed):
        raise PreconditionError("insufficient_forces", "committed forces exceed holdings")
    for treaty in state.treaties:
        if treaty.involves(attacker_id) and treaty.involves(defender_id):
            kind = "alliance" if treaty.type == TreatyType.ALLIANCE else "non-aggression pact"
            raise PreconditionError("treaty_in_force", f"a {kind} forbids this attack")
    return attacker, defender


def apply_combat_result(
    state: GameState,
    attacker: Empire,
    defender: Empire,
    result: CombatResult,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> AttackRecord:
    """Apply casualties and territory transfer, then append the attack record."""

    attacker.forces = attacker.forces.minus(result.attacker_casualties)
    defender.forces = defender.forces.minus(result.defender_casualties)

    if result.sectors_transferred:
        ordered = sorted(defender.sectors, key=lambda s: int(s.id))
        taken = ordered[-result.sectors_transferred :]
        taken_ids = {sector.id for sector in taken}
        defender.sectors = [s for s in defender.sectors if s.id not in taken_ids]
        for sector in taken:
            sector.acquired_turn = state.turn
            attacker.sectors.append(sector)

    if defender.sector_count == 0 and not defender.is_eliminated:
        mark_eliminated(state, defender, DefeatType.ELIMINATION)

    refresh_networth(attacker, rules=rules)
    refresh_networth(defender, rules=rules)

    record = AttackRecord(
        id=AttackID(state.next_id("attack")),
        turn=state.turn,
        attacker_id=attacker.id,
        defender_id=defender.id,
        attack_type=result.attack_type,
        stance=result.stance,
        committed=result.committed.copy(),
        attacker_power=result.attacker_power,
        defender_power=result.defender_power,
        winner=result.winner,
        attacker_casualties=result.attacker_casualties.copy(),
        defender_casualties=result.defender_casualties.copy(),
        sectors_transferred=result.sectors_transferred,
    )
    state.attacks.append(record)
    state.record("combats_resolved")
    state.record("invasions" if result.attack_type == AttackType.INVASION else "guerilla_raids")
    return record


def mark_eliminated(state: GameState, empire: Empire, reason: DefeatType) -> None:
    empire.is_eliminated = True
    empire.eliminated_turn = state.turn
    empire.defeat_reason = reason
    empire.build_queue.clear()
    empire.crafting_queue.clear()
    state.record("eliminations")
