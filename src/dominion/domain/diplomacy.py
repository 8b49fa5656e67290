"""Treaties between empires and the coalition checkpoint."""

from __future__ import annotations

from dominion.domain.archetypes import profile_for
from dominion.domain.emotions import current_modifiers
from dominion.domain.enums import TreatyType
from dominion.domain.errors import PreconditionError
from dominion.domain.models import (
    Coalition,
    CoalitionID,
    Empire,
    EmpireID,
    GameState,
    Treaty,
    TreatyID,
)
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream


def find_treaty(state: GameState, a: EmpireID, b: EmpireID) -> Treaty | None:
    for treaty in state.treaties:
        if treaty.involves(a) and treaty.involves(b):
            return treaty
    return None


def acceptance_chance(target: Empire, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Chance that an autonomous empire accepts a proposal; players never auto-accept."""

    if not target.is_bot:
        return 0.0
    profile = profile_for(target.archetype)
    willingness = current_modifiers(target.emotion).alliance_willingness
    chance = rules.diplomacy.base_acceptance + 0.6 * profile.diplomatic_propensity
    return min(1.0, max(0.0, chance * willingness))


def propose_treaty(
    state: GameState,
    proposer: Empire,
    target: Empire,
    treaty_type: TreatyType,
    *,
    rng: RngStream,
    rules: RulesConfig = DEFAULT_RULES,
) -> Treaty | None:
    """Offer a treaty; returns the signed treaty or ``None`` when declined.

    An alliance offered to an empire already bound by a non-aggression pact
    upgrades that pact in place.
    """

    if proposer.id == target.id:
        raise PreconditionError("self_treaty", "an empire cannot sign a treaty with itself")
    if proposer.is_eliminated or target.is_eliminated:
        raise PreconditionError("target_eliminated", "eliminated empires cannot sign treaties")

    existing = find_treaty(state, proposer.id, target.id)
    if existing is not None and (
        existing.type == treaty_type or existing.type == TreatyType.ALLIANCE
    ):
        raise PreconditionError("treaty_exists", "a treaty of this kind is already in force")

    state.record("treaty_proposals")
    if not rng.chance(acceptance_chance(target, rules=rules)):
        return None

    if existing is not None:
        existing.type = treaty_type
        existing.signed_turn = state.turn
        treaty = existing
    else:
        a, b = sorted((proposer.id, target.id), key=int)
        treaty = Treaty(
            id=TreatyID(state.next_id("treaty")),
            type=treaty_type,
            empire_a=a,
            empire_b=b,
            signed_turn=state.turn,
        )
        state.treaties.append(treaty)
    state.record("alliances" if treaty_type == TreatyType.ALLIANCE else "naps")
    return treaty


def treaty_partners(state: GameState, empire_id: EmpireID) -> set[EmpireID]:
    partners: set[EmpireID] = set()
    for treaty in state.treaties:
        if treaty.empire_a == empire_id:
            partners.add(treaty.empire_b)
        elif treaty.empire_b == empire_id:
            partners.add(treaty.empire_a)
    return partners


def update_coalitions(state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> list[Coalition]:
    """Drop treaties of eliminated empires and rebuild coalitions from alliances.

    A coalition is a connected group of allied empires of at least the
    configured size. Coalitions whose membership is unchanged keep their id.
    """

    alive = {empire.id for empire in state.alive_empires()}
    state.treaties = [
        t for t in state.treaties if t.empire_a in alive and t.empire_b in alive
    ]

    graph: dict[EmpireID, set[EmpireID]] = {empire_id: set() for empire_id in alive}
    for treaty in state.treaties:
        if treaty.type == TreatyType.ALLIANCE:
            graph[treaty.empire_a].add(treaty.empire_b)
            graph[treaty.empire_b].add(treaty.empire_a)

    seen: set[EmpireID] = set()
    groups: list[list[EmpireID]] = []
    for start in sorted(graph, key=int):
        if start in seen:
            continue
        stack = [start]
        component: list[EmpireID] = []
        seen.add(start)
        while stack:
            current = stack.pop()
            component.append(current)
            for neighbour in sorted(graph[current], key=int):
                if neighbour not in seen:
                    seen.add(neighbour)
                    stack.append(neighbour)
        if len(component) >= rules.diplomacy.min_coalition_size:
            groups.append(sorted(component, key=int))

    previous = {tuple(c.member_ids): c for c in state.coalitions}
    coalitions: list[Coalition] = []
    for members in groups:
        known = previous.get(tuple(members))
        if known is not None:
            coalitions.append(known)
            continue
        coalitions.append(
            Coalition(
                id=CoalitionID(state.next_id("coalition")),
                member_ids=members,
                formed_turn=state.turn,
            )
        )
        state.record("coalitions_formed")
    state.coalitions = coalitions
    return coalitions
