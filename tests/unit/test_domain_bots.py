"""Unit tests for bot decisions, emotions, messaging, and galactic events."""

from __future__ import annotations

import pytest

from dominion.domain import archetypes, bots, emotions, events, messaging
from dominion.domain import models as dm
from dominion.domain.actions import AttackRequest
from dominion.domain.enums import (
    Archetype,
    BotActionType,
    CombatSide,
    EmotionalState,
    EventType,
    TreatyType,
)
from dominion.domain.rules_config import DEFAULT_RULES, rules_from_mapping
from dominion.domain.setup import create_game
from dominion.utils.rng import RngStream


def _game(*, turn: int = 1, empire_count: int = 6, protection_turns: int = 20) -> dm.GameState:
    state = create_game(
        1, "bots", empire_count=empire_count, protection_turns=protection_turns
    )
    state.turn_state.turn = turn
    return state


def test_protection_moves_attack_weight_elsewhere():
    profile = archetypes.profile_for(Archetype.WARLORD)
    open_weights = archetypes.action_weights(profile, protected=False)
    protected = archetypes.action_weights(profile, protected=True)

    assert protected[BotActionType.ATTACK] == 0.0
    assert sum(protected.values()) == pytest.approx(sum(open_weights.values()))


def test_every_archetype_has_a_profile():
    for archetype in Archetype:
        profile = archetypes.profile_for(archetype)
        assert profile.archetype == archetype
        assert set(profile.weights) == set(BotActionType)
    assert archetypes.profile_for(None).archetype == Archetype.MERCHANT


def test_decide_is_deterministic_and_bounded():
    state = _game(turn=25)
    for empire in state.alive_empires():
        first = bots.decide(empire, state, RngStream("same"))
        second = bots.decide(empire, state, RngStream("same"))
        assert first == second
        assert len(first) <= 2
        assert sum(isinstance(r, AttackRequest) for r in first) <= 1


def test_no_attacks_during_protection():
    state = _game(turn=5)
    stream = RngStream("peace")
    for _ in range(20):
        for empire in state.alive_empires():
            assert not any(
                isinstance(request, AttackRequest)
                for request in bots.decide(empire, state, stream)
            )


def test_players_and_eliminated_empires_never_act():
    state = create_game(1, "bots", empire_count=4, include_player=True)
    player = state.empires[dm.EmpireID(1)]
    assert bots.decide(player, state, RngStream("p")) == []

    fallen = state.empires[dm.EmpireID(2)]
    fallen.is_eliminated = True
    assert bots.decide(fallen, state, RngStream("p")) == []


def test_attack_plans_respect_treaties():
    state = _game(turn=30, empire_count=2)
    first, second = state.alive_empires()
    first.forces = dm.Forces(fighters=10_000)
    state.treaties.append(
        dm.Treaty(
            id=dm.TreatyID(1),
            type=TreatyType.ALLIANCE,
            empire_a=first.id,
            empire_b=second.id,
            signed_turn=1,
        )
    )
    profile = archetypes.profile_for(Archetype.WARLORD)
    assert bots._plan_attack(first, state, profile, RngStream("x"), DEFAULT_RULES) is None


def test_combat_emotions_and_grudges():
    state = _game()
    attacker, defender = state.alive_empires()[:2]

    emotions.react_to_combat(attacker, CombatSide.ATTACKER, CombatSide.DEFENDER, defender, 30)
    emotions.react_to_combat(defender, CombatSide.DEFENDER, CombatSide.DEFENDER, attacker, 30)
    assert attacker.emotion.state == EmotionalState.DESPERATE
    assert defender.emotion.state == EmotionalState.CONFIDENT

    emotions.react_to_combat(defender, CombatSide.DEFENDER, CombatSide.ATTACKER, attacker, 31)
    assert defender.emotion.state == EmotionalState.VENGEFUL
    assert defender.grudges == {attacker.id: 31}


def test_emotion_decays_toward_neutral_and_grudges_expire():
    state = _game()
    empire = state.alive_empires()[0]
    emotions.set_emotion(empire.emotion, EmotionalState.VENGEFUL, 0.8)
    empire.grudges[dm.EmpireID(99)] = 10

    emotions.decay_emotion(empire, rate=0.02, turn=11, grudge_memory=20)
    assert empire.emotion.intensity == 0.78
    assert empire.grudges

    emotions.decay_emotion(empire, rate=0.02, turn=40, grudge_memory=20)
    assert empire.grudges == {}
    assert empire.emotion.state == EmotionalState.CONFIDENT


def test_vengeful_bot_threatens_its_enemy():
    rules = rules_from_mapping({"bots": {"message_chance": 1.0}})
    state = _game()
    angry, enemy = state.alive_empires()[:2]
    emotions.set_emotion(angry.emotion, EmotionalState.VENGEFUL, 0.9)
    angry.grudges[enemy.id] = 1

    sent = messaging.generate_messages(state, RngStream("talk"), rules=rules)

    assert len(sent) == len(state.alive_empires())
    threat = next(m for m in sent if m.sender_id == angry.id)
    assert threat.kind == "threat"
    assert threat.recipient_id == enemy.id
    assert enemy.name in threat.text
    assert state.stats["messages"] == len(sent)


def test_message_log_is_trimmed():
    rules = rules_from_mapping({"bots": {"message_chance": 1.0, "max_messages_kept": 3}})
    state = _game()
    messaging.generate_messages(state, RngStream("a"), rules=rules)
    messaging.generate_messages(state, RngStream("b"), rules=rules)
    assert len(state.messages) == 3


def test_events_follow_the_trigger_chance():
    never = rules_from_mapping({"events": {"event_chance": 0.0}})
    state = _game()
    assert events.roll_event(state, RngStream("e"), rules=never) is None
    assert state.events == []


def test_forced_events_are_recorded():
    always = rules_from_mapping({"events": {"event_chance": 1.0}})
    state = _game()
    seen: set[EventType] = set()
    for index in range(60):
        event = events.roll_event(state, RngStream(f"event-{index}"), rules=always)
        assert event is not None
        seen.add(event.type)
    assert len(state.events) == 60
    assert state.stats["events"] == 60
    assert len(seen) >= 4
    for empire in state.empires.values():
        assert empire.resources.credits >= 0
        assert empire.population >= 0
