"""Bot-authored messages (broadcasts and direct messages)."""

from __future__ import annotations

from dominion.domain.archetypes import profile_for
from dominion.domain.enums import Archetype, EmotionalState
from dominion.domain.models import Empire, EmpireID, GameState, Message, MessageID
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream

GREETINGS: dict[Archetype, tuple[str, ...]] = {
    Archetype.WARLORD: (
        "{name} salutes the strong. The weak should start counting their sectors.",
        "The fleets of {name} are ready. Choose your friends wisely.",
    ),
    Archetype.DIPLOMAT: (
        "{name} extends an open hand to every empire that seeks peace.",
        "Let us trade words before weapons. {name} is listening.",
    ),
    Archetype.MERCHANT: (
        "{name} is open for business. Fair prices for fair partners.",
        "Credits flow where peace holds. {name} invites all traders.",
    ),
    Archetype.SCHEMER: (
        "{name} wishes everyone a calm and uneventful turn.",
        "Trust is a resource. {name} has plenty to spare.",
    ),
    Archetype.TURTLE: (
        "{name} seeks no quarrel. Our stations will see to any that come.",
        "Leave {name} in peace and you will find us a quiet neighbour.",
    ),
    Archetype.BLITZKRIEG: (
        "{name} moves fast. Blink and your border is ours.",
        "Speed wins wars. {name} does not wait.",
    ),
    Archetype.TECH_RUSH: (
        "{name} looks to the stars and the laboratory alike.",
        "Knowledge compounds. {name} will outpace you all.",
    ),
    Archetype.OPPORTUNIST: (
        "{name} is watching the galaxy with great interest.",
        "Every weakness is an opportunity. {name} remembers that.",
    ),
}

THREATS: tuple[str, ...] = (
    "{name} has not forgotten what {target} did. Retribution is coming.",
    "{target}, your attack will be answered. {name} never forgives.",
)

BOASTS: tuple[str, ...] = (
    "{name} stands victorious. Who dares to be next?",
    "Another triumph for {name}. The galaxy should take note.",
)


def _compose(
    empire: Empire, state: GameState, rng: RngStream
) -> tuple[str, EmpireID | None, str]:
    """Return (kind, recipient, text) for one bot."""

    emotion = empire.emotion.state
    if emotion == EmotionalState.VENGEFUL and empire.grudges:
        enemy_id = max(empire.grudges, key=lambda e: (empire.grudges[e], -int(e)))
        enemy = state.empires.get(enemy_id)
        if enemy is not None and not enemy.is_eliminated:
            text = rng.choice(THREATS).format(name=empire.name, target=enemy.name)
            return "threat", enemy.id, text
    if emotion in (EmotionalState.TRIUMPHANT, EmotionalState.ARROGANT):
        return "boast", None, rng.choice(BOASTS).format(name=empire.name)

    archetype = profile_for(empire.archetype).archetype
    return "greeting", None, rng.choice(GREETINGS[archetype]).format(name=empire.name)


def generate_messages(
    state: GameState,
    rng: RngStream,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[Message]:
    """Let each alive bot emit at most one message this turn."""

    sent: list[Message] = []
    for empire in state.alive_empires():
        if not empire.is_bot or not rng.chance(rules.bots.message_chance):
            continue
        kind, recipient, text = _compose(empire, state, rng)
        message = Message(
            id=MessageID(state.next_id("message")),
            turn=state.turn,
            sender_id=empire.id,
            recipient_id=recipient,
            kind=kind,
            text=text,
        )
        state.messages.append(message)
        sent.append(message)
        state.record("messages")

    overflow = len(state.messages) - rules.bots.max_messages_kept
    if overflow > 0:
        del state.messages[:overflow]
    return sent
