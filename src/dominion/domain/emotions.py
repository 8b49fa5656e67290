"""Emotional state of autonomous empires."""

from __future__ import annotations

from dataclasses import dataclass

from dominion.domain.enums import CombatSide, EmotionalState
from dominion.domain.models import EmotionProfile, Empire

NEUTRAL_INTENSITY = 0.5


@dataclass(frozen=True, slots=True)
class EmotionModifiers:
    decision_quality: float = 1.0
    alliance_willingness: float = 1.0
    aggression: float = 1.0
    negotiation: float = 1.0


EMOTION_MODIFIERS: dict[EmotionalState, EmotionModifiers] = {
    EmotionalState.CONFIDENT: EmotionModifiers(1.05, 1.0, 1.0, 1.05),
    EmotionalState.ARROGANT: EmotionModifiers(0.85, 0.7, 1.3, 0.8),
    EmotionalState.DESPERATE: EmotionModifiers(0.8, 1.4, 0.8, 0.9),
    EmotionalState.VENGEFUL: EmotionModifiers(0.9, 0.6, 1.4, 0.7),
    EmotionalState.FEARFUL: EmotionModifiers(0.9, 1.3, 0.6, 1.1),
    EmotionalState.TRIUMPHANT: EmotionModifiers(1.1, 0.9, 1.2, 1.1),
}


def current_modifiers(profile: EmotionProfile) -> EmotionModifiers:
    """Modifiers for the current state, scaled by intensity (1.0 = full effect)."""

    base = EMOTION_MODIFIERS[profile.state]
    weight = profile.intensity

    def scale(value: float) -> float:
        return 1.0 + (value - 1.0) * weight

    return EmotionModifiers(
        decision_quality=scale(base.decision_quality),
        alliance_willingness=scale(base.alliance_willingness),
        aggression=scale(base.aggression),
        negotiation=scale(base.negotiation),
    )


def set_emotion(profile: EmotionProfile, state: EmotionalState, intensity: float) -> None:
    profile.state = state
    profile.intensity = min(1.0, max(0.0, intensity))
    profile.turns_since_change = 0


def react_to_combat(
    empire: Empire,
    side: CombatSide,
    winner: CombatSide,
    opponent: Empire,
    turn: int,
) -> None:
    """Update emotion (and grudges) after taking part in an attack."""

    if not empire.is_bot:
        return
    won = side == winner
    if side == CombatSide.ATTACKER:
        if won:
            set_emotion(empire.emotion, EmotionalState.TRIUMPHANT, 0.7)
        else:
            set_emotion(empire.emotion, EmotionalState.DESPERATE, 0.6)
    elif won:
        set_emotion(empire.emotion, EmotionalState.CONFIDENT, 0.6)
    else:
        set_emotion(empire.emotion, EmotionalState.VENGEFUL, 0.8)
        empire.grudges[opponent.id] = turn


def decay_emotion(empire: Empire, *, rate: float, turn: int, grudge_memory: int) -> None:
    """Drift intensity toward neutral and forget stale grudges."""

    profile = empire.emotion
    profile.turns_since_change += 1
    if profile.intensity > NEUTRAL_INTENSITY:
        profile.intensity = max(NEUTRAL_INTENSITY, round(profile.intensity - rate, 6))
    elif profile.intensity < NEUTRAL_INTENSITY:
        profile.intensity = min(NEUTRAL_INTENSITY, round(profile.intensity + rate, 6))

    empire.grudges = {
        enemy: since for enemy, since in empire.grudges.items() if turn - since < grudge_memory
    }
    if profile.state == EmotionalState.VENGEFUL and not empire.grudges:
        set_emotion(profile, EmotionalState.CONFIDENT, NEUTRAL_INTENSITY)


def reassess_standing(empire: Empire, rank: int, total: int) -> None:
    """Leaders settle into arrogance; the bottom tier becomes fearful."""

    profile = empire.emotion
    if profile.intensity != NEUTRAL_INTENSITY or total < 3:
        return
    if rank == 0 and profile.state == EmotionalState.CONFIDENT:
        set_emotion(profile, EmotionalState.ARROGANT, 0.6)
    elif rank >= total - max(1, total // 5) and profile.state == EmotionalState.CONFIDENT:
        set_emotion(profile, EmotionalState.FEARFUL, 0.6)
