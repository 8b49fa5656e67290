"""Turn orchestration for Nexus Dominion games."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable

from dominion.domain import bots, diplomacy, events, messaging, victory
from dominion.domain.actions import execute_action
from dominion.domain.build_queue import advance_build_queue
from dominion.domain.covert import accrue_covert_points
from dominion.domain.crafting import advance_crafting_queue, apply_tier1_production
from dominion.domain.economy import apply_income, grow_population, update_civil_status
from dominion.domain.emotions import decay_emotion, reassess_standing
from dominion.domain.enums import GameStatus, TurnPhase
from dominion.domain.market import update_market
from dominion.domain.models import Empire, EmpireID, GameState
from dominion.domain.networth import ranked_by_networth, refresh_networth
from dominion.domain.research import advance_research
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig
from dominion.utils.rng import RngStream

logger = logging.getLogger(__name__)

# Order is a correctness invariant: each phase reads what the earlier ones wrote.
TURN_PHASES: tuple[TurnPhase, ...] = (
    TurnPhase.INCOME,
    TurnPhase.TIER1_PRODUCTION,
    TurnPhase.POPULATION,
    TurnPhase.CIVIL_STATUS,
    TurnPhase.RESEARCH,
    TurnPhase.BUILD_QUEUE,
    TurnPhase.COVERT_POINTS,
    TurnPhase.CRAFTING,
    TurnPhase.BOT_DECISIONS,
    TurnPhase.EMOTIONAL_DECAY,
    TurnPhase.MARKET,
    TurnPhase.BOT_MESSAGING,
    TurnPhase.GALACTIC_EVENTS,
    TurnPhase.COALITION_CHECKPOINT,
    TurnPhase.VICTORY,
    TurnPhase.CHECKPOINT,
)

PhaseHandler = Callable[[GameState, RngStream, RulesConfig], None]


def turn_stream(state: GameState) -> RngStream:
    """The single stream consumed by every phase of the game's current turn."""

    return RngStream.for_turn(int(state.id), state.turn, state.seed)


def advance_turn(
    state: GameState,
    rng: RngStream,
    *,
    rules: RulesConfig = DEFAULT_RULES,
    copy_state: bool = True,
) -> GameState:
    """Run the phase pipeline once and return the next game state.

    With ``copy_state`` (the default) the input is never modified, so a
    failure outside per-empire isolation leaves the caller's snapshot as the
    source of truth. Batch simulations pass ``copy_state=False`` to advance
    in place.
    """

    if state.status != GameStatus.ACTIVE:
        raise ValueError(f"game {int(state.id)} is {state.status.value}; cannot advance")

    game = copy.deepcopy(state) if copy_state else state
    turn_state = game.turn_state
    turn_state.checkpoint_due = False

    for phase in TURN_PHASES:
        if phase in turn_state.completed_phases:
            continue
        _PHASE_HANDLERS[phase](game, rng, rules)
        turn_state.completed_phases.append(phase)

    for empire in game.empires.values():
        refresh_networth(empire, rules=rules)

    turn_state.turn += 1
    turn_state.completed_phases = []
    return game


def _for_each_empire(
    game: GameState,
    phase: TurnPhase,
    step: Callable[[Empire], None],
    *,
    bots_only: bool = False,
) -> None:
    """Run ``step`` for every alive empire, isolating failures per empire.

    A failing empire is restored to its pre-phase snapshot and the phase
    continues with the next empire.
    """

    for empire in game.alive_empires():
        if bots_only and not empire.is_bot:
            continue
        snapshot = copy.deepcopy(empire)
        try:
            step(empire)
        except Exception:
            logger.exception(
                "phase %s failed for empire %s on turn %s; empire left unchanged",
                phase.value,
                int(empire.id),
                game.turn,
            )
            game.empires[empire.id] = snapshot
            game.record("phase_faults")


def _income(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    def step(empire: Empire) -> None:
        report = apply_income(empire, rules=rules)
        if report.bankrupt:
            game.record("bankruptcy_occurred")
        if report.starving:
            game.record("starvation_occurred")

    _for_each_empire(game, TurnPhase.INCOME, step)


def _tier1_production(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    _for_each_empire(
        game, TurnPhase.TIER1_PRODUCTION, lambda e: apply_tier1_production(e, rules=rules)
    )


def _population(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    _for_each_empire(game, TurnPhase.POPULATION, lambda e: grow_population(e, rules=rules))


def _civil_status(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    def step(empire: Empire) -> None:
        if update_civil_status(empire, rules=rules) is not None:
            game.record("civil_status_changed")

    _for_each_empire(game, TurnPhase.CIVIL_STATUS, step)


def _research(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    def step(empire: Empire) -> None:
        reached = advance_research(empire, rules=rules)
        if reached:
            game.record("research_advanced", len(reached))

    _for_each_empire(game, TurnPhase.RESEARCH, step)


def _build_queue(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    def step(empire: Empire) -> None:
        completed = advance_build_queue(empire, rules=rules)
        if completed:
            game.record("builds_completed", len(completed))

    _for_each_empire(game, TurnPhase.BUILD_QUEUE, step)


def _covert_points(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    _for_each_empire(game, TurnPhase.COVERT_POINTS, lambda e: accrue_covert_points(e, rules=rules))


def _crafting(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    _for_each_empire(game, TurnPhase.CRAFTING, advance_crafting_queue)


class _BotTransaction:
    """Undo log for one bot's actions within the decision phase.

    Actions touch the acting empire, their target, the market, treaties and
    coalitions, and append to the game's logs. Empires are copied lazily the
    first time a request names them.
    """

    __slots__ = ("game", "empires", "market", "treaties", "coalitions", "counters", "stats", "logs")

    def __init__(self, game: GameState) -> None:
        self.game = game
        self.empires: dict[EmpireID, Empire] = {}
        self.market = copy.deepcopy(game.market)
        self.treaties = copy.deepcopy(game.treaties)
        self.coalitions = copy.deepcopy(game.coalitions)
        self.counters = dict(game.counters)
        self.stats = dict(game.stats)
        self.logs = (len(game.attacks), len(game.messages), len(game.events))

    def touch(self, *empire_ids: object) -> None:
        for empire_id in empire_ids:
            if empire_id in self.game.empires and empire_id not in self.empires:
                self.empires[empire_id] = copy.deepcopy(self.game.empires[empire_id])

    def rollback(self) -> None:
        game = self.game
        game.empires.update(self.empires)
        game.market = self.market
        game.treaties = self.treaties
        game.coalitions = self.coalitions
        game.counters = self.counters
        game.stats = self.stats
        attacks, messages, logged_events = self.logs
        del game.attacks[attacks:]
        del game.messages[messages:]
        del game.events[logged_events:]


def _bot_decisions(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    """Let each bot act; a failing bot has all of this turn's actions undone."""

    bot_ids = [empire.id for empire in game.alive_empires() if empire.is_bot]
    for empire_id in bot_ids:
        empire = game.empires[empire_id]
        # An earlier bot's attack may have eliminated this one mid-phase.
        if empire.is_eliminated:
            continue
        transaction = _BotTransaction(game)
        try:
            for request in bots.decide(empire, game, rng, rules=rules):
                transaction.touch(request.empire_id, getattr(request, "target_id", None))
                result = execute_action(game, request, rng=rng, rules=rules)
                if result.success:
                    game.record("bot_actions")
                else:
                    logger.debug(
                        "bot %s %s rejected: %s",
                        int(empire_id),
                        type(request).__name__,
                        result.error,
                    )
        except Exception:
            logger.exception(
                "phase %s failed for empire %s on turn %s; bot actions rolled back",
                TurnPhase.BOT_DECISIONS.value,
                int(empire_id),
                game.turn,
            )
            transaction.rollback()
            game.record("phase_faults")


def _emotional_decay(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    ranked = ranked_by_networth(game.alive_empires())
    ranks = {empire.id: index for index, empire in enumerate(ranked)}

    def step(empire: Empire) -> None:
        decay_emotion(
            empire,
            rate=rules.bots.emotion_decay_rate,
            turn=game.turn,
            grudge_memory=rules.bots.grudge_memory_turns,
        )
        reassess_standing(empire, ranks[empire.id], len(ranked))

    _for_each_empire(game, TurnPhase.EMOTIONAL_DECAY, step, bots_only=True)


def _market(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    update_market(game.market, rules=rules)


def _bot_messaging(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    messaging.generate_messages(game, rng, rules=rules)


def _galactic_events(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    events.roll_event(game, rng, rules=rules)


def _coalition_checkpoint(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    if game.turn % rules.diplomacy.coalition_check_interval == 0:
        diplomacy.update_coalitions(game, rules=rules)


def _victory(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    for empire in victory.apply_defeats(game, rules=rules):
        logger.info(
            "empire %s (%s) defeated by %s on turn %s",
            int(empire.id),
            empire.name,
            empire.defeat_reason.value if empire.defeat_reason else "unknown",
            game.turn,
        )
    victory.evaluate_victory(game, rules=rules)


def _checkpoint(game: GameState, rng: RngStream, rules: RulesConfig) -> None:
    turn_state = game.turn_state
    interval = rules.victory.checkpoint_interval
    if game.status == GameStatus.COMPLETED or (interval > 0 and game.turn % interval == 0):
        turn_state.checkpoint_due = True
        turn_state.last_checkpoint_turn = game.turn


_PHASE_HANDLERS: dict[TurnPhase, PhaseHandler] = {
    TurnPhase.INCOME: _income,
    TurnPhase.TIER1_PRODUCTION: _tier1_production,
    TurnPhase.POPULATION: _population,
    TurnPhase.CIVIL_STATUS: _civil_status,
    TurnPhase.RESEARCH: _research,
    TurnPhase.BUILD_QUEUE: _build_queue,
    TurnPhase.COVERT_POINTS: _covert_points,
    TurnPhase.CRAFTING: _crafting,
    TurnPhase.BOT_DECISIONS: _bot_decisions,
    TurnPhase.EMOTIONAL_DECAY: _emotional_decay,
    TurnPhase.MARKET: _market,
    TurnPhase.BOT_MESSAGING: _bot_messaging,
    TurnPhase.GALACTIC_EVENTS: _galactic_events,
    TurnPhase.COALITION_CHECKPOINT: _coalition_checkpoint,
    TurnPhase.VICTORY: _victory,
    TurnPhase.CHECKPOINT: _checkpoint,
}
