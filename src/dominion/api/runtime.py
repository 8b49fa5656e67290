"""Runtime primitives backing the Nexus Dominion HTTP API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any

from dominion.config import Settings, get_settings
from dominion.domain import models as dm
from dominion.domain.actions import (
    ActionRequest,
    ActionResult,
    action_stream,
    empire_summary,
    execute_action,
)
from dominion.domain.enums import GameStatus, Ruleset
from dominion.domain.rules_config import DEFAULT_RULES, RulesConfig, load_rules
from dominion.domain.setup import create_game
from dominion.domain.simulation import SimulationConfig, SimulationResult, run_simulation
from dominion.domain.turn import advance_turn, turn_stream
from dominion.repository import JsonGameRepository

logger = logging.getLogger(__name__)


class GameService:
    """Utilities for loading, creating, and mutating game aggregates."""

    def __init__(
        self,
        repository: JsonGameRepository,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        settings: Settings | None = None,
    ) -> None:
        self._repository = repository
        self._rules = rules
        self._settings = settings or get_settings()

    def list_games(self) -> list[dm.GameState]:
        """Return every persisted game ordered by identifier."""

        games: list[dm.GameState] = []
        for game_id in self._repository.list_games():
            with suppress(FileNotFoundError):
                games.append(self._repository.load(game_id))
        return games

    def get_game(self, game_id: dm.GameID) -> dm.GameState:
        """Load a single game or raise ``FileNotFoundError``."""

        return self._repository.load(game_id)

    def save_game(self, game: dm.GameState) -> dm.GameState:
        self._repository.save(game)
        return game

    def create_game(
        self,
        *,
        name: str | None = None,
        seed: str | None = None,
        empire_count: int = 10,
        include_player: bool = True,
        ruleset: Ruleset | None = None,
        turn_limit: int | None = None,
        protection_turns: int | None = None,
        player_name: str = "Player",
    ) -> dm.GameState:
        """Create and persist a new game."""

        game_id = self._next_identifier()
        settings = self._settings
        game = create_game(
            int(game_id),
            seed or f"game-{int(game_id)}",
            name=name,
            empire_count=empire_count,
            include_player=include_player,
            ruleset=ruleset or settings.default_ruleset,
            turn_limit=turn_limit if turn_limit is not None else settings.turn_limit,
            protection_turns=(
                protection_turns if protection_turns is not None else settings.protection_turns
            ),
            player_name=player_name,
            rules=self._rules,
        )
        self._repository.save(game)
        return game

    def _next_identifier(self) -> dm.GameID:
        existing = self._repository.list_games()
        if not existing:
            return dm.GameID(1)
        last = max(existing, key=int)
        return dm.GameID(int(last) + 1)

    def apply_action(self, game_id: dm.GameID, request: ActionRequest) -> ActionResult:
        """Run one player request against a stored game.

        The snapshot is only written back when the action succeeded.
        """

        game = self._repository.load(game_id)
        if game.status != GameStatus.ACTIVE:
            return ActionResult.failure("game_completed", "the game has already finished")
        rng = action_stream(game, request.empire_id)
        result = execute_action(game, request, rng=rng, rules=self._rules)
        if result.success:
            self._repository.save(game)
        return result

    @staticmethod
    def to_summary_dict(game: dm.GameState) -> dict[str, Any]:
        """Return a JSON-friendly overview of a game."""

        victory = None
        if game.victory is not None:
            victory = {
                "type": game.victory.type.value,
                "winner_id": int(game.victory.winner_id),
                "turn": game.victory.turn,
            }
        return {
            "id": int(game.id),
            "name": game.name,
            "turn": game.turn,
            "status": game.status.value,
            "ruleset": game.ruleset.value,
            "turn_limit": game.turn_limit,
            "protection_turns": game.protection_turns,
            "empire_count": len(game.empires),
            "alive_empires": len(game.alive_empires()),
            "victory": victory,
        }

    @staticmethod
    def to_detail_dict(game: dm.GameState) -> dict[str, Any]:
        """Return a richer JSON-compatible representation for clients."""

        summary = GameService.to_summary_dict(game)
        summary.update(
            {
                "checkpoint_due": game.turn_state.checkpoint_due,
                "galaxy": {
                    "region_count": len(game.galaxy.regions),
                    "connection_count": len(game.galaxy.connections),
                    "wormhole_count": len(game.galaxy.wormholes),
                },
                "empires": [
                    {
                        "id": int(empire.id),
                        "name": empire.name,
                        "kind": empire.kind.value,
                        "archetype": empire.archetype.value if empire.archetype else None,
                        "networth": empire.networth,
                        "sector_count": empire.sector_count,
                        "is_eliminated": empire.is_eliminated,
                    }
                    for empire in sorted(game.empires.values(), key=lambda e: int(e.id))
                ],
                "recent_events": [
                    {"turn": event.turn, "type": event.type.value, "description": event.description}
                    for event in game.events[-10:]
                ],
            }
        )
        return summary

    @staticmethod
    def to_empire_dict(game: dm.GameState, empire_id: dm.EmpireID) -> dict[str, Any]:
        """Empire detail; raises ``KeyError`` when the empire does not exist."""

        empire = game.empire(empire_id)
        detail = empire_summary(empire)
        detail["home_region_id"] = (
            int(empire.home_region_id) if empire.home_region_id is not None else None
        )
        return detail


class TurnManager:
    """Serialises every mutation of a game behind a per-game lock.

    Turn advancement and player actions for the same game never overlap;
    blocking work runs in a worker thread to keep the event loop free.
    """

    def __init__(
        self,
        repository: JsonGameRepository,
        games: GameService,
        *,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self._repository = repository
        self._games = games
        self._rules = rules
        self._locks: dict[dm.GameID, asyncio.Lock] = {}

    def _lock_for(self, game_id: dm.GameID) -> asyncio.Lock:
        lock = self._locks.get(game_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[game_id] = lock
        return lock

    def is_busy(self, game_id: dm.GameID) -> bool:
        lock = self._locks.get(game_id)
        return lock is not None and lock.locked()

    async def advance(self, game_id: dm.GameID, turns: int = 1) -> dm.GameState | None:
        """Advance a game by up to ``turns`` turns; ``None`` when it is missing."""

        if turns <= 0:
            return None
        async with self._lock_for(game_id):
            return await asyncio.to_thread(self._advance_game_sync, game_id, turns)

    async def submit(self, game_id: dm.GameID, request: ActionRequest) -> ActionResult:
        async with self._lock_for(game_id):
            return await asyncio.to_thread(self._games.apply_action, game_id, request)

    def _advance_game_sync(self, game_id: dm.GameID, turns: int) -> dm.GameState | None:
        try:
            game = self._repository.load(game_id)
        except FileNotFoundError:
            logger.warning("game %s missing from repository; nothing to advance", int(game_id))
            return None

        for _ in range(turns):
            if game.status != GameStatus.ACTIVE:
                break
            game = advance_turn(game, turn_stream(game), rules=self._rules)
            # Each completed turn is persisted; a failed turn leaves the previous snapshot.
            self._repository.save(game)
        return game

    async def simulate(self, config: SimulationConfig) -> SimulationResult:
        return await asyncio.to_thread(run_simulation, config, rules=self._rules)

    async def stop(self) -> None:
        for lock in list(self._locks.values()):
            async with lock:
                pass
        self._locks.clear()


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self, *, settings: Settings | None = None, rules: RulesConfig | None = None
    ) -> None:
        self.settings = settings or get_settings()
        if rules is None:
            path = self.settings.rules_path
            rules = load_rules(path) if path else DEFAULT_RULES
        self.rules = rules
        self.repository = JsonGameRepository(self.settings.data_dir)
        self.games = GameService(self.repository, rules=rules, settings=self.settings)
        self.turns = TurnManager(self.repository, self.games, rules=rules)

    async def shutdown(self) -> None:
        await self.turns.stop()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
