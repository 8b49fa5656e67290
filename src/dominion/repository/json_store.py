"""JSON-based repository for Nexus Dominion games."""

from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter

from dominion.domain import models as dm


class JsonGameRepository:
    """Persist games as JSON snapshots on disk."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[dm.GameState] = TypeAdapter(dm.GameState)

    def _path_for(self, game_id: dm.GameID) -> Path:
        return self.base_path / f"game_{int(game_id)}.json"

    def save(self, game: dm.GameState) -> Path:
        """Serialize a game to disk and return the snapshot path.

        The snapshot is written to a sibling temp file first and then moved
        into place, so readers never observe a half-written turn.
        """

        path = self._path_for(game.id)
        payload = self._adapter.dump_json(game, indent=2)
        staging = path.with_suffix(".json.tmp")
        staging.write_bytes(payload)
        staging.replace(path)
        return path

    def load(self, game_id: dm.GameID) -> dm.GameState:
        """Load a previously saved game snapshot."""

        path = self._path_for(game_id)
        data = path.read_bytes()
        return self._adapter.validate_json(data)

    def exists(self, game_id: dm.GameID) -> bool:
        return self._path_for(game_id).exists()

    def list_games(self) -> list[dm.GameID]:
        """Return all game ids currently persisted in the repository."""

        ids: list[dm.GameID] = []
        prefix = "game_"
        suffix = ".json"
        for path in self.base_path.glob("game_*.json"):
            stem = path.name
            if stem.startswith(prefix) and stem.endswith(suffix):
                raw = stem[len(prefix) : -len(suffix)]
                try:
                    ids.append(dm.GameID(int(raw)))
                except ValueError:  # pragma: no cover - ignored malformed file
                    continue
        return sorted(ids, key=int)

    def delete(self, game_id: dm.GameID) -> None:
        """Remove a game snapshot if it exists."""

        path = self._path_for(game_id)
        if path.exists():
            path.unlink()
