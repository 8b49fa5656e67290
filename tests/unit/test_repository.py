"""Tests for the JSON game repository."""

from __future__ import annotations

import pytest

from dominion.domain import models as dm
from dominion.domain.setup import create_game
from dominion.domain.turn import advance_turn, turn_stream
from dominion.repository import JsonGameRepository


def _game(game_id: int = 1) -> dm.GameState:
    return create_game(game_id, f"repo-{game_id}", empire_count=4, include_player=True)


def test_save_and_load_game(tmp_path):
    repo = JsonGameRepository(tmp_path)
    game = _game()

    path = repo.save(game)
    assert path.exists()
    assert path.name == "game_1.json"

    loaded = repo.load(dm.GameID(1))
    assert loaded == game


def test_round_trip_after_play(tmp_path):
    repo = JsonGameRepository(tmp_path)
    game = _game()
    for _ in range(3):
        game = advance_turn(game, turn_stream(game))

    repo.save(game)
    loaded = repo.load(game.id)

    assert loaded == game
    # A reloaded game keeps advancing identically.
    assert advance_turn(loaded, turn_stream(loaded)) == advance_turn(game, turn_stream(game))


def test_list_and_delete(tmp_path):
    repo = JsonGameRepository(tmp_path)
    repo.save(_game(2))
    repo.save(_game(10))
    repo.save(_game(1))

    assert repo.list_games() == [dm.GameID(1), dm.GameID(2), dm.GameID(10)]
    assert repo.exists(dm.GameID(2))

    repo.delete(dm.GameID(2))
    assert repo.list_games() == [dm.GameID(1), dm.GameID(10)]
    assert not repo.exists(dm.GameID(2))
    repo.delete(dm.GameID(2))


def test_missing_game_raises(tmp_path):
    repo = JsonGameRepository(tmp_path)
    with pytest.raises(FileNotFoundError):
        repo.load(dm.GameID(5))


def test_no_staging_file_left_behind(tmp_path):
    repo = JsonGameRepository(tmp_path)
    repo.save(_game())
    assert sorted(p.name for p in tmp_path.iterdir()) == ["game_1.json"]
