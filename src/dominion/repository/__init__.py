"""Persistence adapters for game snapshots."""

from dominion.repository.json_store import JsonGameRepository

__all__ = ["JsonGameRepository"]
