"""Utility helpers shared across the engine."""

from dominion.utils.rng import RngStream, generate_seed

__all__ = ["RngStream", "generate_seed"]
