"""Nexus Dominion turn simulation and combat engine."""

__version__ = "0.1.0"
