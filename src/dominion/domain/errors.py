"""Error taxonomy for the action boundary."""

from __future__ import annotations


class ActionError(ValueError):
    """Base class for rejected actions; no state has been mutated."""

    def __init__(self, code: str, detail: str) -> None:
        super().__init__(detail)
        self.code = code
        self.detail = detail


class ValidationError(ActionError):
    """Malformed or out-of-range input (bad ids, negative counts, unknown enums)."""


class PreconditionError(ActionError):
    """Well-formed request that breaks a game rule (self attack, queue full, ...)."""
