"""Deterministic random number generation for Nexus Dominion.

Every random draw in the engine comes from an explicit :class:`RngStream`
handed down by the caller. Streams are seeded from game state
(game_id, turn, phase, context) so that:
- Replays are exact: same seed and same state always produce the same turn
- No component constructs its own generator or touches system randomness
- Draw order is part of the contract: phases consume the stream in order

Examples:
    >>> seed = generate_seed(game_id=1, turn=42, phase="turn", context="alpha")
    >>> stream = RngStream(seed)
    >>> stream.roll("2d6")["notation"]
    '2d6'
"""

from __future__ import annotations

import hashlib
import random
import re
from collections.abc import Sequence
from typing import Any, TypeVar

T = TypeVar("T")


def generate_seed(game_id: int, turn: int, phase: str, context: str) -> str:
    """Generate deterministic seed from game state.

    Format: "game_id:turn:phase:context"

    Args:
        game_id: Current game ID (unique per game)
        turn: Turn number the randomness belongs to
        phase: Pipeline stage consuming the stream ('turn', 'galaxy', 'action')
        context: Extra discriminator (game seed, empire id, action counter)

    Returns:
        Seed string for RNG in format "game_id:turn:phase:context"

    Examples:
        >>> generate_seed(1, 42, "turn", "seed-7")
        '1:42:turn:seed-7'

    Raises:
        ValueError: If game_id or turn is negative
    """
    if game_id < 0:
        raise ValueError(f"game_id must be non-negative, got {game_id}")
    if turn < 0:
        raise ValueError(f"turn must be non-negative, got {turn}")

    return f"{game_id}:{turn}:{phase}:{context}"


def _seed_to_int(seed: str) -> int:
    """Convert seed string to a stable 64-bit integer for random.Random().

    Args:
        seed: Seed string

    Returns:
        64-bit integer derived from SHA-256(seed)
    """
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    # Use first 8 bytes for a 64-bit integer
    return int.from_bytes(digest[:8], "big", signed=False)


def _parse_dice_notation(notation: str) -> tuple[int, int]:
    """Parse dice notation like '2d6' into (num_dice, num_sides).

    Raises:
        ValueError: If notation is invalid or values are non-positive
    """
    match = re.match(r"^(\d+)d(\d+)$", notation.lower())
    if not match:
        raise ValueError(
            f"Invalid dice notation: '{notation}'. Expected format: NdM (e.g., '2d6', '1d20')"
        )

    num_dice = int(match.group(1))
    num_sides = int(match.group(2))

    if num_dice <= 0:
        raise ValueError(f"Number of dice must be positive, got {num_dice}")
    if num_sides <= 0:
        raise ValueError(f"Number of sides must be positive, got {num_sides}")

    return num_dice, num_sides


class RngStream:
    """Seeded random stream consumed in a fixed order.

    The stream counts its draws so tests and logs can confirm two replays
    consumed exactly the same amount of randomness.
    """

    __slots__ = ("seed", "draws", "_random")

    def __init__(self, seed: str) -> None:
        self.seed = seed
        self.draws = 0
        self._random = random.Random(_seed_to_int(seed))

    @classmethod
    def for_turn(cls, game_id: int, turn: int, game_seed: str) -> RngStream:
        """Return the single stream used for one whole turn of a game."""

        return cls(generate_seed(game_id, turn, "turn", game_seed))

    def random(self) -> float:
        self.draws += 1
        return self._random.random()

    def uniform(self, low: float, high: float) -> float:
        if low > high:
            raise ValueError(f"low ({low}) cannot be greater than high ({high})")
        return low + (high - low) * self.random()

    def randint(self, min_val: int, max_val: int) -> int:
        if min_val > max_val:
            raise ValueError(f"min_val ({min_val}) cannot be greater than max_val ({max_val})")
        self.draws += 1
        return self._random.randint(min_val, max_val)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""

        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be between 0.0 and 1.0, got {probability}")
        return self.random() < probability

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise ValueError("options list cannot be empty")
        return options[self.randint(0, len(options) - 1)]

    def weighted_choice(self, options: Sequence[T], weights: Sequence[float]) -> T:
        """Pick one option with probability proportional to its weight.

        Zero-weight options are never selected. Raises ``ValueError`` when no
        option carries positive weight.
        """
        if len(options) != len(weights):
            raise ValueError("options and weights must have the same length")
        total = sum(weight for weight in weights if weight > 0)
        if total <= 0:
            raise ValueError("at least one weight must be positive")

        target = self.random() * total
        cumulative = 0.0
        for option, weight in zip(options, weights, strict=True):
            if weight <= 0:
                continue
            cumulative += weight
            if target < cumulative:
                return option
        # Float accumulation can leave target == total; fall back to last positive option
        return next(o for o, w in zip(reversed(options), reversed(weights), strict=True) if w > 0)

    def shuffled(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy of ``items`` (Fisher-Yates on stream draws)."""

        result = list(items)
        for index in range(len(result) - 1, 0, -1):
            swap = self.randint(0, index)
            result[index], result[swap] = result[swap], result[index]
        return result

    def roll(self, notation: str = "2d6") -> dict[str, Any]:
        """Roll dice on the stream.

        Returns:
            Dictionary containing notation, individual rolls, total, and the seed.
        """
        num_dice, num_sides = _parse_dice_notation(notation)
        rolls = [self.randint(1, num_sides) for _ in range(num_dice)]
        return {
            "notation": notation,
            "rolls": rolls,
            "total": sum(rolls),
            "seed": self.seed,
        }
