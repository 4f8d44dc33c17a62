"""Seedable RNG wrapper for reproducible map generation."""

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """Wrapper around Python's random.Random.

    All randomness in the engine goes through this class so that a seed
    reproduces the same map and start placement. Passing ``seed=None`` gives
    an unseeded generator for live games.
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize RNG with an optional seed.

        Args:
            seed: Integer seed, or None to seed from system entropy
        """
        self.seed = seed
        self.rng = random.Random(seed)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        return self.rng.choice(seq)

    def shuffled(self, seq: Sequence[T]) -> list[T]:
        """Return a shuffled copy, leaving the input untouched.

        Args:
            seq: Sequence to copy and shuffle

        Returns:
            New list with the same elements in random order
        """
        items = list(seq)
        self.rng.shuffle(items)
        return items
