"""Seeded random stream for matchmaking picks and bot generation.

Wraps Python's random.Random so that ``GameRNG(seed)`` always replays the
same sequence, across processes and restarts.  The run state machine never
draws from it: every run transition is caller-driven.  Only candidate
selection and bot generation consume randomness.
"""

from __future__ import annotations

import hashlib
import math
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """Deterministic RNG that can be forked into independent sub-streams.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    # -- draws ---------------------------------------------------------------

    def random_float(self) -> float:
        """Return a random float in ``[0.0, 1.0)``."""
        return self._rng.random()

    def random_index(self, length: int) -> int:
        """Return ``floor(random_float() * length)`` for a non-empty range."""
        if length <= 0:
            raise ValueError(f"random_index needs a positive length, got {length}")
        return math.floor(self.random_float() * length)

    def random_choice(self, seq: Sequence[T]) -> T:
        """Return a random element from a non-empty sequence."""
        return seq[self.random_index(len(seq))]

    def shuffled(self, seq: Sequence[T]) -> list[T]:
        """Return a shuffled copy of *seq*, leaving the input untouched."""
        items = list(seq)
        self._rng.shuffle(items)
        return items

    # -- forking -------------------------------------------------------------

    def fork(self, name: str) -> GameRNG:
        """Create a child RNG seeded from this RNG's seed and *name*.

        Forking with the same *name* always produces the same child, so a
        driver can hand ``"matchmaking"`` and ``"resolver"`` their own
        streams without one perturbing the other.
        """
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        return GameRNG(int.from_bytes(digest[:4], "big"))

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
