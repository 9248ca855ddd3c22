from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    """The slice of a random generator the combat core depends on."""

    def random(self) -> float:  # pragma: no cover - Protocol
        ...

    def uniform(self, a: float, b: float) -> float:  # pragma: no cover - Protocol
        ...

    def percent(self) -> float:  # pragma: no cover - Protocol
        ...


@dataclass
class RNG:
    """
    Deterministic-friendly RNG wrapper around random.Random.

    Every damage and mitigation roll goes through an instance of this class, so
    a fixed seed replays a whole fight. It never touches Python's global RNG.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)
        if self.seed is not None:
            logger.debug("Initialized RNG with deterministic seed=%s", self.seed)

    def random(self) -> float:
        """Return the next random float in the range [0.0, 1.0)."""
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        """Return a random float N such that a <= N <= b."""
        return self._rng.uniform(a, b)

    def percent(self) -> float:
        """Return a random float in the range [0.0, 100.0)."""
        return self._rng.random() * 100

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self._rng.randrange(len(seq))]

    def state(self):
        """Return the internal PRNG state for debugging or replay."""
        return self._rng.getstate()

    def set_state(self, state) -> None:
        """Restore the internal PRNG state."""
        self._rng.setstate(state)
