"""Deterministic random number sources for Warlords.

Every stochastic rule function receives an explicit :class:`RandomSource`
instead of reaching for the module-level ``random`` functions.  Production
code derives a source from game state (game id, year, month, context) so a
turn can be replayed exactly; tests inject :class:`FixedRandom` to script the
individual draws.

Examples:
    >>> seed = generate_seed("g1", 190, 3, "ai_turn")
    >>> seed
    'g1:190:03:ai_turn'
    >>> rng = seeded_random(seed)
    >>> 1 <= rng.randint(1, 5) <= 5
    True
"""

from __future__ import annotations

import hashlib
import random
from collections import deque
from collections.abc import Iterable
from typing import Protocol


class RandomSource(Protocol):
    """Subset of :class:`random.Random` used by the rules layer."""

    def random(self) -> float:
        """Return a float uniformly drawn from ``[0, 1)``."""
        ...

    def randint(self, a: int, b: int) -> int:
        """Return an integer uniformly drawn from ``[a, b]``."""
        ...

    def uniform(self, a: float, b: float) -> float:
        """Return a float uniformly drawn from ``[a, b]``."""
        ...


def generate_seed(game_id: str, year: int, month: int, context: str) -> str:
    """Generate deterministic seed from game state.

    Format: "game_id:year:month:context" with a zero-padded month.

    Args:
        game_id: Identifier of the running game
        year: Current in-game year
        month: Current in-game month (1-12)
        context: What the draws are for (e.g., 'ai_turn', 'campaign_luoyang')

    Returns:
        Seed string for :func:`seeded_random`

    Raises:
        ValueError: If year is negative or month is outside 1-12
    """
    if year < 0:
        raise ValueError(f"year must be non-negative, got {year}")
    if not 1 <= month <= 12:
        raise ValueError(f"month must be within 1-12, got {month}")

    return f"{game_id}:{year}:{month:02d}:{context}"


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


def seeded_random(seed: str) -> random.Random:
    """Return a ``random.Random`` seeded deterministically from ``seed``."""

    return random.Random(_seed_to_int(seed))


class FixedRandom:
    """Random source that replays scripted values.

    ``floats`` feed :meth:`random`, ``ints`` feed :meth:`randint` and
    ``uniforms`` feed :meth:`uniform`.  Scripted integers and uniforms are
    validated against the requested range so a test cannot silently inject
    an impossible draw.
    """

    def __init__(
        self,
        *,
        floats: Iterable[float] = (),
        ints: Iterable[int] = (),
        uniforms: Iterable[float] = (),
    ) -> None:
        self._floats: deque[float] = deque(floats)
        self._ints: deque[int] = deque(ints)
        self._uniforms: deque[float] = deque(uniforms)

    def random(self) -> float:
        if not self._floats:
            raise RuntimeError("FixedRandom has no scripted random() values left")
        value = self._floats.popleft()
        if not 0.0 <= value < 1.0:
            raise ValueError(f"scripted random() value {value} outside [0, 1)")
        return value

    def randint(self, a: int, b: int) -> int:
        if not self._ints:
            raise RuntimeError("FixedRandom has no scripted randint() values left")
        value = self._ints.popleft()
        if not a <= value <= b:
            raise ValueError(f"scripted randint() value {value} outside [{a}, {b}]")
        return value

    def uniform(self, a: float, b: float) -> float:
        if not self._uniforms:
            raise RuntimeError("FixedRandom has no scripted uniform() values left")
        value = self._uniforms.popleft()
        if not min(a, b) <= value <= max(a, b):
            raise ValueError(f"scripted uniform() value {value} outside [{a}, {b}]")
        return value

    @property
    def exhausted(self) -> bool:
        """True when every scripted value has been consumed."""

        return not (self._floats or self._ints or self._uniforms)
