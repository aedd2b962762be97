"""Random sources injected into workflows that need a reproducible seed."""

from __future__ import annotations

import random
import threading
from typing import Optional, Protocol

_MAX_SEED = 2**31 - 1


class RandomSource(Protocol):
    """Anything that can produce an integer seed."""

    def next(self) -> int: ...


class ThreadSafeRandom:
    """A ``random.Random`` guarded by a lock; deterministic when seeded."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    def next(self, upper: int = _MAX_SEED) -> int:
        """Return a non-negative integer below ``upper``."""
        with self._lock:
            return self._random.randrange(upper)
