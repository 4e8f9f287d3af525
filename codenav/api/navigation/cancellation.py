"""Cooperative cancellation for graph traversal.

Traversals poll a token on every expansion step and stop with a partial,
flagged result once it reports cancellation.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class CancellationToken:
    """Manually triggered cancellation signal. Safe to cancel from any thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._event.is_set()

    @staticmethod
    def combine(*tokens: Optional["CancellationToken"]) -> "CancellationToken":
        """Create a token that is cancelled when any given token is."""
        members = [t for t in tokens if t is not None]
        if len(members) == 1:
            return members[0]
        return _CompositeToken(members)


class Deadline(CancellationToken):
    """Token that cancels itself once a time budget is spent.

    Args:
        seconds: Budget measured from construction
        clock: Monotonic clock, injectable for tests
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self._clock = clock
        self._expires_at = clock() + seconds

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        """Create a deadline that expires after the given number of seconds."""
        return cls(seconds)

    @property
    def remaining(self) -> float:
        """Seconds left before expiry (never negative)."""
        return max(0.0, self._expires_at - self._clock())

    @property
    def is_cancelled(self) -> bool:
        return super().is_cancelled or self._clock() >= self._expires_at


class _CompositeToken(CancellationToken):
    def __init__(self, members: list[CancellationToken]):
        super().__init__()
        self._members = members

    @property
    def is_cancelled(self) -> bool:
        return super().is_cancelled or any(t.is_cancelled for t in self._members)
