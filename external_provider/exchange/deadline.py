"""Wall-clock deadline and cancellation signal shared with the launcher."""

from __future__ import annotations

import threading
import time
from typing import Callable


class Deadline:
    """Bound an exchange in time and allow callers to cancel it early."""

    def __init__(
        self,
        timeout: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._timeout = None if timeout is None else max(0.0, timeout)
        self._expires_at = None if self._timeout is None else clock() + self._timeout
        self._cancelled = threading.Event()

    @classmethod
    def after(cls, seconds: float | None) -> "Deadline":
        """Return a deadline expiring *seconds* from now, or never when ``None``."""

        return cls(seconds)

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Signal every waiter bound to this deadline to stop."""

        self._cancelled.set()

    def remaining(self) -> float | None:
        """Seconds left before expiry, ``None`` for an unbounded deadline."""

        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def done(self) -> bool:
        """Return ``True`` once the deadline expired or was cancelled."""

        return self.cancelled or self.expired()


__all__ = ["Deadline"]
