"""One-shot refresh timer used by the consumer session controller."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol


class TimerHandle(Protocol):
    """Subset of :class:`asyncio.TimerHandle` used by the scheduler."""

    def cancel(self) -> None:
        ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


def _loop_call_later(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class PollScheduler:
    """Owns at most one pending refresh timer.

    Every schedule cancels the previous timer first, so overlapping polling
    loops cannot accumulate when the interval changes or manual and
    automatic refreshes interleave.
    """

    def __init__(self, call_later: Optional[CallLater] = None, logger: Optional[logging.Logger] = None) -> None:
        self._call_later = call_later or _loop_call_later
        self._pending: Optional[TimerHandle] = None
        self._generation = 0
        self.logger = logger or logging.getLogger(__name__)

    @property
    def pending(self) -> bool:
        """True while a timer is waiting to fire."""

        return self._pending is not None

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""

        self._generation += 1
        if self._pending is None:
            return
        self._pending.cancel()
        self._pending = None
        self.logger.debug("Cancelled scheduled refresh", extra={"event": "refresh_cancelled"})

    def schedule_if_needed(self, interval_ms: int, is_manual: bool, on_fire: Callable[[], Any]) -> bool:
        """Arrange the next automatic refresh.

        Manual refreshes never auto-repeat. A non-positive interval only
        clears any pending timer. Returns whether a timer was scheduled.
        """

        if is_manual:
            return False
        self.cancel()
        if interval_ms <= 0:
            return False

        generation = self._generation

        def fire() -> None:
            # a timer cancelled after it was already queued must not fire
            if generation != self._generation:
                return
            self._pending = None
            on_fire()

        self._pending = self._call_later(interval_ms / 1000.0, fire)
        self.logger.debug(
            "Scheduled refresh in %sms", interval_ms,
            extra={"event": "refresh_scheduled", "interval_ms": interval_ms},
        )
        return True


__all__ = ["PollScheduler", "TimerHandle", "CallLater"]
