"""Deferred actions that belong to a view and die with it."""

import logging
import time
from collections.abc import Callable

log = logging.getLogger(__name__)


class ScheduledAction:
    """Run ``callback`` once, ``delay`` seconds from now, unless cancelled.

    Nothing runs in the background: the owner polls ``fire_if_due()`` (or
    waits out ``remaining()`` first). A view cancels its actions when it is
    torn down, so a redirect never fires after the user has left.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ):
        self._callback = callback
        self._clock = clock
        self.deadline = clock() + delay
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    @property
    def due(self) -> bool:
        return self.pending and self._clock() >= self.deadline

    def remaining(self) -> float:
        if not self.pending:
            return 0.0
        return max(0.0, self.deadline - self._clock())

    def cancel(self) -> None:
        if self.pending:
            log.debug("Scheduled action cancelled")
        self.cancelled = True

    def fire_if_due(self) -> bool:
        """Run the callback if the deadline has passed. Returns True if it ran."""
        if not self.due:
            return False
        self.fired = True
        self._callback()
        return True
