"""Coalescing write scheduler for autosave.

Every schedule() replaces the pending item and pushes the due time out by
the delay, so a burst of edits ends in exactly one write of the last state.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


class AutosaveScheduler:
    def __init__(
        self,
        write: Callable[[Any], None],
        delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._write = write
        self._delay = delay
        self._clock = clock
        self._pending: Any = None
        self._due_at: float | None = None

    @property
    def pending(self) -> Any:
        return self._pending

    @property
    def due_at(self) -> float | None:
        return self._due_at

    def schedule(self, item: Any) -> None:
        """Cancel any pending write and reschedule with the newest item."""
        self._pending = item
        self._due_at = self._clock() + self._delay

    def cancel(self) -> None:
        self._pending = None
        self._due_at = None

    def poll(self) -> bool:
        """Write if the quiet period has elapsed. Returns True when a write happened."""
        if self._due_at is None or self._clock() < self._due_at:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Write the pending item now, if any.

        A failed write stays pending and is retried after another delay.
        """
        if self._due_at is None:
            return False
        item = self._pending
        try:
            self._write(item)
        except OSError as exc:
            logger.error("Autosave failed, will retry: %s", exc)
            self._due_at = self._clock() + self._delay
            return False
        self.cancel()
        return True

    async def run(self, interval: float = 0.1) -> None:
        """Poll until cancelled, flushing whatever is still pending on the way out."""
        try:
            while True:
                self.poll()
                await asyncio.sleep(interval)
        finally:
            self.flush()
