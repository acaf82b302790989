"""
Request pacing for the wiki API.

The wiki asks bots to keep to roughly one request per second. RequestPacer
hands out a single slot per interval; every network call goes through
``wait()`` first, so a different scheduling policy can be dropped in without
touching the call sites.
"""

import logging
import threading
import time
from collections.abc import Callable

log = logging.getLogger(__name__)


class RequestPacer:
    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval < 0:
            raise ValueError(f"Pacing interval must be >= 0, got {interval}")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_slot: float | None = None

    def wait(self) -> float:
        """Block until the next slot is free. Returns the time spent sleeping."""
        with self._lock:
            slept = 0.0
            if self._last_slot is not None:
                remaining = self._last_slot + self.interval - self._clock()
                if remaining > 0:
                    log.debug("Pacing wiki request: sleeping %.2fs", remaining)
                    self._sleep(remaining)
                    slept = remaining
            self._last_slot = self._clock()
            return slept
