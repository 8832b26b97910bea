"""
Discovery/poll loop.
Runs on its own thread: finds a player, samples it every interval and
publishes each snapshot to the StatusCache.
"""

import logging
import threading
import time
from enum import Enum

from .backoff import retry_delay
from .locator import Outcome
from .sampler import sample

logger = logging.getLogger(__name__)

# Upper bound for the retry counter (only the first 16 tries change the delay)
_MAX_TRIES_COUNTED = 2 ** 32 - 1


class PollerState(Enum):
    SEARCHING = 'searching'
    ATTACHED = 'attached'


class StatusPoller:
    """Sole writer of the StatusCache."""

    def __init__(self, locator, cache, min_delay=1.0, max_delay=4.0, interval=0.25,
                 sampler=sample, clock=time.monotonic):
        self._locator = locator
        self._cache = cache
        self._sample = sampler
        self._clock = clock
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.interval = interval

        self.player = None
        self.tries = 0
        self._stop = threading.Event()
        self._thread = None

    @property
    def state(self) -> PollerState:
        return PollerState.ATTACHED if self.player is not None else PollerState.SEARCHING

    def _detach(self):
        self.player = None
        self.tries = 0

    def _sample_attached(self):
        snapshot = self._sample(self.player)
        if snapshot is not None:
            logger.debug(f"Updated from player \"{self.player.identity} ({self.player.bus_name})\".")
            self._cache.publish(snapshot)
            return

        self._cache.publish(None)
        logger.info("Could not read player status.")
        if not self.player.is_running():
            logger.info(f"Player \"{self.player.identity}\" is not running! Detaching.")
            self._detach()

    def run_once(self) -> float:
        """Runs one cycle and returns how long to sleep before the next one."""
        started = self._clock()

        if self.player is not None:
            self._sample_attached()

        result = self._locator.locate(self.player)

        if result.outcome is Outcome.FOUND:
            player = result.player
            logger.info(f"Found new player \"{player.identity} ({player.bus_name})\"!")
            self.player = player
            self.tries = 0
        elif result.outcome is Outcome.UNCHANGED:
            logger.debug("Found the same player! Skipping.")
        elif self.player is None:
            self._cache.publish(None)
            delay = retry_delay(self.min_delay, self.max_delay, self.tries)
            self.tries = min(self.tries + 1, _MAX_TRIES_COUNTED)
            logger.info(
                f"Could not find a media player. Been trying for {self.tries} time(s). "
                f"Trying again in {delay:.2f} seconds."
            )
            return delay

        elapsed = self._clock() - started
        return max(0.0, self.interval - elapsed)

    def run(self):
        logger.info("Status poller started")
        while not self._stop.is_set():
            try:
                delay = self.run_once()
            except Exception:
                logger.exception("Unexpected error in status poller")
                delay = self.max_delay
            self._stop.wait(delay)
        logger.info("Status poller stopped")

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name='status-poller', daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
