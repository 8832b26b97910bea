"""Latest-value holder shared by the poller thread and the WebSocket clients."""

import threading


class StatusCache:
    """
    Single writer, many readers.

    publish() swaps the whole snapshot under a condition and wakes any waiter;
    latest() reads the slot without locking, so readers never hold up the writer.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._value = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of publishes so far."""
        return self._generation

    def publish(self, snapshot) -> None:
        with self._cond:
            self._value = snapshot
            self._generation += 1
            self._cond.notify_all()

    def latest(self):
        return self._value

    def wait_for(self, timeout: float, newer_than=None):
        """
        Blocks up to *timeout* seconds and returns the latest value.

        Without *newer_than* it waits for any non-None value; with it, for a
        publish whose generation is greater than *newer_than*.
        """
        if newer_than is None:
            ready = lambda: self._value is not None
        else:
            ready = lambda: self._generation > newer_than

        with self._cond:
            self._cond.wait_for(ready, max(timeout, 0))
            return self._value
