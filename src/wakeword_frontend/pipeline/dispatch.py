"""Fire-and-forget delivery of results to consumer callbacks.

The capture worker submits (callback, payload) pairs with put_nowait;
a single consumer thread drains them in FIFO order. When the queue is
full the item is dropped (at-most-once delivery) rather than stalling
the worker.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_STOP = object()


class EventDispatcher:
    """Bounded queue + one consumer thread."""

    def __init__(self, max_pending: int = 64, name: str = "wakeword-dispatch"):
        if max_pending < 1:
            raise ValueError("max_pending must be >= 1")
        self.max_pending = max_pending
        self.name = name
        self._queue: Optional[queue.Queue] = None
        self._thread: Optional[threading.Thread] = None
        self._abandon: Optional[threading.Event] = None
        self._lock = threading.Lock()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._queue = queue.Queue(maxsize=self.max_pending)
            self._abandon = threading.Event()
            self._thread = threading.Thread(
                target=self._drain,
                args=(self._queue, self._abandon),
                name=self.name,
                daemon=True,
            )
            self._thread.start()

    def submit(self, callback: Callable[[Any], None], payload: Any) -> bool:
        """Queue callback(payload) without blocking. Returns False if dropped."""
        if not self.running:
            self.start()
        try:
            self._queue.put_nowait((callback, payload))
        except queue.Full:
            logger.warning("Consumer queue full (%d pending); dropped %r", self.max_pending, payload)
            return False
        return True

    def close(self, timeout: Optional[float] = None) -> None:
        """Deliver what is already queued, then stop the consumer thread."""
        with self._lock:
            thread, q, abandon = self._thread, self._queue, self._abandon
            self._thread = None
        if thread is None:
            return
        try:
            q.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("Consumer did not drain within %.1fs; abandoning pending items", timeout)
            # The consumer exits after its current callback; the sentinel only
            # matters if the queue emptied in the meantime.
            abandon.set()
            try:
                q.put_nowait(_STOP)
            except queue.Full:
                pass
            return
        if thread is not threading.current_thread():
            thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @staticmethod
    def _drain(q: queue.Queue, abandon: threading.Event) -> None:
        while True:
            item = q.get()
            if item is _STOP or abandon.is_set():
                return
            callback, payload = item
            try:
                callback(payload)
            except Exception:
                logger.exception("Consumer callback %r failed", callback)
