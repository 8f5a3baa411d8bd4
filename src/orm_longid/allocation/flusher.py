from typing import Optional
import logging
import threading

from ..errors import InvalidStateError
from .allocator import LongIdAllocator

logger = logging.getLogger(__name__)


class PeriodicFlusher:
    """
    Flushes an allocator to its storage on a background thread.

    A failed flush is logged and retried on the next tick; the counters are
    untouched by a flush so retrying is always safe. ``stop`` performs a
    final flush unless ``flush_on_stop`` is disabled.

    At most one flush loop runs per flusher. When ``stop`` times out while a
    tick is still writing, the thread handle is kept, the final flush is
    skipped and ``start`` refuses until that thread has exited.
    """

    def __init__(
        self,
        allocator: LongIdAllocator,
        interval_seconds: float = 60.0,
        *,
        flush_on_stop: bool = True,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.allocator = allocator
        self.interval_seconds = interval_seconds
        self.flush_on_stop = flush_on_stop
        self.flush_count = 0
        self.failure_count = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            if not self._stop.is_set():
                return
            raise InvalidStateError(
                "Previous flusher thread is still finishing a flush; call stop() again"
            )
        # each run gets its own event so a stale thread can never be revived
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop,),
            name="longid-flusher",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Periodic flusher started (every {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(
                    f"Periodic flusher did not stop within {timeout}s; skipping final flush"
                )
                return
            self._thread = None
        if self.flush_on_stop:
            self.allocator.flush_to_storage()
            self.flush_count += 1
        logger.info("Periodic flusher stopped")

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_seconds):
            try:
                self.allocator.flush_to_storage()
                self.flush_count += 1
            except Exception as e:
                self.failure_count += 1
                logger.error(f"Periodic flush failed: {e}", exc_info=True)

    def __enter__(self) -> "PeriodicFlusher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.stop()
            return
        # keep the body's exception; a failing final flush is only logged
        try:
            self.stop()
        except Exception as e:
            self.failure_count += 1
            logger.error(
                f"Final flush failed while handling {exc_type.__name__}: {e}",
                exc_info=True,
            )
