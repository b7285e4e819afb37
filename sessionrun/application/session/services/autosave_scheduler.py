"""
Debounced autosave.

Every input change reschedules one deferred save; only the last change in
a burst is written. `flush` is used before completion and on exit, where
the write must happen now and on the caller's thread.
"""

import threading
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_AUTOSAVE_DELAY_SECONDS = 3.0


class AutosaveScheduler:
    """One pending save at a time; owned by a single RunController."""

    def __init__(
        self,
        save: Callable[[], object],
        delay_seconds: float = DEFAULT_AUTOSAVE_DELAY_SECONDS,
    ) -> None:
        if delay_seconds <= 0:
            raise ValueError("Autosave delay must be positive")
        self._save = save
        self.delay_seconds = delay_seconds
        self._lock = threading.Lock()
        # Held for the whole of a save; deferred and flushed saves never overlap
        self._save_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        # Bumped on every schedule/cancel so a timer that already fired can
        # tell it has been superseded.
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        """Cancel any pending save and start a new delay."""
        with self._lock:
            self._cancel_locked()
            generation = self._generation
            timer = threading.Timer(self.delay_seconds, self._run_deferred, args=(generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def flush(self) -> None:
        """
        Cancel any pending save and save synchronously. Errors propagate.

        A deferred save already in progress is waited for, so the flushed
        write is always the last one.
        """
        self.cancel()
        with self._save_lock:
            self._save()

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1

    def _run_deferred(self, generation: int) -> None:
        with self._save_lock:
            with self._lock:
                if generation != self._generation:
                    return
                self._timer = None
            try:
                self._save()
            except Exception:
                # Nobody waits on a timer thread; the next save carries the same state
                logger.exception("autosave_failed")
