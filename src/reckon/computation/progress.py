"""Progress reporting and cooperative cancellation for a single computation.

Progress is a unit counter with an optional total. Its fraction never
decreases: starts at 0.0, only grows, and is 1.0 once finished. Readers may
poll it from any thread while the computation runs.

Cancellation is advisory. cancel() only raises a flag; evaluation logic that
wants to stop early polls check_cancelled() at safe points.
"""

import threading

from reckon.foundation.errors import ComputationCancelled


class Progress:
    """Monotonic progress indicator with a cancellation flag.

    Example:
        >>> progress = Progress(total=4)
        >>> progress.advance()
        >>> progress.fraction
        0.25
        >>> progress.set_total(8)  # finer granularity never moves backwards
        >>> progress.fraction
        0.25
    """

    def __init__(self, total: int | None = None) -> None:
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._current = 0
        self._total = total
        self._fraction = 0.0
        self._finished = False

    @property
    def current(self) -> int:
        with self._lock:
            return self._current

    @property
    def total(self) -> int | None:
        with self._lock:
            return self._total

    @property
    def fraction(self) -> float:
        """Completed fraction in [0.0, 1.0]; never decreases."""
        with self._lock:
            return self._fraction

    @property
    def is_finished(self) -> bool:
        with self._lock:
            return self._finished

    def set_total(self, total: int | None) -> None:
        with self._lock:
            if self._finished:
                return
            self._total = total
            self._publish()

    def advance(self, steps: int = 1) -> None:
        if steps < 0:
            raise ValueError("progress cannot go backwards")
        with self._lock:
            if self._finished:
                return
            self._current += steps
            self._publish()

    def set_current(self, current: int) -> None:
        """Move the counter forward to `current`; lower values are ignored."""
        with self._lock:
            if self._finished or current <= self._current:
                return
            self._current = current
            self._publish()

    def finish(self) -> None:
        """Mark as complete (terminal value 1.0)."""
        with self._lock:
            if self._total is not None:
                self._current = max(self._current, self._total)
            self._fraction = 1.0
            self._finished = True

    def _publish(self) -> None:
        # Caller holds the lock
        if not self._total:
            return
        fraction = min(self._current / self._total, 1.0)
        if fraction > self._fraction:
            self._fraction = fraction

    # Cancellation

    def cancel(self) -> None:
        """Request cancellation. Running work is not interrupted."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def check_cancelled(self) -> None:
        """Abort the current evaluation if cancellation was requested.

        Raises:
            ComputationCancelled: If cancel() was called.
        """
        if self._cancelled.is_set():
            raise ComputationCancelled()

    def __repr__(self) -> str:
        state = "finished" if self._finished else f"{self._current}/{self._total}"
        flag = ", cancelled" if self.cancelled else ""
        return f"Progress({state}, {self._fraction:.0%}{flag})"
