"""Tests for Progress."""

import threading

import pytest

from reckon.computation import Progress
from reckon.foundation.errors import ComputationCancelled


class TestProgress:
    """Tests for monotonic progress."""

    def test_starts_at_zero(self) -> None:
        """A fresh indicator reports 0.0."""
        progress = Progress()
        assert progress.fraction == 0.0
        assert not progress.is_finished

    def test_advance(self) -> None:
        """Advancing against a total moves the fraction."""
        progress = Progress(total=4)
        progress.advance()
        assert progress.fraction == 0.25
        progress.advance(2)
        assert progress.fraction == 0.75

    def test_no_total_stays_at_zero(self) -> None:
        """Without a total, only finish() moves the fraction."""
        progress = Progress()
        progress.advance(10)
        assert progress.fraction == 0.0
        progress.finish()
        assert progress.fraction == 1.0

    def test_growing_total_never_decreases(self) -> None:
        """Raising the total does not move the fraction backwards."""
        progress = Progress(total=2)
        progress.advance()
        progress.set_total(10)
        assert progress.fraction == 0.5
        progress.advance(6)
        assert progress.fraction == 0.7

    def test_set_current_ignores_lower(self) -> None:
        """set_current only moves forward."""
        progress = Progress(total=10)
        progress.set_current(5)
        progress.set_current(2)
        assert progress.current == 5
        assert progress.fraction == 0.5

    def test_negative_advance_rejected(self) -> None:
        """Negative steps are a programming error."""
        with pytest.raises(ValueError):
            Progress(total=2).advance(-1)

    def test_capped_at_one(self) -> None:
        """Overshooting the total caps at 1.0."""
        progress = Progress(total=2)
        progress.advance(5)
        assert progress.fraction == 1.0

    def test_finish_is_terminal(self) -> None:
        """After finish() nothing changes the fraction."""
        progress = Progress(total=4)
        progress.finish()
        progress.set_total(100)
        progress.advance()
        assert progress.fraction == 1.0
        assert progress.is_finished

    def test_concurrent_readers_see_monotonic_values(self) -> None:
        """Polling while another thread advances never observes a decrease."""
        progress = Progress(total=1000)
        seen: list[float] = []
        done = threading.Event()

        def reader() -> None:
            while not done.is_set():
                seen.append(progress.fraction)

        thread = threading.Thread(target=reader)
        thread.start()
        for _ in range(1000):
            progress.advance()
        done.set()
        thread.join()

        assert seen == sorted(seen)
        assert progress.fraction == 1.0


class TestCancellation:
    """Tests for the cancellation flag."""

    def test_check_cancelled(self) -> None:
        """check_cancelled raises only after cancel()."""
        progress = Progress()
        progress.check_cancelled()
        progress.cancel()
        assert progress.cancelled
        with pytest.raises(ComputationCancelled):
            progress.check_cancelled()
