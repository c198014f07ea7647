"""FutureResult: a handle on an in-flight or completed computation.

States: PENDING -> COMPLETED, exactly once. Any number of readers can poll
progress, block for the final Result, await it from asyncio, or register
callbacks; none of them re-triggers the computation.

A pending handle is also a unit of work that is claimed exactly once. The
store's worker pool claims it normally, but a thread that blocks on an
unclaimed handle claims it and runs it inline instead of waiting. Workers
blocked on dependencies therefore never starve the pool.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from reckon.computation.context import TOP_LEVEL, CallContext
from reckon.computation.progress import Progress
from reckon.foundation.types.result import Result

if TYPE_CHECKING:
    from reckon.computation.node import Computation

logger = logging.getLogger(__name__)


class FutureState(Enum):
    """Lifecycle state of a FutureResult."""

    PENDING = "pending"
    """Submitted; result not yet available."""

    COMPLETED = "completed"
    """Terminal; result available."""


class FutureResult[T]:
    """Asynchronous result of a computation.

    Example:
        >>> handle = store.compute(ComputeConstant(42))
        >>> handle.result()
        Result.of(42, problems=[])
        >>> handle.progress.fraction
        1.0
    """

    def __init__(
        self,
        computation: Computation[T] | None = None,
        *,
        context: CallContext = TOP_LEVEL,
        runner: Callable[[FutureResult[T]], None] | None = None,
        progress: Progress | None = None,
    ) -> None:
        self._computation = computation
        self._context = context
        self._runner = runner
        self._progress = progress or Progress()
        self._condition = threading.Condition()
        self._state = FutureState.PENDING
        self._result: Result[T] | None = None
        self._claimed = False
        self._callbacks: list[Callable[[FutureResult[T]], None]] = []

    @classmethod
    def completed(cls, result: Result[T], computation: Computation[T] | None = None) -> FutureResult[T]:
        """An already-completed handle wrapping `result`."""
        handle = cls(computation)
        handle._claimed = True
        handle._progress.finish()
        handle._complete(result)
        return handle

    @property
    def computation(self) -> Computation[T] | None:
        return self._computation

    @property
    def context(self) -> CallContext:
        """The call context the computation evaluates in."""
        return self._context

    @property
    def progress(self) -> Progress:
        return self._progress

    @property
    def state(self) -> FutureState:
        with self._condition:
            return self._state

    def done(self) -> bool:
        with self._condition:
            return self._state is FutureState.COMPLETED

    def result(self, timeout: float | None = None) -> Result[T]:
        """Block until the computation completes and return its Result.

        If the work has not been picked up by a worker yet, it runs inline in
        the calling thread (and `timeout` does not apply to it).

        Raises:
            TimeoutError: If the result is not available within `timeout` seconds.
        """
        if self._runner is not None and self._claim():
            self._runner(self)
        with self._condition:
            if not self._condition.wait_for(self._is_completed, timeout):
                raise TimeoutError(f"computation not completed within {timeout}s")
            assert self._result is not None
            return self._result

    def get(self, timeout: float | None = None) -> T:
        """Block for the result and return its value.

        Raises:
            ReckonError: RESULT_ABSENT if the computation produced no value.
        """
        return self.result(timeout).get()

    async def wait_async(self) -> Result[T]:
        """Await the Result from asyncio without blocking the event loop."""
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[Result[T]] = loop.create_future()

        def _resolve(result: Result[T]) -> None:
            if not waiter.done():
                waiter.set_result(result)

        def _on_done(handle: FutureResult[T]) -> None:
            loop.call_soon_threadsafe(_resolve, handle._result)

        self.add_done_callback(_on_done)
        return await waiter

    def __await__(self):
        return self.wait_async().__await__()

    def cancel(self) -> bool:
        """Request cooperative cancellation.

        Returns:
            False if the computation had already completed.
        """
        with self._condition:
            if self._state is FutureState.COMPLETED:
                return False
        self._progress.cancel()
        return True

    @property
    def cancelled(self) -> bool:
        return self._progress.cancelled

    def add_done_callback(self, callback: Callable[[FutureResult[T]], None]) -> None:
        """Call `callback(handle)` on completion (immediately if already done)."""
        with self._condition:
            if self._state is not FutureState.COMPLETED:
                self._callbacks.append(callback)
                return
        self._invoke(callback)

    # Store-facing protocol

    def _claim(self) -> bool:
        """Take ownership of running the work; True for exactly one caller."""
        with self._condition:
            if self._claimed:
                return False
            self._claimed = True
            return True

    def _complete(self, result: Result[T]) -> bool:
        """Transition to COMPLETED. Later calls are ignored."""
        with self._condition:
            if self._state is FutureState.COMPLETED:
                return False
            self._result = result
            self._state = FutureState.COMPLETED
            callbacks, self._callbacks = self._callbacks, []
            self._condition.notify_all()
        for callback in callbacks:
            self._invoke(callback)
        return True

    def _is_completed(self) -> bool:
        return self._state is FutureState.COMPLETED

    def _invoke(self, callback: Callable[[FutureResult[T]], Any]) -> None:
        try:
            callback(self)
        except Exception:
            logger.exception("FutureResult callback %r failed", callback)

    def __repr__(self) -> str:
        name = self._computation.kind if self._computation is not None else "?"
        return f"FutureResult({name}, {self._state.value}, {self._progress.fraction:.0%})"
