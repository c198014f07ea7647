"""Store: memoizing evaluator keyed by structural equality.

The store maps computations (by structural equality, so two separately built
but equal trees share an entry) to FutureResult handles.

Guarantees:
- At most one concurrent evaluation per distinct computation. Looking up,
  joining an in-flight evaluation and creating a new one happen in one
  critical section, so racing callers always receive the same handle.
- Entries are write-once. put() never overwrites; only remove() and clear()
  evict, and eviction never disturbs evaluations already running.
- Evaluation failures are data. Exceptions from evaluation logic become
  absent results carrying an ERROR problem; nothing raises across compute().

Execution model:
    compute() returns immediately; the evaluation runs on a worker pool.
    Dependencies are resolved sequentially in declaration order, each through
    the store itself (so shared subtrees are evaluated once). A thread that
    waits on a handle nobody has started runs it inline, which keeps workers
    that block on dependencies from starving the pool.

Example:
    >>> with Store("cache_all") as store:
    ...     handle = store.compute(ComputeConstant(42))
    ...     assert handle.get() == 42
    ...     assert store.compute(ComputeConstant(42)) is handle
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Generator
from concurrent.futures import ThreadPoolExecutor
from contextvars import copy_context
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from reckon.computation.context import CallContext, current_context, entered
from reckon.computation.dependency import DependencyList
from reckon.computation.events import (
    CacheHit,
    CacheMiss,
    EntryCommitted,
    EntryEvicted,
    EntryRejected,
    EvaluationFinished,
    StoreCleared,
    StoreEvent,
)
from reckon.computation.future import FutureResult
from reckon.computation.node import Computation
from reckon.computation.policy import CachingPolicy, resolve_policy
from reckon.foundation.errors import (
    ComputationCancelled,
    ErrorCode,
    ReckonError,
    construction_error,
)
from reckon.foundation.threading import WorkloadType, optimal_workers
from reckon.foundation.types.result import Problem, Result, merge_problems

if TYPE_CHECKING:
    from reckon.foundation.config import ReckonConfig

logger = logging.getLogger(__name__)

EventCallback = Callable[[StoreEvent], None]


@dataclass(slots=True)
class StoreStats:
    """Counters for cache behaviour."""

    hits: int = 0
    """Submissions answered by a committed entry or an in-flight handle."""

    misses: int = 0
    """Submissions that started a new evaluation."""

    evaluations: int = 0
    """Evaluations that finished."""

    commits: int = 0
    """Entries committed (by policy or put())."""

    rejections: int = 0
    """Evaluations the policy declined to commit."""

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "hit_rate": self.hit_rate}


@dataclass(slots=True)
class _Frame:
    """One evaluation on an executing thread's frame stack."""

    handle: FutureResult
    steps: Generator[FutureResult, Result, Result]
    started: float = field(default_factory=time.perf_counter)


def _cancelled_problem(computation: Computation) -> Problem:
    error = ReckonError(ErrorCode.COMPUTATION_CANCELLED, context={"node": computation.kind})
    return Problem.from_exception(error)


class Store:
    """Memoizing computation store with a pluggable caching policy.

    Args:
        policy: A CachingPolicy or its identifier (cache_all, cache_none,
            cache_top_level). Required.
        max_workers: Worker pool size. None = adaptive.
        thread_name_prefix: Prefix for worker thread names.
        event_callback: Receives StoreEvents; failures are logged and ignored.

    Raises:
        ReckonError: POLICY_MISSING / POLICY_UNKNOWN for a bad policy.
    """

    def __init__(
        self,
        policy: CachingPolicy | str | None,
        *,
        max_workers: int | None = None,
        thread_name_prefix: str = "reckon",
        event_callback: EventCallback | None = None,
    ) -> None:
        self._policy = resolve_policy(policy)
        self._max_workers = max_workers or optimal_workers(WorkloadType.MIXED)
        self._event_callback = event_callback
        self._lock = threading.Lock()
        self._entries: dict[Computation, FutureResult] = {}
        self._in_flight: dict[Computation, FutureResult] = {}
        self._stats = StoreStats()
        self._closed = False
        self._pool = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        logger.debug(
            "Store started: policy=%s, workers=%d",
            self._policy.identifier,
            self._max_workers,
        )

    @classmethod
    def from_config(
        cls,
        config: ReckonConfig | None = None,
        *,
        event_callback: EventCallback | None = None,
    ) -> Store:
        """Build a store from configuration (the global config by default)."""
        if config is None:
            from reckon.foundation.config import get_config

            config = get_config()
        return cls(
            config.store.policy,
            max_workers=config.store.max_workers,
            thread_name_prefix=config.store.thread_name_prefix,
            event_callback=event_callback,
        )

    @property
    def policy(self) -> CachingPolicy:
        return self._policy

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def stats(self) -> StoreStats:
        """Snapshot of the cache counters."""
        with self._lock:
            return StoreStats(**asdict(self._stats))

    @property
    def closed(self) -> bool:
        return self._closed

    # Public contract

    def compute[T](
        self,
        computation: Computation[T],
        *,
        context: CallContext | None = None,
    ) -> FutureResult[T]:
        """Return the handle for `computation`, starting it if needed.

        Args:
            computation: The node to evaluate.
            context: Call context of the caller. Defaults to the current
                context: top level outside any evaluation, nested inside one.

        Raises:
            ReckonError: STORE_CLOSED for top-level calls after close();
                INVALID_DEPENDENCY if `computation` is not a Computation.
        """
        if not isinstance(computation, Computation):
            raise construction_error(
                ErrorCode.INVALID_DEPENDENCY,
                node="Store.compute",
                detail=f"expected a Computation, got {type(computation).__name__}",
            )
        context = context or current_context()
        handle, created = self._acquire(computation, context)
        if created:
            try:
                self._pool.submit(copy_context().run, self._run, handle)
            except RuntimeError as e:
                # Pool already shut down; whoever waits on the handle runs it inline
                if not context.is_top_level:
                    return handle
                raise ReckonError(
                    ErrorCode.STORE_CLOSED,
                    context={"node": computation.kind},
                    cause=e,
                ) from e
        return handle

    def has(self, computation: Computation) -> bool:
        """Whether a committed entry exists for `computation`."""
        with self._lock:
            return computation in self._entries

    def get[T](self, computation: Computation[T]) -> Result[FutureResult[T]]:
        """The committed handle for `computation`, or an absent result."""
        with self._lock:
            handle = self._entries.get(computation)
        if handle is None:
            return Result.empty()
        return Result.of(handle)

    def put[T](
        self,
        computation: Computation[T],
        result: FutureResult[T] | Result[T],
    ) -> bool:
        """Commit a handle (or a plain Result) for `computation`.

        Returns:
            False, without overwriting, if an entry already exists.
        """
        handle = result if isinstance(result, FutureResult) else FutureResult.completed(result, computation)
        with self._lock:
            if computation in self._entries:
                return False
            self._entries[computation] = handle
            self._stats.commits += 1
        logger.debug("Put %s (%s)", computation.digest, computation.kind)
        self._emit(EntryCommitted(computation.digest, computation.kind, "put"))
        return True

    def remove(self, computation: Computation) -> bool:
        """Evict one entry. Returns False if there was none."""
        with self._lock:
            handle = self._entries.pop(computation, None)
            if handle is None:
                return False
            if self._in_flight.get(computation) is handle:
                del self._in_flight[computation]
        logger.debug("Evicted %s (%s)", computation.digest, computation.kind)
        self._emit(EntryEvicted(computation.digest, computation.kind))
        return True

    def clear(self) -> None:
        """Evict every entry.

        Running evaluations continue and complete their existing handles;
        they are just no longer found by later lookups.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._in_flight.clear()
        logger.debug("Cleared %d entries", count)
        self._emit(StoreCleared(count))

    def keys(self) -> tuple[Computation, ...]:
        """Committed computations, in commit order."""
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, computation: object) -> bool:
        with self._lock:
            return computation in self._entries

    # Lifecycle

    def close(self, wait: bool = True) -> None:
        """Stop accepting top-level computations and shut the worker pool down.

        Work already submitted still completes: evaluations keep resolving
        their dependencies and nested computations after close().
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._pool.shutdown(wait=wait)
        logger.debug("Store closed")

    def __enter__(self) -> Store:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # Internals

    def _acquire(self, computation: Computation, context: CallContext) -> tuple[FutureResult, bool]:
        """Find or create the handle for `computation` in one critical section.

        Returns:
            (handle, created). When created is True the caller must arrange
            for the handle to run (pool submission or inline).

        Raises:
            ReckonError: STORE_CLOSED for a top-level request after close().
        """
        events: list[StoreEvent] = []
        with self._lock:
            if self._closed and context.is_top_level:
                raise ReckonError(ErrorCode.STORE_CLOSED, context={"node": computation.kind})

            handle = self._entries.get(computation)
            if handle is not None:
                self._stats.hits += 1
                events.append(CacheHit(computation.digest, computation.kind, committed=True))
                created = False
            else:
                handle = self._in_flight.get(computation)
                if handle is not None:
                    # Joining an evaluation that was started uncommitted
                    self._stats.hits += 1
                    events.append(CacheHit(computation.digest, computation.kind, committed=False))
                    if self._policy.should_cache(computation, context):
                        self._entries[computation] = handle
                        self._stats.commits += 1
                        events.append(EntryCommitted(computation.digest, computation.kind, self._policy.identifier))
                    created = False
                else:
                    handle = FutureResult(
                        computation,
                        context=context.nested(computation),
                        runner=self._execute,
                    )
                    self._in_flight[computation] = handle
                    self._stats.misses += 1
                    events.append(CacheMiss(computation.digest, computation.kind, context.depth))
                    if self._policy.should_cache(computation, context):
                        self._entries[computation] = handle
                        self._stats.commits += 1
                        events.append(EntryCommitted(computation.digest, computation.kind, self._policy.identifier))
                    else:
                        self._stats.rejections += 1
                        events.append(EntryRejected(computation.digest, computation.kind, self._policy.identifier))
                    created = True

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s %s (%s) depth=%d",
                "Miss" if created else "Hit",
                computation.digest,
                computation.kind,
                context.depth,
            )
        for event in events:
            self._emit(event)
        return handle, created

    def _run(self, handle: FutureResult) -> None:
        """Worker-pool entry point."""
        if handle._claim():
            self._execute(handle)

    def _execute(self, handle: FutureResult) -> None:
        """Evaluate a claimed handle and complete it. Never raises.

        Unclaimed dependencies are evaluated in this thread on an explicit
        frame stack rather than by recursion, so chain length is unbounded.
        """
        frames = [_Frame(handle, self._steps(handle))]
        sent: Result | None = None
        while frames:
            frame = frames[-1]
            try:
                with entered(frame.handle.context):
                    needed = frame.steps.send(sent)
            except StopIteration as stop:
                result = stop.value
            except Exception as e:
                logger.exception("Unexpected failure evaluating %s", frame.handle.computation.digest)
                result = Result.empty(Problem.from_exception(e))
            else:
                if needed._claim():
                    frames.append(_Frame(needed, self._steps(needed)))
                    sent = None
                else:
                    sent = needed.result()
                continue
            frames.pop()
            self._finish(frame, result)
            sent = result

    def _finish(self, frame: _Frame, result: Result) -> None:
        handle = frame.handle
        computation = handle.computation
        with self._lock:
            if self._in_flight.get(computation) is handle:
                del self._in_flight[computation]
            self._stats.evaluations += 1

        handle.progress.finish()
        self._emit(
            EvaluationFinished(
                computation.digest,
                computation.kind,
                present=result.is_present,
                problem_count=len(result.problems),
                elapsed_ms=(time.perf_counter() - frame.started) * 1000,
            )
        )
        handle._complete(result)

    def _steps(self, handle: FutureResult) -> Generator[FutureResult, Result, Result]:
        """Evaluation of one handle, yielding each dependency handle it waits on.

        The driver sends back the dependency's Result.
        """
        computation = handle.computation
        progress = handle.progress
        dependencies = computation.dependencies
        progress.set_total(len(dependencies) + 1)

        values: list[Any] = []
        problems: list[Problem] = []
        for dependency in dependencies:
            if progress.cancelled:
                return Result.empty(problems, _cancelled_problem(computation))
            dependency_handle, _ = self._acquire(dependency, handle.context)
            dependency_result = yield dependency_handle
            problems.extend(dependency_result.problems)
            if dependency_result.is_empty:
                return Result.empty(problems)
            values.append(dependency_result.get())
            progress.advance()

        if progress.cancelled:
            return Result.empty(problems, _cancelled_problem(computation))

        resolved = DependencyList(
            values,
            computations=dependencies,
            problems=problems,
            context=handle.context,
            store=self,
        )
        try:
            result = computation.evaluate(resolved, progress)
        except ComputationCancelled:
            return Result.empty(problems, _cancelled_problem(computation))
        except Exception as e:
            logger.debug("Evaluation of %s raised", computation.digest, exc_info=True)
            error = ReckonError(
                ErrorCode.EVALUATION_FAILED,
                context={"node": computation.kind, "detail": str(e) or type(e).__name__},
                cause=e,
            )
            return Result.empty(problems, Problem(error.message, exception=e))

        if not isinstance(result, Result):
            result = Result.of_optional(result)
        merged = merge_problems(problems, result.problems)
        if result.is_present:
            return Result.of(result.get(), merged)
        return Result.empty(merged)

    def _emit(self, event: StoreEvent) -> None:
        if self._event_callback is None:
            return
        try:
            self._event_callback(event)
        except Exception:
            logger.exception("Store event callback failed for %s", type(event).__name__)

    def __repr__(self) -> str:
        return f"Store(policy={self._policy!r}, entries={len(self)})"
