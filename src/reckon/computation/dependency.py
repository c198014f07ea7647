"""Resolved dependency values handed to Computation.evaluate()."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, overload

from reckon.computation.context import TOP_LEVEL, CallContext
from reckon.foundation.types.result import Problem

if TYPE_CHECKING:
    from reckon.computation.future import FutureResult
    from reckon.computation.node import Computation
    from reckon.computation.store import Store


class DependencyList(Sequence[Any]):
    """Ordered, read-only view of a node's resolved dependency values.

    Position i holds the value of `computations[i]`. Also exposes the
    problems reported while resolving them and the call context of the
    evaluating node, so evaluation logic can run nested computations
    through the same store.
    """

    __slots__ = ("_values", "_computations", "_problems", "_context", "_store")

    def __init__(
        self,
        values: Iterable[Any],
        computations: Iterable[Computation] = (),
        problems: Iterable[Problem] = (),
        context: CallContext = TOP_LEVEL,
        store: Store | None = None,
    ) -> None:
        self._values = tuple(values)
        self._computations = tuple(computations)
        self._problems = tuple(problems)
        self._context = context
        self._store = store

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Any, ...]: ...

    def __getitem__(self, index: int | slice) -> Any:
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    @property
    def values(self) -> tuple[Any, ...]:
        return self._values

    @property
    def computations(self) -> tuple[Computation, ...]:
        """The dependency nodes these values were resolved from."""
        return self._computations

    @property
    def problems(self) -> tuple[Problem, ...]:
        """Problems carried by the dependency results, in order."""
        return self._problems

    @property
    def context(self) -> CallContext:
        """Call context for work started from inside the evaluating node."""
        return self._context

    def compute(self, computation: Computation) -> FutureResult:
        """Run a nested computation through the owning store.

        The nested call is marked as such, so a top-level-only policy will
        not commit it.

        Raises:
            RuntimeError: If these values were not produced by a store.
        """
        if self._store is None:
            raise RuntimeError("DependencyList is not bound to a store")
        return self._store.compute(computation, context=self._context)

    def __repr__(self) -> str:
        return f"DependencyList({list(self._values)!r})"
