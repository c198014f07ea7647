"""Explicit call context for nested computations.

A CallContext records how deeply the current call is nested inside other
computations' evaluation logic. A caller outside any evaluation is at depth 0
(top level). While a store evaluates a computation, the context for
everything that computation resolves or computes is `context.nested(node)`.

The context travels two ways:
- explicitly, as `Store.compute(node, context=...)` and `DependencyList.context`
- implicitly, through a ContextVar that the store sets around each evaluation,
  so a plain `store.compute()` issued from inside evaluation logic (on any
  worker thread) still sees the right nesting.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reckon.computation.node import Computation


@dataclass(frozen=True, slots=True)
class CallContext:
    """Nesting token threaded through evaluation.

    Attributes:
        depth: 0 for calls made by external callers, +1 per enclosing evaluation.
        root: Digest of the top-level computation this call belongs to.
    """

    depth: int = 0
    root: str | None = None

    @property
    def is_top_level(self) -> bool:
        return self.depth == 0

    def nested(self, computation: Computation) -> CallContext:
        """Context for calls made while `computation` evaluates."""
        return CallContext(depth=self.depth + 1, root=self.root or computation.digest)


TOP_LEVEL = CallContext()

_current_context: ContextVar[CallContext] = ContextVar("reckon_call_context", default=TOP_LEVEL)


def current_context() -> CallContext:
    """The call context of the running code (TOP_LEVEL outside any evaluation)."""
    return _current_context.get()


@contextmanager
def entered(context: CallContext) -> Iterator[CallContext]:
    """Make `context` current for the duration of the block."""
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)
