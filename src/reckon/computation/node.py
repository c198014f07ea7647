"""Computation nodes: immutable, structurally-compared computation trees.

A computation is one step of a larger computation. It owns an ordered tuple
of dependency computations (its positional arguments) and an optional
embedded payload. Two computations are equal iff they are of the same
concrete class, carry equal payloads (compared by type and value), and have
pairwise-equal dependencies, recursively. Object identity never matters, so
a store can recognise a freshly built `ComputeConstant(42)` as the one it
evaluated before.

Nodes are frozen after construction. A node can only reference nodes that
already exist, so computation graphs are acyclic by construction.

Example:
    >>> @computation
    ... def add(a, b):
    ...     return a + b
    >>>
    >>> total = add(ComputeConstant(1), 2)  # plain values become constants
    >>> total == add(1, 2)
    True
    >>> total.clone() is total
    False
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from functools import wraps
from typing import TYPE_CHECKING, Any

from reckon.computation.hashing import compute_digest
from reckon.foundation.errors import ErrorCode, construction_error
from reckon.foundation.types.result import Result

if TYPE_CHECKING:
    from reckon.computation.dependency import DependencyList
    from reckon.computation.progress import Progress


class _Opaque:
    """Wrapper for unhashable payload parts.

    Equal to another _Opaque holding an equal value of the same type; hashes
    by type only, which keeps __hash__ consistent with __eq__.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Opaque) or type(self.value) is not type(other.value):
            return False
        try:
            return bool(self.value == other.value)
        except (TypeError, ValueError):
            # e.g. array-likes whose == is elementwise
            return self.value is other.value

    def __hash__(self) -> int:
        return hash(type(self.value))


def _payload_key(value: Any) -> Any:
    """Normalize a payload into a hashable key that also encodes types.

    Without the type tags 1, 1.0 and True would collide.
    """
    if isinstance(value, (list, tuple)):
        return (type(value), tuple(_payload_key(item) for item in value))
    if isinstance(value, dict):
        return (
            type(value),
            frozenset((_payload_key(k), _payload_key(v)) for k, v in value.items()),
        )
    if isinstance(value, (set, frozenset)):
        return (type(value), frozenset(_payload_key(item) for item in value))
    try:
        hash(value)
    except TypeError:
        return _Opaque(value)
    return (type(value), value)


class Computation[T](ABC):
    """Base class of all computation nodes.

    Subclasses implement evaluate() and put every datum that influences the
    result into the payload or the dependencies; attributes cannot be set
    after construction.
    """

    def __init__(self, *dependencies: Any, payload: Any = None) -> None:
        resolved = tuple(_as_dependency(self, position, dep) for position, dep in enumerate(dependencies))
        key = _payload_key(payload)
        object.__setattr__(self, "_dependencies", resolved)
        object.__setattr__(self, "_payload", payload)
        object.__setattr__(self, "_payload_key", key)
        object.__setattr__(self, "_hash", hash((type(self), key, resolved)))
        object.__setattr__(self, "_depth", 1 + max((dep._depth for dep in resolved), default=-1))
        object.__setattr__(self, "_digest", None)

    @abstractmethod
    def evaluate(self, dependencies: DependencyList, progress: Progress) -> Result[T]:
        """Compute this node's result from its resolved dependency values.

        Must be a pure function of `dependencies` and the payload.

        Args:
            dependencies: Resolved values of self.dependencies, in order.
            progress: Progress sink; poll progress.check_cancelled() in long loops.
        """

    @property
    def dependencies(self) -> tuple[Computation, ...]:
        return self._dependencies

    @property
    def payload(self) -> Any:
        return self._payload

    @property
    def digest(self) -> str:
        """Stable 20-hex structural digest (for logs and events)."""
        if self._digest is None:
            # Bottom-up over the nodes still missing a digest
            for node in _unique_postorder(self, skip=lambda n: n._digest is not None):
                digest = compute_digest(
                    type(node),
                    node._payload,
                    [dependency._digest for dependency in node._dependencies],
                )
                object.__setattr__(node, "_digest", digest)
        return self._digest

    @property
    def depth(self) -> int:
        """Longest dependency path below this node (0 for a leaf)."""
        return self._depth

    @property
    def kind(self) -> str:
        return type(self).__name__

    def walk(self) -> Iterator[Computation]:
        """Yield this node and each distinct transitive dependency once, pre-order."""
        seen: set[int] = set()
        stack: list[Computation] = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            stack.extend(reversed(node._dependencies))

    def clone(self) -> Computation[T]:
        """Deep structural copy: a distinct instance that compares equal.

        Subtrees shared within this tree stay shared in the copy.
        """
        twins: dict[int, Computation] = {}
        for node in _unique_postorder(self):
            twin = object.__new__(type(node))
            twin.__dict__.update(node.__dict__)
            object.__setattr__(
                twin,
                "_dependencies",
                tuple(twins[id(dependency)] for dependency in node._dependencies),
            )
            twins[id(node)] = twin
        return twins[id(self)]

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Computation):
            return NotImplemented
        return _structurally_equal(self, other)

    def __hash__(self) -> int:
        return self._hash

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        parts = [] if self._payload is None else [repr(self._payload)]
        parts.extend(repr(dependency) for dependency in self._dependencies)
        return f"{type(self).__name__}({', '.join(parts)})"


def _as_dependency(owner: Computation, position: int, value: Any) -> Computation:
    if isinstance(value, Computation):
        return value
    if value is None:
        raise construction_error(
            ErrorCode.INVALID_DEPENDENCY,
            node=type(owner).__name__,
            detail=f"dependency {position} is None",
        )
    return ComputeConstant(value)


def _unique_postorder(
    root: Computation,
    skip: Callable[[Computation], bool] | None = None,
) -> list[Computation]:
    """Distinct nodes below and including `root`, dependencies first.

    Nodes matching `skip` are left out together with everything below them.
    Iterative, so arbitrarily deep graphs are fine.
    """
    order: list[Computation] = []
    seen: set[int] = set()
    stack: list[tuple[Computation, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        if id(node) in seen or (skip is not None and skip(node)):
            continue
        seen.add(id(node))
        stack.append((node, True))
        stack.extend((dependency, False) for dependency in reversed(node._dependencies))
    return order


def _structurally_equal(left: Computation, right: Computation) -> bool:
    """Compare two graphs, visiting each pair of nodes at most once.

    Shared subtrees make the path count exponential in depth, while the
    number of distinct node pairs stays small.
    """
    compared: set[tuple[int, int]] = set()
    stack: list[tuple[Computation, Computation]] = [(left, right)]
    while stack:
        a, b = stack.pop()
        if a is b:
            continue
        pair = (id(a), id(b))
        if pair in compared:
            continue
        compared.add(pair)
        if (
            type(a) is not type(b)
            or a._hash != b._hash
            or len(a._dependencies) != len(b._dependencies)
            or a._payload_key != b._payload_key
        ):
            return False
        stack.extend(zip(a._dependencies, b._dependencies))
    return True


class ComputeConstant[T](Computation[T]):
    """A constant computation; the leaves of every computation tree.

    Raises:
        ReckonError: INVALID_CONSTANT if value is None.
    """

    def __init__(self, value: T) -> None:
        if value is None:
            raise construction_error(
                ErrorCode.INVALID_CONSTANT,
                detail="constant computation of None is not allowed",
            )
        super().__init__(payload=value)

    @property
    def value(self) -> T:
        return self._payload

    def evaluate(self, dependencies: DependencyList, progress: Progress) -> Result[T]:
        return Result.of(self._payload)

    def __repr__(self) -> str:
        return f"ComputeConstant({type(self._payload).__name__}, {self._payload!r})"


class ComputeFunction[T](Computation[T]):
    """Applies a pure function to the resolved dependency values.

    The function is the payload, so two nodes are equal only when they hold
    the very same function object (module-level functions, not fresh lambdas).
    Plain return values are wrapped into a present result (None means absent);
    a returned Result is used as is.
    """

    def __init__(self, function: Callable[..., T | Result[T]], *dependencies: Any) -> None:
        if not callable(function):
            raise construction_error(
                ErrorCode.INVALID_FUNCTION,
                detail=f"{function!r} is not callable",
            )
        super().__init__(*dependencies, payload=function)

    @property
    def function(self) -> Callable[..., T | Result[T]]:
        return self._payload

    def evaluate(self, dependencies: DependencyList, progress: Progress) -> Result[T]:
        value = self._payload(*dependencies)
        if isinstance(value, Result):
            return value
        return Result.of_optional(value)

    def __repr__(self) -> str:
        name = getattr(self._payload, "__qualname__", repr(self._payload))
        args = ", ".join(repr(dependency) for dependency in self._dependencies)
        return f"ComputeFunction({name}, {args})" if args else f"ComputeFunction({name})"


def computation[T](function: Callable[..., T]) -> Callable[..., ComputeFunction[T]]:
    """Decorator turning a pure function into a ComputeFunction factory.

    Calling the decorated function builds a node instead of running it;
    arguments become dependencies (non-computations are wrapped as constants).

    Example:
        >>> @computation
        ... def square(x):
        ...     return x * x
        >>> store.compute(square(7)).get()
        49
    """

    @wraps(function)
    def build(*dependencies: Any) -> ComputeFunction[T]:
        return ComputeFunction(function, *dependencies)

    return build
