"""Memoized evaluation of structurally-compared computation trees.

This package provides:
- Immutable computation nodes compared by structure, not identity
- A single-flight store: at most one evaluation per distinct computation
- Pluggable caching policies (cache_all, cache_none, cache_top_level)
- Asynchronous result handles with monotonic progress and cancellation
- Store events for cache observability

Example:
    >>> from reckon.computation import Store, computation
    >>>
    >>> @computation
    ... def add(a, b):
    ...     return a + b
    >>>
    >>> with Store("cache_top_level") as store:
    ...     handle = store.compute(add(add(1, 2), 3))
    ...     print(handle.get())
    6
"""

# Context
from reckon.computation.context import (
    TOP_LEVEL,
    CallContext,
    current_context,
)

# Dependencies
from reckon.computation.dependency import DependencyList

# Events
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

# Handles
from reckon.computation.future import FutureResult, FutureState

# Hashing
from reckon.computation.hashing import DIGEST_LENGTH, compute_digest

# Nodes
from reckon.computation.node import (
    Computation,
    ComputeConstant,
    ComputeFunction,
    computation,
)

# Policies
from reckon.computation.policy import (
    CACHE_ALL,
    CACHE_NONE,
    CACHE_TOP_LEVEL,
    POLICIES,
    CacheAll,
    CacheNone,
    CacheTopLevel,
    CachingPolicy,
    resolve_policy,
)

# Progress
from reckon.computation.progress import Progress

# Store
from reckon.computation.store import Store, StoreStats

__all__ = [
    # Context
    "TOP_LEVEL",
    "CallContext",
    "current_context",
    # Dependencies
    "DependencyList",
    # Events
    "CacheHit",
    "CacheMiss",
    "EntryCommitted",
    "EntryEvicted",
    "EntryRejected",
    "EvaluationFinished",
    "StoreCleared",
    "StoreEvent",
    # Handles
    "FutureResult",
    "FutureState",
    # Hashing
    "DIGEST_LENGTH",
    "compute_digest",
    # Nodes
    "Computation",
    "ComputeConstant",
    "ComputeFunction",
    "computation",
    # Policies
    "CACHE_ALL",
    "CACHE_NONE",
    "CACHE_TOP_LEVEL",
    "POLICIES",
    "CacheAll",
    "CacheNone",
    "CacheTopLevel",
    "CachingPolicy",
    "resolve_policy",
    # Progress
    "Progress",
    # Store
    "Store",
    "StoreStats",
]
