"""Store events for cache observability.

A store hands these to its optional `event_callback`, which makes cache
behaviour visible without the core printing anything.

Example:
    >>> events = []
    >>> store = Store("cache_all", event_callback=events.append)
    >>> _ = store.compute(ComputeConstant(42)).result()
    >>> [type(e).__name__ for e in events]
    ['CacheMiss', 'EntryCommitted', 'EvaluationFinished']
"""

from dataclasses import dataclass, field
from time import time
from typing import Any


@dataclass(frozen=True, slots=True)
class CacheHit:
    """A submission was answered by an existing handle.

    Attributes:
        digest: Structural digest of the computation.
        kind: Computation class name.
        committed: True if the handle came from the cache, False if it was
            joined while still in flight.
        timestamp: When the hit occurred.
    """

    digest: str
    kind: str
    committed: bool
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "cache_hit",
            "digest": self.digest,
            "kind": self.kind,
            "committed": self.committed,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class CacheMiss:
    """A submission started a fresh evaluation."""

    digest: str
    kind: str
    depth: int
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "cache_miss",
            "digest": self.digest,
            "kind": self.kind,
            "depth": self.depth,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class EntryCommitted:
    """The policy approved an entry and it was committed."""

    digest: str
    kind: str
    policy: str
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "entry_committed",
            "digest": self.digest,
            "kind": self.kind,
            "policy": self.policy,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class EntryRejected:
    """The policy declined to commit an entry; it still evaluates."""

    digest: str
    kind: str
    policy: str
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "entry_rejected",
            "digest": self.digest,
            "kind": self.kind,
            "policy": self.policy,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class EvaluationFinished:
    """An evaluation completed (successfully or not)."""

    digest: str
    kind: str
    present: bool
    problem_count: int
    elapsed_ms: float
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "evaluation_finished",
            "digest": self.digest,
            "kind": self.kind,
            "present": self.present,
            "problem_count": self.problem_count,
            "elapsed_ms": self.elapsed_ms,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class EntryEvicted:
    """A single entry was removed."""

    digest: str
    kind: str
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "entry_evicted",
            "digest": self.digest,
            "kind": self.kind,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class StoreCleared:
    """All entries were removed."""

    entries: int
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "event": "store_cleared",
            "entries": self.entries,
            "timestamp": self.timestamp,
        }


StoreEvent = CacheHit | CacheMiss | EntryCommitted | EntryRejected | EvaluationFinished | EntryEvicted | StoreCleared
