"""Caching policies: which computations a store commits.

A policy decides at commit time, from the call context alone, whether a
computation's handle is persisted in the store. Policies never look inside
the computation; they are orthogonal to what is computed.

Built-in policies, registered in POLICIES under their identifiers:
- cache_all: commit everything that reaches the store
- cache_none: commit nothing; the store degenerates to a pass-through
- cache_top_level: commit only calls made from outside any evaluation, so
  transient intermediate nodes don't flood the cache
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from reckon.computation.context import CallContext
from reckon.foundation.errors import ErrorCode, policy_error
from reckon.foundation.registry import ExtensionPoint

if TYPE_CHECKING:
    from reckon.computation.node import Computation


class CachingPolicy(ABC):
    """Strategy deciding whether a computation is committed to the store."""

    identifier: ClassVar[str]

    @abstractmethod
    def should_cache(self, computation: Computation, context: CallContext) -> bool:
        """Whether to commit `computation`, submitted under `context`."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CacheAll(CachingPolicy):
    identifier = "cache_all"

    def should_cache(self, computation: Computation, context: CallContext) -> bool:
        return True


class CacheNone(CachingPolicy):
    identifier = "cache_none"

    def should_cache(self, computation: Computation, context: CallContext) -> bool:
        return False


class CacheTopLevel(CachingPolicy):
    """Commit only outermost calls; nested sub-computations stay transient."""

    identifier = "cache_top_level"

    def should_cache(self, computation: Computation, context: CallContext) -> bool:
        return context.is_top_level


CACHE_ALL = CacheAll()
CACHE_NONE = CacheNone()
CACHE_TOP_LEVEL = CacheTopLevel()

POLICIES: ExtensionPoint[CachingPolicy] = ExtensionPoint("caching policy")
for _policy in (CACHE_ALL, CACHE_NONE, CACHE_TOP_LEVEL):
    POLICIES.add(_policy.identifier, _policy)
del _policy


def resolve_policy(policy: CachingPolicy | str | None) -> CachingPolicy:
    """Resolve a policy instance or identifier.

    Raises:
        ReckonError: POLICY_MISSING for None, POLICY_UNKNOWN for an
            identifier nothing is registered under.
    """
    if policy is None:
        raise policy_error(ErrorCode.POLICY_MISSING)
    if isinstance(policy, CachingPolicy):
        return policy
    found = POLICIES.get(policy)
    if found.is_empty:
        raise policy_error(
            ErrorCode.POLICY_UNKNOWN,
            policy=str(policy),
            known=", ".join(POLICIES.identifiers()),
        )
    return found.get()
