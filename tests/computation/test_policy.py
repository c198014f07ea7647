"""Tests for caching policies and their registry."""

import pytest

from reckon.computation import (
    CACHE_ALL,
    CACHE_NONE,
    CACHE_TOP_LEVEL,
    POLICIES,
    TOP_LEVEL,
    CachingPolicy,
    CallContext,
    ComputeConstant,
    resolve_policy,
)
from reckon.foundation.errors import ErrorCode, ReckonError

NODE = ComputeConstant(1)
NESTED = TOP_LEVEL.nested(NODE)


class TestPolicies:
    """Tests for the built-in policies."""

    def test_cache_all(self) -> None:
        """Commits at every depth."""
        assert CACHE_ALL.should_cache(NODE, TOP_LEVEL)
        assert CACHE_ALL.should_cache(NODE, NESTED)

    def test_cache_none(self) -> None:
        """Commits nothing."""
        assert not CACHE_NONE.should_cache(NODE, TOP_LEVEL)
        assert not CACHE_NONE.should_cache(NODE, NESTED)

    def test_cache_top_level(self) -> None:
        """Commits only calls from outside any evaluation."""
        assert CACHE_TOP_LEVEL.should_cache(NODE, TOP_LEVEL)
        assert not CACHE_TOP_LEVEL.should_cache(NODE, NESTED)


class TestCallContext:
    """Tests for nesting tokens."""

    def test_nested(self) -> None:
        """Nesting increments depth and records the root."""
        assert TOP_LEVEL.is_top_level
        assert NESTED.depth == 1
        assert NESTED.root == NODE.digest
        assert not NESTED.is_top_level

    def test_root_is_kept(self) -> None:
        """Deeper nesting keeps the outermost root."""
        deeper = NESTED.nested(ComputeConstant(2))
        assert deeper.depth == 2
        assert deeper.root == NODE.digest

    def test_equality(self) -> None:
        """Contexts are values."""
        assert CallContext() == TOP_LEVEL


class TestResolvePolicy:
    """Tests for resolve_policy."""

    @pytest.mark.parametrize(
        ("identifier", "expected"),
        [
            ("cache_all", CACHE_ALL),
            ("cache_none", CACHE_NONE),
            ("cache_top_level", CACHE_TOP_LEVEL),
        ],
    )
    def test_by_identifier(self, identifier: str, expected: CachingPolicy) -> None:
        """Identifiers resolve to the registered singletons."""
        assert resolve_policy(identifier) is expected

    def test_instance_passes_through(self) -> None:
        """Policy instances are used as given."""
        assert resolve_policy(CACHE_NONE) is CACHE_NONE

    def test_missing(self) -> None:
        """No policy at all is a fatal configuration error."""
        with pytest.raises(ReckonError) as excinfo:
            resolve_policy(None)
        assert excinfo.value.code is ErrorCode.POLICY_MISSING
        assert excinfo.value.is_fatal

    def test_unknown(self) -> None:
        """Unknown identifiers list the known ones."""
        with pytest.raises(ReckonError) as excinfo:
            resolve_policy("cache_most")
        assert excinfo.value.code is ErrorCode.POLICY_UNKNOWN
        assert "cache_most" in str(excinfo.value)
        assert "cache_top_level" in str(excinfo.value)

    def test_custom_policy_registration(self) -> None:
        """Custom policies resolve once registered."""

        class CacheShallow(CachingPolicy):
            identifier = "cache_shallow"

            def should_cache(self, computation, context) -> bool:
                return context.depth <= 1

        policy = CacheShallow()
        assert POLICIES.add(policy.identifier, policy)
        try:
            assert resolve_policy("cache_shallow") is policy
        finally:
            POLICIES.remove(policy.identifier)
