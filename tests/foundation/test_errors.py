"""Tests for the structured error system."""

import pytest

from reckon.foundation.errors import (
    ComputationCancelled,
    ErrorCode,
    ReckonError,
    config_error,
    construction_error,
    policy_error,
)


class TestErrorCode:
    """Tests for error code metadata."""

    @pytest.mark.parametrize(
        ("code", "category"),
        [
            (ErrorCode.INVALID_CONSTANT, "construction"),
            (ErrorCode.RESULT_ABSENT, "result"),
            (ErrorCode.STORE_CLOSED, "store"),
            (ErrorCode.POLICY_UNKNOWN, "policy"),
            (ErrorCode.CONFIG_INVALID, "config"),
        ],
    )
    def test_category(self, code: ErrorCode, category: str) -> None:
        """Categories follow the thousands digit."""
        assert code.category == category

    def test_fatal(self) -> None:
        """Construction, policy and config errors are fatal."""
        assert ErrorCode.POLICY_MISSING.is_fatal
        assert ErrorCode.INVALID_DEPENDENCY.is_fatal
        assert not ErrorCode.RESULT_ABSENT.is_fatal
        assert not ErrorCode.STORE_CLOSED.is_fatal


class TestReckonError:
    """Tests for ReckonError formatting."""

    def test_str(self) -> None:
        """str() carries the error id and formatted message."""
        error = ReckonError(
            ErrorCode.POLICY_UNKNOWN,
            context={"policy": "cache_most", "known": "cache_all"},
        )
        assert str(error) == "[RK-4002] Unknown caching policy 'cache_most'. Known: cache_all"

    def test_missing_context_keys(self) -> None:
        """Unformattable templates fall back to the raw template."""
        error = ReckonError(ErrorCode.STORE_CLOSED)
        assert "{node}" in error.message

    def test_recovery_hints(self) -> None:
        """Hints are formatted with the context."""
        error = policy_error(ErrorCode.POLICY_UNKNOWN, policy="x", known="cache_all, cache_none")
        assert "Use one of: cache_all, cache_none" in error.recovery_hints

    def test_to_dict(self) -> None:
        """Serializes for logging."""
        data = construction_error(ErrorCode.INVALID_CONSTANT, detail="None").to_dict()
        assert data["error_id"] == "RK-1001"
        assert data["category"] == "construction"
        assert data["fatal"] is True
        assert data["message"] == "Invalid constant: None"

    def test_config_error_keeps_cause(self) -> None:
        """Causes are preserved."""
        cause = ValueError("bad")
        error = config_error(ErrorCode.CONFIG_INVALID, key="store.policy", detail="bad", cause=cause)
        assert error.cause is cause
        assert error.error_id == "RK-5001"

    def test_cancelled_is_not_reckon_error(self) -> None:
        """Cancellation is a separate internal signal."""
        assert not issubclass(ComputationCancelled, ReckonError)
