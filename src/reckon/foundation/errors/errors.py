"""Reckon Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Recovery hints
- Context for debugging

Only a handful of situations raise: invalid node construction, policy and
configuration problems, submissions to a closed store, and reading the value
of an absent result. Everything that happens while a computation evaluates is
reported as data (an absent Result carrying problems) instead.
"""


from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Construction errors
        2xxx - Result errors
        3xxx - Store errors
        4xxx - Policy/Extension errors
        5xxx - Configuration errors
    """

    # 1xxx - Construction Errors
    INVALID_CONSTANT = 1001
    INVALID_DEPENDENCY = 1002
    INVALID_FUNCTION = 1003

    # 2xxx - Result Errors
    RESULT_ABSENT = 2001

    # 3xxx - Store Errors
    STORE_CLOSED = 3001
    COMPUTATION_CANCELLED = 3002
    EVALUATION_FAILED = 3003

    # 4xxx - Policy/Extension Errors
    POLICY_MISSING = 4001
    POLICY_UNKNOWN = 4002
    EXTENSION_NOT_FOUND = 4101
    EXTENSION_DUPLICATE = 4102

    # 5xxx - Configuration Errors
    CONFIG_INVALID = 5001
    CONFIG_PARSE_ERROR = 5002

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "construction",
            2: "result",
            3: "store",
            4: "policy",
            5: "config",
        }.get(prefix, "unknown")

    @property
    def is_fatal(self) -> bool:
        """Whether this error aborts before anything enters the computation graph."""
        return self.category in ("construction", "policy", "config")


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    # Construction errors
    ErrorCode.INVALID_CONSTANT: "Invalid constant: {detail}",
    ErrorCode.INVALID_DEPENDENCY: "Invalid dependency for '{node}': {detail}",
    ErrorCode.INVALID_FUNCTION: "Invalid function for computation: {detail}",

    # Result errors
    ErrorCode.RESULT_ABSENT: "Result has no value ({count} problem(s) attached).",

    # Store errors
    ErrorCode.STORE_CLOSED: "Store is closed; cannot compute '{node}'.",
    ErrorCode.COMPUTATION_CANCELLED: "Computation '{node}' was cancelled.",
    ErrorCode.EVALUATION_FAILED: "Evaluation of '{node}' failed: {detail}",

    # Policy/Extension errors
    ErrorCode.POLICY_MISSING: "No caching policy configured for the store.",
    ErrorCode.POLICY_UNKNOWN: "Unknown caching policy '{policy}'. Known: {known}",
    ErrorCode.EXTENSION_NOT_FOUND: "No extension found for identifier '{identifier}'.",
    ErrorCode.EXTENSION_DUPLICATE: "Extension '{identifier}' is already registered.",

    # Config errors
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",
    ErrorCode.CONFIG_PARSE_ERROR: "Failed to parse configuration file '{path}': {detail}",
}


# Recovery hints
RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.INVALID_CONSTANT: [
        "Constants must carry a real value; use Result.empty() for 'nothing'",
    ],
    ErrorCode.POLICY_MISSING: [
        "Pass policy=... to Store()",
        "Set store.policy in .reckon/config.yaml",
        "Set RECKON_STORE_POLICY=cache_all",
    ],
    ErrorCode.POLICY_UNKNOWN: [
        "Use one of: {known}",
        "Register custom policies with POLICIES.add()",
    ],
    ErrorCode.STORE_CLOSED: [
        "Create a fresh Store, or compute before calling close()",
    ],
    ErrorCode.CONFIG_INVALID: [
        "Check the value of '{key}' in .reckon/config.yaml",
        "Check RECKON_* environment variables",
    ],
}


class ReckonError(Exception):
    """Base error type for all Reckon errors.

    Provides structured error information for:
    - Programmatic error handling (code)
    - User-friendly display (message)
    - Recovery hints (recovery_hints)
    - Debugging (context, cause)

    Example:
        >>> err = ReckonError(
        ...     code=ErrorCode.POLICY_UNKNOWN,
        ...     context={"policy": "cache_most", "known": "cache_all"},
        ... )
        >>> print(err)
        [RK-4002] Unknown caching policy 'cache_most'. Known: cache_all
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def recovery_hints(self) -> list[str]:
        """Get recovery suggestions for this error."""
        formatted = []
        for hint in RECOVERY_HINTS.get(self.code, []):
            try:
                formatted.append(hint.format(**self.context))
            except KeyError:
                formatted.append(hint)
        return formatted

    @property
    def is_fatal(self) -> bool:
        return self.code.is_fatal

    @property
    def category(self) -> str:
        """Get the error category."""
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'RK-1001')."""
        return f"RK-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"ReckonError(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "fatal": self.is_fatal,
            "recovery_hints": self.recovery_hints,
            "context": self.context,
        }


class ComputationCancelled(Exception):
    """Raised by Progress.check_cancelled() to abort an evaluation cooperatively.

    The store catches it and turns it into an absent result with a
    "cancelled" problem; it never escapes the store.
    """


# Convenience factory functions

def construction_error(
    code: ErrorCode,
    detail: str = "",
    node: str = "",
    cause: Exception | None = None,
) -> ReckonError:
    """Create a node construction error."""
    return ReckonError(
        code=code,
        context={"detail": detail, "node": node},
        cause=cause,
    )


def policy_error(code: ErrorCode, policy: str = "", known: str = "") -> ReckonError:
    """Create a caching policy error."""
    return ReckonError(code=code, context={"policy": policy, "known": known})


def config_error(
    code: ErrorCode,
    key: str = "",
    detail: str = "",
    path: str = "",
    cause: Exception | None = None,
) -> ReckonError:
    """Create a configuration error."""
    return ReckonError(
        code=code,
        context={"key": key, "detail": detail, "path": path},
        cause=cause,
    )
