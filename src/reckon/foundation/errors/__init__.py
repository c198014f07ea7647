"""Error system for Reckon."""

from reckon.foundation.errors.errors import (
    ERROR_MESSAGES,
    RECOVERY_HINTS,
    ComputationCancelled,
    ErrorCode,
    ReckonError,
    config_error,
    construction_error,
    policy_error,
)

__all__ = [
    "ErrorCode",
    "ERROR_MESSAGES",
    "RECOVERY_HINTS",
    "ComputationCancelled",
    "ReckonError",
    "config_error",
    "construction_error",
    "policy_error",
]
