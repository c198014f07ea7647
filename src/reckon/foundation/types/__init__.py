"""Type definitions - single source of truth for all shared types.

Everything else imports shared types from here.
"""

from reckon.foundation.types.config import (
    LoggingConfig,
    StoreConfig,
)
from reckon.foundation.types.result import (
    Problem,
    Result,
    Severity,
    merge_problems,
)

__all__ = [
    # Result types
    "Problem",
    "Result",
    "Severity",
    "merge_problems",
    # Config types
    "LoggingConfig",
    "StoreConfig",
]
