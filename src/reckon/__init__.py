"""Reckon - memoizing evaluation of computation trees.

Build immutable computation nodes, hand them to a Store, and get back
asynchronous result handles. Structurally equal computations are evaluated
at most once; a caching policy decides which results the store keeps.
"""

from reckon.computation import (
    CallContext,
    Computation,
    ComputeConstant,
    ComputeFunction,
    DependencyList,
    FutureResult,
    Progress,
    Store,
    computation,
)
from reckon.foundation.errors import ComputationCancelled, ErrorCode, ReckonError
from reckon.foundation.logging import configure_logging
from reckon.foundation.types import Problem, Result, Severity

__version__ = "0.1.0"

__all__ = [
    # Core
    "Computation",
    "ComputeConstant",
    "ComputeFunction",
    "computation",
    "DependencyList",
    "CallContext",
    "FutureResult",
    "Progress",
    "Store",
    # Types
    "Problem",
    "Result",
    "Severity",
    # Errors
    "ReckonError",
    "ErrorCode",
    "ComputationCancelled",
    # Logging
    "configure_logging",
]
