"""Foundation domain - base types, config, errors, logging, registry.

This domain contains the building blocks that have no dependencies on the
computation core. Everything else imports from here.
"""

# Config
from reckon.foundation.config import (
    ReckonConfig,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)

# Errors
from reckon.foundation.errors import (
    ComputationCancelled,
    ErrorCode,
    ReckonError,
    config_error,
    construction_error,
    policy_error,
)

# Logging
from reckon.foundation.logging import (
    Verbosity,
    configure_logging,
    log_problem,
    log_problems,
    render_problems,
)

# Registry
from reckon.foundation.registry import ExtensionPoint

# Threading
from reckon.foundation.threading import (
    WorkloadType,
    cpu_count,
    is_free_threaded,
    optimal_workers,
)

# Types
from reckon.foundation.types import (
    LoggingConfig,
    Problem,
    Result,
    Severity,
    StoreConfig,
    merge_problems,
)

__all__ = [
    # Config
    "ReckonConfig",
    "get_config",
    "load_config",
    "reset_config",
    "save_default_config",
    # Errors
    "ComputationCancelled",
    "ErrorCode",
    "ReckonError",
    "config_error",
    "construction_error",
    "policy_error",
    # Logging
    "Verbosity",
    "configure_logging",
    "log_problem",
    "log_problems",
    "render_problems",
    # Registry
    "ExtensionPoint",
    # Threading
    "WorkloadType",
    "cpu_count",
    "is_free_threaded",
    "optimal_workers",
    # Types
    "LoggingConfig",
    "Problem",
    "Result",
    "Severity",
    "StoreConfig",
    "merge_problems",
]
