"""Free-threading utilities for Reckon."""

from reckon.foundation.threading.freethreading import (
    WorkloadType,
    cpu_count,
    is_free_threaded,
    optimal_workers,
)

__all__ = [
    "WorkloadType",
    "cpu_count",
    "is_free_threaded",
    "optimal_workers",
]
