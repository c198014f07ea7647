"""Free-threading detection and adaptive worker sizing.

Python 3.13+ supports free-threading (PEP 703) which disables the GIL.
The store's worker pool is sized from the runtime mode:

When free-threading is enabled:
- CPU-bound evaluations truly run in parallel
- Higher worker counts are beneficial

When GIL is enabled (standard Python):
- CPU-bound evaluations serialize at the GIL
- Keep workers lower to reduce context-switch overhead
"""


import os
import sys
from enum import Enum
from functools import cache


class WorkloadType(Enum):
    """Type of work being parallelized."""

    IO_BOUND = "io"
    """Network, file I/O - benefits from threads regardless of GIL."""

    CPU_BOUND = "cpu"
    """Computation - only benefits from threads if GIL-free."""

    MIXED = "mixed"
    """Both I/O and CPU - use adaptive strategy."""


@cache
def is_free_threaded() -> bool:
    """Check if running on a free-threaded (no-GIL) Python build.

    Detection methods (in order):
    1. sys._is_gil_enabled() - Python 3.13+ direct API
    2. sysconfig Py_GIL_DISABLED - build-time flag
    3. PYTHON_GIL=0 environment variable
    """
    if hasattr(sys, "_is_gil_enabled"):
        return not sys._is_gil_enabled()

    try:
        import sysconfig
        gil_disabled = sysconfig.get_config_var("Py_GIL_DISABLED")
        if gil_disabled:
            return bool(int(gil_disabled))
    except (ImportError, ValueError, TypeError):
        pass

    return os.environ.get("PYTHON_GIL", "1") == "0"


@cache
def cpu_count() -> int:
    """Get available CPU cores."""
    try:
        # Container-aware where supported
        return len(os.sched_getaffinity(0))
    except (AttributeError, OSError):
        return os.cpu_count() or 4


def optimal_workers(workload: WorkloadType = WorkloadType.MIXED) -> int:
    """Get optimal worker count for given workload type.

    Strategy:
    - IO_BOUND: High concurrency (4x CPU) - threads wait on I/O
    - CPU_BOUND: Match CPU count if free-threaded, else minimal
    - MIXED: Adaptive based on GIL state
    """
    cpus = cpu_count()
    free_threaded = is_free_threaded()

    if workload == WorkloadType.IO_BOUND:
        return cpus * 4

    elif workload == WorkloadType.CPU_BOUND:
        if free_threaded:
            return cpus
        else:
            return 2

    else:  # MIXED
        if free_threaded:
            return cpus * 2
        else:
            return cpus
