"""Configuration type definitions - single source of truth for all config classes."""


from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StoreConfig:
    """Configuration for the computation store."""

    policy: str | None = "cache_all"
    """Identifier of the caching policy (cache_all, cache_none, cache_top_level).

    None leaves the store unconfigured, which is rejected at store startup.
    """

    max_workers: int | None = None
    """Worker pool size. None = adaptive (see foundation.threading)."""

    thread_name_prefix: str = "reckon"
    """Name prefix for worker threads (visible in debug logs)."""


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for logging and problem reporting."""

    level: str | None = None
    """Log level or verbosity name (DEBUG, INFO, WARNING, ...). None = default."""

    debug: bool = False
    """Enable DEBUG level with detailed format."""
