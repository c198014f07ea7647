"""Logging configuration and problem reporting for Reckon.

The computation core never prints. It accumulates Problem records on results
and leaves presentation to this module:

- log_problems(): route problems to a stdlib logger per severity
- render_problems(): render problems as a rich table for terminals

Logging setup has sensible defaults:
- Default: WARNING level (quiet operation)
- debug=True: DEBUG level with full context
- RECKON_DEBUG=true or RECKON_LOG_LEVEL=DEBUG env vars: Override for CI/scripting
- logging.level / logging.debug from the Reckon config (file or RECKON_LOGGING_*)

Usage:
    from reckon.foundation.logging import configure_logging
    configure_logging(debug=True)

Priority for level resolution (highest to lowest):
    1. Explicit `level` parameter (programmatic override)
    2. RECKON_LOG_LEVEL env var (any level or verbosity name)
    3. RECKON_DEBUG=true env var (simple boolean)
    4. `debug=True` parameter
    5. Config `logging.level` (.reckon/config.yaml or RECKON_LOGGING_LEVEL)
    6. Config `logging.debug` (.reckon/config.yaml or RECKON_LOGGING_DEBUG)
    7. WARNING (default)
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable
from enum import Enum

from rich.console import Console
from rich.table import Table
from rich.text import Text

from reckon.foundation.config import get_config
from reckon.foundation.types.result import Problem, Result, Severity

# Format includes module path for tracing issues
_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(threadName)s %(message)s"
_DEFAULT_FORMAT = "%(name)s: %(message)s"

# Noisy libraries we want to quiet even in debug mode
_NOISY_LOGGERS = (
    "asyncio",
    "concurrent.futures",
    "markdown_it",
)

# Custom level for progress messages, between DEBUG (10) and INFO (20)
PROGRESS = 15
logging.addLevelName(PROGRESS, "PROGRESS")


class Verbosity(Enum):
    """Logging verbosity.

    Each verbosity (save for NONE and ALL) is a type of message; used as a
    threshold it includes every type listed above it.
    """

    NONE = "none"
    """No messages at all."""

    MESSAGE = "message"
    """Regular messages for explicit console output."""

    ERROR = "error"
    """Critical exceptions and errors."""

    WARNING = "warning"
    """Non-critical warnings."""

    INFO = "info"
    """High-level information."""

    DEBUG = "debug"
    """Low-level information."""

    PROGRESS = "progress"
    """Progress of long-running jobs."""

    ALL = "all"
    """Every message."""

    @classmethod
    def of(cls, name: str) -> Result[Verbosity]:
        """Parse a verbosity name (case-insensitive)."""
        try:
            return Result.of(cls(name.strip().lower()))
        except ValueError:
            known = ", ".join(v.value for v in cls)
            return Result.empty(Problem.error(f"unknown verbosity '{name}' (known: {known})"))

    @property
    def level(self) -> int:
        """Equivalent stdlib logging threshold."""
        return _VERBOSITY_LEVELS[self]


_VERBOSITY_LEVELS: dict[Verbosity, int] = {
    Verbosity.NONE: logging.CRITICAL + 10,
    Verbosity.MESSAGE: logging.CRITICAL,
    Verbosity.ERROR: logging.ERROR,
    Verbosity.WARNING: logging.WARNING,
    Verbosity.INFO: logging.INFO,
    Verbosity.DEBUG: logging.DEBUG,
    Verbosity.PROGRESS: PROGRESS,
    Verbosity.ALL: logging.NOTSET,
}


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: object = None,
) -> None:
    """Configure root logging.

    Args:
        debug: Enable DEBUG level with detailed format
        level: Override log level (int, level name, or verbosity name)
               Also reads RECKON_LOG_LEVEL env var
               Falls back to the `logging` section of get_config()
        stream: Output stream (default: stderr)
    """
    resolved_level: int
    if level is not None:
        resolved_level = _parse_level(level)
    elif env_level := os.environ.get("RECKON_LOG_LEVEL"):
        resolved_level = _parse_level(env_level)
    elif os.environ.get("RECKON_DEBUG", "").lower() in ("true", "1", "yes"):
        resolved_level = logging.DEBUG
    elif debug:
        resolved_level = logging.DEBUG
    else:
        settings = get_config().logging
        if settings.level is not None:
            resolved_level = _parse_level(settings.level)
        elif settings.debug:
            resolved_level = logging.DEBUG
        else:
            resolved_level = logging.WARNING

    console_format = _DEBUG_FORMAT if resolved_level <= logging.DEBUG else _DEFAULT_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(logging.Formatter(console_format))
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(
        "Logging configured: level=%s, debug=%s",
        logging.getLevelName(resolved_level),
        debug,
    )


def _parse_level(level: int | str) -> int:
    """Parse log level from int, level name, or verbosity name."""
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    verbosity = Verbosity.of(level)
    if verbosity.is_present:
        return verbosity.get().level
    try:
        return int(level)
    except ValueError:
        return logging.WARNING


def log_problem(problem: Problem, logger: logging.Logger | None = None) -> None:
    """Log a single problem at the level matching its severity."""
    logger = logger or logging.getLogger("reckon.problems")
    exc_info = problem.exception if problem.exception is not None else None
    if problem.severity is Severity.ERROR:
        logger.error(problem.message, exc_info=exc_info)
    else:
        logger.warning(problem.message, exc_info=exc_info)


def log_problems(problems: Iterable[Problem], logger: logging.Logger | None = None) -> None:
    """Log problems in order."""
    for problem in problems:
        log_problem(problem, logger)


def render_problems(
    problems: Iterable[Problem],
    console: Console | None = None,
    *,
    title: str = "Problems",
) -> None:
    """Render problems as a table, errors first, each severity in its own style."""
    console = console or Console(stderr=True)
    problems = list(problems)
    if not problems:
        return

    table = Table(title=title, show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Message")
    table.add_column("Cause", style="dim")

    ordered = [p for p in problems if p.is_error] + [p for p in problems if not p.is_error]
    for problem in ordered:
        style = "bold red" if problem.is_error else "yellow"
        cause = type(problem.exception).__name__ if problem.exception else ""
        table.add_row(Text(problem.severity.name, style=style), Text(problem.message), cause)

    console.print(table)
