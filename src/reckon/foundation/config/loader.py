"""Reckon configuration management.

Loads configuration from .reckon/config.yaml with sensible defaults.
All settings can be overridden via environment variables (RECKON_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .reckon/config.yaml (project-local)
3. ~/.reckon/config.yaml (user-global)
4. Built-in defaults

Thread Safety:
    Uses threading.Lock for thread-safe lazy initialization in
    free-threaded Python (3.14t).
"""


import os
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from reckon.foundation.errors import ErrorCode, config_error
from reckon.foundation.types.config import LoggingConfig, StoreConfig

_ENV_PREFIX = "RECKON_"


@dataclass(frozen=True, slots=True)
class ReckonConfig:
    """Root configuration for Reckon."""

    store: StoreConfig = field(default_factory=StoreConfig)
    """Computation store configuration (caching policy, worker pool)."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    """Logging and problem reporting configuration."""


# Global config instance (lazy-loaded, thread-safe)
_config: ReckonConfig | None = None
_config_lock = threading.Lock()


def _get_dataclass_defaults() -> dict[str, dict[str, Any]]:
    """Get defaults from dataclass definitions (single source of truth)."""
    return {
        "store": asdict(StoreConfig()),
        "logging": asdict(LoggingConfig()),
    }


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> Any:
    """Coerce an environment string to bool/int/None where it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("none", "null", ""):
        return None
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    return value


def _apply_env_overrides(config_dict: dict, environ: dict[str, str] | None = None) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: RECKON_SECTION_KEY, where SECTION is
    a known top-level section and KEY may itself contain underscores.

    Examples:
        RECKON_STORE_POLICY=cache_top_level
        RECKON_STORE_MAX_WORKERS=8
        RECKON_LOGGING_LEVEL=DEBUG
    """
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue

        path_str = key[len(_ENV_PREFIX):].lower()
        for section, values in config_dict.items():
            if not isinstance(values, dict) or not path_str.startswith(section + "_"):
                continue
            option = path_str[len(section) + 1:]
            if option in values:
                values[option] = _coerce(value)
            break

    return config_dict


def _dict_to_config(data: dict) -> ReckonConfig:
    """Convert a dict to ReckonConfig, rejecting unknown or mistyped keys."""
    try:
        store_config = StoreConfig(**data.get("store", {}))
        logging_config = LoggingConfig(**data.get("logging", {}))
    except TypeError as e:
        raise config_error(ErrorCode.CONFIG_INVALID, key="config", detail=str(e), cause=e) from e

    if store_config.policy is not None and not isinstance(store_config.policy, str):
        raise config_error(
            ErrorCode.CONFIG_INVALID,
            key="store.policy",
            detail=f"expected a policy identifier, got {store_config.policy!r}",
        )
    if store_config.max_workers is not None and (
        not isinstance(store_config.max_workers, int) or store_config.max_workers < 1
    ):
        raise config_error(
            ErrorCode.CONFIG_INVALID,
            key="store.max_workers",
            detail=f"expected a positive integer, got {store_config.max_workers!r}",
        )

    return ReckonConfig(store=store_config, logging=logging_config)


def load_config(path: str | Path | None = None) -> ReckonConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (RECKON_*)
    2. Explicit path if provided
    3. .reckon/config.yaml (project-local)
    4. ~/.reckon/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged ReckonConfig instance.

    Raises:
        ReckonError: CONFIG_PARSE_ERROR for unreadable YAML,
            CONFIG_INVALID for unknown keys or bad values.
    """
    global _config

    config_dict: dict[str, Any] = _get_dataclass_defaults()

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(".reckon/config.yaml"),
        Path.home() / ".reckon" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise config_error(
                    ErrorCode.CONFIG_PARSE_ERROR,
                    path=str(config_path),
                    detail=str(e),
                    cause=e,
                ) from e
            if not isinstance(file_config, dict):
                raise config_error(
                    ErrorCode.CONFIG_PARSE_ERROR,
                    path=str(config_path),
                    detail="top level must be a mapping",
                )
            _deep_update(config_dict, file_config)
            break  # Use first found config

    config_dict = _apply_env_overrides(config_dict)

    _config = _dict_to_config(config_dict)
    return _config


def get_config() -> ReckonConfig:
    """Get the current configuration, loading if needed.

    Thread-safe with double-check locking for free-threaded Python.
    """
    global _config

    if _config is not None:
        return _config

    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Reset the global config (useful for testing)."""
    global _config
    with _config_lock:
        _config = None


def save_default_config(path: str | Path = ".reckon/config.yaml") -> Path:
    """Save the default configuration to a file.

    Args:
        path: Where to save the config.

    Returns:
        Path to the saved config file.
    """
    config_content = '''# Reckon Configuration
#
# NOTE: Actual defaults are defined in reckon/foundation/types/config.py.
# This file is an example template - edit values you want to override.

store:
  # Caching policy: cache_all | cache_none | cache_top_level
  policy: cache_all

  # Worker pool size (null = adaptive to CPU count and GIL state)
  max_workers: null

  thread_name_prefix: reckon

logging:
  # DEBUG | INFO | WARNING | ERROR (null = WARNING)
  level: null
  debug: false
'''
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(config_content)
    return config_path


__all__ = [
    "ReckonConfig",
    "get_config",
    "load_config",
    "reset_config",
    "save_default_config",
]
