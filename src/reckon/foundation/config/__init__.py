"""Configuration management for Reckon."""

from reckon.foundation.config.loader import (
    ReckonConfig,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)

__all__ = [
    "ReckonConfig",
    "get_config",
    "load_config",
    "reset_config",
    "save_default_config",
]
