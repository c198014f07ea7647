"""Extension registries for Reckon."""

from reckon.foundation.registry.extensions import ExtensionPoint

__all__ = ["ExtensionPoint"]
