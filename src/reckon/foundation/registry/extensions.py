"""ExtensionPoint - identifier-keyed registry of pluggable extensions.

Caching policies (and any other pluggable kind) register under a string
identifier and are resolved by that identifier at configuration time.
Registration is first-wins: a second extension with the same identifier is
refused, never silently replaces the first.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass, field

from reckon.foundation.errors import ErrorCode, ReckonError
from reckon.foundation.types.result import Problem, Result


@dataclass
class ExtensionPoint[T]:
    """Registry of extensions of one kind, in registration order."""

    name: str
    """What this extension point holds (used in problem messages)."""

    _extensions: dict[str, T] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def add(self, identifier: str, extension: T) -> bool:
        """Register an extension.

        Returns:
            False if the identifier is already taken or the extension is None.
        """
        if extension is None:
            return False
        with self._lock:
            if identifier in self._extensions:
                return False
            self._extensions[identifier] = extension
            return True

    def get(self, identifier: str) -> Result[T]:
        """Look up an extension; absent with an ERROR problem if unknown."""
        with self._lock:
            extension = self._extensions.get(identifier)
        if extension is None:
            error = ReckonError(
                ErrorCode.EXTENSION_NOT_FOUND,
                context={"identifier": identifier, "point": self.name},
            )
            return Result.empty(Problem.from_exception(error))
        return Result.of(extension)

    def remove(self, identifier: str) -> bool:
        with self._lock:
            return self._extensions.pop(identifier, None) is not None

    def identifiers(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._extensions)

    def extensions(self) -> tuple[T, ...]:
        with self._lock:
            return tuple(self._extensions.values())

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._extensions

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers())

    def __len__(self) -> int:
        with self._lock:
            return len(self._extensions)
