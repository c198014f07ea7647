"""Structural digests for computations.

A digest is a short, deterministic fingerprint of a computation's structure:

1. The concrete computation kind (module + qualified class name)
2. A fingerprint of the embedded payload
3. The digests of all dependencies, in order (transitive closure)

Digests name computations in logs and events. Cache lookups do not use them;
the store keys entries by the computation itself (structural __eq__/__hash__),
so a digest collision can never alias two cache entries.

Hash length: 20 hex characters (80 bits).
"""

import hashlib
from collections.abc import Sequence
from typing import Any

DIGEST_LENGTH = 20


def payload_fingerprint(payload: Any) -> str:
    """Stable text for a payload.

    Callables are named by module and qualified name; everything else by
    type and repr.
    """
    if payload is None:
        return "-"
    if callable(payload) and hasattr(payload, "__qualname__"):
        module = getattr(payload, "__module__", None) or "?"
        return f"fn:{module}.{payload.__qualname__}"
    return f"{type(payload).__module__}.{type(payload).__qualname__}:{payload!r}"


def compute_digest(
    kind: type,
    payload: Any,
    dependency_digests: Sequence[str],
) -> str:
    """Compute the structural digest of one node.

    Args:
        kind: The concrete computation class.
        payload: The embedded payload (constant value, function, ...).
        dependency_digests: Digests of the dependencies, in order.

    Returns:
        20-character hex digest (80 bits).

    Example:
        >>> compute_digest(ComputeConstant, 42, []) == compute_digest(ComputeConstant, 42, [])
        True
    """
    hasher = hashlib.sha256()

    hasher.update(f"{kind.__module__}.{kind.__qualname__}".encode())
    hasher.update(b"\x00")
    hasher.update(payload_fingerprint(payload).encode())

    # Position matters: dependencies are positional arguments
    for position, digest in enumerate(dependency_digests):
        hasher.update(f"\x00{position}:{digest}".encode())

    return hasher.hexdigest()[:DIGEST_LENGTH]
