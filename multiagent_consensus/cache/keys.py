"""Deterministic cache key derivation for model requests."""

import hashlib
import json
from collections.abc import Mapping
from typing import Any


def _canonicalize(value: Any) -> Any:
    """Recursively sort mapping keys, including mappings nested in lists."""
    if isinstance(value, Mapping):
        return {str(k): _canonicalize(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_canonicalize(item) for item in value]
    return value


def derive_key(request: Mapping[str, Any]) -> str:
    """Canonicalize a request into a stable string key.

    Top-level entries that are None or the empty string are dropped, every
    mapping is key-sorted, and the ``models`` list is sorted so that the same
    model set always produces the same key regardless of order.
    """
    filtered = {k: v for k, v in request.items() if v is not None and v != ""}
    canonical = _canonicalize(filtered)
    if isinstance(canonical.get("models"), list):
        canonical["models"] = sorted(canonical["models"], key=str)
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), default=str)


def hash_key(key: str) -> str:
    """Return a filename-safe digest of a cache key."""
    return hashlib.md5(key.encode("utf-8")).hexdigest()
