"""
Stable hashing utilities for query-result caching.

Provides a canonical structural serialization of conditions and a
blake2b digest over it. Mapping keys are sorted, so two conditions that
differ only in key order share a signature.

The canonical form is one-to-one: values JSON cannot express become
objects tagged with "__type__", real mappings that carry a "__type__"
key are wrapped under the "{}" tag, and string keys starting with "<"
are escaped so they never look like a typed non-string key.
"""

import hashlib
import json
from typing import Any

TYPE_KEY = "__type__"
MAPPING_TAG = "{}"


def _tag_unserializable(obj: Any) -> dict:
    # Keep the type name so e.g. {1, 2} and "{1, 2}" never collide
    if isinstance(obj, (set, frozenset)):
        try:
            items = sorted(obj)
        except TypeError:
            items = sorted(obj, key=repr)
        return {TYPE_KEY: type(obj).__name__, "items": items}
    return {TYPE_KEY: type(obj).__name__, "repr": repr(obj)}


def _encode_key(key: Any) -> str:
    if isinstance(key, str):
        return f"<str>{key}" if key.startswith("<") else key
    return f"<{type(key).__name__}>{key!r}"


def _normalize(obj: Any) -> Any:
    """Recursively coerce mapping keys to strings without losing their type."""
    if isinstance(obj, dict):
        normalized = {_encode_key(k): _normalize(v) for k, v in obj.items()}
        if TYPE_KEY in normalized:
            return {TYPE_KEY: MAPPING_TAG, "items": normalized}
        return normalized
    if isinstance(obj, (list, tuple)):
        return [_normalize(v) for v in obj]
    return obj


def canonical_json(obj: Any) -> str:
    """
    Serialize an object into its canonical JSON form.

    - Dicts: keys sorted
    - Lists/tuples: order preserved
    - Anything JSON cannot express: tagged with its type name

    Examples:
        >>> canonical_json({"b": 2, "a": 1})
        '{"a":1,"b":2}'
    """
    return json.dumps(
        _normalize(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_tag_unserializable,
    )


def stable_hash(obj: Any) -> str:
    """
    Compute stable hash of an object.

    Returns:
        64-character hex string (blake2b)

    Examples:
        >>> stable_hash({"b": 2, "a": 1}) == stable_hash({"a": 1, "b": 2})
        True
    """
    data = canonical_json(obj).encode("utf-8")

    h = hashlib.blake2b(data, digest_size=32)
    return h.hexdigest()
