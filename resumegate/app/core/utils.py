"""Utility functions for the analysis gateway."""

import hashlib
import json
from typing import Any


def serialize_profile(profile: Any) -> str:
    """Serialize a profile document to text.

    Strings pass through unchanged. Structured documents are dumped as
    compact JSON with sorted keys, so two equal documents always produce the
    same text regardless of key order.

    Examples:
        >>> serialize_profile({"b": 1, "a": [1, 2]})
        '{"a":[1,2],"b":1}'
    """
    if isinstance(profile, str):
        return profile
    return json.dumps(profile, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def request_fingerprint(kind: str, profile: str, target: str) -> str:
    """Derive the cache key for an analysis request.

    The key is deterministic and order-sensitive: swapping profile and
    target yields a different key. Each part is length-prefixed so that
    shifting text across the boundary cannot produce the same digest input.
    SHA-256 is used for collision avoidance only; the key is not a secret
    and not a security boundary.

    Args:
        kind: Analysis kind (namespaces keys per endpoint)
        profile: Serialized profile document
        target: Target (job) description

    Returns:
        Cache key of the form ``"{kind}:{hex digest}"``
    """
    material = f"{len(profile)}:{profile}|{len(target)}:{target}"
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return f"{kind}:{digest}"
