"""Digests for correlating log lines about a user without writing personal data."""

import hashlib
import json
from typing import Any


def hash_payload(value: Any) -> str:
    """
    Stable SHA-256 hex digest of `value`.

    Strings are hashed as UTF-8 and bytes as-is; anything else is serialized to
    JSON with sorted keys (repr() when it cannot be) so equal dicts share a digest.
    """
    if value is None:
        data = b"null"
    elif isinstance(value, bytes):
        data = value
    elif isinstance(value, str):
        data = value.encode("utf-8")
    else:
        try:
            data = json.dumps(value, sort_keys=True, default=str).encode("utf-8")
        except TypeError:
            data = repr(value).encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def hash_email(email: str | None) -> str | None:
    """Digest of a trimmed, lower-cased address, so log lines for one account always match."""
    normalized = (email or "").strip().lower()
    if not normalized:
        return None
    return hash_payload(normalized)
