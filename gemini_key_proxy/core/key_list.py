"""Upstream key list parsing and identity hashing."""

import hashlib

KEY_SEPARATOR = ","


def parse_key_list(source: str) -> list[str]:
    """Split a comma-separated key string into an ordered key list.

    Whitespace around each entry is trimmed and empty entries are dropped.
    Duplicates and order are preserved.
    """
    parts = [part.strip() for part in source.split(KEY_SEPARATOR)]
    return [part for part in parts if part]


def list_identity(keys: list[str]) -> str:
    """Return a stable SHA-256 hex digest identifying ``keys``.

    The digest is order-sensitive, so ``["a", "b"]`` and ``["b", "a"]``
    map to different rotation state entries.
    """
    joined = KEY_SEPARATOR.join(keys)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def mask_key(key: str) -> str:
    """Render a secret as a short digest suitable for logs and CLI output."""
    return "sha256:" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:8] + "..."
