"""Deterministic validators and sanitizers used across services."""

from __future__ import annotations

import re
import secrets
import string

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def is_uuid(value: str | None) -> bool:
    return bool(value) and bool(_UUID_RE.match(value))


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    return cleaned[:max_len]


def normalize_search(value: str | None) -> str:
    """Lower-cased search term; empty when nothing searchable remains."""
    return sanitize_text(value, max_len=200).lower()


def temporary_password(length: int = 12) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
