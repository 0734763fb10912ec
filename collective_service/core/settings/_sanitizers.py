"""Helpers to sanitize environment variable values before validation."""

from __future__ import annotations

from typing import Any


def strip_inline_comment(value: str) -> str:
    """Remove inline comments of the form "value  # comment".

    Some env-file parsers keep inline comments, so values like
    ``86400  # 1 day`` reach the process environment verbatim. A ``#`` only
    starts a comment when preceded by whitespace, so ``redis://h/0#x``
    survives untouched.
    """
    idx = value.find("#")
    if idx == -1:
        return value.strip()
    if idx == 0:
        return ""
    if not value[idx - 1].isspace():
        return value.strip()
    return value[:idx].strip()


def sanitize_inline_numeric(value: Any) -> Any:
    """Normalize numeric env vars that may include inline comments."""
    if isinstance(value, str):
        cleaned = strip_inline_comment(value)
        if cleaned:
            return cleaned
    return value


def split_server_list(value: Any) -> Any:
    """Split a comma or whitespace separated ``host:port`` list.

    ``"cache-1:11211, cache-2:11211"`` becomes
    ``["cache-1:11211", "cache-2:11211"]``. Empty strings become an empty
    list so that an unset-but-present env var means "not configured".
    """
    if isinstance(value, str):
        cleaned = strip_inline_comment(value)
        return [part for part in cleaned.replace(",", " ").split() if part]
    return value
