"""
INPUT VALIDATION & SANITIZATION
===============================
Plain-text sanitizers for values read back from the query string.
"""

# FLOW:
# - unslash() drops backslash escaping added by clients or proxies.
# - sanitize_text_field() strips tags, octets and control characters.
# - validate_allowlist() enforces regex allowlists.
# WHY:
# - Query values are attacker controlled; error codes must be plain text.
# HOW:
# - Normalizes input and applies strict regex filters.

from __future__ import annotations

import re


_SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
_OCTET = re.compile(r"%[a-fA-F0-9]{2}")
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE = re.compile(r"[\r\n\t ]+")


def unslash(value: str | None) -> str | None:
    if value is None:
        return None
    return re.sub(r"\\(.)", r"\1", value)


def sanitize_text_field(value) -> str:
    if value is None:
        return ""
    value = str(value)
    value = _SCRIPT_STYLE.sub("", value)
    value = _TAG.sub("", value)
    while _OCTET.search(value):
        value = _OCTET.sub("", value)
    value = _CONTROL.sub("", value)
    value = _WHITESPACE.sub(" ", value)
    return value.strip()


def validate_allowlist(value: str | None, pattern: str) -> str | None:
    if value is None:
        return None
    if not re.fullmatch(pattern, value):
        return None
    return value
