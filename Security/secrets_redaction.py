"""
SECRETS REDACTION
=================
Utility to mask secrets and redirect nonces in logs.
"""

# FLOW:
# - redact() masks common secret patterns before logging.
# - redact_param() masks one configurable query key.
# WHY:
# - Redirect URLs carry nonces; logs must not make them replayable.
# HOW:
# - Replaces sensitive values with ***.

from __future__ import annotations

import re

from Security.security_config import REDIRECT_ERROR_SETTINGS, feature_enabled


_SECRET_PATTERNS = [
    re.compile(r"(password=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(token=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(key=)([^&\s]+)", re.IGNORECASE),
]


def redact_param(value: str, key: str) -> str:
    pattern = re.compile(r"((?:^|[?&])" + re.escape(key) + r"=)([^&#\s]+)")
    return pattern.sub(r"\1***", value)


def redact(value: str) -> str:
    if not feature_enabled("secrets-redaction", True):
        return value
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(r"\1***", value)
    return redact_param(value, REDIRECT_ERROR_SETTINGS["NONCE_KEY"])
