"""
SECURITY METRICS
================
Prometheus-backed counters for redirect errors and security features.
"""

from __future__ import annotations

import os
from typing import Dict

from prometheus_client import Counter


_FEATURE_EVENTS = None
_REDIRECT_ERROR_EVENTS = None

REDIRECT_ERROR_OUTCOMES = (
    "added",
    "shown",
    "missing_parameter",
    "invalid_nonce",
    "code_mismatch",
    "unregistered_code",
)


def _enabled() -> bool:
    return os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"


def _init_metrics() -> None:
    global _FEATURE_EVENTS, _REDIRECT_ERROR_EVENTS
    if _FEATURE_EVENTS is not None or not _enabled():
        return
    _FEATURE_EVENTS = Counter(
        "security_feature_events_total",
        "Count of security feature events",
        ["feature"],
    )
    _REDIRECT_ERROR_EVENTS = Counter(
        "redirect_error_events_total",
        "Count of redirect error outcomes",
        ["outcome"],
    )


def increment_feature_event(feature: str, amount: int = 1) -> None:
    _init_metrics()
    if _FEATURE_EVENTS is None:
        return
    _FEATURE_EVENTS.labels(feature=feature).inc(amount)


def record_redirect_error(outcome: str) -> None:
    _init_metrics()
    if _REDIRECT_ERROR_EVENTS is None:
        return
    _REDIRECT_ERROR_EVENTS.labels(outcome=outcome).inc()


def _counter_value(counter, **labels) -> int:
    try:
        return int(counter.labels(**labels)._value.get())
    except Exception:
        return 0


def get_redirect_error_snapshot() -> Dict[str, int]:
    _init_metrics()
    if _REDIRECT_ERROR_EVENTS is None:
        return {outcome: 0 for outcome in REDIRECT_ERROR_OUTCOMES}
    return {
        outcome: _counter_value(_REDIRECT_ERROR_EVENTS, outcome=outcome)
        for outcome in REDIRECT_ERROR_OUTCOMES
    }
