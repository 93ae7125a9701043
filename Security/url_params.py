"""
URL QUERY PARAMETERS
====================
Merge and strip query arguments on redirect URLs.
"""

# FLOW:
# - add_query_args() replaces matching keys and appends new ones.
# - remove_query_args() strips keys, leaving the rest of the URL intact.
# WHY:
# - Redirect targets may already carry query strings and fragments.
# HOW:
# - Delegates to starlette's URL helpers; a None value removes the key.

from __future__ import annotations

from typing import Iterable, Mapping

from starlette.datastructures import URL


def add_query_args(url: str, params: Mapping[str, object]) -> str:
    removed = [key for key, value in params.items() if value is None]
    kept = {key: value for key, value in params.items() if value is not None}
    target = URL(url)
    if removed:
        target = target.remove_query_params(removed)
    if kept:
        target = target.include_query_params(**kept)
    return str(target)


def remove_query_args(url: str, keys: str | Iterable[str]) -> str:
    if isinstance(keys, str):
        keys = [keys]
    return str(URL(url).remove_query_params(list(keys)))
