from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

from Security.url_params import add_query_args, remove_query_args


def _pairs(url: str) -> list[tuple[str, str]]:
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


def test_add_query_args_appends_to_bare_url():
    url = add_query_args("https://example.com/form", {"error-code": "x", "token": "abc"})
    assert url == "https://example.com/form?error-code=x&token=abc"


def test_add_query_args_replaces_existing_keys():
    url = add_query_args("https://example.com/form?page=2&error-code=old", {"error-code": "new", "token": "t"})
    assert _pairs(url) == [("page", "2"), ("error-code", "new"), ("token", "t")]


def test_add_query_args_keeps_fragment_and_relative_paths():
    assert add_query_args("/form#top", {"a": "1"}) == "/form?a=1#top"


def test_add_query_args_none_removes_key():
    url = add_query_args("https://example.com/?a=1&b=2", {"a": None})
    assert _pairs(url) == [("b", "2")]


def test_remove_query_args():
    url = remove_query_args("https://example.com/form?page=2&error-code=x&token=t", ["error-code", "token"])
    assert url == "https://example.com/form?page=2"
    assert remove_query_args("https://example.com/form?token=t", "token") == "https://example.com/form"
