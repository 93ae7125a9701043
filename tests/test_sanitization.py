from __future__ import annotations

from Security.input_validation import sanitize_text_field, unslash, validate_allowlist
from Security.xss_protection import esc_attr, kses_post


def test_sanitize_text_field_strips_tags_and_trims():
    assert sanitize_text_field("  <i>invalid-email</i>\n") == "invalid-email"


def test_sanitize_text_field_drops_script_blocks():
    assert sanitize_text_field("<script>alert(1)</script>my-code") == "my-code"


def test_sanitize_text_field_removes_octets_and_control_chars():
    assert sanitize_text_field("bad%0Acode\x00\x07") == "badcode"


def test_sanitize_text_field_removes_nested_octets():
    assert sanitize_text_field("%%4141") == ""
    assert sanitize_text_field("my-%%2020code") == "my-code"


def test_sanitize_text_field_collapses_whitespace():
    assert sanitize_text_field("a \t\r\n b") == "a b"


def test_sanitize_text_field_handles_none_and_non_strings():
    assert sanitize_text_field(None) == ""
    assert sanitize_text_field(404) == "404"


def test_unslash_removes_backslash_escaping():
    assert unslash(r"it\'s") == "it's"
    assert unslash(None) is None


def test_validate_allowlist():
    assert validate_allowlist("my-code", r"[a-z-]+") == "my-code"
    assert validate_allowlist("my code", r"[a-z-]+") is None


def test_esc_attr_escapes_quotes_and_markup():
    assert esc_attr('"><script>') == "&#34;&gt;&lt;script&gt;"
    assert esc_attr(None) == ""


def test_esc_attr_does_not_double_encode_entities():
    assert esc_attr("a&amp;b") == "a&amp;b"
    assert esc_attr("&#39;&#x27;&copy;") == "&#39;&#x27;&copy;"
    assert esc_attr("a&b &amp c") == "a&amp;b &amp;amp c"


def test_kses_post_keeps_allowed_tags():
    assert kses_post("<b>Bad</b> email") == "<b>Bad</b> email"


def test_kses_post_drops_scripts_and_event_handlers():
    html = '<script>alert(1)</script><em onclick="steal()">hi</em>'
    assert kses_post(html) == "<em>hi</em>"


def test_kses_post_unwraps_disallowed_tags():
    assert kses_post("<blink>read</blink> me") == "read me"


def test_kses_post_drops_embedded_frames():
    assert kses_post("<iframe src='https://evil.example'>hidden</iframe>text") == "text"


def test_kses_post_filters_unsafe_links():
    assert kses_post('<a href="javascript:alert(1)" title="t">x</a>') == '<a title="t">x</a>'
    assert kses_post('<a href="https://example.com/?a=1&b=2">x</a>') == (
        '<a href="https://example.com/?a=1&amp;b=2">x</a>'
    )


def test_kses_post_closes_open_tags():
    assert kses_post("<strong>bold") == "<strong>bold</strong>"
    assert kses_post("line<br>break") == "line<br>break"


def test_kses_post_keeps_alert_markup():
    html = '<div class="alert alert-danger error-invalid-email"><b>Bad</b> email</div>'
    assert kses_post(html) == html
