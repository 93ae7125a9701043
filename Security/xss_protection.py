"""
XSS PROTECTION
==============
Output escaping, restricted-HTML sanitization and CSP headers.
"""

# FLOW:
# - esc_attr() escapes values placed inside HTML attributes.
# - kses_post() filters markup down to an allow-list of post-safe tags.
# - Middleware applies CSP and XSS-related headers to responses.
# WHY:
# - Error messages and codes are rendered as HTML on the redirect target.
# HOW:
# - Re-emits parsed markup, keeping only allow-listed tags/attributes.

from __future__ import annotations

import re
from html.parser import HTMLParser

from markupsafe import escape
from starlette.middleware.base import BaseHTTPMiddleware

from Security.security_config import REDIRECT_ERROR_SETTINGS


_COMMON_ATTRS = {"class", "id", "title", "role", "aria-label", "dir", "lang"}

ALLOWED_POST_TAGS: dict[str, set[str]] = {
    "a": _COMMON_ATTRS | {"href", "rel", "target", "name"},
    "abbr": _COMMON_ATTRS,
    "b": _COMMON_ATTRS,
    "blockquote": _COMMON_ATTRS | {"cite"},
    "br": _COMMON_ATTRS,
    "code": _COMMON_ATTRS,
    "del": _COMMON_ATTRS | {"datetime"},
    "div": _COMMON_ATTRS | {"align"},
    "em": _COMMON_ATTRS,
    "h1": _COMMON_ATTRS, "h2": _COMMON_ATTRS, "h3": _COMMON_ATTRS,
    "h4": _COMMON_ATTRS, "h5": _COMMON_ATTRS, "h6": _COMMON_ATTRS,
    "hr": _COMMON_ATTRS,
    "i": _COMMON_ATTRS,
    "img": _COMMON_ATTRS | {"src", "alt", "width", "height"},
    "li": _COMMON_ATTRS,
    "ol": _COMMON_ATTRS | {"start"},
    "p": _COMMON_ATTRS | {"align"},
    "pre": _COMMON_ATTRS,
    "small": _COMMON_ATTRS,
    "span": _COMMON_ATTRS,
    "strong": _COMMON_ATTRS,
    "u": _COMMON_ATTRS,
    "ul": _COMMON_ATTRS,
}

VOID_TAGS = {"br", "hr", "img"}
DROP_CONTENT_TAGS = {"script", "style", "iframe", "object", "noscript", "template"}
URL_ATTRS = {"href", "src", "cite"}
ALLOWED_PROTOCOLS = {"http", "https", "mailto"}


_ESCAPED_ENTITY = re.compile(r"&amp;(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")


def _escape(value) -> str:
    return str(escape("" if value is None else str(value)))


def esc_attr(value) -> str:
    """Escape for an attribute value; well-formed entities are not encoded twice."""
    return _ESCAPED_ENTITY.sub(r"&\1;", _escape(value))


def _safe_url(value: str) -> bool:
    cleaned = "".join(ch for ch in value if ch > " ").lower()
    head = cleaned
    for sep in "/?#":
        head = head.split(sep, 1)[0]
    if ":" not in head:
        return True
    return head.split(":", 1)[0] in ALLOWED_PROTOCOLS


class _RestrictedHTMLFilter(HTMLParser):
    def __init__(self, allowed: dict[str, set[str]]):
        super().__init__(convert_charrefs=True)
        self.allowed = allowed
        self.out: list[str] = []
        self.open_tags: list[str] = []
        self.skip_depth = 0

    def _render_start(self, tag, attrs) -> str:
        allowed_attrs = self.allowed[tag]
        parts = [tag]
        for name, value in attrs:
            if name not in allowed_attrs:
                continue
            if value is None:
                parts.append(name)
                continue
            if name in URL_ATTRS and not _safe_url(value):
                continue
            parts.append(f'{name}="{_escape(value)}"')
        return "<" + " ".join(parts) + ">"

    def handle_starttag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth += 1
            return
        if self.skip_depth or tag not in self.allowed:
            return
        self.out.append(self._render_start(tag, attrs))
        if tag not in VOID_TAGS:
            self.open_tags.append(tag)

    def handle_startendtag(self, tag, attrs):
        if self.skip_depth or tag not in self.allowed:
            return
        self.out.append(self._render_start(tag, attrs))
        if tag not in VOID_TAGS:
            self.out.append(f"</{tag}>")

    def handle_endtag(self, tag):
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth = max(0, self.skip_depth - 1)
            return
        if self.skip_depth or tag not in self.open_tags:
            return
        while self.open_tags:
            current = self.open_tags.pop()
            self.out.append(f"</{current}>")
            if current == tag:
                break

    def handle_data(self, data):
        if self.skip_depth:
            return
        self.out.append(_escape(data))

    def result(self) -> str:
        self.close()
        while self.open_tags:
            self.out.append(f"</{self.open_tags.pop()}>")
        return "".join(self.out)


def kses_post(value, allowed: dict[str, set[str]] | None = None) -> str:
    """Sanitize markup to the allow-listed tags and attributes used for post content."""
    if value is None:
        return ""
    parser = _RestrictedHTMLFilter(allowed or ALLOWED_POST_TAGS)
    parser.feed(str(value))
    return parser.result()


class XSSProtectionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, csp_enabled: bool | None = None):
        super().__init__(app)
        if csp_enabled is None:
            csp_enabled = REDIRECT_ERROR_SETTINGS["CSP_ENABLED"]
        self.csp_enabled = csp_enabled

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("Referrer-Policy", "same-origin")
        if self.csp_enabled:
            csp = (
                "default-src 'self'; "
                "script-src 'self'; "
                "style-src 'self' 'unsafe-inline' https:; "
                "img-src 'self' data: https:; "
                "frame-ancestors 'self'"
            )
            response.headers.setdefault("Content-Security-Policy", csp)
        return response
