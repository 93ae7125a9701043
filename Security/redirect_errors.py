"""
REDIRECT WITH ERROR
===================
Pass an error code across a redirect using URL parameters and a nonce.

FLOW:
- register_error() maps error codes to messages at startup.
- add_error() appends the code and a fresh nonce to the redirect URL.
- show_error() on the next request verifies the nonce and renders the message.

WHY:
- No session or cookie storage is needed to show "what went wrong" after a
  POST/redirect/GET round trip.

HOW:
- Nonces are scoped to one action name and expire with the signer lifetime.
- Every rejection (missing parameter, bad nonce, other code, unknown code)
  renders nothing; it is logged and counted, never raised.

Note that the nonce proves the action only, not the code: a URL carrying a
valid nonce can have its code swapped for any other registered code.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Callable, Mapping

from Security.activity_logging import get_security_logger
from Security.input_validation import sanitize_text_field, unslash
from Security.metrics import record_redirect_error
from Security.nonce import NonceSigner
from Security.request_context import current_query_params
from Security.security_config import DEFAULT_TEMPLATE, REDIRECT_ERROR_SETTINGS
from Security.url_params import add_query_args, remove_query_args
from Security.xss_protection import esc_attr, kses_post


_PRINTF_SLOT = re.compile(r"%%|%([12])\$s|%s")
_FORMAT_SLOT = re.compile(r"\{([01])\}")


def render_template(template: str, code: str, message: str) -> str:
    """Fill slot 1 with the code and slot 2 with the message.

    Accepts printf-style slots, positional (%1$s, %2$s) or sequential
    (%s ... %s), or positional fields ({0}, {1}). Other braces are left
    as they are, so inline CSS in a template is safe.
    """
    values = [code, message]
    if _PRINTF_SLOT.search(template):
        sequence = iter(values)

        def fill(match):
            if match.group(0) == "%%":
                return "%"
            if match.group(1):
                return values[int(match.group(1)) - 1]
            return next(sequence, "")

        return _PRINTF_SLOT.sub(fill, template)
    return _FORMAT_SLOT.sub(lambda m: values[int(m.group(1))], template)


class RedirectWithError:
    def __init__(
        self,
        signer: NonceSigner,
        error_key: str = "error-code",
        nonce_key: str = "token",
        nonce_action: str = "truongwp-redirect-with-error",
        template: str = DEFAULT_TEMPLATE,
        writer: Callable[[str], object] | None = None,
    ):
        self.signer = signer
        self.error_key = error_key
        self.nonce_key = nonce_key
        self.nonce_action = nonce_action
        self.template = template
        self.writer = writer
        self.errors: dict[str, str] = {}
        self.logger = get_security_logger("security.redirect_errors", "redirect_errors.log")

    @classmethod
    def from_settings(cls, signer: NonceSigner | None = None, **overrides) -> "RedirectWithError":
        options = {
            "error_key": REDIRECT_ERROR_SETTINGS["ERROR_KEY"],
            "nonce_key": REDIRECT_ERROR_SETTINGS["NONCE_KEY"],
            "nonce_action": REDIRECT_ERROR_SETTINGS["NONCE_ACTION"],
            "template": REDIRECT_ERROR_SETTINGS["TEMPLATE"],
        }
        options.update(overrides)
        return cls(signer or NonceSigner.from_env(), **options)

    def set_error_key(self, key: str) -> None:
        self.error_key = key

    def set_nonce_key(self, key: str) -> None:
        self.nonce_key = key

    def set_nonce_action(self, action: str) -> None:
        self.nonce_action = action

    def set_template(self, template: str) -> None:
        self.template = template

    def register_error(self, code: str, message) -> None:
        self.errors[code] = str(message)

    def register_errors(self, errors: Mapping[str, object]) -> None:
        for code, message in errors.items():
            self.register_error(code, message)

    def get_error(self, code) -> str | None:
        """Return the registered message, or None when the code is unknown."""
        try:
            return self.errors.get(code)
        except TypeError:
            return None

    def add_error(self, url: str, code: str) -> str:
        nonce = self.signer.create_nonce(self.nonce_action)
        record_redirect_error("added")
        return add_query_args(url, {self.error_key: code, self.nonce_key: nonce})

    def remove_error(self, url: str) -> str:
        return remove_query_args(url, [self.error_key, self.nonce_key])

    def _reject(self, outcome: str, message: str, *args) -> None:
        # a bare page load without parameters is the common case
        level = logging.DEBUG if outcome == "missing_parameter" else logging.INFO
        self.logger.log(level, "outcome=%s " + message, outcome, *args)
        record_redirect_error(outcome)

    def show_error(
        self,
        code: str | None = None,
        echo: bool = True,
        *,
        query: Mapping[str, str] | None = None,
    ) -> str | None:
        """Render the error carried by the current URL.

        Returns the HTML when echo is False. With echo, the HTML is sanitized
        again and handed to the writer (stdout by default) and None is
        returned. Any failed check renders nothing.
        """
        if query is None:
            query = current_query_params()

        raw_code = query.get(self.error_key)
        nonce = query.get(self.nonce_key)
        if not raw_code or not nonce:
            self._reject("missing_parameter", "error_key=%s nonce_key=%s", self.error_key, self.nonce_key)
            return None

        if not self.signer.verify_nonce(nonce, self.nonce_action):
            self._reject("invalid_nonce", "action=%s", self.nonce_action)
            return None

        error_code = sanitize_text_field(unslash(raw_code))

        if code and error_code != code:
            self._reject("code_mismatch", "expected=%s got=%s", code, error_code)
            return None

        message = self.get_error(error_code)
        if not message:
            self._reject("unregistered_code", "code=%s", error_code)
            return None

        html = render_template(self.template, esc_attr(error_code), kses_post(message))
        record_redirect_error("shown")
        self.logger.info("redirect error shown code=%s", error_code)

        if echo:
            writer = self.writer or sys.stdout.write
            writer(kses_post(html))
            return None
        return html
