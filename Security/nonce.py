"""
REDIRECT NONCES
===============
Time-windowed, action-scoped tokens for URLs that cross a redirect.

FLOW:
- create_nonce() signs the current tick with the action name.
- verify_nonce() accepts the current tick (1) or the previous one (2).

WHY:
- Lets a destination page trust that a query parameter was produced by this
  application for a given action, without sessions or cookies.

HOW:
- HMAC-SHA256 over "tick|action|subject|session_token", truncated to 10 hex
  characters. A tick is half of the lifetime, so a nonce lives between
  lifetime/2 and lifetime seconds.
"""

from __future__ import annotations

import hmac as std_hmac
import math
import time
from typing import Callable

from cryptography.hazmat.primitives import hashes, hmac

from Security.security_config import REDIRECT_ERROR_SETTINGS, ensure_nonce_secret


DEFAULT_LIFETIME = 60 * 60 * 24


class NonceSigner:
    def __init__(
        self,
        secret: str | bytes,
        lifetime: int = DEFAULT_LIFETIME,
        clock: Callable[[], float] = time.time,
    ):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        if not secret:
            raise ValueError("Nonce secret must not be empty")
        if lifetime <= 0:
            raise ValueError("Nonce lifetime must be positive")
        self._secret = secret
        self.lifetime = lifetime
        self.clock = clock

    @classmethod
    def from_env(cls, env_name: str = "NONCE_SECRET_KEY") -> "NonceSigner":
        return cls(
            ensure_nonce_secret(env_name),
            lifetime=REDIRECT_ERROR_SETTINGS["NONCE_LIFETIME"],
        )

    def tick(self) -> int:
        return math.ceil(self.clock() / (self.lifetime / 2))

    def _digest(self, tick: int, action: str, subject: str, session_token: str) -> str:
        mac = hmac.HMAC(self._secret, hashes.SHA256())
        mac.update(f"{tick}|{action}|{subject}|{session_token}".encode("utf-8"))
        return mac.finalize().hex()[-12:-2]

    def create_nonce(self, action: str, subject: str = "", session_token: str = "") -> str:
        return self._digest(self.tick(), action, subject, session_token)

    def verify_nonce(self, nonce, action: str, subject: str = "", session_token: str = "") -> int:
        """Return 1 or 2 for the tick the nonce was issued in, 0 when invalid."""
        if not nonce or not isinstance(nonce, str):
            return 0
        given = nonce.encode("utf-8", "replace")
        tick = self.tick()
        for age, candidate in enumerate((tick, tick - 1), start=1):
            expected = self._digest(candidate, action, subject, session_token)
            if std_hmac.compare_digest(expected.encode("ascii"), given):
                return age
        return 0
