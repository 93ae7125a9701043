from __future__ import annotations

import os
import tempfile
from urllib.parse import parse_qsl, urlsplit

os.environ.setdefault("NONCE_SECRET_KEY", "test-nonce-secret")
os.environ.setdefault("SECURITY_LOG_DIR", tempfile.mkdtemp(prefix="redirect-errors-logs-"))

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from Security.nonce import NonceSigner
from Security.redirect_errors import RedirectWithError


class FakeClock:
    def __init__(self, now: float = 1_700_000_123.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def query_of(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def signer(clock) -> NonceSigner:
    return NonceSigner("unit-test-secret", clock=clock)


@pytest.fixture()
def output() -> list[str]:
    return []


@pytest.fixture()
def redirect_errors(signer, output) -> RedirectWithError:
    registry = RedirectWithError(signer, writer=output.append)
    registry.register_error("invalid-email", "<b>Bad</b> email")
    registry.register_error("my-code", "Something went wrong.")
    return registry


@pytest.fixture()
def client(signer) -> TestClient:
    return TestClient(create_app(signer=signer))
