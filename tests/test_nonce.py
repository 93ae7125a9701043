from __future__ import annotations

import re

import pytest

from Security.nonce import DEFAULT_LIFETIME, NonceSigner


ACTION = "truongwp-redirect-with-error"


def test_nonce_is_short_hex(signer):
    nonce = signer.create_nonce(ACTION)
    assert re.fullmatch(r"[0-9a-f]{10}", nonce)


def test_fresh_nonce_verifies_in_current_tick(signer):
    nonce = signer.create_nonce(ACTION)
    assert signer.verify_nonce(nonce, ACTION) == 1


def test_nonce_from_previous_tick_still_verifies(signer, clock):
    nonce = signer.create_nonce(ACTION)
    clock.advance(DEFAULT_LIFETIME / 2)
    assert signer.verify_nonce(nonce, ACTION) == 2


def test_nonce_expires_after_two_ticks(signer, clock):
    nonce = signer.create_nonce(ACTION)
    clock.advance(DEFAULT_LIFETIME)
    assert signer.verify_nonce(nonce, ACTION) == 0


def test_nonce_is_scoped_to_action(signer):
    nonce = signer.create_nonce(ACTION)
    assert signer.verify_nonce(nonce, "another-action") == 0


def test_nonce_is_scoped_to_subject(signer):
    nonce = signer.create_nonce(ACTION, subject="42")
    assert signer.verify_nonce(nonce, ACTION, subject="42") == 1
    assert signer.verify_nonce(nonce, ACTION, subject="43") == 0


def test_nonce_from_other_secret_is_rejected(signer, clock):
    other = NonceSigner("another-secret", clock=clock)
    assert signer.verify_nonce(other.create_nonce(ACTION), ACTION) == 0


@pytest.mark.parametrize("nonce", [None, "", 12345, "0000000000", "ünïcödé-nonce"])
def test_malformed_nonce_is_rejected(signer, nonce):
    assert signer.verify_nonce(nonce, ACTION) == 0


def test_empty_secret_is_a_configuration_error():
    with pytest.raises(ValueError):
        NonceSigner("")


def test_non_positive_lifetime_is_a_configuration_error():
    with pytest.raises(ValueError):
        NonceSigner("secret", lifetime=0)


def test_from_env_reads_secret(monkeypatch, clock):
    monkeypatch.setenv("NONCE_SECRET_KEY", "env-secret")
    from_env = NonceSigner.from_env()
    from_env.clock = clock
    assert NonceSigner("env-secret", clock=clock).verify_nonce(from_env.create_nonce(ACTION), ACTION) == 1
