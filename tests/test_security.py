"""
Tests for token lifetimes, JWT type separation and refresh fingerprints.
"""

from datetime import timedelta

import jwt
import pytest

from eventaro.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    fingerprint_token,
    hash_password,
    parse_expires_in,
    token_matches_fingerprint,
    verify_password,
)

PAYLOAD = {"sub": "1", "email": "test@example.com", "role": "USER"}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("900", timedelta(seconds=900)),
        (900, timedelta(seconds=900)),
        ("15m", timedelta(minutes=15)),
        ("12h", timedelta(hours=12)),
        ("30d", timedelta(days=30)),
        ("1w", timedelta(weeks=1)),
    ],
)
def test_parse_expires_in(value, expected):
    assert parse_expires_in(value) == expected


@pytest.mark.parametrize("value", ["", "soon", "15 minutes", "0", "-5m", 0])
def test_parse_expires_in_rejects(value):
    with pytest.raises(ValueError):
        parse_expires_in(value)


def test_access_token_round_trip():
    payload = decode_access_token(create_access_token(PAYLOAD))
    assert payload["sub"] == "1"
    assert payload["role"] == "USER"
    assert payload["type"] == "access"


def test_token_types_are_not_interchangeable():
    with pytest.raises(jwt.PyJWTError):
        decode_access_token(create_refresh_token(PAYLOAD))
    with pytest.raises(jwt.PyJWTError):
        decode_refresh_token(create_access_token(PAYLOAD))


def test_tokens_minted_together_differ():
    assert create_refresh_token(PAYLOAD) != create_refresh_token(PAYLOAD)


def test_fingerprint_matches_only_its_token():
    token = create_refresh_token(PAYLOAD)
    fingerprint = fingerprint_token(token)
    assert fingerprint != token
    assert token_matches_fingerprint(token, fingerprint)
    assert not token_matches_fingerprint(create_refresh_token(PAYLOAD), fingerprint)


def test_password_hashing():
    hashed = hash_password("securepassword123")
    assert hashed != "securepassword123"
    assert verify_password("securepassword123", hashed)
    assert not verify_password("wrongpassword", hashed)


def test_verify_password_with_malformed_hash():
    assert not verify_password("securepassword123", "not-a-bcrypt-hash")
