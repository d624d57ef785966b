"""
Password hashing, refresh-token fingerprints and JWT creation/verification.

Access and refresh tokens share the same claim set (sub, email, role) plus a
`type` claim so one can never be replayed as the other, and a random `jti`
so two tokens minted in the same second still differ.
"""

import asyncio
import hashlib
import hmac
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from eventaro.core.config import get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w|y)?\s*$", re.IGNORECASE)
_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
    "y": 31557600,
}


def parse_expires_in(value: str | int) -> timedelta:
    """
    Parse a token lifetime: numeric seconds ("900", 900) or a duration
    string ("15m", "12h", "30d"). Raises ValueError on anything else.
    """
    if isinstance(value, int):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(value or "")
        if not match:
            raise ValueError(f"Invalid token lifetime: {value!r}")
        amount, unit = match.groups()
        seconds = float(amount) * _UNIT_SECONDS[(unit or "s").lower()]
    if seconds <= 0:
        raise ValueError(f"Token lifetime must be positive: {value!r}")
    return timedelta(seconds=seconds)


# --- Passwords -------------------------------------------------------------

def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage with the configured bcrypt cost."""
    # bcrypt only looks at the first 72 bytes; input validation caps password length.
    pw_bytes = plain_password.encode("utf-8")[:72]
    rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


async def hash_password_async(plain_password: str) -> str:
    return await asyncio.to_thread(hash_password, plain_password)


async def verify_password_async(plain_password: str, hashed: str) -> bool:
    return await asyncio.to_thread(verify_password, plain_password, hashed)


# --- Refresh-token fingerprints -------------------------------------------

def fingerprint_token(token: str) -> str:
    """One-way fingerprint of a refresh token; the token itself is never stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches_fingerprint(token: str, fingerprint: str) -> bool:
    return hmac.compare_digest(fingerprint_token(token), fingerprint)


# --- JWT -------------------------------------------------------------------

@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _encode(payload: dict[str, Any], token_type: str, secret: str, lifetime: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        **payload,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(payload: dict[str, Any]) -> str:
    settings = get_settings()
    return _encode(
        payload,
        ACCESS_TOKEN_TYPE,
        settings.JWT_SECRET,
        parse_expires_in(settings.JWT_ACCESS_EXPIRES_IN),
    )


def create_refresh_token(payload: dict[str, Any]) -> str:
    settings = get_settings()
    return _encode(
        payload,
        REFRESH_TOKEN_TYPE,
        settings.refresh_secret,
        parse_expires_in(settings.JWT_REFRESH_EXPIRES_IN),
    )


async def create_token_pair(payload: dict[str, Any]) -> TokenPair:
    """Sign the access and refresh tokens concurrently and wait for both."""
    access_token, refresh_token = await asyncio.gather(
        asyncio.to_thread(create_access_token, payload),
        asyncio.to_thread(create_refresh_token, payload),
    )
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def _decode(token: str, secret: str, expected_type: str) -> dict[str, Any]:
    settings = get_settings()
    payload = jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp", "type"]},
    )
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected a {expected_type} token")
    return payload


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token; return its payload.
    Raises jwt.PyJWTError on invalid, expired or wrong-type tokens.
    """
    return _decode(token, get_settings().JWT_SECRET, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    return _decode(token, get_settings().refresh_secret, REFRESH_TOKEN_TYPE)
