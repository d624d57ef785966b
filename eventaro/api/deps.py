"""
Request guards: bearer extraction, token decoding and role checks.

Routes compose them explicitly, e.g.
    user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
"""

from dataclasses import dataclass
from typing import Callable, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventaro.core.security import decode_access_token, decode_refresh_token
from eventaro.models.user import UserRole

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a verified access token."""

    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


@dataclass(frozen=True)
class RefreshCredentials:
    user_id: int
    refresh_token: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")
    return credentials.credentials


def _subject_id(payload: dict) -> int:
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid token payload")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Require a valid access token. Raises 401 if missing, invalid or expired."""
    token = _bearer_token(credentials)
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    return CurrentUser(
        id=_subject_id(payload),
        email=payload.get("email", ""),
        role=payload.get("role", ""),
    )


def get_refresh_credentials(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> RefreshCredentials:
    """Require a valid refresh token in the Authorization header."""
    token = _bearer_token(credentials)
    try:
        payload = decode_refresh_token(token)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid refresh token")
    return RefreshCredentials(user_id=_subject_id(payload), refresh_token=token)


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """Build a dependency that admits only the given roles. Raises 403 otherwise."""
    allowed = {role.value for role in roles}

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden resource",
            )
        return user

    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_member = require_roles(UserRole.USER, UserRole.ADMIN)
