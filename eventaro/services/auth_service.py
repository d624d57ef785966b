"""
Authentication service: registration, login, refresh-token rotation, logout.

Each successful register/login/refresh overwrites the user's stored refresh
fingerprint, so only the most recently issued refresh token is accepted.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from eventaro.models.user import User, UserRole
from eventaro.schemas.user import UserCreate, UserLogin, AuthResponse, UserResponse
from eventaro.core.security import (
    create_token_pair,
    fingerprint_token,
    hash_password_async,
    token_matches_fingerprint,
    verify_password_async,
)
from eventaro.core.metrics import record_auth_attempt
from eventaro.core.logging import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _issue_tokens(db: AsyncSession, user: User) -> AuthResponse:
    """Sign a fresh token pair and make its refresh token the only valid one."""
    pair = await create_token_pair({"sub": str(user.id), "email": user.email, "role": user.role})
    user.hashed_refresh_token = fingerprint_token(pair.refresh_token)
    await db.flush()
    await db.refresh(user)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
    )


async def register_user(db: AsyncSession, user_data: UserCreate) -> AuthResponse:
    """
    Register a new user with hashed password and the USER role.
    Raises 409 if the email already exists.
    """
    if await get_user_by_email(db, user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        record_auth_attempt("register", success=False)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        )

    user = User(
        full_name=user_data.full_name,
        email=user_data.email,
        hashed_password=await hash_password_async(user_data.password),
        role=UserRole.USER.value,
    )
    db.add(user)
    await db.flush()

    response = await _issue_tokens(db, user)
    logger.info("user_registered", user_id=user.id, email=user.email)
    record_auth_attempt("register", success=True)
    return response


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> AuthResponse:
    """
    Authenticate user and return a token pair.
    Unknown email and wrong password fail with the same 401 message.
    """
    user = await get_user_by_email(db, login_data.email)

    if not user or not await verify_password_async(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        record_auth_attempt("login", success=False)
        raise _unauthorized(INVALID_CREDENTIALS)

    response = await _issue_tokens(db, user)
    logger.info("user_logged_in", user_id=user.id)
    record_auth_attempt("login", success=True)
    return response


async def refresh_tokens(db: AsyncSession, user_id: int, refresh_token: str) -> AuthResponse:
    """
    Rotate the token pair. The presented refresh token must match the stored
    fingerprint; the old token stops working as soon as this returns.
    """
    user = await get_user_by_id(db, user_id)
    if (
        not user
        or not user.hashed_refresh_token
        or not token_matches_fingerprint(refresh_token, user.hashed_refresh_token)
    ):
        logger.warning("refresh_rejected", user_id=user_id)
        record_auth_attempt("refresh", success=False)
        raise _unauthorized(INVALID_REFRESH_TOKEN)

    response = await _issue_tokens(db, user)
    logger.info("tokens_refreshed", user_id=user.id)
    record_auth_attempt("refresh", success=True)
    return response


async def logout_user(db: AsyncSession, user_id: int) -> None:
    """Forget the stored refresh fingerprint. Safe to call any number of times."""
    await db.execute(
        update(User).where(User.id == user_id).values(hashed_refresh_token=None)
    )
    await db.flush()
    logger.info("user_logged_out", user_id=user_id)


async def get_profile(db: AsyncSession, user_id: int) -> User:
    user = await get_user_by_id(db, user_id)
    if not user:
        raise _unauthorized("User not found")
    return user
