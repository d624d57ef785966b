"""
Authentication endpoints: register, login, refresh, logout, profile.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventaro.api.deps import (
    CurrentUser,
    RefreshCredentials,
    get_refresh_credentials,
    require_member,
)
from eventaro.db.session import get_db
from eventaro.schemas.user import AuthResponse, UserCreate, UserLogin, UserResponse
from eventaro.services.auth_service import (
    authenticate_user,
    get_profile,
    logout_user,
    refresh_tokens,
    register_user,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db, scope="function")):
    """Create a USER account and sign it in."""
    return await register_user(db, user_data)


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db, scope="function")):
    """Authenticate and receive an access/refresh token pair."""
    return await authenticate_user(db, login_data)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    user: CurrentUser = Depends(require_member),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """Invalidate the stored refresh token. Calling it again is harmless."""
    await logout_user(db, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/refresh", response_model=AuthResponse)
async def refresh(
    credentials: RefreshCredentials = Depends(get_refresh_credentials),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    """
    Rotate the token pair. Send the refresh token as `Authorization: Bearer`.
    The presented refresh token stops working once a new pair is issued.
    """
    return await refresh_tokens(db, credentials.user_id, credentials.refresh_token)


@router.get("/me", response_model=UserResponse)
async def me(
    user: CurrentUser = Depends(require_member),
    db: AsyncSession = Depends(get_db, scope="function"),
):
    return await get_profile(db, user.id)
