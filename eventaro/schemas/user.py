"""
Pydantic schemas for registration, login and token responses.
"""

from datetime import datetime
from pydantic import EmailStr, Field

from eventaro.models.user import UserRole
from eventaro.schemas.base import CamelModel, RequestModel


class UserCreate(RequestModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


class UserLogin(RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(CamelModel):
    id: int
    full_name: str
    email: str
    role: UserRole
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str
