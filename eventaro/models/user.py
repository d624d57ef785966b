"""
User model with secure password storage and a single refresh-token fingerprint.
"""

import enum

from sqlalchemy import Column, Integer, String, CheckConstraint

from eventaro.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    # SHA-256 of the only refresh token currently accepted; NULL when logged out
    hashed_refresh_token = Column(String(255), nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'USER')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
