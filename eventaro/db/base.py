"""
SQLAlchemy declarative base and shared column mixins.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, func
from sqlalchemy.orm import DeclarativeBase

from eventaro.db.types import UTCDateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
