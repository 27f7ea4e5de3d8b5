"""SQLAlchemy declarative base and shared mixins."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class TimestampMixin:
    """Adds created_at, set in Python so rows inserted in the same second keep their order."""
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class OwnerMixin:
    """Adds the owning user's id."""
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
