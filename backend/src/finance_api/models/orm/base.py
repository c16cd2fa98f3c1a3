"""Declarative base and shared column mixins."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Wide enough for UUID strings and numeric ids carried over from backups
RECORD_ID_LENGTH = 64


def generate_record_id() -> str:
    """Generate a new record id."""
    return str(uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class RecordIdMixin:
    """String primary key. Ids from a backup are kept as-is on import."""

    id: Mapped[str] = mapped_column(
        String(RECORD_ID_LENGTH), primary_key=True, default=generate_record_id
    )


class OwnedMixin:
    """Rows belong to exactly one user account."""

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)


class TimestampMixin:
    """Creation and modification timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
