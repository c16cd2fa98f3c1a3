"""Bank ORM model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import Base, OwnedMixin, RecordIdMixin, TimestampMixin


class BankORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """Bank database model."""

    __tablename__ = "banks"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
