"""Supplier ORM model."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import Base, OwnedMixin, RecordIdMixin, TimestampMixin


class SupplierORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """Supplier database model."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    document: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # CPF or CNPJ, digits only
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
