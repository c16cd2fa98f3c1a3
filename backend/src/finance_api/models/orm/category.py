"""Category ORM model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import Base, OwnedMixin, RecordIdMixin, TimestampMixin


class CategoryORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """Category database model."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # Type: income, expense
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
