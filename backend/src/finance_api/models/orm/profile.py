"""Profile ORM model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import Base, OwnedMixin, RecordIdMixin, TimestampMixin


class ProfileORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """User profile database model."""

    __tablename__ = "profiles"

    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
