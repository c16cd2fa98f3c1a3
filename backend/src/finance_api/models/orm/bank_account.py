"""Bank account ORM model."""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import (
    RECORD_ID_LENGTH,
    Base,
    OwnedMixin,
    RecordIdMixin,
    TimestampMixin,
)


class BankAccountORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """Bank account database model."""

    __tablename__ = "bank_accounts"

    bank_id: Mapped[str] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("banks.id", ondelete="CASCADE"), nullable=False
    )
    agency: Mapped[str | None] = mapped_column(String(20), nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    account_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # Type: checking, savings, investment
    initial_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"), nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
