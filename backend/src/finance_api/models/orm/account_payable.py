"""Account payable ORM model."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import (
    RECORD_ID_LENGTH,
    Base,
    OwnedMixin,
    RecordIdMixin,
    TimestampMixin,
)


class AccountPayableORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """Account payable database model."""

    __tablename__ = "accounts_payable"

    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    # Status: pending, paid, overdue, cancelled
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    category_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    supplier_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    bank_account_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
