"""Transaction ORM model."""

from datetime import date as date_type
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finance_api.models.orm.base import (
    RECORD_ID_LENGTH,
    Base,
    OwnedMixin,
    RecordIdMixin,
    TimestampMixin,
)


class TransactionORM(Base, RecordIdMixin, OwnedMixin, TimestampMixin):
    """Transaction database model.

    Income credits ``to_account_id``, expense debits ``from_account_id`` and a
    transfer moves money between the two.
    """

    __tablename__ = "transactions"

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    from_account_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True
    )
    to_account_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True
    )
    accounts_payable_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("accounts_payable.id", ondelete="SET NULL"), nullable=True
    )
    accounts_receivable_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("accounts_receivable.id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[str | None] = mapped_column(
        String(RECORD_ID_LENGTH), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
