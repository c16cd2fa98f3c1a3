"""Typed views over the records carried in a backup file.

Backup records are plain JSON objects. These models declare the identity and
foreign-key fields each entity type is known to carry, while keeping every
other field untouched (``extra="allow"``).
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

from finance_api.models.dto.backup import IssueLevel

# Record ids are UUID strings in production data, plain integers in
# hand-written or legacy files.
RecordId: TypeAlias = StrictStr | StrictInt


class EntityType(StrEnum):
    """Entity collections contained in a backup."""

    PROFILES = "profiles"
    CATEGORIES = "categories"
    SUPPLIERS = "suppliers"
    BANKS = "banks"
    BANK_ACCOUNTS = "bank_accounts"
    ACCOUNTS_PAYABLE = "accounts_payable"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    TRANSACTIONS = "transactions"


class TransactionType(StrEnum):
    """Transaction kinds and the account legs they require."""

    INCOME = "income"  # to_account_id
    EXPENSE = "expense"  # from_account_id
    TRANSFER = "transfer"  # both, and they must differ


class BackupRecord(BaseModel):
    """Base for all typed record views."""

    model_config = ConfigDict(extra="allow")

    id: RecordId | None = None


class ProfileRecord(BackupRecord):
    """User profile."""


class CategoryRecord(BackupRecord):
    """Income/expense category."""


class SupplierRecord(BackupRecord):
    """Supplier (payee of accounts payable)."""


class BankRecord(BackupRecord):
    """Bank."""


class BankAccountRecord(BackupRecord):
    """Account held at a bank."""

    bank_id: RecordId | None = None


class AccountPayableRecord(BackupRecord):
    """Bill to pay."""

    category_id: RecordId | None = None
    supplier_id: RecordId | None = None
    bank_account_id: RecordId | None = None


class AccountReceivableRecord(BackupRecord):
    """Amount to receive."""

    category_id: RecordId | None = None
    bank_account_id: RecordId | None = None


class TransactionRecord(BackupRecord):
    """Money movement between bank accounts."""

    # Any JSON value; only the known kinds are shape-checked
    type: Any = None
    from_account_id: RecordId | None = None
    to_account_id: RecordId | None = None
    accounts_payable_id: RecordId | None = None
    accounts_receivable_id: RecordId | None = None


RECORD_MODELS: dict[EntityType, type[BackupRecord]] = {
    EntityType.PROFILES: ProfileRecord,
    EntityType.CATEGORIES: CategoryRecord,
    EntityType.SUPPLIERS: SupplierRecord,
    EntityType.BANKS: BankRecord,
    EntityType.BANK_ACCOUNTS: BankAccountRecord,
    EntityType.ACCOUNTS_PAYABLE: AccountPayableRecord,
    EntityType.ACCOUNTS_RECEIVABLE: AccountReceivableRecord,
    EntityType.TRANSACTIONS: TransactionRecord,
}


@dataclass(frozen=True)
class ForeignKey:
    """A reference from one entity type to another inside the same backup."""

    entity_type: EntityType
    field: str
    target: EntityType
    level: IssueLevel


# Every reference a backup may contain. A dangling bank_id makes the account
# unusable; the other references only lose categorisation or linkage.
FOREIGN_KEYS: tuple[ForeignKey, ...] = (
    ForeignKey(EntityType.BANK_ACCOUNTS, "bank_id", EntityType.BANKS, IssueLevel.ERROR),
    ForeignKey(EntityType.ACCOUNTS_PAYABLE, "category_id", EntityType.CATEGORIES, IssueLevel.WARNING),
    ForeignKey(EntityType.ACCOUNTS_PAYABLE, "supplier_id", EntityType.SUPPLIERS, IssueLevel.WARNING),
    ForeignKey(EntityType.ACCOUNTS_PAYABLE, "bank_account_id", EntityType.BANK_ACCOUNTS, IssueLevel.WARNING),
    ForeignKey(EntityType.ACCOUNTS_RECEIVABLE, "category_id", EntityType.CATEGORIES, IssueLevel.WARNING),
    ForeignKey(EntityType.ACCOUNTS_RECEIVABLE, "bank_account_id", EntityType.BANK_ACCOUNTS, IssueLevel.WARNING),
    ForeignKey(EntityType.TRANSACTIONS, "accounts_payable_id", EntityType.ACCOUNTS_PAYABLE, IssueLevel.WARNING),
    ForeignKey(EntityType.TRANSACTIONS, "accounts_receivable_id", EntityType.ACCOUNTS_RECEIVABLE, IssueLevel.WARNING),
)


def is_present(value: Any) -> bool:
    """Return True if a reference field actually holds a reference."""
    return value is not None and value != ""
