"""SQLAlchemy ORM models package."""

from finance_api.models.orm.account_payable import AccountPayableORM
from finance_api.models.orm.account_receivable import AccountReceivableORM
from finance_api.models.orm.bank import BankORM
from finance_api.models.orm.bank_account import BankAccountORM
from finance_api.models.orm.base import Base
from finance_api.models.orm.category import CategoryORM
from finance_api.models.orm.profile import ProfileORM
from finance_api.models.orm.supplier import SupplierORM
from finance_api.models.orm.transaction import TransactionORM

__all__ = [
    "Base",
    "AccountPayableORM",
    "AccountReceivableORM",
    "BankORM",
    "BankAccountORM",
    "CategoryORM",
    "ProfileORM",
    "SupplierORM",
    "TransactionORM",
]
