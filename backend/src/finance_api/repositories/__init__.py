"""Repositories package."""

from finance_api.repositories.account_payable_repository import AccountPayableRepository
from finance_api.repositories.account_receivable_repository import AccountReceivableRepository
from finance_api.repositories.bank_account_repository import BankAccountRepository
from finance_api.repositories.bank_repository import BankRepository
from finance_api.repositories.base import BaseRepository, EntityRepository
from finance_api.repositories.category_repository import CategoryRepository
from finance_api.repositories.profile_repository import ProfileRepository
from finance_api.repositories.registry import RepositoryRegistry
from finance_api.repositories.supplier_repository import SupplierRepository
from finance_api.repositories.transaction_repository import TransactionRepository

__all__ = [
    "BaseRepository",
    "EntityRepository",
    "RepositoryRegistry",
    "AccountPayableRepository",
    "AccountReceivableRepository",
    "BankAccountRepository",
    "BankRepository",
    "CategoryRepository",
    "ProfileRepository",
    "SupplierRepository",
    "TransactionRepository",
]
