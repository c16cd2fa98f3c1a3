"""Bank account repository."""

from finance_api.models.orm.bank_account import BankAccountORM
from finance_api.repositories.base import BaseRepository


class BankAccountRepository(BaseRepository[BankAccountORM]):
    """Repository for bank account operations."""

    model = BankAccountORM
