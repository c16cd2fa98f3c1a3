"""Bank repository."""

from finance_api.models.orm.bank import BankORM
from finance_api.repositories.base import BaseRepository


class BankRepository(BaseRepository[BankORM]):
    """Repository for bank operations."""

    model = BankORM
