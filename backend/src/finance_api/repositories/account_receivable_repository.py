"""Account receivable repository."""

from finance_api.models.orm.account_receivable import AccountReceivableORM
from finance_api.repositories.base import BaseRepository


class AccountReceivableRepository(BaseRepository[AccountReceivableORM]):
    """Repository for account receivable operations."""

    model = AccountReceivableORM
