"""Account payable repository."""

from finance_api.models.orm.account_payable import AccountPayableORM
from finance_api.repositories.base import BaseRepository


class AccountPayableRepository(BaseRepository[AccountPayableORM]):
    """Repository for account payable operations."""

    model = AccountPayableORM
