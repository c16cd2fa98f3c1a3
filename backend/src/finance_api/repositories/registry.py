"""Lookup of the repository that serves each backup entity type."""

from collections.abc import Iterator, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from finance_api.models.domain.records import EntityType
from finance_api.repositories.account_payable_repository import AccountPayableRepository
from finance_api.repositories.account_receivable_repository import AccountReceivableRepository
from finance_api.repositories.bank_account_repository import BankAccountRepository
from finance_api.repositories.bank_repository import BankRepository
from finance_api.repositories.base import EntityRepository
from finance_api.repositories.category_repository import CategoryRepository
from finance_api.repositories.profile_repository import ProfileRepository
from finance_api.repositories.supplier_repository import SupplierRepository
from finance_api.repositories.transaction_repository import TransactionRepository


class RepositoryRegistry(Mapping[str, EntityRepository]):
    """Read-only mapping of entity type to repository."""

    def __init__(self, repositories: Mapping[str, EntityRepository]) -> None:
        self._repositories = {str(EntityType(key)): repo for key, repo in repositories.items()}

    def __getitem__(self, entity_type: str) -> EntityRepository:
        return self._repositories[entity_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._repositories)

    def __len__(self) -> int:
        return len(self._repositories)

    @classmethod
    def for_user(cls, session: AsyncSession, user_id: UUID) -> "RepositoryRegistry":
        """Build SQLAlchemy repositories scoped to one user.

        Args:
            session: Database session shared by all repositories
            user_id: Owner of the records

        Returns:
            Registry covering every entity type
        """
        return cls(
            {
                EntityType.PROFILES: ProfileRepository(session, user_id),
                EntityType.CATEGORIES: CategoryRepository(session, user_id),
                EntityType.SUPPLIERS: SupplierRepository(session, user_id),
                EntityType.BANKS: BankRepository(session, user_id),
                EntityType.BANK_ACCOUNTS: BankAccountRepository(session, user_id),
                EntityType.ACCOUNTS_PAYABLE: AccountPayableRepository(session, user_id),
                EntityType.ACCOUNTS_RECEIVABLE: AccountReceivableRepository(session, user_id),
                EntityType.TRANSACTIONS: TransactionRepository(session, user_id),
            }
        )
