"""Transaction repository."""

from typing import Any

from sqlalchemy import select

from finance_api.models.orm.transaction import TransactionORM
from finance_api.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[TransactionORM]):
    """Repository for transaction operations."""

    model = TransactionORM

    async def list_all(self) -> list[dict[str, Any]]:
        """Get all transactions of the current user in booking order."""
        result = await self.session.execute(
            select(TransactionORM)
            .where(TransactionORM.user_id == self.user_id)
            .order_by(TransactionORM.date, TransactionORM.created_at, TransactionORM.id)
        )
        return [self.to_dict(transaction) for transaction in result.scalars().all()]
