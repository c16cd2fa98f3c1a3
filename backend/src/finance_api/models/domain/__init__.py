"""Domain models package."""

from finance_api.models.domain.records import EntityType, TransactionType
from finance_api.models.domain.user import CurrentUser

__all__ = [
    "CurrentUser",
    "EntityType",
    "TransactionType",
]
