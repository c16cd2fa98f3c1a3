"""Supplier repository."""

from finance_api.models.orm.supplier import SupplierORM
from finance_api.repositories.base import BaseRepository


class SupplierRepository(BaseRepository[SupplierORM]):
    """Repository for supplier operations."""

    model = SupplierORM
