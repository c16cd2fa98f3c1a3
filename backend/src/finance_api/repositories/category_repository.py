"""Category repository."""

from finance_api.models.orm.category import CategoryORM
from finance_api.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[CategoryORM]):
    """Repository for category operations."""

    model = CategoryORM
