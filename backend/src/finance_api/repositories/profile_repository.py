"""Profile repository."""

from finance_api.models.orm.profile import ProfileORM
from finance_api.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[ProfileORM]):
    """Repository for profile operations."""

    model = ProfileORM
