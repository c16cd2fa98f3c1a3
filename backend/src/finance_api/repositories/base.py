"""Base repository with the operations the backup subsystem relies on."""

import logging
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, Protocol, TypeVar
from uuid import UUID

from sqlalchemy import Column, Date, DateTime, Numeric, String, Uuid, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_api.models.orm.base import Base, generate_record_id

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)


class EntityRepository(Protocol):
    """What the exporter and importer need from a per-entity store."""

    async def list_all(self) -> list[dict[str, Any]]:
        """Return every record of the current user."""
        ...

    async def create(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Create one record and return it as stored."""
        ...


class BaseRepository(Generic[T]):
    """SQLAlchemy repository scoped to one user account.

    Records cross this boundary as plain dicts keyed by column name, which is
    the shape they have inside a backup file.
    """

    model: type[T]

    def __init__(self, session: AsyncSession, user_id: UUID) -> None:
        """Initialize repository with database session and owning user."""
        self.session = session
        self.user_id = user_id

    async def get(self, id: str) -> T | None:
        """Get a record of the current user by ID.

        Args:
            id: Record ID

        Returns:
            Record or None if not found
        """
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == str(id),
                self.model.user_id == self.user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[dict[str, Any]]:
        """Get all records of the current user, oldest first.

        Returns:
            List of records as dicts
        """
        result = await self.session.execute(
            select(self.model)
            .where(self.model.user_id == self.user_id)
            .order_by(self.model.created_at, self.model.id)
        )
        return [self.to_dict(instance) for instance in result.scalars().all()]

    async def count(self) -> int:
        """Count records of the current user.

        Returns:
            Total count
        """
        result = await self.session.execute(
            select(func.count()).select_from(self.model).where(self.model.user_id == self.user_id)
        )
        return result.scalar_one()

    async def create(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Create a record from a backup-shaped dict.

        The record keeps its own ``id`` (a new one is generated when absent)
        and always belongs to the repository's user. Keys that are not
        columns of the model are ignored. References must point at rows of
        the same user: an unresolved optional reference is cleared, an
        unresolved required one rejects the record. The insert runs in a
        SAVEPOINT so a failing record leaves the surrounding transaction
        usable.

        Args:
            record: Field values keyed by column name

        Returns:
            Created record as dict

        Raises:
            ValueError: If a value cannot be converted to its column type, or a
                required reference does not resolve
            SQLAlchemyError: If the database rejects the row
        """
        values = self._values_from_record(record)
        await self._resolve_references(values)
        instance = self.model(**values)
        async with self.session.begin_nested():
            self.session.add(instance)
        await self.session.refresh(instance)
        return self.to_dict(instance)

    def to_dict(self, instance: T) -> dict[str, Any]:
        """Convert ORM object to dict, keyed by database column name."""
        mapper = inspect(instance.__class__)
        return {
            prop.columns[0].name: getattr(instance, prop.key)
            for prop in mapper.column_attrs
        }

    def _values_from_record(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Map a record onto model attributes, converting values per column type."""
        mapper = inspect(self.model)
        values: dict[str, Any] = {}

        for prop in mapper.column_attrs:
            column = prop.columns[0]
            if column.name in ("id", "user_id") or column.name not in record:
                continue
            values[prop.key] = self._coerce(column, record[column.name])

        record_id = record.get("id")
        values["id"] = str(record_id) if record_id not in (None, "") else generate_record_id()
        values["user_id"] = self.user_id
        return values

    @staticmethod
    def _coerce(column: Column, value: Any) -> Any:
        """Convert a JSON value to what the column type expects."""
        if value is None:
            return None

        column_type = column.type
        try:
            if isinstance(column_type, DateTime):
                return value if isinstance(value, datetime) else datetime.fromisoformat(value)
            if isinstance(column_type, Date):
                if isinstance(value, datetime):
                    return value.date()
                return value if isinstance(value, date) else date.fromisoformat(value)
            if isinstance(column_type, Numeric):
                return value if isinstance(value, Decimal) else Decimal(str(value))
            if isinstance(column_type, Uuid):
                return value if isinstance(value, UUID) else UUID(str(value))
            if isinstance(column_type, String) and isinstance(value, (int, float)):
                return str(value)
        except (ValueError, TypeError, InvalidOperation) as e:
            raise ValueError(f"Invalid value for {column.name}: {value!r}") from e

        return value

    async def _resolve_references(self, values: dict[str, Any]) -> None:
        """Check every foreign key value against the current user's rows.

        Args:
            values: Model attribute values, updated in place

        Raises:
            ValueError: If a non-nullable reference does not resolve
        """
        mapper = inspect(self.model)

        for prop in mapper.column_attrs:
            column = prop.columns[0]
            value = values.get(prop.key)
            if value is None or not column.foreign_keys:
                continue

            target = next(iter(column.foreign_keys)).column.table
            result = await self.session.execute(
                select(target.c.id).where(
                    target.c.id == value,
                    target.c.user_id == self.user_id,
                )
            )
            if result.first() is not None:
                continue

            if not column.nullable:
                raise ValueError(f"{column.name} {value} not found")
            logger.warning(
                f"Clearing {self.model.__tablename__}.{column.name}: "
                f"{target.name} {value} not found for user"
            )
            values[prop.key] = None
