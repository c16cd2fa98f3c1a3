"""Shared fixtures for the backup test suite."""

import copy
import json
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from finance_api.config import Settings
from finance_api.constants.backup import BACKUP_SCHEMA_VERSION, ENTITY_TYPES
from finance_api.models.domain.user import CurrentUser
from finance_api.models.orm import Base
from finance_api.utils.checksum import compute_checksum

USER_ID = UUID("6f1c2a3e-8d4b-4c1a-9e2f-0a1b2c3d4e5f")
OTHER_USER_ID = UUID("0b9e8d7c-6f5a-4b3c-8d2e-1f0a9b8c7d6e")

SAMPLE_DATA: dict[str, list[dict[str, Any]]] = {
    "profiles": [
        {"id": "p1", "full_name": "Maria Souza", "phone": "+5511987654321", "company_name": "JC Comércio"},
    ],
    "categories": [
        {"id": "c1", "name": "Aluguel", "type": "expense", "color": "#ef4444"},
        {"id": "c2", "name": "Vendas", "type": "income", "color": "#22c55e"},
    ],
    "suppliers": [
        {"id": "s1", "name": "Imobiliária Central", "document": "12.345.678/0001-90"},
    ],
    "banks": [
        {"id": "b1", "name": "Banco do Brasil", "code": "001"},
    ],
    "bank_accounts": [
        {
            "id": "ba1",
            "bank_id": "b1",
            "agency": "1234",
            "account_number": "56789-0",
            "account_type": "checking",
            "initial_balance": "1000.00",
            "current_balance": "1500.00",
        },
        {
            "id": "ba2",
            "bank_id": "b1",
            "agency": "1234",
            "account_number": "11111-2",
            "account_type": "savings",
            "initial_balance": "0.00",
            "current_balance": "300.00",
        },
    ],
    "accounts_payable": [
        {
            "id": "ap1",
            "description": "Aluguel março",
            "amount": "1200.00",
            "due_date": "2024-03-10",
            "status": "paid",
            "category_id": "c1",
            "supplier_id": "s1",
            "bank_account_id": "ba1",
        },
    ],
    "accounts_receivable": [
        {
            "id": "ar1",
            "description": "Pedido 42",
            "amount": "800.00",
            "due_date": "2024-03-15",
            "status": "received",
            "customer_name": "Padaria Estrela",
            "category_id": "c2",
            "bank_account_id": "ba1",
        },
    ],
    "transactions": [
        {
            "id": "t1",
            "type": "expense",
            "amount": "1200.00",
            "date": "2024-03-10",
            "from_account_id": "ba1",
            "accounts_payable_id": "ap1",
            "category_id": "c1",
        },
        {
            "id": "t2",
            "type": "income",
            "amount": "800.00",
            "date": "2024-03-16",
            "to_account_id": "ba1",
            "accounts_receivable_id": "ar1",
            "category_id": "c2",
        },
        {
            "id": "t3",
            "type": "transfer",
            "amount": "300.00",
            "date": "2024-03-20",
            "from_account_id": "ba1",
            "to_account_id": "ba2",
        },
    ],
}


class InMemoryRepository:
    """Entity store backed by a list, with switchable failures."""

    def __init__(
        self,
        records: list[dict[str, Any]] | None = None,
        fail_ids: set[Any] | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self.records = list(records or [])
        self.fail_ids = fail_ids or set()
        self.list_error = list_error
        self.created: list[dict[str, Any]] = []

    async def list_all(self) -> list[dict[str, Any]]:
        if self.list_error is not None:
            raise self.list_error
        return copy.deepcopy(self.records)

    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        if record.get("id") in self.fail_ids:
            raise ValueError(f"duplicate key {record['id']}")
        self.records.append(record)
        self.created.append(record)
        return record


@pytest.fixture()
def user() -> CurrentUser:
    return CurrentUser(id=USER_ID, phone="+5511987654321", email="maria@example.com")


@pytest.fixture()
def other_user() -> CurrentUser:
    return CurrentUser(id=OTHER_USER_ID, phone="+5521912345678")


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, debug=False, environment="development")


@pytest.fixture()
def sample_data() -> dict[str, list[dict[str, Any]]]:
    return copy.deepcopy(SAMPLE_DATA)


@pytest.fixture()
def make_repositories() -> Callable[..., dict[str, InMemoryRepository]]:
    """Factory for a full set of in-memory repositories.

    Keyword arguments replace the repository of that entity type.
    """

    def _make(data: dict[str, list[dict[str, Any]]] | None = None, **overrides: InMemoryRepository):
        data = data or {}
        repositories = {
            entity_type: InMemoryRepository(copy.deepcopy(data.get(entity_type, [])))
            for entity_type in ENTITY_TYPES
        }
        repositories.update(overrides)
        return repositories

    return _make


@pytest.fixture()
def build_backup(user: CurrentUser) -> Callable[..., dict[str, Any]]:
    """Factory for a well-formed backup payload with correct counts and checksum.

    Keyword arguments replace top-level sections after the checksum is computed.
    """

    def _build(
        data: dict[str, list[dict[str, Any]]] | None = None,
        owner_id: UUID | None = None,
        **overrides: Any,
    ) -> dict[str, Any]:
        source = copy.deepcopy(SAMPLE_DATA) if data is None else data
        full = {entity_type: source.get(entity_type, []) for entity_type in ENTITY_TYPES}
        payload = {
            "app": {"name": "JC Financeiro", "version": "1.0.0"},
            "schema_version": BACKUP_SCHEMA_VERSION,
            "exported_at": "2024-05-01T10:30:00Z",
            "owner": {"user_id": str(owner_id or user.id), "phone": user.phone},
            "counts": {entity_type: len(records) for entity_type, records in full.items()},
            "data": full,
            "checksum": {"algo": "sha256", "value": compute_checksum(full, BACKUP_SCHEMA_VERSION)},
            "meta": {"generated_by": "backupService@web", "notes": None},
        }
        payload.update(overrides)
        return payload

    return _build


def encode(payload: Any) -> bytes:
    """Serialize a payload the way a backup file is stored."""
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


@asynccontextmanager
async def sqlite_session(db_path: Path) -> AsyncIterator[AsyncSession]:
    """Session on a fresh SQLite database with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")

    # Let SQLAlchemy emit BEGIN itself so SAVEPOINT works on SQLite, and
    # enforce foreign keys as PostgreSQL does
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            yield session
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(tmp_path: Path) -> AsyncIterator[AsyncSession]:
    async with sqlite_session(tmp_path / "source.db") as session:
        yield session


@pytest_asyncio.fixture
async def restore_session(tmp_path: Path) -> AsyncIterator[AsyncSession]:
    async with sqlite_session(tmp_path / "restore.db") as session:
        yield session
