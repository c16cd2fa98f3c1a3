"""Export, validate and import against a real database."""

import pytest

from conftest import encode
from finance_api.constants.backup import MERGE_IMPORT_ORDER
from finance_api.models.dto.backup import IssueLevel, IssueType
from finance_api.repositories import (
    AccountPayableRepository,
    BankRepository,
    CategoryRepository,
    RepositoryRegistry,
)
from finance_api.services.backup_service import BackupService

SCENARIO = {
    "banks": [{"id": 1, "name": "Banco A"}, {"id": 2, "name": "Banco B"}],
    "bank_accounts": [{"id": 1, "bank_id": 1, "agency": "0001"}],
    "accounts_payable": [
        {"id": 1, "description": "Internet", "amount": "99.90", "due_date": "2024-04-05", "category_id": 999},
    ],
}


class TestScenario:
    """Two banks, one account, one payable with an unknown category."""

    @pytest.mark.asyncio
    async def test_report(self, make_repositories, user, settings) -> None:
        service = BackupService(make_repositories(SCENARIO), user, settings)
        exported = await service.export_backup()
        report = service.validate_backup(exported.content)

        assert report.valid is True
        assert report.preview.total_records == 4
        assert len(report.issues) == 1
        issue = report.issues[0]
        assert issue.level == IssueLevel.WARNING
        assert issue.type == IssueType.INTEGRITY
        assert "999" in issue.message

    @pytest.mark.asyncio
    async def test_import(self, db_session, build_backup, user, settings) -> None:
        service = BackupService(RepositoryRegistry.for_user(db_session, user.id), user, settings)
        result = await service.import_backup(encode(build_backup(SCENARIO)))

        assert result.success is True
        assert result.summary.created["banks"] == 2
        assert result.summary.created["bank_accounts"] == 1
        assert result.summary.created["accounts_payable"] == 1
        assert await BankRepository(db_session, user.id).count() == 2
        payable = await AccountPayableRepository(db_session, user.id).get("1")
        assert payable.category_id is None

    @pytest.mark.asyncio
    async def test_import_does_not_link_other_users_rows(
        self, db_session, build_backup, user, other_user, settings
    ) -> None:
        await CategoryRepository(db_session, other_user.id).create({"id": "999", "name": "Fornecedores"})
        service = BackupService(RepositoryRegistry.for_user(db_session, user.id), user, settings)
        result = await service.import_backup(encode(build_backup(SCENARIO)))

        assert result.success is True
        payable = await AccountPayableRepository(db_session, user.id).get("1")
        assert payable.category_id is None
        assert await CategoryRepository(db_session, user.id).count() == 0


class TestRoundTrip:
    """A backup restores the same records into an empty database."""

    @pytest.mark.asyncio
    async def test_restore_into_empty_database(
        self, db_session, restore_session, build_backup, user, settings
    ) -> None:
        source = BackupService(RepositoryRegistry.for_user(db_session, user.id), user, settings)
        seeded = await source.import_backup(encode(build_backup()))
        assert seeded.success is True
        await db_session.commit()

        exported = await source.export_backup()
        assert source.validate_backup(exported.content).valid is True

        target = BackupService(RepositoryRegistry.for_user(restore_session, user.id), user, settings)
        restored = await target.import_backup(exported.content)
        assert restored.success is True
        await restore_session.commit()

        again = await target.export_backup()
        for entity_type in MERGE_IMPORT_ORDER:
            original = exported.backup.data.records(entity_type)
            copy = again.backup.data.records(entity_type)
            assert [record["id"] for record in copy] == [record["id"] for record in original]
            assert [record.get("amount") for record in copy] == [record.get("amount") for record in original]
        assert again.backup.counts == exported.backup.counts

    @pytest.mark.asyncio
    async def test_reimport_fails_per_record(self, db_session, build_backup, user, settings) -> None:
        service = BackupService(RepositoryRegistry.for_user(db_session, user.id), user, settings)
        await service.import_backup(encode(build_backup()))
        await db_session.commit()
        db_session.expunge_all()

        result = await service.import_backup(encode(build_backup()))

        assert result.success is False
        assert sum(result.summary.created.values()) == 0
        assert sum(result.summary.errors.values()) == 11
        assert result.errors[0].startswith("Failed to import categories record 1:")
        assert not any("INSERT" in message for message in result.errors)
        assert await BankRepository(db_session, user.id).count() == 1
