"""Backup service: export, validate and import one user's data."""

import json
import logging
from collections.abc import Mapping

from finance_api.config import Settings, get_settings
from finance_api.exceptions import BackupValidationError
from finance_api.models.domain.user import CurrentUser
from finance_api.models.dto.backup import BackupFile, ImportOptions, ImportResult, ValidationReport
from finance_api.repositories.base import EntityRepository
from finance_api.services.backup_export_service import BackupExporter, ExportedBackup
from finance_api.services.backup_import_service import BackupImporter
from finance_api.services.backup_validation_service import BackupValidator

logger = logging.getLogger(__name__)


class BackupService:
    """Service for backup export and import."""

    def __init__(
        self,
        repositories: Mapping[str, EntityRepository],
        user: CurrentUser | None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repositories: Repository per entity type, scoped to ``user``
            user: Current user, None when unauthenticated
            settings: Application settings, defaults to the cached instance
        """
        self.settings = settings or get_settings()
        self.user = user
        self.exporter = BackupExporter(repositories, self.settings)
        self.importer = BackupImporter(repositories, self.settings.backup_import_concurrency)
        self.validator = BackupValidator(max_size_bytes=self.settings.backup_max_size_bytes)

    async def export_backup(self) -> ExportedBackup:
        """Export all data of the current user."""
        return await self.exporter.export_all(self.user)

    def validate_backup(self, raw: bytes | str) -> ValidationReport:
        """Validate a backup file for import by the current user."""
        return self.validator.validate(raw, self.user.id if self.user else None)

    async def import_backup(
        self,
        raw: bytes | str,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """Validate and import a backup file.

        Args:
            raw: File content
            options: Import options, chunk size defaults to the configured one

        Returns:
            Import result

        Raises:
            BackupValidationError: If the file did not pass validation
            UnsupportedImportStrategyError: If the strategy is not merge
        """
        options = options or ImportOptions(chunk_size=self.settings.backup_import_chunk_size)

        report = self.validate_backup(raw)
        if not report.valid:
            logger.warning(
                f"Rejected backup import: {len(report.error_issues)} validation error(s)"
            )
            raise BackupValidationError(report)

        for issue in report.warning_issues:
            logger.info(f"Importing backup despite warning: {issue.message}")

        backup = BackupFile.model_validate(json.loads(raw))
        return await self.importer.import_from_backup(backup, options)
