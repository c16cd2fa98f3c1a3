"""Services package."""

from finance_api.services.backup_export_service import BackupExporter, ExportedBackup
from finance_api.services.backup_import_service import BackupImporter, build_merge_plan
from finance_api.services.backup_service import BackupService
from finance_api.services.backup_validation_service import BackupValidator
from finance_api.services.integrity_service import ReferentialIntegrityChecker

__all__ = [
    "BackupExporter",
    "BackupImporter",
    "BackupService",
    "BackupValidator",
    "ExportedBackup",
    "ReferentialIntegrityChecker",
    "build_merge_plan",
]
