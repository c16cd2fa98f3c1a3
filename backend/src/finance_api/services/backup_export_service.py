"""Backup export: snapshot every collection of one user into a signed file."""

import json
import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Mapping

from pydantic_core import to_jsonable_python

from finance_api.config import Settings, get_settings
from finance_api.constants.backup import BACKUP_SCHEMA_VERSION, CHECKSUM_ALGORITHM, ENTITY_TYPES
from finance_api.exceptions import BackupExportError, NotAuthenticatedError
from finance_api.models.domain.user import CurrentUser
from finance_api.models.dto.backup import (
    BackupApp,
    BackupChecksum,
    BackupCounts,
    BackupData,
    BackupFile,
    BackupMeta,
    BackupOwner,
)
from finance_api.repositories.base import EntityRepository
from finance_api.utils.checksum import compute_checksum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedBackup:
    """A produced backup: the envelope, its serialized bytes and a file name."""

    backup: BackupFile
    content: bytes
    filename: str


def generate_file_name(app_name: str, now: datetime | None = None) -> str:
    """Build a download file name such as ``backup_jc_financeiro_2024-05-01T10-30-00Z.json``."""
    now = now or datetime.now(UTC)
    slug = re.sub(r"[^a-z0-9]+", "_", app_name.lower()).strip("_") or "finance"
    timestamp = now.astimezone(UTC).strftime("%Y-%m-%dT%H-%M-%S")
    return f"backup_{slug}_{timestamp}Z.json"


class BackupExporter:
    """Assembles a complete, checksummed backup from the entity repositories."""

    def __init__(
        self,
        repositories: Mapping[str, EntityRepository],
        settings: Settings | None = None,
    ) -> None:
        """Initialize exporter.

        Args:
            repositories: Repository per entity type, all eight are required
            settings: Application settings, defaults to the cached instance
        """
        self.repositories = repositories
        self.settings = settings or get_settings()

    async def export_all(self, user: CurrentUser | None) -> ExportedBackup:
        """Export every collection of the user.

        Export is all-or-nothing: if any collection cannot be read, no file
        is produced.

        Args:
            user: Authenticated user whose data is exported

        Returns:
            Exported backup with serialized JSON content

        Raises:
            NotAuthenticatedError: If there is no current user
            BackupExportError: If a collection cannot be read
        """
        if user is None:
            raise NotAuthenticatedError()

        logger.info(f"Starting backup export for user {user.id}")
        data = await self._collect_data()
        counts = {entity_type: len(records) for entity_type, records in data.items()}

        backup = BackupFile(
            app=BackupApp(name=self.settings.app_name, version=self.settings.app_version),
            schema_version=BACKUP_SCHEMA_VERSION,
            exported_at=datetime.now(UTC),
            owner=BackupOwner(user_id=user.id, phone=self._owner_phone(user, data)),
            counts=BackupCounts(**counts),
            data=BackupData(**data),
            checksum=BackupChecksum(
                algo=CHECKSUM_ALGORITHM,
                value=compute_checksum(data, BACKUP_SCHEMA_VERSION),
            ),
            meta=BackupMeta(generated_by=self.settings.backup_generated_by, notes=None),
        )

        content = json.dumps(
            backup.model_dump(mode="json"),
            indent=2,
            ensure_ascii=False,
        ).encode("utf-8")

        logger.info(
            f"Backup export finished: {sum(counts.values())} records, {len(content)} bytes"
        )
        return ExportedBackup(
            backup=backup,
            content=content,
            filename=generate_file_name(self.settings.app_name, backup.exported_at),
        )

    async def _collect_data(self) -> dict[str, list[dict[str, Any]]]:
        """Fetch all collections and normalize them to JSON-native values.

        Collections are read one after another because the repositories share
        a single database session.
        """
        data: dict[str, list[dict[str, Any]]] = {}
        for entity_type in ENTITY_TYPES:
            repository = self.repositories.get(entity_type)
            if repository is None:
                logger.error(f"Backup export failed: no repository for {entity_type}")
                raise BackupExportError(entity_type)
            try:
                records = await repository.list_all()
            except Exception as e:
                logger.error(f"Backup export failed reading {entity_type}: {e}", exc_info=True)
                raise BackupExportError(entity_type) from e
            # Decimal -> str, date/datetime -> ISO 8601, UUID -> str
            data[entity_type] = to_jsonable_python(records)
        return data

    @staticmethod
    def _owner_phone(user: CurrentUser, data: dict[str, list[dict[str, Any]]]) -> str:
        """Phone of the account owner, preferring the stored profile."""
        for profile in data["profiles"]:
            if profile.get("phone"):
                return str(profile["phone"])
        return user.phone or ""
