"""Validation of untrusted backup files.

Validation never raises for bad content. Every problem becomes a
``ValidationIssue`` and the caller decides whether to proceed. Only a file
that cannot be parsed at all, or that does not have the backup shape, stops
the checks early.
"""

import json
import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from finance_api.constants.backup import (
    BACKUP_SCHEMA_VERSION,
    CHECKSUM_ALGORITHM,
    ENTITY_TYPES,
    MAX_BACKUP_SIZE_MB,
    PREVIEW_SAMPLE_SIZE,
)
from finance_api.models.dto.backup import (
    BackupFile,
    BackupPreview,
    IssueLevel,
    IssueType,
    ValidationIssue,
    ValidationReport,
)
from finance_api.services.integrity_service import ReferentialIntegrityChecker
from finance_api.utils.checksum import compute_checksum

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    """Refuse NaN and Infinity, which are not valid JSON."""
    raise ValueError(f"Invalid JSON constant: {name}")


def _as_uuid(value: UUID | str) -> UUID | None:
    """Parse an identity into a UUID, None if it is not one."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class BackupValidator:
    """Validates backup files against the supported format and the current user."""

    def __init__(
        self,
        max_size_bytes: int | None = None,
        supported_version: str = BACKUP_SCHEMA_VERSION,
        integrity_checker: ReferentialIntegrityChecker | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            max_size_bytes: Largest accepted file, defaults to MAX_BACKUP_SIZE_MB
            supported_version: Schema version this validator understands
            integrity_checker: Checker for cross-entity references
        """
        self.max_size_bytes = (
            max_size_bytes if max_size_bytes is not None else MAX_BACKUP_SIZE_MB * 1024 * 1024
        )
        self.supported_version = supported_version
        self.integrity_checker = integrity_checker or ReferentialIntegrityChecker()

    def validate(
        self,
        raw: bytes | str,
        current_user_id: UUID | str | None,
    ) -> ValidationReport:
        """Validate a backup file.

        Args:
            raw: File content
            current_user_id: Identity of the user who wants to import, None if unauthenticated

        Returns:
            Validation report; ``valid`` is False when any error-level issue was found
        """
        issues: list[ValidationIssue] = []

        size = len(raw) if isinstance(raw, bytes) else len(raw.encode("utf-8"))
        if size > self.max_size_bytes:
            issues.append(
                self._issue(
                    IssueType.SCHEMA,
                    f"Backup file too large (maximum {self.max_size_bytes // 1024 // 1024}MB)",
                    {"size": size, "max_size": self.max_size_bytes},
                )
            )

        try:
            payload = json.loads(raw, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            issues.append(self._issue(IssueType.SCHEMA, f"Could not read backup: {e}"))
            logger.warning(f"Backup validation failed: unreadable file ({size} bytes)")
            return ValidationReport(valid=False, issues=issues)

        metadata = self._header_fields(payload)

        try:
            backup = BackupFile.model_validate(payload)
        except ValidationError as e:
            issues.append(
                self._issue(
                    IssueType.SCHEMA,
                    "Invalid backup format",
                    [
                        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
                        for err in e.errors(include_url=False)
                    ],
                )
            )
            logger.warning(f"Backup validation failed: {e.error_count()} schema error(s)")
            return ValidationReport(valid=False, issues=issues, metadata=metadata)

        # The checksum and previews use the data exactly as it was in the file
        raw_data: dict[str, list[dict[str, Any]]] = payload["data"]

        if backup.schema_version != self.supported_version:
            issues.append(
                self._issue(
                    IssueType.SCHEMA,
                    f"Unsupported schema version: {backup.schema_version}",
                    {"found": backup.schema_version, "supported": self.supported_version},
                )
            )

        issues.extend(self._check_owner(backup, current_user_id))
        issues.extend(self._check_counts(backup, raw_data))
        issues.extend(self._check_checksum(backup, raw_data))
        issues.extend(self.integrity_checker.check(raw_data))

        counts = backup.counts.model_dump()
        preview = BackupPreview(
            total_records=sum(counts.values()),
            record_counts=counts,
            sample_data={
                entity_type: raw_data[entity_type][:PREVIEW_SAMPLE_SIZE]
                for entity_type in ENTITY_TYPES
            },
        )

        report = ValidationReport(
            valid=not any(issue.level == IssueLevel.ERROR for issue in issues),
            issues=issues,
            metadata=metadata,
            preview=preview,
        )
        logger.info(
            f"Backup validation finished: valid={report.valid}, "
            f"errors={len(report.error_issues)}, warnings={len(report.warning_issues)}"
        )
        return report

    def _check_owner(
        self,
        backup: BackupFile,
        current_user_id: UUID | str | None,
    ) -> list[ValidationIssue]:
        """Check that the backup belongs to the importing user."""
        if current_user_id is None:
            return [self._issue(IssueType.PERMISSION, "Authentication required to import a backup")]

        if backup.owner.user_id != _as_uuid(current_user_id):
            return [self._issue(IssueType.PERMISSION, "This backup belongs to another user")]

        return []

    def _check_counts(
        self,
        backup: BackupFile,
        raw_data: dict[str, list[dict[str, Any]]],
    ) -> list[ValidationIssue]:
        """Check declared record counts against the actual collections."""
        issues = []
        for entity_type in ENTITY_TYPES:
            expected = getattr(backup.counts, entity_type)
            actual = len(raw_data[entity_type])
            if expected != actual:
                issues.append(
                    self._issue(
                        IssueType.INTEGRITY,
                        f"Record count mismatch for {entity_type}: expected {expected}, found {actual}",
                        {"entity_type": entity_type, "expected": expected, "found": actual},
                    )
                )
        return issues

    def _check_checksum(
        self,
        backup: BackupFile,
        raw_data: dict[str, list[dict[str, Any]]],
    ) -> list[ValidationIssue]:
        """Recompute the checksum and compare it to the stamped one."""
        if backup.checksum.algo.lower() != CHECKSUM_ALGORITHM:
            return [
                self._issue(
                    IssueType.CHECKSUM,
                    f"Unsupported checksum algorithm: {backup.checksum.algo}",
                    {"found": backup.checksum.algo, "supported": CHECKSUM_ALGORITHM},
                )
            ]

        calculated = compute_checksum(raw_data, backup.schema_version)
        if calculated != backup.checksum.value.lower():
            return [
                self._issue(
                    IssueType.CHECKSUM,
                    "Invalid checksum: data may be corrupted or tampered with",
                    {"expected": backup.checksum.value, "calculated": calculated},
                )
            ]

        return []

    @staticmethod
    def _header_fields(payload: Any) -> dict[str, Any]:
        """Everything in the file except the data collections."""
        if not isinstance(payload, dict):
            return {}
        return {key: value for key, value in payload.items() if key != "data"}

    @staticmethod
    def _issue(issue_type: IssueType, message: str, details: Any = None) -> ValidationIssue:
        return ValidationIssue(
            level=IssueLevel.ERROR,
            type=issue_type,
            message=message,
            details=details,
        )
