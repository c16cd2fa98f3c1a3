"""Backup DTOs for export/import functionality."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_api.constants.backup import DEFAULT_CHUNK_SIZE

RecordCount = Annotated[int, Field(ge=0, strict=True)]
RecordList = list[dict[str, Any]]


class IssueLevel(StrEnum):
    """Severity of a validation issue. Only errors invalidate a backup."""

    ERROR = "error"
    WARNING = "warning"


class IssueType(StrEnum):
    """Category of a validation issue."""

    SCHEMA = "schema"
    INTEGRITY = "integrity"
    CHECKSUM = "checksum"
    PERMISSION = "permission"


class ImportStrategy(StrEnum):
    """How backup records are applied to the target store."""

    MERGE = "merge"
    REPLACE = "replace"


# =============================================================================
# Backup file
# =============================================================================


class BackupApp(BaseModel):
    """Producer identity (informational only)."""

    name: str
    version: str


class BackupOwner(BaseModel):
    """Account the backup was taken from."""

    user_id: UUID
    phone: str


class BackupCounts(BaseModel):
    """Number of records per entity type at export time."""

    profiles: RecordCount
    categories: RecordCount
    suppliers: RecordCount
    banks: RecordCount
    bank_accounts: RecordCount
    accounts_payable: RecordCount
    accounts_receivable: RecordCount
    transactions: RecordCount


class BackupData(BaseModel):
    """Entity collections. Each record is an opaque JSON object."""

    profiles: RecordList
    categories: RecordList
    suppliers: RecordList
    banks: RecordList
    bank_accounts: RecordList
    accounts_payable: RecordList
    accounts_receivable: RecordList
    transactions: RecordList

    def records(self, entity_type: str) -> RecordList:
        """Get the records of one entity type."""
        return getattr(self, entity_type)


class BackupChecksum(BaseModel):
    """Digest over the canonical serialization of data and schema version."""

    algo: str
    value: str


class BackupMeta(BaseModel):
    """Free-form provenance."""

    generated_by: str
    notes: str | None = None


class BackupFile(BaseModel):
    """Root of a backup file. Immutable once produced."""

    app: BackupApp
    schema_version: str
    exported_at: datetime
    owner: BackupOwner
    counts: BackupCounts
    data: BackupData
    checksum: BackupChecksum
    meta: BackupMeta


# =============================================================================
# Validation
# =============================================================================


class ValidationIssue(BaseModel):
    """Single finding of a validation pass."""

    level: IssueLevel
    type: IssueType
    message: str
    details: Any = None


class BackupPreview(BaseModel):
    """Summary of what a backup contains."""

    total_records: int = 0
    record_counts: dict[str, int] = Field(default_factory=dict)
    sample_data: dict[str, RecordList] = Field(default_factory=dict)


class ValidationReport(BaseModel):
    """Outcome of validating an untrusted backup file."""

    valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    preview: BackupPreview = Field(default_factory=BackupPreview)

    @property
    def error_issues(self) -> list[ValidationIssue]:
        """Issues that invalidate the backup."""
        return [issue for issue in self.issues if issue.level == IssueLevel.ERROR]

    @property
    def warning_issues(self) -> list[ValidationIssue]:
        """Issues that are reported but do not block an import."""
        return [issue for issue in self.issues if issue.level == IssueLevel.WARNING]


# =============================================================================
# Import
# =============================================================================


class ImportOptions(BaseModel):
    """Import execution options."""

    dry_run: bool = False
    strategy: ImportStrategy = ImportStrategy.MERGE
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)


class ImportSummary(BaseModel):
    """Per entity type outcome counters."""

    created: dict[str, int] = Field(default_factory=dict)
    updated: dict[str, int] = Field(default_factory=dict)
    deleted: dict[str, int] = Field(default_factory=dict)
    errors: dict[str, int] = Field(default_factory=dict)


class ImportResult(BaseModel):
    """Outcome of an import attempt."""

    success: bool = False
    summary: ImportSummary = Field(default_factory=ImportSummary)
    errors: list[str] = Field(default_factory=list)
    duration_ms: float = 0.0
    batch_id: UUID = Field(default_factory=uuid4)
    dry_run: bool = False
