"""Data Transfer Objects package."""

from finance_api.models.dto.backup import (
    BackupFile,
    ImportOptions,
    ImportResult,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "BackupFile",
    "ImportOptions",
    "ImportResult",
    "ValidationIssue",
    "ValidationReport",
]
