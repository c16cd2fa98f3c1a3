"""Domain-specific exceptions for the finance API.

These exceptions provide a clean separation between service-layer errors
and HTTP responses, avoiding string matching in routers.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from finance_api.models.dto.backup import ValidationReport


class FinanceAPIError(Exception):
    """Base exception for all finance API errors."""

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Authentication Errors (401)
# =============================================================================


class NotAuthenticatedError(FinanceAPIError):
    """Raised when an operation needs a current user and there is none."""

    def __init__(self) -> None:
        super().__init__("Authentication required")


# =============================================================================
# Backup Errors
# =============================================================================


class BackupError(FinanceAPIError):
    """Base class for backup export/import errors."""

    pass


class BackupExportError(BackupError):
    """Raised when a backup snapshot cannot be produced.

    Export is all-or-nothing, so any failed collection read ends up here.
    """

    def __init__(self, entity_type: str | None = None) -> None:
        details = {"entity_type": entity_type} if entity_type else {}
        super().__init__("Failed to generate backup", details)


class BackupValidationError(BackupError):
    """Raised when an import is attempted with a backup that failed validation."""

    def __init__(self, report: "ValidationReport") -> None:
        self.report = report
        error_count = sum(1 for issue in report.issues if issue.level == "error")
        super().__init__(
            "Backup file is invalid",
            {"error_count": error_count},
        )


class UnsupportedImportStrategyError(BackupError):
    """Raised for import strategies that are declared but not implemented."""

    def __init__(self, strategy: str) -> None:
        super().__init__(
            f"Unsupported import strategy: {strategy}",
            {"strategy": strategy, "supported": ["merge"]},
        )
