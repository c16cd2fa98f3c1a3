"""Referential integrity checks over an in-memory backup dataset."""

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from finance_api.models.domain.records import (
    FOREIGN_KEYS,
    RECORD_MODELS,
    BackupRecord,
    EntityType,
    TransactionRecord,
    TransactionType,
    is_present,
)
from finance_api.models.dto.backup import IssueLevel, IssueType, ValidationIssue

logger = logging.getLogger(__name__)

# Collections whose ids other records may point at
_REFERENCED_TYPES = (
    EntityType.BANKS,
    EntityType.CATEGORIES,
    EntityType.SUPPLIERS,
    EntityType.BANK_ACCOUNTS,
    EntityType.ACCOUNTS_PAYABLE,
    EntityType.ACCOUNTS_RECEIVABLE,
)

# Collections that hold references, in the order they are reported
_DEPENDENT_TYPES = (
    EntityType.BANK_ACCOUNTS,
    EntityType.ACCOUNTS_PAYABLE,
    EntityType.ACCOUNTS_RECEIVABLE,
    EntityType.TRANSACTIONS,
)

# Records are reported by their 1-based position in the collection
PositionedRecords = list[tuple[int, BackupRecord]]


class ReferentialIntegrityChecker:
    """Checks that every reference inside a backup resolves inside the same backup.

    The checker never stops at the first problem: every record of every
    dependent type is visited so one pass reports all defects.
    """

    def check(self, data: Mapping[str, list[dict[str, Any]]]) -> list[ValidationIssue]:
        """Check foreign keys and transaction shapes.

        Args:
            data: Entity collections keyed by entity type

        Returns:
            Integrity issues, in record order
        """
        issues: list[ValidationIssue] = []
        typed = self._parse_records(data, issues)

        ids: dict[EntityType, set[Any]] = {
            entity_type: {record.id for _, record in typed[entity_type] if record.id is not None}
            for entity_type in _REFERENCED_TYPES
        }

        for entity_type in _DEPENDENT_TYPES:
            foreign_keys = [fk for fk in FOREIGN_KEYS if fk.entity_type == entity_type]
            for position, record in typed[entity_type]:
                if isinstance(record, TransactionRecord):
                    issue = self._check_transaction_shape(position, record)
                    if issue is not None:
                        issues.append(issue)

                for fk in foreign_keys:
                    value = getattr(record, fk.field)
                    if not is_present(value) or value in ids[fk.target]:
                        continue
                    issues.append(
                        ValidationIssue(
                            level=fk.level,
                            type=IssueType.INTEGRITY,
                            message=f"{entity_type} record {position}: {fk.field} {value} not found",
                            details={
                                "entity_type": str(entity_type),
                                "record": position,
                                "field": fk.field,
                                "value": value,
                                "references": str(fk.target),
                            },
                        )
                    )

        if issues:
            logger.debug(f"Referential integrity check found {len(issues)} issue(s)")
        return issues

    def _parse_records(
        self,
        data: Mapping[str, list[dict[str, Any]]],
        issues: list[ValidationIssue],
    ) -> dict[EntityType, PositionedRecords]:
        """Build typed views, reporting records whose key fields are unusable."""
        typed: dict[EntityType, PositionedRecords] = {}

        for entity_type, model in RECORD_MODELS.items():
            parsed: PositionedRecords = []
            for position, raw in enumerate(data.get(entity_type, []), start=1):
                try:
                    parsed.append((position, model.model_validate(raw)))
                except ValidationError as e:
                    fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
                    issues.append(
                        ValidationIssue(
                            level=IssueLevel.ERROR,
                            type=IssueType.INTEGRITY,
                            message=(
                                f"{entity_type} record {position}: "
                                f"invalid value for {', '.join(fields)}"
                            ),
                            details={
                                "entity_type": str(entity_type),
                                "record": position,
                                "fields": fields,
                            },
                        )
                    )
            typed[entity_type] = parsed

        return typed

    def _check_transaction_shape(
        self,
        position: int,
        record: TransactionRecord,
    ) -> ValidationIssue | None:
        """Check that a transaction carries the account legs its type requires."""
        problem: str | None = None

        if record.type == TransactionType.INCOME:
            if not is_present(record.to_account_id):
                problem = "income must have to_account_id"
        elif record.type == TransactionType.EXPENSE:
            if not is_present(record.from_account_id):
                problem = "expense must have from_account_id"
        elif record.type == TransactionType.TRANSFER:
            if not is_present(record.from_account_id) or not is_present(record.to_account_id):
                problem = "transfer must have from_account_id and to_account_id"
            elif record.from_account_id == record.to_account_id:
                problem = "transfer cannot use the same source and destination account"

        if problem is None:
            return None
        return ValidationIssue(
            level=IssueLevel.ERROR,
            type=IssueType.INTEGRITY,
            message=f"transactions record {position}: {problem}",
            details={"entity_type": "transactions", "record": position, "type": record.type},
        )
