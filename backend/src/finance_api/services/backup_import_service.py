"""Backup import: replay validated backup records through the repositories.

Records are created stage by stage in dependency order (parents before the
records that reference them), each stage split into chunks. A failing record
is counted and reported, never rolled back, and never stops the import.
"""

import asyncio
import copy
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from finance_api.constants.backup import DEFAULT_CHUNK_SIZE, MERGE_IMPORT_ORDER
from finance_api.exceptions import UnsupportedImportStrategyError
from finance_api.models.dto.backup import BackupFile, ImportOptions, ImportResult, ImportStrategy
from finance_api.repositories.base import EntityRepository

logger = logging.getLogger(__name__)

# (1-based position in the collection, record)
NumberedRecord = tuple[int, dict[str, Any]]


@dataclass(frozen=True)
class ImportStage:
    """One step of an import plan: which entity type, in chunks of what size."""

    entity_type: str
    chunk_size: int


def describe_failure(error: Exception) -> str:
    """Short cause of a failed record, without SQL statements or bound values."""
    if isinstance(error, DBAPIError) and error.orig is not None:
        cause = str(error.orig).splitlines()
        return cause[0] if cause else type(error.orig).__name__
    if isinstance(error, SQLAlchemyError):
        return type(error).__name__
    return str(error) or type(error).__name__


def build_merge_plan(chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[ImportStage, ...]:
    """Build the ordered stages of a merge import.

    Args:
        chunk_size: Records per chunk

    Returns:
        Stages in dependency order

    Raises:
        ValueError: If chunk_size is not positive
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    return tuple(ImportStage(entity_type, chunk_size) for entity_type in MERGE_IMPORT_ORDER)


def chunked(items: Sequence[NumberedRecord], size: int) -> Iterator[Sequence[NumberedRecord]]:
    """Split items into consecutive slices of at most size elements."""
    for start in range(0, len(items), size):
        yield items[start : start + size]


class BackupImporter:
    """Imports a parsed backup with the merge strategy."""

    def __init__(
        self,
        repositories: Mapping[str, EntityRepository],
        concurrency: int = 1,
    ) -> None:
        """Initialize importer.

        Args:
            repositories: Repository per entity type
            concurrency: Creates allowed in flight within one chunk
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.repositories = repositories
        self.concurrency = concurrency

    async def import_from_backup(
        self,
        backup: BackupFile,
        options: ImportOptions | None = None,
    ) -> ImportResult:
        """Import a backup.

        The backup must already have passed validation. ``backup`` is never
        modified; each repository receives its own copy of a record.

        Args:
            backup: Parsed backup file
            options: Strategy, dry run flag and chunk size

        Returns:
            Import result; ``success`` is False if any record failed

        Raises:
            UnsupportedImportStrategyError: For any strategy other than merge
        """
        options = options or ImportOptions()
        started = time.perf_counter()

        if options.strategy != ImportStrategy.MERGE:
            raise UnsupportedImportStrategyError(options.strategy)

        result = ImportResult(dry_run=options.dry_run)

        if options.dry_run:
            logger.info(f"Dry run import {result.batch_id}: no records written")
            result.success = True
            result.duration_ms = (time.perf_counter() - started) * 1000
            return result

        logger.info(
            f"Starting merge import {result.batch_id} "
            f"(chunk size {options.chunk_size}, concurrency {self.concurrency})"
        )
        semaphore = asyncio.Semaphore(self.concurrency)

        for stage in build_merge_plan(options.chunk_size):
            await self._run_stage(stage, backup.data.records(stage.entity_type), result, semaphore)

        result.success = not result.errors
        result.duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Merge import {result.batch_id} finished in {result.duration_ms:.0f}ms: "
            f"created={sum(result.summary.created.values())}, "
            f"failed={sum(result.summary.errors.values())}"
        )
        return result

    async def _run_stage(
        self,
        stage: ImportStage,
        records: list[dict[str, Any]],
        result: ImportResult,
        semaphore: asyncio.Semaphore,
    ) -> None:
        """Create all records of one entity type, chunk by chunk."""
        entity_type = stage.entity_type
        result.summary.created[entity_type] = 0
        result.summary.updated[entity_type] = 0
        result.summary.errors[entity_type] = 0

        if not records:
            return

        repository = self.repositories.get(entity_type)
        if repository is None:
            result.summary.errors[entity_type] = len(records)
            message = f"Failed to import {entity_type}: no repository available"
            result.errors.append(message)
            logger.warning(message)
            return

        numbered: list[NumberedRecord] = list(enumerate(records, start=1))
        total_chunks = (len(numbered) + stage.chunk_size - 1) // stage.chunk_size

        for index, chunk in enumerate(chunked(numbered, stage.chunk_size), start=1):
            await asyncio.gather(
                *(
                    self._import_record(repository, entity_type, position, record, result, semaphore)
                    for position, record in chunk
                )
            )
            logger.debug(f"Imported {entity_type} chunk {index}/{total_chunks} ({len(chunk)} records)")

        logger.info(
            f"Imported {entity_type}: {result.summary.created[entity_type]} created, "
            f"{result.summary.errors[entity_type]} failed"
        )

    async def _import_record(
        self,
        repository: EntityRepository,
        entity_type: str,
        position: int,
        record: dict[str, Any],
        result: ImportResult,
        semaphore: asyncio.Semaphore,
    ) -> None:
        """Create one record, recording the outcome in result."""
        async with semaphore:
            try:
                await repository.create(copy.deepcopy(record))
            except Exception as e:
                result.summary.errors[entity_type] += 1
                message = f"Failed to import {entity_type} record {position}: {describe_failure(e)}"
                result.errors.append(message)
                logger.warning(f"Failed to import {entity_type} record {position}: {e}")
            else:
                result.summary.created[entity_type] += 1
