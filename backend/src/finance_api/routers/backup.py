"""Backup router for export, validation and import."""

import logging
from pathlib import PurePath
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from finance_api.config import Settings
from finance_api.constants.backup import ALLOWED_BACKUP_EXTENSIONS, BACKUP_MEDIA_TYPE
from finance_api.database import get_db
from finance_api.models.domain.user import CurrentUser
from finance_api.models.dto.backup import ImportOptions, ImportResult, ImportStrategy, ValidationReport
from finance_api.repositories.registry import RepositoryRegistry
from finance_api.security.auth import get_current_user, require_user
from finance_api.services.backup_service import BackupService

logger = logging.getLogger(__name__)

router = APIRouter()

# Chunk size for streaming reads
READ_CHUNK_SIZE = 64 * 1024  # 64KB


async def read_upload_with_limit(
    file: UploadFile,
    max_size: int,
) -> bytes:
    """Read an uploaded file with size limit.

    Reads the file in chunks and stops early if the max size is exceeded.

    Args:
        file: The uploaded file
        max_size: Maximum allowed file size in bytes

    Returns:
        The file content as bytes

    Raises:
        HTTPException: If file exceeds max_size
    """
    chunks = []
    total_size = 0

    while True:
        chunk = await file.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File too large. Maximum size: {max_size // 1024 // 1024}MB",
            )
        chunks.append(chunk)

    return b"".join(chunks)


def check_backup_filename(file: UploadFile) -> None:
    """Reject uploads that are not JSON backup files.

    Raises:
        HTTPException: If the file name is missing or has another extension
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No filename provided",
        )
    if PurePath(file.filename).suffix.lower() not in ALLOWED_BACKUP_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Backups must be .json files",
        )


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


async def get_backup_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[CurrentUser | None, Depends(get_current_user)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> BackupService:
    """Get BackupService instance for the current user."""
    repositories = (
        RepositoryRegistry.for_user(db, current_user.id) if current_user else RepositoryRegistry({})
    )
    return BackupService(repositories, current_user, settings)


@router.post("/export")
async def export_backup(
    current_user: Annotated[CurrentUser, Depends(require_user)],
    service: Annotated[BackupService, Depends(get_backup_service)],
) -> Response:
    """Export all data of the current user as a JSON backup file."""
    exported = await service.export_backup()
    logger.info(f"Backup exported for user {current_user.id}: {exported.filename}")

    return Response(
        content=exported.content,
        media_type=BACKUP_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{exported.filename}"',
            "Content-Length": str(len(exported.content)),
        },
    )


@router.post("/validate", response_model=ValidationReport)
async def validate_backup(
    service: Annotated[BackupService, Depends(get_backup_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    file: UploadFile = File(...),
) -> ValidationReport:
    """Validate a backup file without importing it.

    Anonymous requests get a report with a permission issue instead of an error.
    """
    check_backup_filename(file)
    content = await read_upload_with_limit(file, settings.backup_upload_limit_bytes)

    report = service.validate_backup(content)
    if not report.valid:
        logger.warning(
            f"Uploaded backup {file.filename!r} is invalid: "
            f"{len(report.error_issues)} error(s)"
        )
    return report


@router.post("/import", response_model=ImportResult)
async def import_backup(
    current_user: Annotated[CurrentUser, Depends(require_user)],
    service: Annotated[BackupService, Depends(get_backup_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    file: UploadFile = File(...),
    strategy: ImportStrategy = Form(ImportStrategy.MERGE),
    dry_run: bool = Form(False),
    chunk_size: int | None = Form(None, ge=1),
) -> ImportResult:
    """Validate and import a backup file into the current user's data.

    Returns 422 with the validation report when the file is invalid.
    """
    check_backup_filename(file)
    content = await read_upload_with_limit(file, settings.backup_upload_limit_bytes)

    options = ImportOptions(
        strategy=strategy,
        dry_run=dry_run,
        chunk_size=chunk_size or settings.backup_import_chunk_size,
    )
    logger.info(
        f"Backup import requested by user {current_user.id} "
        f"(strategy={options.strategy}, dry_run={options.dry_run})"
    )
    return await service.import_backup(content, options)
