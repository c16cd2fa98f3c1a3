#!/usr/bin/env python
"""Export, validate or import a user's backup from the command line."""

import asyncio
import json
import sys
from pathlib import Path
from uuid import UUID

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from finance_api.config import get_settings
from finance_api.database import get_engine, get_session_maker
from finance_api.exceptions import BackupValidationError
from finance_api.models.domain.user import CurrentUser
from finance_api.models.dto.backup import ImportOptions
from finance_api.repositories.registry import RepositoryRegistry
from finance_api.services.backup_service import BackupService


async def export_backup(user: CurrentUser, output: Path | None) -> bool:
    """Write the user's backup to output, or to the generated file name."""
    async with get_session_maker()() as session:
        service = BackupService(RepositoryRegistry.for_user(session, user.id), user)
        exported = await service.export_backup()

    path = output or Path(exported.filename)
    path.write_bytes(exported.content)
    print(f"Backup written to {path} ({len(exported.content)} bytes)")
    return True


async def validate_backup(user: CurrentUser, path: Path) -> bool:
    """Print the validation report of a backup file."""
    service = BackupService(RepositoryRegistry({}), user)
    report = service.validate_backup(path.read_bytes())
    print(json.dumps(report.model_dump(mode="json", exclude={"preview": {"sample_data"}}), indent=2))
    return report.valid


async def import_backup(user: CurrentUser, path: Path, dry_run: bool, chunk_size: int | None) -> bool:
    """Validate and import a backup file for the user."""
    settings = get_settings()
    options = ImportOptions(
        dry_run=dry_run,
        chunk_size=chunk_size or settings.backup_import_chunk_size,
    )

    async with get_session_maker()() as session:
        service = BackupService(RepositoryRegistry.for_user(session, user.id), user, settings)
        try:
            result = await service.import_backup(path.read_bytes(), options)
        except BackupValidationError as e:
            for issue in e.report.error_issues:
                print(f"[{issue.type}] {issue.message}")
            return False
        await session.commit()

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return result.success


async def main(args) -> bool:
    user = CurrentUser(id=args.user_id, phone=args.phone)
    try:
        if args.command == "export":
            return await export_backup(user, args.output)
        if args.command == "validate":
            return await validate_backup(user, args.file)
        return await import_backup(user, args.file, args.dry_run, args.chunk_size)
    finally:
        if get_engine.cache_info().currsize:
            await get_engine().dispose()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Backup export and import")
    parser.add_argument("--user-id", type=UUID, required=True, help="Owner of the data")
    parser.add_argument("--phone", help="Owner phone, used when there is no profile")
    commands = parser.add_subparsers(dest="command", required=True)

    export_parser = commands.add_parser("export", help="Export all data to a JSON file")
    export_parser.add_argument("--output", type=Path, help="Output file")

    validate_parser = commands.add_parser("validate", help="Validate a backup file")
    validate_parser.add_argument("file", type=Path)

    import_parser = commands.add_parser("import", help="Merge a backup file into the database")
    import_parser.add_argument("file", type=Path)
    import_parser.add_argument("--dry-run", action="store_true", help="Validate only, write nothing")
    import_parser.add_argument("--chunk-size", type=int, help="Records per chunk")

    args = parser.parse_args()
    sys.exit(0 if asyncio.run(main(args)) else 1)
