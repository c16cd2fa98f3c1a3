"""Backup format constants.

Single source of truth for the backup file format version, limits and the
entity ordering shared by the exporter, validator and importer.
"""

from typing import Final

# =============================================================================
# File Format
# =============================================================================

BACKUP_SCHEMA_VERSION: Final[str] = "1.0"

CHECKSUM_ALGORITHM: Final[str] = "sha256"

# Entity collections, in the order they appear in "counts" and "data"
ENTITY_TYPES: Final[tuple[str, ...]] = (
    "profiles",
    "categories",
    "suppliers",
    "banks",
    "bank_accounts",
    "accounts_payable",
    "accounts_receivable",
    "transactions",
)

# =============================================================================
# Limits
# =============================================================================

MAX_BACKUP_SIZE_MB: Final[int] = 10

# Records shown per entity type in a validation preview
PREVIEW_SAMPLE_SIZE: Final[int] = 3

# =============================================================================
# Import
# =============================================================================

DEFAULT_CHUNK_SIZE: Final[int] = 50

# Parents before children. Profiles belong to the account identity and are
# never recreated from a backup.
MERGE_IMPORT_ORDER: Final[tuple[str, ...]] = (
    "categories",
    "suppliers",
    "banks",
    "bank_accounts",
    "accounts_payable",
    "accounts_receivable",
    "transactions",
)

# =============================================================================
# File Upload
# =============================================================================

ALLOWED_BACKUP_EXTENSIONS: Final[frozenset[str]] = frozenset({".json"})

BACKUP_MEDIA_TYPE: Final[str] = "application/json"
