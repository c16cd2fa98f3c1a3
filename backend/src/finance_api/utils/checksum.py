"""Checksum engine for backup files.

The digest covers ``{"data": ..., "schema_version": ...}`` serialized as
compact JSON with keys sorted at every depth, so a backup produced by one
serializer verifies under any other that follows the same rules.
"""

import hashlib
import json
from typing import Any

from finance_api.constants.backup import CHECKSUM_ALGORITHM


def canonicalize(data: Any, schema_version: str) -> bytes:
    """Serialize the checksummed payload to canonical UTF-8 bytes.

    Args:
        data: Entity collections, JSON-native values only
        schema_version: Backup format version

    Returns:
        Canonical byte representation

    Raises:
        TypeError: If data contains values JSON cannot represent
    """
    payload = {"data": data, "schema_version": schema_version}
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def compute_checksum(data: Any, schema_version: str) -> str:
    """Compute the lowercase hex SHA-256 digest of the canonical payload."""
    digest = hashlib.new(CHECKSUM_ALGORITHM)
    digest.update(canonicalize(data, schema_version))
    return digest.hexdigest()
