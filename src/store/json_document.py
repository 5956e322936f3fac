"""JSON document persistence helpers.

This module isolates whole-document JSON IO for the date-keyed stores.
Writes go through a temporary file so readers never see partial JSON.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from core.errors import RelayStoreError


def read_json_document(document_path: Path) -> dict[str, Any]:
    """Read a JSON object document, treating a missing file as empty.

    Args:
        document_path: Document JSON path.

    Returns:
        Parsed top-level object.

    Raises:
        RelayStoreError: If the document is unreadable or not an object.
    """
    if not document_path.exists():
        return {}
    try:
        payload = json.loads(document_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise RelayStoreError(
            f"Failed to read store document at {document_path}: {error}. "
            "Check read permissions."
        ) from error
    except json.JSONDecodeError as error:
        raise RelayStoreError(
            f"Failed to parse store document at {document_path}: {error.msg}. "
            "Restore the document from backup or remove it and re-ingest."
        ) from error
    if not isinstance(payload, dict):
        raise RelayStoreError(
            f"Failed to parse store document at {document_path}: "
            "expected JSON object at top level."
        )
    return payload


def write_json_document(document_path: Path, payload: dict[str, Any]) -> None:
    """Atomically replace a JSON document.

    Args:
        document_path: Document JSON path.
        payload: JSON-safe top-level object.

    Raises:
        RelayStoreError: If the write fails.
    """
    temp_path = document_path.with_name(f".{document_path.name}.tmp")
    try:
        document_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        os.replace(temp_path, document_path)
    except OSError as error:
        raise RelayStoreError(
            f"Failed to write store document at {document_path}: {error}. "
            "Check write permissions and available disk space."
        ) from error
