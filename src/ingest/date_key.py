"""Snapshot date derivation from file names.

Snapshot files are named ``<prefix>-YYYY-MM-DD.<ext>``. The derived
date keys both the idempotency ledger and every record in the file.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
import re

from core.errors import RelayFormatError
from core.types import PathLike

_SNAPSHOT_NAME_PATTERN = re.compile(r"^.+-(\d{4})-(\d{2})-(\d{2})\.[^.]+$")


def derive_date(file_path: PathLike) -> date:
    """Derive the snapshot date from a file path.

    Args:
        file_path: Snapshot file path or bare file name.

    Returns:
        Calendar date encoded in the file name.

    Raises:
        RelayFormatError: If the name does not follow the snapshot convention.
    """
    file_name = Path(file_path).name
    match = _SNAPSHOT_NAME_PATTERN.match(file_name)
    if match is None:
        raise RelayFormatError(
            f"Cannot derive snapshot date from '{file_name}': "
            "expected a name like 'relays-YYYY-MM-DD.csv'."
        )
    year, month, day = (int(token) for token in match.groups())
    try:
        return date(year, month, day)
    except ValueError as error:
        raise RelayFormatError(
            f"Cannot derive snapshot date from '{file_name}': {error}."
        ) from error
