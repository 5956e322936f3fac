"""Date ledger store.

The ledger is the authoritative list of fully ingested snapshot dates.
It is append-only and only written after every other commit succeeded.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from core.config import RelayscopeConfig
from core.constants import DATES_FILE_NAME
from core.errors import RelayStoreError
from core.logging_config import get_logger
from store.json_document import read_json_document, write_json_document

_LOGGER = get_logger(__name__)


class DateLedgerStore:
    """Filesystem-backed ledger of ingested dates."""

    def __init__(self, config: RelayscopeConfig) -> None:
        self._ledger_path: Path = config.data_root / DATES_FILE_NAME

    def exists(self, observed_on: date) -> bool:
        """Return whether the date has been fully ingested."""
        return observed_on.isoformat() in self._read_dates()

    def mark_done(self, observed_on: date) -> None:
        """Record a date as fully ingested. Repeated calls are no-ops."""
        dates = self._read_dates()
        date_key = observed_on.isoformat()
        if date_key in dates:
            return
        write_json_document(self._ledger_path, {"dates": sorted([*dates, date_key])})
        _LOGGER.info("date_marked_done", date=date_key)

    def list_dates(self) -> list[date]:
        """Return ingested dates in ascending order."""
        return [date.fromisoformat(value) for value in sorted(self._read_dates())]

    def _read_dates(self) -> set[str]:
        payload = read_json_document(self._ledger_path)
        dates = payload.get("dates", [])
        if not isinstance(dates, list):
            raise RelayStoreError(
                f"Failed to parse date ledger at {self._ledger_path}: "
                "expected 'dates' to be a list."
            )
        return {str(value) for value in dates}
