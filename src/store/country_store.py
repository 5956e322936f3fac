"""Country histogram store.

Histograms are kept in one JSON document keyed by ISO date. Writing a
date replaces its previous histogram, so retries are idempotent.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Mapping

from core.config import RelayscopeConfig
from core.constants import COUNTRIES_FILE_NAME
from core.errors import RelayStoreError
from core.logging_config import get_logger
from core.types import CountryHistogram
from store.json_document import read_json_document, write_json_document

_LOGGER = get_logger(__name__)


class CountryHistogramStore:
    """Filesystem-backed per-date guard client country histograms."""

    def __init__(self, config: RelayscopeConfig) -> None:
        self._document_path: Path = config.data_root / COUNTRIES_FILE_NAME

    def upsert_country_histogram(self, observed_on: date, histogram: Mapping[str, int]) -> None:
        """Replace the histogram stored for a date.

        Args:
            observed_on: Snapshot date.
            histogram: Country code to guard client count.

        Raises:
            RelayStoreError: If the document cannot be read or written.
        """
        payload = read_json_document(self._document_path)
        payload[observed_on.isoformat()] = {
            country_code: int(count) for country_code, count in sorted(histogram.items())
        }
        write_json_document(self._document_path, payload)
        _LOGGER.info(
            "country_histogram_upserted",
            date=observed_on.isoformat(),
            country_count=len(histogram),
        )

    def load_country_histogram(self, observed_on: date) -> CountryHistogram | None:
        """Return the stored histogram for a date, or ``None``."""
        payload = read_json_document(self._document_path)
        histogram = payload.get(observed_on.isoformat())
        if histogram is None:
            return None
        if not isinstance(histogram, dict):
            raise RelayStoreError(
                f"Failed to parse country histogram for {observed_on.isoformat()} "
                f"at {self._document_path}: expected an object."
            )
        return {str(country_code): int(count) for country_code, count in histogram.items()}
