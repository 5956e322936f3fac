"""Relay dataset store.

This module keeps one Apache Lance dataset of relay rows per snapshot
date and a JSON document of per-date aggregates derived from them.
Rows are merged by fingerprint so re-ingesting a date never duplicates,
and superseded Lance versions are pruned after each write.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Sequence

import lance
import pyarrow as pa
import pyarrow.compute as pc

from core.config import RelayscopeConfig
from core.constants import (
    AGGREGATES_FILE_NAME,
    LANCE_DIR_NAME,
    RELAYS_DIR_NAME,
    UNKNOWN_COUNTRY_CODE,
)
from core.errors import RelayStoreError
from core.logging_config import get_logger
from core.types import DateAggregate, RelayRecord
from store.json_document import read_json_document, write_json_document

_LOGGER = get_logger(__name__)

RELAY_SCHEMA = pa.schema(
    [
        pa.field("fingerprint", pa.string()),
        pa.field("observed_on", pa.date32()),
        pa.field("nickname", pa.string()),
        pa.field("address", pa.string()),
        pa.field("or_port", pa.int32()),
        pa.field("dir_port", pa.int32()),
        pa.field("country_code", pa.string()),
        pa.field("latitude", pa.float64()),
        pa.field("longitude", pa.float64()),
        pa.field("bandwidth", pa.int64()),
        pa.field("flags", pa.list_(pa.string())),
        pa.field("is_guard", pa.bool_()),
        pa.field("is_exit", pa.bool_()),
    ]
)


class RelayDatasetStore:
    """Lance-backed relay rows and JSON-backed per-date aggregates."""

    def __init__(self, config: RelayscopeConfig) -> None:
        self._relays_root = config.data_root / RELAYS_DIR_NAME
        self._aggregates_path = config.data_root / AGGREGATES_FILE_NAME

    def upsert_relays(self, records: Sequence[RelayRecord]) -> None:
        """Insert or replace relay rows keyed by fingerprint and date.

        Args:
            records: Parsed relay records, possibly spanning several dates.

        Raises:
            RelayStoreError: If a dataset cannot be read or written.
        """
        records_by_date: dict[date, list[RelayRecord]] = defaultdict(list)
        for record in records:
            records_by_date[record.observed_on].append(record)
        for observed_on, date_records in sorted(records_by_date.items()):
            rows = {row["fingerprint"]: row for row in self._read_rows(observed_on)}
            for record in date_records:
                rows[record.fingerprint] = _row_from_record(record)
            self._write_rows(observed_on, [rows[key] for key in sorted(rows)])
            _LOGGER.info(
                "relays_upserted",
                date=observed_on.isoformat(),
                upserted=len(date_records),
                stored=len(rows),
            )

    def refresh_aggregates(self, observed_on: date) -> DateAggregate:
        """Recompute and store the aggregate summary for a date.

        Args:
            observed_on: Snapshot date.

        Returns:
            Freshly computed aggregate.

        Raises:
            RelayStoreError: If the dataset or aggregates document fails.
        """
        aggregate = _compute_aggregate(observed_on, self._read_table(observed_on))
        payload = read_json_document(self._aggregates_path)
        aggregate_payload: dict[str, Any] = asdict(aggregate)
        aggregate_payload.pop("observed_on")
        payload[observed_on.isoformat()] = aggregate_payload
        write_json_document(self._aggregates_path, payload)
        _LOGGER.info("aggregates_refreshed", date=observed_on.isoformat(), **aggregate_payload)
        return aggregate

    def load_relays(self, observed_on: date) -> list[RelayRecord]:
        """Return stored relay records for a date ordered by fingerprint."""
        return [_record_from_row(row) for row in self._read_rows(observed_on)]

    def load_aggregate(self, observed_on: date) -> DateAggregate | None:
        """Return the stored aggregate for a date, or ``None``."""
        payload = read_json_document(self._aggregates_path).get(observed_on.isoformat())
        if payload is None:
            return None
        try:
            return DateAggregate(observed_on=observed_on, **payload)
        except TypeError as error:
            raise RelayStoreError(
                f"Failed to parse aggregate for {observed_on.isoformat()} at "
                f"{self._aggregates_path}: {error}. Re-run ingest for that date."
            ) from error

    def _dataset_uri(self, observed_on: date) -> Path:
        return self._relays_root / observed_on.isoformat() / LANCE_DIR_NAME

    def _read_table(self, observed_on: date) -> pa.Table:
        dataset_uri = self._dataset_uri(observed_on)
        if not dataset_uri.exists():
            return RELAY_SCHEMA.empty_table()
        try:
            return lance.dataset(str(dataset_uri)).to_table()
        except Exception as error:
            raise RelayStoreError(
                f"Failed to read relay dataset at {dataset_uri}: {error}. "
                "Validate lance/pyarrow compatibility or remove the dataset and re-ingest."
            ) from error

    def _read_rows(self, observed_on: date) -> list[dict[str, Any]]:
        return self._read_table(observed_on).to_pylist()

    def _write_rows(self, observed_on: date, rows: list[dict[str, Any]]) -> None:
        dataset_uri = self._dataset_uri(observed_on)
        try:
            table = pa.Table.from_pylist(rows, schema=RELAY_SCHEMA)
            dataset_uri.parent.mkdir(parents=True, exist_ok=True)
            dataset = lance.write_dataset(table, str(dataset_uri), mode="overwrite")
            dataset.cleanup_old_versions(older_than=timedelta(0))
        except Exception as error:
            raise RelayStoreError(
                f"Failed to write relay dataset at {dataset_uri}: {error}. "
                "Validate lance/pyarrow compatibility and retry ingest."
            ) from error


def _compute_aggregate(observed_on: date, table: pa.Table) -> DateAggregate:
    """Summarize one date's relay table."""
    known_countries = table.filter(
        pc.not_equal(table["country_code"], pa.scalar(UNKNOWN_COUNTRY_CODE))
    )["country_code"]
    return DateAggregate(
        observed_on=observed_on,
        relay_count=table.num_rows,
        guard_count=_sum_column(pc.cast(table["is_guard"], pa.int64())),
        exit_count=_sum_column(pc.cast(table["is_exit"], pa.int64())),
        total_bandwidth=_sum_column(table["bandwidth"]),
        country_count=int(pc.count_distinct(known_countries).as_py() or 0),
    )


def _sum_column(column: pa.ChunkedArray) -> int:
    return int(pc.sum(column).as_py() or 0)


def _row_from_record(record: RelayRecord) -> dict[str, Any]:
    row = asdict(record)
    row["flags"] = list(record.flags)
    row["is_guard"] = record.is_guard
    row["is_exit"] = record.is_exit
    return row


def _record_from_row(row: dict[str, Any]) -> RelayRecord:
    return RelayRecord(
        fingerprint=str(row["fingerprint"]),
        observed_on=row["observed_on"],
        nickname=str(row["nickname"] or ""),
        address=str(row["address"] or ""),
        or_port=int(row["or_port"] or 0),
        dir_port=int(row["dir_port"] or 0),
        country_code=str(row["country_code"] or UNKNOWN_COUNTRY_CODE),
        latitude=float(row["latitude"] or 0.0),
        longitude=float(row["longitude"] or 0.0),
        bandwidth=int(row["bandwidth"] or 0),
        flags=tuple(row["flags"] or ()),
    )
