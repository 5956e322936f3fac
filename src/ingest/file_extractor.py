"""Streaming snapshot file extraction.

This module reads one snapshot file line by line, verifies its header,
and folds the tagged parse stream into records, a skip count, and the
per-relay guard client maps.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterator

from core.errors import RelayFormatError, RelayIngestError
from core.logging_config import get_logger
from core.types import (
    FileExtraction,
    GuardClientMap,
    MalformedRelayLine,
    ParsedRelayLine,
    PathLike,
    RelayLineResult,
    RelayRecord,
)
from ingest.date_key import derive_date
from ingest.relay_parser import build_guard_client_map, build_relay_record, verify_header

_LOGGER = get_logger(__name__)


def extract_relays(file_path: PathLike) -> FileExtraction:
    """Extract relay records and guard client maps from a snapshot file.

    Args:
        file_path: Snapshot file path named ``<prefix>-YYYY-MM-DD.<ext>``.

    Returns:
        Extraction result stamped with the file's snapshot date.

    Raises:
        RelayFormatError: If the file name or header is not recognized.
        RelayIngestError: If the file cannot be read.
    """
    observed_on = derive_date(file_path)
    _LOGGER.info("relay_file_parsing", source_path=str(file_path), date=observed_on.isoformat())
    records: list[RelayRecord] = []
    guard_clients: dict[str, GuardClientMap] = {}
    num_skipped = 0
    for result in iter_relay_lines(file_path, observed_on):
        if isinstance(result, MalformedRelayLine):
            num_skipped += 1
            _LOGGER.debug(
                "relay_line_malformed",
                source_path=str(file_path),
                line_number=result.line_number,
                reason=result.reason,
            )
            continue
        records.append(result.record)
        guard_clients[result.record.fingerprint] = result.guard_clients
    return FileExtraction(
        observed_on=observed_on,
        records=tuple(records),
        num_skipped=num_skipped,
        guard_clients=guard_clients,
    )


def iter_relay_lines(file_path: PathLike, observed_on: date) -> Iterator[RelayLineResult]:
    """Lazily parse data lines of a snapshot file in file order.

    The header is verified before any data line is read. The stream is
    single pass and holds one line in memory at a time.

    Args:
        file_path: Snapshot file path.
        observed_on: Date stamped on every parsed record.

    Yields:
        ``ParsedRelayLine`` or ``MalformedRelayLine`` per data line.

    Raises:
        RelayFormatError: If the header line is missing or wrong.
        RelayIngestError: If the file cannot be opened or read.
    """
    source_path = Path(file_path)
    try:
        with source_path.open("rb") as handle:
            verify_header(_decode_header(handle.readline()))
            for line_number, raw_line in enumerate(handle, 2):
                yield _parse_line(raw_line.rstrip(b"\r\n"), line_number, observed_on)
    except OSError as error:
        raise RelayIngestError(
            f"Failed to read snapshot file at {source_path}: {error}. "
            "Check that the file exists and is readable."
        ) from error


def _decode_header(raw_line: bytes) -> str:
    try:
        return raw_line.decode("utf-8")
    except UnicodeDecodeError as error:
        raise RelayFormatError(
            f"Unrecognized snapshot header: not valid UTF-8 ({error.reason})."
        ) from error


def _parse_line(raw_line: bytes, line_number: int, observed_on: date) -> RelayLineResult:
    try:
        line = raw_line.decode("utf-8")
    except UnicodeDecodeError:
        return MalformedRelayLine(line_number=line_number, reason="invalid UTF-8")
    try:
        record = build_relay_record(line, observed_on)
        guard_clients = build_guard_client_map(line, observed_on)
    except ValueError as error:
        return MalformedRelayLine(line_number=line_number, reason=str(error))
    return ParsedRelayLine(line_number=line_number, record=record, guard_clients=guard_clients)
