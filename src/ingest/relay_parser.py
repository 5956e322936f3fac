"""Relay snapshot line grammar.

This module parses one CSV data line into a relay record and its
guard client view. Malformed lines produce ``None`` instead of raising
so a single bad row never aborts the containing file.
"""

from __future__ import annotations

import csv
from datetime import date
from typing import Mapping

from core.constants import (
    GUARD_CLIENT_PAIR_SEPARATOR,
    GUARD_CLIENT_VALUE_SEPARATOR,
    RELAY_FIELD_NAMES,
    RELAY_HEADER_LINE,
    UNKNOWN_COUNTRY_CODE,
)
from core.errors import RelayFormatError
from core.types import GuardClientMap, RelayRecord

_BYTE_ORDER_MARK = "\ufeff"


def verify_header(line: str) -> None:
    """Check that a snapshot file starts with the expected header.

    Args:
        line: First line of the file.

    Raises:
        RelayFormatError: If the header does not match.
    """
    header = line.lstrip(_BYTE_ORDER_MARK).strip()
    if header != RELAY_HEADER_LINE:
        raise RelayFormatError(
            f"Unrecognized snapshot header '{header[:80]}': "
            f"expected '{RELAY_HEADER_LINE}'."
        )


def parse_relay_line(line: str, observed_on: date) -> RelayRecord | None:
    """Parse one data line into a relay record.

    Args:
        line: Raw data line without trailing newline.
        observed_on: Snapshot date stamped on the record.

    Returns:
        Parsed record, or ``None`` when the line is malformed.
    """
    try:
        return build_relay_record(line, observed_on)
    except ValueError:
        return None


def parse_country_code_line(line: str, observed_on: date) -> GuardClientMap | None:
    """Parse the guard client counts carried by one data line.

    Args:
        line: Raw data line without trailing newline.
        observed_on: Snapshot date stamped on the map.

    Returns:
        Guard client map, or ``None`` when the line is malformed.
    """
    try:
        return build_guard_client_map(line, observed_on)
    except ValueError:
        return None


def build_relay_record(line: str, observed_on: date) -> RelayRecord:
    """Parse one data line into a relay record, raising on bad input.

    Raises:
        ValueError: With a short reason when the line is malformed.
    """
    fields = _split_fields(line)
    parse_guard_client_counts(fields["guard_clients"])
    latitude = float(fields["latitude"])
    longitude = float(fields["longitude"])
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValueError(f"coordinates out of range: {latitude},{longitude}")
    return RelayRecord(
        fingerprint=_parse_fingerprint(fields["fingerprint"]),
        observed_on=observed_on,
        nickname=fields["nickname"].strip(),
        address=fields["address"].strip(),
        or_port=_parse_non_negative_int(fields["or_port"], "or_port"),
        dir_port=_parse_non_negative_int(fields["dir_port"] or "0", "dir_port"),
        country_code=_normalize_country_code(fields["country_code"]),
        latitude=latitude,
        longitude=longitude,
        bandwidth=_parse_non_negative_int(fields["bandwidth"], "bandwidth"),
        flags=tuple(fields["flags"].split()),
    )


def build_guard_client_map(line: str, observed_on: date) -> GuardClientMap:
    """Parse the guard client view of one data line, raising on bad input.

    Raises:
        ValueError: With a short reason when the line is malformed.
    """
    fields = _split_fields(line)
    return GuardClientMap(
        fingerprint=_parse_fingerprint(fields["fingerprint"]),
        observed_on=observed_on,
        counts=parse_guard_client_counts(fields["guard_clients"]),
    )


def parse_guard_client_counts(raw_value: str) -> Mapping[str, int]:
    """Parse ``cc=count`` pairs separated by semicolons.

    Args:
        raw_value: Raw guard client field, possibly empty.

    Returns:
        Country code to client count. Unknown (``??``) entries are kept.

    Raises:
        ValueError: If a pair is malformed or a count is negative.
    """
    counts: dict[str, int] = {}
    for pair in raw_value.split(GUARD_CLIENT_PAIR_SEPARATOR):
        if not pair.strip():
            continue
        country_code, separator, count = pair.partition(GUARD_CLIENT_VALUE_SEPARATOR)
        if not separator or not country_code.strip():
            raise ValueError(f"invalid guard client pair '{pair}'")
        counts[_normalize_country_code(country_code)] = _parse_non_negative_int(
            count, "guard client count"
        )
    return counts


def _split_fields(line: str) -> dict[str, str]:
    try:
        row = next(csv.reader([line]), [])
    except csv.Error as error:
        raise ValueError(f"unreadable CSV row: {error}") from error
    if len(row) != len(RELAY_FIELD_NAMES):
        raise ValueError(f"expected {len(RELAY_FIELD_NAMES)} fields, got {len(row)}")
    return dict(zip(RELAY_FIELD_NAMES, row))


def _parse_fingerprint(raw_value: str) -> str:
    fingerprint = raw_value.strip().upper()
    if not fingerprint:
        raise ValueError("empty fingerprint")
    return fingerprint


def _parse_non_negative_int(raw_value: str, field_name: str) -> int:
    value = int(raw_value.strip())
    if value < 0:
        raise ValueError(f"negative {field_name}: {value}")
    return value


def _normalize_country_code(raw_value: str) -> str:
    country_code = raw_value.strip().upper()
    return country_code or UNKNOWN_COUNTRY_CODE
