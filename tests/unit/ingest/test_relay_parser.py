"""Unit tests for the relay line grammar."""

from __future__ import annotations

from datetime import date

import pytest

from core.constants import RELAY_HEADER_LINE
from core.errors import RelayFormatError
from ingest.relay_parser import (
    parse_country_code_line,
    parse_guard_client_counts,
    parse_relay_line,
    verify_header,
)
from tests.relay_lines import relay_line

SNAPSHOT_DATE = date(2024, 3, 1)


def test_verify_header_accepts_expected_header_with_bom_and_newline() -> None:
    """Header check should tolerate a BOM and trailing newline."""
    verify_header("\ufeff" + RELAY_HEADER_LINE + "\r\n")


def test_verify_header_rejects_other_first_line() -> None:
    """Any other first line is a format error."""
    with pytest.raises(RelayFormatError):
        verify_header(relay_line("F1"))


def test_parse_relay_line_builds_record() -> None:
    """Well-formed lines should produce a fully typed record."""
    line = "abcd01,alpha,10.0.0.1,9001,,de,51.16,10.45,524288,Exit Fast Guard,DE=1"

    record = parse_relay_line(line, SNAPSHOT_DATE)

    assert record is not None
    assert record.fingerprint == "ABCD01"
    assert record.observed_on == SNAPSHOT_DATE
    assert record.country_code == "DE"
    assert record.dir_port == 0
    assert record.bandwidth == 524288
    assert record.flags == ("Exit", "Fast", "Guard")
    assert record.is_guard and record.is_exit


@pytest.mark.parametrize(
    "line",
    [
        "",
        "F1,alpha,10.0.0.1",
        relay_line("F1") + ",extra",
        relay_line(""),
        relay_line("F1", bandwidth="fast"),
        relay_line("F1", bandwidth="-5"),
        relay_line("F1", guard_clients="US=two"),
        relay_line("F1", guard_clients="US"),
        "F1,alpha,10.0.0.1,9001,9030,US,123.0,2.35,1000,Guard,",
    ],
)
def test_parse_relay_line_returns_none_for_malformed_lines(line: str) -> None:
    """Malformed lines produce the None sentinel instead of raising."""
    assert parse_relay_line(line, SNAPSHOT_DATE) is None


def test_parse_relay_line_accepts_quoted_fields() -> None:
    """CSV quoting allows commas inside the nickname field."""
    line = 'F1,"alpha, the first",10.0.0.1,9001,9030,US,1.0,2.0,10,Guard,US=1'

    record = parse_relay_line(line, SNAPSHOT_DATE)

    assert record is not None and record.nickname == "alpha, the first"


def test_parse_relay_line_returns_none_for_field_over_csv_limit() -> None:
    """CSV reader errors on oversized fields become malformed lines."""
    line = relay_line("F1").replace("nickF1", "n" * 200_000)

    assert parse_relay_line(line, SNAPSHOT_DATE) is None
    assert parse_country_code_line(line, SNAPSHOT_DATE) is None


def test_parse_country_code_line_returns_normalized_counts() -> None:
    """Guard client view keeps unknown countries and upper-cases codes."""
    guard_clients = parse_country_code_line(
        relay_line("f1", guard_clients="us=2;??=7;de=0"), SNAPSHOT_DATE
    )

    assert guard_clients is not None
    assert guard_clients.fingerprint == "F1"
    assert dict(guard_clients.counts) == {"US": 2, "??": 7, "DE": 0}


def test_parse_country_code_line_returns_none_for_bad_counts() -> None:
    """A malformed guard client field makes the country view malformed."""
    assert parse_country_code_line(relay_line("F1", guard_clients="US=-1"), SNAPSHOT_DATE) is None


def test_parse_guard_client_counts_allows_empty_field() -> None:
    """Relays without guard clients report an empty mapping."""
    assert parse_guard_client_counts(" ") == {}
