"""Unit tests for shared model behavior."""

from __future__ import annotations

from datetime import date

from core.types import IngestionOutcome


def test_summary_reports_imported_relays() -> None:
    """Clean imports report only the imported count."""
    outcome = IngestionOutcome("relays-2024-03-01.csv", date(2024, 3, 1), "imported", 3, 0)

    assert outcome.summary() == "Imported 3 relays from relays-2024-03-01.csv"


def test_summary_reports_skipped_out_of_total() -> None:
    """Skipped lines are reported out of all data lines."""
    outcome = IngestionOutcome("relays-2024-03-01.csv", date(2024, 3, 1), "imported", 3, 1)

    assert outcome.summary() == (
        "Imported 3 relays from relays-2024-03-01.csv (1 of 4 skipped due to malformed data)"
    )


def test_summary_reports_already_ingested_date() -> None:
    """The no-op outcome names the existing date."""
    outcome = IngestionOutcome("relays-2024-03-01.csv", date(2024, 3, 1), "already_ingested")

    assert outcome.summary() == (
        "Ignoring relays-2024-03-01.csv: date 2024-03-01 already ingested"
    )
