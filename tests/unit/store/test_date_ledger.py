"""Unit tests for the date ledger store."""

from __future__ import annotations

from datetime import date

import pytest

from core.constants import DATES_FILE_NAME
from core.errors import RelayStoreError
from store.date_ledger import DateLedgerStore


def test_ledger_starts_empty(config) -> None:
    """Unknown dates are not ingested on a fresh data root."""
    ledger = DateLedgerStore(config)

    assert ledger.exists(date(2024, 3, 1)) is False


def test_mark_done_is_idempotent(config) -> None:
    """Marking the same date twice keeps a single entry."""
    ledger = DateLedgerStore(config)

    ledger.mark_done(date(2024, 3, 2))
    ledger.mark_done(date(2024, 3, 1))
    ledger.mark_done(date(2024, 3, 2))

    assert ledger.list_dates() == [date(2024, 3, 1), date(2024, 3, 2)]
    assert ledger.exists(date(2024, 3, 2))


def test_ledger_persists_across_instances(config) -> None:
    """A new store instance reads dates written by an earlier one."""
    DateLedgerStore(config).mark_done(date(2024, 3, 1))

    assert DateLedgerStore(config).exists(date(2024, 3, 1))


def test_ledger_rejects_corrupt_document(config) -> None:
    """Corrupt ledger JSON surfaces as a store error."""
    config.data_root.mkdir(parents=True)
    (config.data_root / DATES_FILE_NAME).write_text("{not json", encoding="utf-8")

    with pytest.raises(RelayStoreError):
        DateLedgerStore(config).exists(date(2024, 3, 1))
