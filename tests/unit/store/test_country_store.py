"""Unit tests for the country histogram store."""

from __future__ import annotations

from datetime import date

from store.country_store import CountryHistogramStore


def test_upsert_country_histogram_replaces_previous_value(config) -> None:
    """Writing a date twice keeps only the latest histogram."""
    store = CountryHistogramStore(config)
    store.upsert_country_histogram(date(2024, 3, 1), {"US": 2, "FR": 1})

    store.upsert_country_histogram(date(2024, 3, 1), {"US": 4, "DE": 1})

    assert store.load_country_histogram(date(2024, 3, 1)) == {"US": 4, "DE": 1}


def test_histograms_are_kept_per_date(config) -> None:
    """Different dates do not overwrite each other."""
    store = CountryHistogramStore(config)
    store.upsert_country_histogram(date(2024, 3, 1), {"US": 2})
    store.upsert_country_histogram(date(2024, 3, 2), {"CA": 3})

    assert store.load_country_histogram(date(2024, 3, 1)) == {"US": 2}
    assert store.load_country_histogram(date(2024, 3, 3)) is None
