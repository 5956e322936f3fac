"""Country histogram folding for guard client counts."""

from __future__ import annotations

from typing import Mapping

from core.constants import UNKNOWN_COUNTRY_CODE
from core.types import CountryHistogram, GuardClientMap


def build_country_histogram(guard_clients: Mapping[str, GuardClientMap]) -> CountryHistogram:
    """Fold per-relay guard client maps into one country histogram.

    Maps are folded in ascending fingerprint order and each country count
    overwrites any earlier value for the same country, so the relay with
    the greatest fingerprint reporting a country decides its count.
    Unknown (``??``) countries are dropped.

    Args:
        guard_clients: Fingerprint to guard client map for one file.

    Returns:
        Country code to guard client count.
    """
    histogram: CountryHistogram = {}
    for fingerprint in sorted(guard_clients):
        for country_code, count in guard_clients[fingerprint].counts.items():
            if country_code == UNKNOWN_COUNTRY_CODE:
                continue
            histogram[country_code] = count
    return histogram
