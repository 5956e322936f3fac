"""Shared typed models.

This module defines immutable data models used by the ingest, store,
and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Literal, Mapping, Protocol, Sequence

from core.constants import EXIT_FLAG, GUARD_FLAG

IngestStatus = Literal["imported", "already_ingested"]
CountryHistogram = dict[str, int]


@dataclass(frozen=True)
class RelayRecord:
    """One relay's observed state on one date.

    Attributes:
        fingerprint: Upper-case relay identity, unique per relay.
        observed_on: Snapshot date derived from the source file name.
        nickname: Operator-chosen relay nickname.
        address: Advertised IP address.
        or_port: Onion routing port.
        dir_port: Directory port, ``0`` when not served.
        country_code: Upper-case country code of the relay, ``??`` if unknown.
        latitude: Geolocated latitude in degrees.
        longitude: Geolocated longitude in degrees.
        bandwidth: Observed bandwidth in bytes per second.
        flags: Consensus flags assigned to the relay.
    """

    fingerprint: str
    observed_on: date
    nickname: str
    address: str
    or_port: int
    dir_port: int
    country_code: str
    latitude: float
    longitude: float
    bandwidth: int
    flags: tuple[str, ...] = ()

    @property
    def is_guard(self) -> bool:
        return GUARD_FLAG in self.flags

    @property
    def is_exit(self) -> bool:
        return EXIT_FLAG in self.flags


@dataclass(frozen=True)
class GuardClientMap:
    """Per-country guard client counts reported for one relay.

    Attributes:
        fingerprint: Owning relay fingerprint.
        observed_on: Snapshot date.
        counts: Country code to non-negative client count.
    """

    fingerprint: str
    observed_on: date
    counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedRelayLine:
    """Valid data line from a snapshot stream."""

    line_number: int
    record: RelayRecord
    guard_clients: GuardClientMap


@dataclass(frozen=True)
class MalformedRelayLine:
    """Data line that could not be parsed and is skipped."""

    line_number: int
    reason: str


RelayLineResult = ParsedRelayLine | MalformedRelayLine


@dataclass(frozen=True)
class FileExtraction:
    """Everything extracted from one snapshot file.

    Attributes:
        observed_on: Snapshot date derived from the file name.
        records: Valid relay records in file order.
        num_skipped: Number of malformed data lines.
        guard_clients: Fingerprint to guard client map, last line wins.
    """

    observed_on: date
    records: tuple[RelayRecord, ...]
    num_skipped: int
    guard_clients: Mapping[str, GuardClientMap]


@dataclass(frozen=True)
class DateAggregate:
    """Derived relay summary for one snapshot date.

    Attributes:
        observed_on: Snapshot date.
        relay_count: Number of stored relays.
        guard_count: Relays carrying the Guard flag.
        exit_count: Relays carrying the Exit flag.
        total_bandwidth: Sum of observed bandwidth in bytes per second.
        country_count: Distinct known relay countries.
    """

    observed_on: date
    relay_count: int
    guard_count: int
    exit_count: int
    total_bandwidth: int
    country_count: int


@dataclass(frozen=True)
class IngestionOutcome:
    """Result of ingesting one snapshot file.

    Attributes:
        source_path: Ingested file path.
        observed_on: Snapshot date.
        status: ``imported`` or ``already_ingested`` for the no-op outcome.
        num_imported: Relay records written.
        num_skipped: Malformed lines skipped.
    """

    source_path: str
    observed_on: date
    status: IngestStatus
    num_imported: int = 0
    num_skipped: int = 0

    def summary(self) -> str:
        """Render a one-line human readable summary."""
        if self.status == "already_ingested":
            return (
                f"Ignoring {self.source_path}: date {self.observed_on.isoformat()} "
                "already ingested"
            )
        summary = f"Imported {self.num_imported} relays from {self.source_path}"
        if self.num_skipped > 0:
            total_lines = self.num_imported + self.num_skipped
            summary += (
                f" ({self.num_skipped} of {total_lines} skipped due to malformed data)"
            )
        return summary


@dataclass(frozen=True)
class IngestFailure:
    """One failed file inside a batch ingest."""

    source_path: str
    stage: str
    message: str


@dataclass(frozen=True)
class BatchIngestReport:
    """Outcomes and failures for a sequential multi-file ingest."""

    outcomes: tuple[IngestionOutcome, ...]
    failures: tuple[IngestFailure, ...]

    @property
    def succeeded(self) -> bool:
        return not self.failures


class DatesStore(Protocol):
    """Date ledger collaborator, the sole source of truth for idempotency."""

    def exists(self, observed_on: date) -> bool:
        """Return whether the date is fully ingested."""

    def mark_done(self, observed_on: date) -> None:
        """Record the date as fully ingested; repeating is not an error."""


class RelayStore(Protocol):
    """Relay record and per-date aggregate collaborator."""

    def upsert_relays(self, records: Sequence[RelayRecord]) -> None:
        """Insert or replace records keyed by fingerprint and date."""

    def refresh_aggregates(self, observed_on: date) -> DateAggregate:
        """Recompute the aggregate summary for one date."""


class CountryStore(Protocol):
    """Country histogram collaborator."""

    def upsert_country_histogram(
        self, observed_on: date, histogram: Mapping[str, int]
    ) -> None:
        """Replace the histogram stored for one date."""


PathLike = str | Path
