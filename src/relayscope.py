"""Public SDK surface for relayscope.

This module wires the filesystem stores into the ingest runner.
It re-exports the client and typed result models.
"""

from __future__ import annotations

from typing import Iterable

from core.config import RelayscopeConfig
from core.errors import IngestStageError, RelayscopeError
from core.types import BatchIngestReport, IngestionOutcome, PathLike
from ingest.pipeline import IngestRunner, find_snapshot_files, ingest_files
from store.country_store import CountryHistogramStore
from store.date_ledger import DateLedgerStore
from store.relay_store import RelayDatasetStore


class RelayscopeClient:
    """Entry point for ingesting daily relay snapshots."""

    def __init__(self, config: RelayscopeConfig) -> None:
        self.config = config
        self.dates = DateLedgerStore(config)
        self.relays = RelayDatasetStore(config)
        self.countries = CountryHistogramStore(config)
        self._runner = IngestRunner(self.dates, self.relays, self.countries)

    def ingest(self, file_path: PathLike) -> IngestionOutcome:
        """Ingest one snapshot file; see ``IngestRunner.ingest``."""
        return self._runner.ingest(file_path)

    def ingest_many(
        self, file_paths: Iterable[PathLike], fail_fast: bool = False
    ) -> BatchIngestReport:
        """Ingest several snapshot files sequentially."""
        return ingest_files(file_paths, self._runner, fail_fast=fail_fast)

    def ingest_directory(
        self,
        directory: PathLike,
        pattern: str | None = None,
        fail_fast: bool = False,
    ) -> BatchIngestReport:
        """Ingest every matching snapshot in a directory in name order."""
        file_paths = find_snapshot_files(directory, pattern or self.config.file_pattern)
        return self.ingest_many(file_paths, fail_fast=fail_fast)


__all__ = [
    "BatchIngestReport",
    "IngestStageError",
    "IngestionOutcome",
    "RelayscopeClient",
    "RelayscopeConfig",
    "RelayscopeError",
]
