"""Ingest orchestration for daily relay snapshots.

This module drives one snapshot file through the ledger check,
extraction, and the ordered store commits. Stages run strictly in
sequence and the first failure stops the run without compensation;
stores upsert so a retried file converges to the same state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from core.errors import IngestStageError, RelayIngestError
from core.logging_config import get_logger
from core.types import (
    BatchIngestReport,
    CountryHistogram,
    CountryStore,
    DatesStore,
    FileExtraction,
    IngestFailure,
    IngestionOutcome,
    PathLike,
    RelayStore,
)
from ingest.date_key import derive_date
from ingest.file_extractor import extract_relays
from ingest.histogram import build_country_histogram

_LOGGER = get_logger(__name__)


class IngestStage(Enum):
    """Stages of one snapshot ingest, in execution order."""

    CHECK_LEDGER = "check_ledger"
    EXTRACT = "extract"
    COMMIT_RELAYS = "commit_relays"
    COMMIT_COUNTRIES = "commit_countries"
    COMMIT_AGGREGATES = "commit_aggregates"
    MARK_DATE_DONE = "mark_date_done"
    COMPLETED = "completed"
    ALREADY_INGESTED = "already_ingested"


TERMINAL_STAGES = frozenset({IngestStage.COMPLETED, IngestStage.ALREADY_INGESTED})

_STAGE_SEQUENCE = (
    IngestStage.CHECK_LEDGER,
    IngestStage.EXTRACT,
    IngestStage.COMMIT_RELAYS,
    IngestStage.COMMIT_COUNTRIES,
    IngestStage.COMMIT_AGGREGATES,
    IngestStage.MARK_DATE_DONE,
    IngestStage.COMPLETED,
)


def next_stage(stage: IngestStage, date_already_ingested: bool = False) -> IngestStage:
    """Return the stage that follows a successfully finished stage.

    Args:
        stage: Stage that just succeeded.
        date_already_ingested: Ledger answer, only meaningful after the
            ledger check.

    Returns:
        Following stage.

    Raises:
        ValueError: If ``stage`` is terminal.
    """
    if stage in TERMINAL_STAGES:
        raise ValueError(f"Stage '{stage.value}' is terminal and has no successor.")
    if stage is IngestStage.CHECK_LEDGER and date_already_ingested:
        return IngestStage.ALREADY_INGESTED
    return _STAGE_SEQUENCE[_STAGE_SEQUENCE.index(stage) + 1]


@dataclass
class _IngestContext:
    """Mutable per-file state carried between stages."""

    source_path: str
    observed_on: date | None = None
    date_already_ingested: bool = False
    extraction: FileExtraction | None = None
    histogram: CountryHistogram = field(default_factory=dict)

    def require_date(self) -> date:
        if self.observed_on is None:
            raise RelayIngestError(f"Snapshot date for {self.source_path} was never derived.")
        return self.observed_on

    def require_extraction(self) -> FileExtraction:
        if self.extraction is None:
            raise RelayIngestError(f"Snapshot {self.source_path} was never extracted.")
        return self.extraction


class IngestRunner:
    """Sequential single-file ingest over the three store collaborators."""

    def __init__(
        self,
        dates_store: DatesStore,
        relay_store: RelayStore,
        country_store: CountryStore,
    ) -> None:
        self._dates_store = dates_store
        self._relay_store = relay_store
        self._country_store = country_store
        self._handlers: dict[IngestStage, Callable[[_IngestContext], None]] = {
            IngestStage.CHECK_LEDGER: self._check_ledger,
            IngestStage.EXTRACT: self._extract,
            IngestStage.COMMIT_RELAYS: self._commit_relays,
            IngestStage.COMMIT_COUNTRIES: self._commit_countries,
            IngestStage.COMMIT_AGGREGATES: self._commit_aggregates,
            IngestStage.MARK_DATE_DONE: self._mark_date_done,
        }

    def ingest(self, file_path: PathLike) -> IngestionOutcome:
        """Ingest one snapshot file exactly once per snapshot date.

        Args:
            file_path: Resolved snapshot file path.

        Returns:
            Imported outcome, or the no-op outcome when the date is
            already in the ledger.

        Raises:
            IngestStageError: If any stage fails; earlier commits stay in place.
        """
        context = _IngestContext(source_path=str(file_path))
        _LOGGER.info("ingest_started", source_path=context.source_path)
        stage = IngestStage.CHECK_LEDGER
        while stage not in TERMINAL_STAGES:
            self._run_stage(stage, context)
            stage = next_stage(stage, context.date_already_ingested)
        observed_on = context.require_date()
        if stage is IngestStage.ALREADY_INGESTED:
            _LOGGER.info(
                "ingest_skipped_existing_date",
                source_path=context.source_path,
                date=observed_on.isoformat(),
            )
            return IngestionOutcome(
                source_path=context.source_path,
                observed_on=observed_on,
                status="already_ingested",
            )
        extraction = context.require_extraction()
        outcome = IngestionOutcome(
            source_path=context.source_path,
            observed_on=observed_on,
            status="imported",
            num_imported=len(extraction.records),
            num_skipped=extraction.num_skipped,
        )
        _LOGGER.info(
            "ingest_completed",
            source_path=context.source_path,
            date=observed_on.isoformat(),
            num_imported=outcome.num_imported,
            num_skipped=outcome.num_skipped,
        )
        return outcome

    def _run_stage(self, stage: IngestStage, context: _IngestContext) -> None:
        try:
            self._handlers[stage](context)
        except Exception as error:
            _LOGGER.error(
                "ingest_failed",
                source_path=context.source_path,
                stage=stage.value,
                error=str(error),
            )
            raise IngestStageError(stage.value, error) from error
        _LOGGER.debug("ingest_stage_completed", source_path=context.source_path, stage=stage.value)

    def _check_ledger(self, context: _IngestContext) -> None:
        context.observed_on = derive_date(context.source_path)
        context.date_already_ingested = self._dates_store.exists(context.observed_on)

    def _extract(self, context: _IngestContext) -> None:
        context.extraction = extract_relays(context.source_path)

    def _commit_relays(self, context: _IngestContext) -> None:
        self._relay_store.upsert_relays(context.require_extraction().records)

    def _commit_countries(self, context: _IngestContext) -> None:
        context.histogram = build_country_histogram(context.require_extraction().guard_clients)
        self._country_store.upsert_country_histogram(context.require_date(), context.histogram)

    def _commit_aggregates(self, context: _IngestContext) -> None:
        self._relay_store.refresh_aggregates(context.require_date())

    def _mark_date_done(self, context: _IngestContext) -> None:
        self._dates_store.mark_done(context.require_date())


def ingest_files(
    file_paths: Iterable[PathLike],
    runner: IngestRunner,
    fail_fast: bool = False,
) -> BatchIngestReport:
    """Ingest snapshot files one after another in the given order.

    Args:
        file_paths: Snapshot file paths.
        runner: Single-file ingest runner.
        fail_fast: Stop after the first failed file.

    Returns:
        Outcomes of finished files and failures of the others.
    """
    outcomes: list[IngestionOutcome] = []
    failures: list[IngestFailure] = []
    for file_path in file_paths:
        try:
            outcomes.append(runner.ingest(file_path))
        except IngestStageError as error:
            failures.append(
                IngestFailure(
                    source_path=str(file_path), stage=error.stage, message=str(error.cause)
                )
            )
            if fail_fast:
                break
    return BatchIngestReport(outcomes=tuple(outcomes), failures=tuple(failures))


def find_snapshot_files(directory: PathLike, pattern: str) -> list[Path]:
    """List snapshot files in a directory sorted by name.

    Args:
        directory: Directory to scan, not recursively.
        pattern: Glob such as ``*.csv``.

    Returns:
        Sorted file paths.

    Raises:
        RelayIngestError: If the directory does not exist.
    """
    source_dir = Path(directory).expanduser()
    if not source_dir.is_dir():
        raise RelayIngestError(
            f"Snapshot directory not found at {source_dir}. Provide an existing directory."
        )
    return sorted(path.resolve() for path in source_dir.glob(pattern) if path.is_file())
