"""Relayscope exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RelayscopeError(Exception):
    """Base exception for all relayscope failures."""


class RelayConfigError(RelayscopeError):
    """Raised for invalid runtime configuration."""


class RelayFormatError(RelayscopeError):
    """Raised when a snapshot file name or header is not recognized."""


class RelayIngestError(RelayscopeError):
    """Raised for snapshot read and ingest failures."""


class RelayStoreError(RelayscopeError):
    """Raised for relay, country, and date ledger persistence failures."""


class IngestStageError(RelayIngestError):
    """Raised when one ingest stage fails.

    Attributes:
        stage: Name of the stage that failed.
        cause: Underlying error raised by the stage.
    """

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__(f"Ingest stage '{stage}' failed: {cause}")
        self.stage = stage
        self.cause = cause
