"""Storage layer for ingested relay snapshots.

This package persists relay rows, per-date aggregates, country
histograms, and the ledger of ingested dates under the data root.
"""
