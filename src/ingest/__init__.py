"""Relay snapshot ingestion pipeline.

This package derives snapshot dates, parses relay lines, and commits
each file to the relay, country, and date stores exactly once per date.
"""
