"""Core constants used across relayscope modules.

This module centralizes file names, defaults, and the snapshot grammar.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".relayscope")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_FILE_PATTERN = "*.csv"
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
RELAYS_DIR_NAME = "relays"
LANCE_DIR_NAME = "data.lance"
AGGREGATES_FILE_NAME = "aggregates.json"
COUNTRIES_FILE_NAME = "countries.json"
DATES_FILE_NAME = "dates.json"
UNKNOWN_COUNTRY_CODE = "??"
GUARD_FLAG = "Guard"
EXIT_FLAG = "Exit"
RELAY_FIELD_NAMES = (
    "fingerprint",
    "nickname",
    "address",
    "or_port",
    "dir_port",
    "country_code",
    "latitude",
    "longitude",
    "bandwidth",
    "flags",
    "guard_clients",
)
RELAY_HEADER_LINE = ",".join(RELAY_FIELD_NAMES)
GUARD_CLIENT_PAIR_SEPARATOR = ";"
GUARD_CLIENT_VALUE_SEPARATOR = "="
