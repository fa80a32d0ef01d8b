"""
fwhistory History Subsystem

Retrieves the firmware history of a device model and region, normalizes the
firmware strings and merges in vendor changelogs.

Core Components:
- interfaces: Data records, outcome types and the primary page parser interface
- firmware: Firmware string normalization
- async_client: HTTP access to the history sources
- parsers: FOTA version.xml parsing
- changelog: Changelog retrieval and indexing
- job: Single-flight, cancellable fetch orchestration
"""

from .async_client import AsyncHistoryClient
from .changelog import ChangelogHandler, parse_changelogs
from .firmware import firmware_build_prefix, normalize_firmware
from .interfaces import (
    Changelog,
    ChangelogIndex,
    FirmwareSelection,
    HistoryBodyParser,
    HistoryFound,
    HistoryInfo,
    HistoryOutcome,
    HistoryParseFailure,
    NoHistory,
)
from .job import HistoryFetchJob, HistorySnapshot
from .parsers import parse_history_xml

__all__ = [
    # Interfaces
    "HistoryBodyParser",
    "HistoryInfo",
    "Changelog",
    "ChangelogIndex",
    "FirmwareSelection",
    # Outcomes
    "HistoryOutcome",
    "NoHistory",
    "HistoryParseFailure",
    "HistoryFound",
    # Components
    "AsyncHistoryClient",
    "ChangelogHandler",
    "HistoryFetchJob",
    "HistorySnapshot",
    # Helpers
    "normalize_firmware",
    "firmware_build_prefix",
    "parse_history_xml",
    "parse_changelogs",
]
