"""
Core Interfaces for the fwhistory History Subsystem

This module defines the data structures shared by the history pipeline and the
interface of the platform-specific history page parser.
"""

import datetime
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple, Union

from .firmware import firmware_build_prefix


@dataclass(frozen=True)
class HistoryInfo:
    """One firmware release record."""

    firmware_string: str
    """Normalized firmware identifier (e.g. 'G998BXXU5CVDD/G998BOXM5CVDD/G998BXXU5CVDD/G998BXXU5CVDD')"""

    date: Optional[datetime.date] = None
    """Release date, when the source provides one"""

    android_version: Optional[str] = None
    """Android version; only reported for the latest FOTA entry"""

    @property
    def build_prefix(self) -> str:
        return firmware_build_prefix(self.firmware_string)


@dataclass(frozen=True)
class Changelog:
    """Release notes published for a single firmware build."""

    device: str
    firmware: str
    android_version: Optional[str] = None
    release_date: Optional[str] = None
    security_patch: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ChangelogIndex:
    """Changelogs for one model/region keyed by firmware build prefix."""

    device: str
    changelogs: Mapping[str, Changelog] = field(default_factory=dict)

    def get(self, build: str) -> Optional[Changelog]:
        return self.changelogs.get(build)

    def for_firmware(self, firmware_string: str) -> Optional[Changelog]:
        """
        Look up the changelog for a full firmware string by its build prefix.

        Returns:
            Optional[Changelog]: The matching changelog, or None if there is none.
        """
        return self.changelogs.get(firmware_build_prefix(firmware_string))

    def __len__(self) -> int:
        return len(self.changelogs)


@dataclass(frozen=True)
class NoHistory:
    """Neither history source returned any data."""


@dataclass(frozen=True)
class HistoryParseFailure:
    """A history payload was found but could not be parsed."""

    message: str


@dataclass(frozen=True)
class HistoryFound:
    """History entries parsed from one of the sources."""

    items: Tuple[HistoryInfo, ...]
    source: str


HistoryOutcome = Union[NoHistory, HistoryParseFailure, HistoryFound]


@dataclass(frozen=True)
class FirmwareSelection:
    """Model, region and firmware handed off to the download and decrypt flows."""

    model: str
    region: str
    firmware: str


class HistoryBodyParser(ABC):
    """
    Abstract base class for parsers of the primary history page.

    The primary source returns an HTML/JSON page whose layout is specific to the
    hosting platform. Implementations turn that page into HistoryInfo records.
    """

    @abstractmethod
    async def parse_history(self, body: str) -> List[HistoryInfo]:
        """
        Parse the primary source's full response text.

        Parameters:
            body (str): The raw page text.

        Returns:
            List[HistoryInfo]: Entries in the order the page presents them (most recent
                first), with `date` populated when the page supplies one and
                `android_version` left unset.
        """
