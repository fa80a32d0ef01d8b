"""
Changelog retrieval for firmware history entries.

The vendor publishes release notes per model and region as a small frame page
(`doc.html`) whose hidden language selector points at the actual notes document.
The notes document lists one block per firmware build: a header row with
"Build Number", "Android version", "Release Date" and "Security Patch Level"
fields, followed by rows holding the notes text.
"""

from typing import Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from fwhistory.constants import (
    CHANGELOG_LANGUAGE_SELECTOR,
    CHANGELOG_PREFERRED_LANGUAGE,
    CHANGELOG_URL_TEMPLATE,
)
from fwhistory.exceptions import ChangelogError
from fwhistory.log_utils import logger

from .async_client import AsyncHistoryClient, build_source_url
from .interfaces import Changelog, ChangelogIndex

_FIELD_LABELS = {
    "build number": "firmware",
    "android version": "android_version",
    "release date": "release_date",
    "security patch level": "security_patch",
}
_BUILD_LABEL = "build number"


def _normalize_label(label: str) -> str:
    return " ".join(label.split()).lower()


def _text_lines(tag: Tag) -> List[str]:
    lines = (line.strip() for line in tag.get_text("\n").splitlines())
    return [line for line in lines if line]


def _is_header_row(row: Tag) -> bool:
    return _BUILD_LABEL in _normalize_label(row.get_text(" "))


def _parse_header_fields(row: Tag) -> Dict[str, str]:
    """
    Read `Label : value` pairs from a changelog header row.

    A value rendered in its own element (e.g. `<b>Build Number :</b> X`) ends up on
    the line after its label, so an empty value is taken from the next line.
    """
    fields: Dict[str, str] = {}
    lines = _text_lines(row)
    index = 0
    while index < len(lines):
        label, sep, value = lines[index].partition(":")
        key = _FIELD_LABELS.get(_normalize_label(label)) if sep else None
        if key:
            value = value.strip()
            if not value and index + 1 < len(lines) and ":" not in lines[index + 1]:
                index += 1
                value = lines[index]
            if value:
                fields[key] = value
        index += 1
    return fields


def parse_language_doc_url(html: str, page_url: str) -> Optional[str]:
    """
    Find the notes document URL in a changelog frame page.

    The English option of the hidden language selector is preferred; otherwise the
    first option is used. Option text is a URL relative to `page_url`.

    Returns:
        Optional[str]: Absolute URL of the notes document, or None if the page has no selector.
    """
    soup = BeautifulSoup(html, "html.parser")
    selector = soup.select_one(CHANGELOG_LANGUAGE_SELECTOR)
    if selector is None:
        return None

    options = selector.find_all("option")
    if not options:
        return None

    chosen = next(
        (
            option
            for option in options
            if str(option.get("value", "")).upper() == CHANGELOG_PREFERRED_LANGUAGE
        ),
        options[0],
    )
    relative = chosen.get_text(strip=True)
    if not relative:
        return None
    return urljoin(page_url, relative)


def parse_changelogs(device: str, html: str) -> ChangelogIndex:
    """
    Parse a changelog notes document into an index keyed by build number.

    Parameters:
        device (str): Model the document belongs to.
        html (str): The notes document.

    Returns:
        ChangelogIndex: Changelogs in document order.

    Raises:
        ChangelogError: If the document has no `.container` element.
    """
    soup = BeautifulSoup(html, "html.parser")
    container = soup.select_one(".container")
    if container is None:
        raise ChangelogError(f"Changelog document for {device} has no container")

    changelogs: Dict[str, Changelog] = {}
    current: Optional[Dict[str, str]] = None
    notes: List[str] = []

    def flush() -> None:
        if current and current.get("firmware"):
            changelogs[current["firmware"]] = Changelog(
                device=device,
                firmware=current["firmware"],
                android_version=current.get("android_version"),
                release_date=current.get("release_date"),
                security_patch=current.get("security_patch"),
                notes="\n".join(notes) or None,
            )

    for row in container.find_all("div", class_="row", recursive=False):
        if _is_header_row(row):
            flush()
            current = _parse_header_fields(row)
            notes = []
        elif current is not None:
            notes.extend(_text_lines(row))
    flush()

    return ChangelogIndex(device=device, changelogs=changelogs)


class ChangelogHandler:
    """Fetches and indexes vendor changelogs for a model and region."""

    def __init__(
        self,
        client: AsyncHistoryClient,
        url_template: str = CHANGELOG_URL_TEMPLATE,
    ) -> None:
        self.client = client
        self.url_template = url_template

    async def get_changelogs(self, model: str, region: str) -> Optional[ChangelogIndex]:
        """
        Fetch the changelogs published for a model and region.

        Returns:
            Optional[ChangelogIndex]: The index, or None if either document is unavailable.

        Raises:
            ChangelogError: If the notes document cannot be parsed.
        """
        outer_url = build_source_url(self.url_template, model, region)
        outer = await self.client.get_text(outer_url)
        if outer is None:
            logger.debug(f"No changelog page for {model}/{region}")
            return None

        doc_url = parse_language_doc_url(outer, outer_url)
        if doc_url is None:
            logger.debug(f"No changelog document link on {outer_url}")
            return None

        body = await self.client.get_text(doc_url)
        if body is None:
            logger.debug(f"Changelog document unavailable: {doc_url}")
            return None

        try:
            index = parse_changelogs(model.strip(), body)
        except ChangelogError as e:
            e.url = doc_url
            raise
        logger.debug(f"Loaded {len(index)} changelogs for {model}/{region}")
        return index
