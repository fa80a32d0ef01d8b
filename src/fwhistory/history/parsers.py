"""
FOTA version.xml history parser.

The vendor FOTA endpoint answers with a document shaped like::

    <versioninfo>
      <firmware>
        <version>
          <latest o="13">PDA/CSC/MODEM/BL</latest>
          <upgrade>
            <value rcount="0" fwsize="...">PDA/CSC/MODEM</value>
          </upgrade>
        </version>
      </firmware>
    </versioninfo>

Missing nodes are skipped; only a document that is not XML at all fails.
"""

import xml.etree.ElementTree as ET
from typing import List, Optional

from fwhistory.constants import SOURCE_FOTA_XML
from fwhistory.exceptions import HistoryParseError
from fwhistory.log_utils import logger

from .firmware import history_sort_key, normalize_firmware
from .interfaces import HistoryInfo


def _first_descendant(node: Optional[ET.Element], *path: str) -> Optional[ET.Element]:
    for tag in path:
        if node is None:
            return None
        node = next(node.iter(tag), None)
    return node


def _node_text(node: ET.Element) -> str:
    return "".join(node.itertext()).strip()


def parse_history_xml(xml: str) -> List[HistoryInfo]:
    """
    Parse a FOTA version.xml document into history entries.

    The `latest` entry (when present and non-blank) comes first and carries the
    Android version from its `o` attribute. Upgrade entries follow, sorted
    descending by the last four characters of their normalized firmware string.

    Parameters:
        xml (str): Raw version.xml payload.

    Returns:
        List[HistoryInfo]: Parsed entries; empty when the document has no history nodes.

    Raises:
        HistoryParseError: If the payload is not well-formed XML.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise HistoryParseError(
            "Malformed firmware history XML", source=SOURCE_FOTA_XML, details=str(e)
        ) from e

    version = _first_descendant(root, "firmware", "version")
    latest = _first_descendant(version, "latest")
    upgrade = _first_descendant(version, "upgrade")

    items: List[HistoryInfo] = []

    if latest is not None:
        firmware = normalize_firmware(_node_text(latest))
        if firmware:
            items.append(
                HistoryInfo(
                    firmware_string=firmware,
                    date=None,
                    android_version=latest.get("o"),
                )
            )
        else:
            logger.debug("Skipping blank latest firmware entry")

    if upgrade is not None:
        historical = []
        for value in upgrade.findall("value"):
            firmware = normalize_firmware(_node_text(value))
            if not firmware:
                continue
            historical.append(HistoryInfo(firmware_string=firmware))

        historical.sort(
            key=lambda info: history_sort_key(info.firmware_string), reverse=True
        )
        items.extend(historical)

    logger.debug(f"Parsed {len(items)} firmware history entries from FOTA XML")
    return items

