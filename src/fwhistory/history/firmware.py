"""
Firmware string helpers.

Upstream sources drop trailing segments of a firmware string when they repeat
the first one (CSC, modem and bootloader fields frequently mirror the PDA).
Download URL builders expect the full PDA/CSC/MODEM/BOOTLOADER layout, so the
helpers here restore it.
"""

from typing import List

from fwhistory.constants import (
    FIRMWARE_SEPARATOR,
    HISTORY_SORT_KEY_LENGTH,
)


def split_firmware(raw: str) -> List[str]:
    """Split a firmware string on '/' and drop blank segments."""
    return [part for part in raw.split(FIRMWARE_SEPARATOR) if part.strip()]


def normalize_firmware(raw: str) -> str:
    """
    Normalize a slash-delimited firmware string to its 4-segment form.

    Two segments become [A, B, A, A] and three segments become [A, B, C, A].
    Any other segment count is rejoined unchanged, so callers that need exactly
    four segments must check the result themselves.

    Parameters:
        raw (str): Firmware string as reported upstream, e.g. "G998BXXU5CVDD/G998BOXM5CVDD".

    Returns:
        str: The normalized firmware string; "" when `raw` has no non-blank segments.
    """
    parts = split_firmware(raw)

    if len(parts) == 2:
        parts.append(parts[0])
        parts.append(parts[0])
    elif len(parts) == 3:
        parts.append(parts[0])

    return FIRMWARE_SEPARATOR.join(parts)


def firmware_build_prefix(firmware: str) -> str:
    """Return the first segment of a firmware string, used as the changelog key."""
    return firmware.split(FIRMWARE_SEPARATOR)[0]


def history_sort_key(firmware: str) -> str:
    # Lexicographic, not numeric: the tail encodes year/month/iteration characters.
    return firmware[-HISTORY_SORT_KEY_LENGTH:]
