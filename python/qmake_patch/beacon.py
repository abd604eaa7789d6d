"""
Beacon-anchored field patching.

Some fields (the Qt version string) have no fixed storage key. They are
found through a "beacon": a marker string that is stored, NUL-terminated,
right before the value, e.g. "-version\\0" followed by "4.8.4\\0".

The same marker text can also show up elsewhere in the image (help text,
other tables), so a match only counts when the byte right after its
terminator is printable. Otherwise the search continues after the match.
"""

import logging
import os

from .field import resolve_and_rewrite
from .image import Image
from .scanner import find_subsequence, is_printable
from .types import PatchResult, RetCode, as_bytes

logger = logging.getLogger(__name__)


def find_beacon(data: bytes | bytearray, beacon: str | bytes) -> int | None:
    """Find the value that follows a beacon.

    Args:
        data: Image contents
        beacon: Marker string, without terminator

    Returns:
        Offset of the first byte after "beacon\\0" whose value starts with a
        printable character, or None if there is no such occurrence
    """
    needle = as_bytes(beacon) + b"\x00"
    pos = 0
    while True:
        found = find_subsequence(data, needle, pos)
        if found is None:
            return None

        value_start = found + len(needle)
        # A match at the very end of the image has no value to test
        if value_start >= len(data):
            return None
        if is_printable(data[value_start]):
            return value_start

        pos = value_start


def rewrite_field_with_beacon(
    image: Image,
    beacon: str | bytes,
    replacement: str | bytes,
    verbose: bool = True,
) -> PatchResult:
    """Rewrite the value stored after a beacon.

    Args:
        image: Image to modify
        beacon: Marker string preceding the value
        replacement: New value, without terminator
        verbose: Report a missing beacon as an error. When False, a missing
            beacon is only logged at debug level (used when probing several
            candidate beacons).

    Returns:
        PatchResult of the rewrite
    """
    name = beacon if isinstance(beacon, str) else os.fsdecode(beacon)

    value_start = find_beacon(image.data, beacon)
    if value_start is None:
        error = f"Could not find '{name}' beacon in image."
        if verbose:
            logger.error(error)
        else:
            logger.debug(error)
        return PatchResult.fail(RetCode.DATA_FAILURE, error, field=name)

    return resolve_and_rewrite(
        image,
        name,
        area_start=value_start,
        value_start=value_start,
        replacement=as_bytes(replacement) + b"\x00",
    )
