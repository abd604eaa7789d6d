"""
Leader-anchored variable patching.

QMake stores its install paths as literal "name=value" strings, each in a
fixed-size zero-padded slot:

    qt_prfxpath=/usr/local/Trolltech/Qt-4.8.4\\0\\0\\0...\\0qt_docspath=...

A variable is located by its exact "name=" leader and rewritten together
with the leader, so the slot always holds a complete "name=value" pair.

Variables tend to sit next to each other in ascending order, so the
image caches the 64KB block of the lowest variable found so far and later
lookups start there. The cache is a hint only: a miss always falls back to
searching the whole image.
"""

import logging
import os

from .field import resolve_and_rewrite
from .image import Image
from .scanner import find_subsequence
from .types import PatchResult, RetCode, as_bytes

logger = logging.getLogger(__name__)


def split_variable_spec(spec: str | bytes) -> tuple[bytes, bytes] | None:
    """Split "name=value" into its leader ("name=") and value.

    Returns:
        (leader, value) tuple, or None if there is no equals sign
    """
    raw = as_bytes(spec)
    sep = raw.find(b"=")
    if sep == -1:
        return None
    return raw[: sep + 1], raw[sep + 1 :]


def find_leader(image: Image, leader: bytes) -> int | None:
    """Find a variable leader, starting at the cached search offset.

    Updates the image's search offset on success.

    Args:
        image: Image to search
        leader: Exact "name=" bytes

    Returns:
        Offset of the leader, or None if not found anywhere in the image
    """
    start = image.search_offset or 0
    found = find_subsequence(image.data, leader, start)

    if found is None and start:
        logger.debug(
            "'%s' not found after 0x%x, searching whole image",
            os.fsdecode(leader),
            start,
        )
        found = find_subsequence(image.data, leader)

    if found is not None:
        image.update_search_offset(found)

    return found


def rewrite_variable(image: Image, spec: str | bytes) -> PatchResult:
    """Rewrite a "name=value" variable in place.

    Args:
        image: Image to modify
        spec: New "name=value" pair

    Returns:
        PatchResult of the rewrite. BAD_CONFIG if the pair has no equals
        sign, DATA_FAILURE if the variable cannot be found or does not fit.
    """
    display = spec if isinstance(spec, str) else os.fsdecode(spec)

    parts = split_variable_spec(spec)
    if parts is None:
        error = f"No equals sign found in '{display}'."
        logger.error(error)
        return PatchResult.fail(RetCode.BAD_CONFIG, error, field=display)

    leader, _ = parts
    name = os.fsdecode(leader[:-1])

    found = find_leader(image, leader)
    if found is None:
        error = f"Could not find '{os.fsdecode(leader)}' in image."
        logger.error(error)
        return PatchResult.fail(RetCode.DATA_FAILURE, error, field=name)

    return resolve_and_rewrite(
        image,
        name,
        area_start=found,
        value_start=found + len(leader),
        replacement=as_bytes(spec) + b"\x00",
    )
