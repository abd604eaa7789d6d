"""
Field boundary resolution and rewriting.

A field is a NUL-terminated string stored in a reserved area that is
usually larger than the current value. The extra space is zero padding,
so the true capacity is only known once the zero run after the terminator
ends:

    area_start  value_start      value_end          area_end
    |           |                |                  |
    v           v                v                  v
    [ leader... | current value  | \\0 \\0 \\0 ... \\0 ] next data...

Resolution runs in three steps, each bounded by FIELD_RESERVED_AREA_LIMIT
so that a false anchor inside non-text data cannot make the area unbounded:
1. value scan: find the terminator of the current value
2. pad scan: find the first non-zero byte after the terminator
3. ceiling check: reject areas larger than the sanity limit
"""

import logging
from dataclasses import dataclass

from .image import Image
from .scanner import find_nonzero
from .types import (
    FIELD_RESERVED_AREA_LIMIT,
    FieldLocation,
    PatchResult,
    RetCode,
)

logger = logging.getLogger(__name__)


@dataclass
class FieldResolveResult:
    """Result of resolving a field's boundaries."""

    success: bool
    location: FieldLocation | None = None
    error: str | None = None


def _fail(error: str) -> FieldResolveResult:
    logger.error(error)
    return FieldResolveResult(success=False, error=error)


def resolve_field(
    data: bytes | bytearray,
    name: str,
    area_start: int,
    value_start: int,
    end: int | None = None,
) -> FieldResolveResult:
    """Determine the reserved area of a field.

    Args:
        data: Image contents
        name: Field name for diagnostics
        area_start: Start of the field's reserved area
        value_start: Start of the field's current value
        end: Exclusive search bound (defaults to len(data))

    Returns:
        FieldResolveResult with the resolved FieldLocation
    """
    if end is None:
        end = len(data)

    value_end = data.find(b"\x00", value_start, end)
    if value_end == -1:
        return _fail(f"Could not find the end of '{name}' value in image.")

    reserved = value_end - area_start
    if reserved > FIELD_RESERVED_AREA_LIMIT:
        return _fail(
            f"Determined size of '{name}' value in image is {reserved} bytes, "
            f"which is beyond sanity limit of {FIELD_RESERVED_AREA_LIMIT} bytes."
        )

    area_end = find_nonzero(data, value_end + 1, end)
    if area_end >= end:
        return _fail(f"Could not find the end of '{name}' reserved area in image.")

    reserved = area_end - area_start
    if reserved > FIELD_RESERVED_AREA_LIMIT:
        return _fail(
            f"Determined size of '{name}' reserved area in image is {reserved} "
            f"bytes, which is beyond sanity limit of {FIELD_RESERVED_AREA_LIMIT} "
            f"bytes."
        )

    return FieldResolveResult(
        success=True,
        location=FieldLocation(
            area_start=area_start,
            value_start=value_start,
            value_end=value_end,
            area_end=area_end,
        ),
    )


def rewrite_field(
    image: Image,
    name: str,
    location: FieldLocation,
    replacement: bytes,
) -> PatchResult:
    """Overwrite a resolved field and zero-fill the rest of its area.

    Args:
        image: Image to modify
        name: Field name for diagnostics
        location: Boundaries from resolve_field()
        replacement: New contents including the NUL terminator

    Returns:
        PatchResult; the image is left untouched on failure
    """
    reserved = location.reserved_size
    if len(replacement) > reserved:
        error = (
            f"Determined size of '{name}' reserved area in image is {reserved} "
            f"bytes, while the new value requires {len(replacement)} bytes."
        )
        logger.error(error)
        return PatchResult.fail(RetCode.DATA_FAILURE, error, field=name)

    padded = replacement + b"\x00" * (reserved - len(replacement))
    image.write_bytes_at_offset(
        location.area_start,
        padded,
        description=f"rewrite '{name}' ({len(replacement)}/{reserved} bytes)",
    )
    logger.info(
        "Rewrote '%s' at 0x%x (%d of %d bytes used)",
        name,
        location.area_start,
        len(replacement),
        reserved,
    )
    return PatchResult.ok(field=name, location=location)


def resolve_and_rewrite(
    image: Image,
    name: str,
    area_start: int,
    value_start: int,
    replacement: bytes,
) -> PatchResult:
    """Resolve a field's boundaries and rewrite it in one step."""
    resolved = resolve_field(image.data, name, area_start, value_start)
    if not resolved.success:
        return PatchResult.fail(RetCode.DATA_FAILURE, resolved.error, field=name)
    return rewrite_field(image, name, resolved.location, replacement)
