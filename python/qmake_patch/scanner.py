"""
Low-level byte scanning primitives.

These operate on any bytes-like buffer and work with absolute offsets so
callers can keep positions relative to the whole image.
"""

import re

_NONZERO_BYTE = re.compile(rb"[^\x00]")


def find_subsequence(
    data: bytes | bytearray,
    needle: bytes,
    start: int = 0,
    end: int | None = None,
) -> int | None:
    """Find the first occurrence of needle fully inside data[start:end].

    The needle may contain NUL bytes, which allows anchoring on a whole
    string plus its terminator.

    Args:
        data: Buffer to search
        needle: Byte sequence to look for
        start: First offset to consider
        end: Exclusive upper bound (defaults to len(data))

    Returns:
        Absolute offset of the match, or None if not found

    Raises:
        ValueError: If needle is empty
    """
    if not needle:
        raise ValueError("Cannot search for an empty byte sequence")

    if end is None:
        end = len(data)

    pos = data.find(needle, start, end)
    if pos == -1:
        return None
    return pos


def find_nonzero(data: bytes | bytearray, start: int, end: int) -> int:
    """Find the first non-zero byte in data[start:end].

    Args:
        data: Buffer to search
        start: First offset to consider
        end: Exclusive upper bound (start of the next block)

    Returns:
        Offset of the first non-zero byte, or end if the range is all zeros
    """
    if start >= end:
        return end

    match = _NONZERO_BYTE.search(data, start, end)
    return end if match is None else match.start()


def is_printable(byte: int) -> bool:
    """Check whether a byte is a printable ASCII character (C locale isprint)."""
    return 0x20 <= byte <= 0x7E
