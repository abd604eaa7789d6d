"""
Shared constants and result types for QMake image patching.

Every patch operation reports its outcome as a value (PatchResult) rather
than raising. The RetCode values double as the process exit status of the
command line tool.
"""

import os
from dataclasses import dataclass
from enum import IntEnum

# =============================================================================
# Constants
# =============================================================================

# Sanity limit for the reserved area of a single field ("qt_xxxxpath=...").
FIELD_RESERVED_AREA_LIMIT = 4096

# Granularity of the cached variable search offset (64KB).
SEARCH_BLOCK_SIZE = 0x10000

DEFAULT_MODULE_NAME = "qmakepatch"


def round_down_to_block(offset: int) -> int:
    """Round offset down to the previous search block boundary."""
    return offset & ~(SEARCH_BLOCK_SIZE - 1)


class RetCode(IntEnum):
    """Outcome of a patch operation, also used as the process exit status."""

    SUCCESS = 0
    BAD_SYNTAX = 1
    BAD_CONFIG = 2
    GENERIC_FAILURE = 3
    FILE_FAILURE = 4
    DATA_FAILURE = 5


@dataclass
class FieldLocation:
    """Byte boundaries of a field's storage within an image.

    Attributes:
        area_start: First byte of the field's reserved area
        value_start: First byte of the current value (>= area_start)
        value_end: Position of the current value's NUL terminator
        area_end: End of the zero padding (exclusive), i.e. the first
            non-zero byte after the terminator
    """

    area_start: int
    value_start: int
    value_end: int
    area_end: int

    @property
    def reserved_size(self) -> int:
        """Number of bytes available for a replacement (terminator included)."""
        return self.area_end - self.area_start

    @property
    def value_size(self) -> int:
        """Length of the current value, excluding its terminator."""
        return self.value_end - self.value_start


@dataclass
class PatchResult:
    """Result of a single patch operation or of a whole patch run."""

    success: bool
    code: RetCode
    field: str | None = None
    location: FieldLocation | None = None
    error: str | None = None

    @classmethod
    def ok(
        cls, field: str | None = None, location: FieldLocation | None = None
    ) -> "PatchResult":
        return cls(success=True, code=RetCode.SUCCESS, field=field, location=location)

    @classmethod
    def fail(cls, code: RetCode, error: str, field: str | None = None) -> "PatchResult":
        return cls(success=False, code=code, field=field, error=error)


def as_bytes(value: str | bytes) -> bytes:
    """Convert a command-line string to the bytes it was typed as."""
    if isinstance(value, str):
        return os.fsencode(value)
    return bytes(value)
