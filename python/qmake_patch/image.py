"""
In-memory QMake image.

The Image class owns the complete file contents as a bytearray. It is
loaded once, modified in place by field rewrites, and written back once.

Design principles:
- Load once, modify in memory, write once
- Never change the size of the image
- Track all modifications for reporting
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path

from .types import round_down_to_block


class ImageFileError(OSError):
    """Raised when an image cannot be read from or written to disk."""

    pass


@dataclass
class Modification:
    """Record of a modification made to the image."""

    operation: str  # e.g., "rewrite_field"
    file_offset: int
    size: int
    description: str
    original: bytes = b""
    replacement: bytes = b""


@dataclass
class Image:
    """A binary image loaded wholesale into memory.

    Usage:
        image = Image.load(Path("bin/qmake"))

        pos = image.data.find(b"qt_prfxpath=")
        image.write_bytes_at_offset(pos, b"qt_prfxpath=/opt/qt4\\x00")

        image.save()
    """

    data: bytearray
    path: Path | None = None
    # Cached search start for variable lookups (multiple of SEARCH_BLOCK_SIZE).
    search_offset: int | None = None
    modifications: list[Modification] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "Image":
        """Read a whole file into memory.

        Args:
            path: Path to the binary

        Returns:
            Image holding the file contents

        Raises:
            ImageFileError: If the file cannot be read, is empty or is too
                large to address
        """
        path = Path(path)
        try:
            with open(path, "rb") as f:
                size = f.seek(0, 2)
                if size == 0:
                    raise ImageFileError(f"File '{path}' is empty.")
                if size > (sys.maxsize >> 1):
                    raise ImageFileError(
                        f"File '{path}' has very large size of {size} bytes."
                    )
                f.seek(0)
                data = bytearray(f.read(size))
        except ImageFileError:
            raise
        except OSError as e:
            raise ImageFileError(f"Could not read file '{path}': {e}") from e

        if len(data) != size:
            raise ImageFileError(
                f"Could not read {size} bytes of file '{path}' "
                f"(got {len(data)})."
            )

        return cls(data=data, path=path)

    @property
    def size(self) -> int:
        """Image size in bytes."""
        return len(self.data)

    def update_search_offset(self, position: int) -> None:
        """Remember the search block of a found variable.

        The cache only ever moves towards the start of the image so that
        later lookups still cover every variable seen so far.
        """
        block = round_down_to_block(position)
        if self.search_offset is None or block < self.search_offset:
            self.search_offset = block

    def write_bytes_at_offset(
        self, offset: int, data: bytes, description: str = ""
    ) -> None:
        """Overwrite bytes in place.

        Args:
            offset: File offset
            data: Bytes to write
            description: Human-readable description for tracking

        Raises:
            ValueError: If the write would cross the end of the image
        """
        if offset < 0 or offset + len(data) > len(self.data):
            raise ValueError(
                f"Write would exceed image bounds: offset={offset}, "
                f"len={len(data)}, image_size={len(self.data)}"
            )

        original = bytes(self.data[offset : offset + len(data)])
        self.data[offset : offset + len(data)] = data
        self.modifications.append(
            Modification(
                operation="rewrite_field",
                file_offset=offset,
                size=len(data),
                description=description or f"write {len(data)} bytes at 0x{offset:x}",
                original=original,
                replacement=bytes(data),
            )
        )

    def save(self, path: Path | None = None) -> None:
        """Write the whole image back in a single write.

        Args:
            path: Output path (defaults to the path the image was loaded from)

        Raises:
            ImageFileError: If the file cannot be written completely
        """
        if path is None:
            path = self.path
        if path is None:
            raise ValueError("Image has no associated path to save to")

        try:
            with open(path, "wb") as f:
                written = f.write(self.data)
        except OSError as e:
            raise ImageFileError(
                f"Could not write {self.size} bytes to file '{path}': {e}"
            ) from e

        if written != self.size:
            raise ImageFileError(
                f"Could not write {self.size} bytes to file '{path}' "
                f"(wrote {written})."
            )
