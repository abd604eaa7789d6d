"""
Patch records.

A patch record lists every rewrite applied to an image, including the
bytes that were replaced, serialized as MessagePack. It documents what a
patch run changed and holds enough data to restore the original bytes.
"""

from pathlib import Path

import msgpack

from .image import Image, Modification

RECORD_FORMAT = "qmake-patch-record"
RECORD_VERSION = 1


def build_patch_record(image: Image) -> dict:
    """Build the record dictionary for an image's modifications."""
    return {
        "format": RECORD_FORMAT,
        "version": RECORD_VERSION,
        "image": str(image.path) if image.path is not None else None,
        "size": image.size,
        "modifications": [
            {
                "operation": mod.operation,
                "file_offset": mod.file_offset,
                "size": mod.size,
                "description": mod.description,
                "original": mod.original,
                "replacement": mod.replacement,
            }
            for mod in image.modifications
        ],
    }


def write_patch_record(path: Path, image: Image) -> None:
    """Serialize an image's modifications to a MessagePack file.

    Args:
        path: Output record path
        image: Patched image
    """
    record_bytes = msgpack.packb(build_patch_record(image), use_bin_type=True)
    Path(path).write_bytes(record_bytes)


def read_patch_record(path: Path) -> dict:
    """Read a patch record written by write_patch_record().

    Args:
        path: Record path

    Returns:
        Record dictionary with "modifications" converted to Modification
        objects

    Raises:
        RuntimeError: If the file is not a valid patch record
    """
    content = Path(path).read_bytes()
    try:
        record = msgpack.unpackb(content, raw=False, strict_map_key=True)
    except (msgpack.exceptions.UnpackException, ValueError) as e:
        raise RuntimeError(f"Failed to parse patch record {path}: {e}")

    if not isinstance(record, dict) or record.get("format") != RECORD_FORMAT:
        raise RuntimeError(f"{path} is not a {RECORD_FORMAT} file")
    if record.get("version") != RECORD_VERSION:
        raise RuntimeError(
            f"Unsupported patch record version {record.get('version')} in {path}"
        )

    try:
        record["modifications"] = [
            Modification(**entry) for entry in record["modifications"]
        ]
    except (KeyError, TypeError) as e:
        raise RuntimeError(f"Malformed modification entry in {path}: {e}")

    return record
