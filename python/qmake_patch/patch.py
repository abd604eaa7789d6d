"""
Complete patch runs.

A run loads the image, rewrites the version string (if requested), then
each variable in order, and writes the image back only if every step
succeeded. The first failure ends the run and the file on disk stays
untouched.

Usage:
    from qmake_patch import patch_qmake_binary

    result = patch_qmake_binary(
        Path("bin/qmake"), "4.8.4", ["qt_prfxpath=/opt/qt4"]
    )
    if not result.success:
        sys.exit(result.code)
"""

import logging
from pathlib import Path
from typing import Iterable

from .image import Image, ImageFileError
from .record import write_patch_record
from .types import PatchResult, RetCode
from .variable import rewrite_variable
from .version import rewrite_version

logger = logging.getLogger(__name__)


def patch_qmake_image(
    image: Image,
    version: str,
    variables: Iterable[str | bytes] = (),
) -> PatchResult:
    """Apply a version and variable rewrites to an in-memory image.

    Stops at the first failure. Rewrites applied before the failure stay
    in the buffer; callers must not save the image in that case.

    Args:
        image: Image to modify
        version: New Qt version string, or "" to leave it alone
        variables: "name=value" specs, applied in order

    Returns:
        PatchResult of the first failing step, or success
    """
    result = rewrite_version(image, version)
    if not result.success:
        return result

    for spec in variables:
        result = rewrite_variable(image, spec)
        if not result.success:
            return result

    return PatchResult.ok()


def patch_qmake_binary(
    path: Path,
    version: str,
    variables: Iterable[str | bytes] = (),
    record_path: Path | None = None,
) -> PatchResult:
    """Patch a QMake executable on disk.

    Args:
        path: QMake executable, rewritten in place
        version: New Qt version string, or "" to leave it alone
        variables: "name=value" specs, applied in order
        record_path: If given, write a patch record there. The record is
            written before the image, so a bad record path leaves the image
            untouched.

    Returns:
        PatchResult of the run. FILE_FAILURE for I/O errors,
        GENERIC_FAILURE if the image does not fit in memory.
    """
    path = Path(path)

    try:
        image = Image.load(path)
    except ImageFileError as e:
        logger.error("%s", e)
        return PatchResult.fail(RetCode.FILE_FAILURE, str(e), field=str(path))
    except MemoryError:
        error = f"Could not allocate memory to read the contents of file '{path}'."
        logger.error(error)
        return PatchResult.fail(RetCode.GENERIC_FAILURE, error, field=str(path))

    result = patch_qmake_image(image, version, variables)
    if not result.success:
        return result

    if record_path is not None:
        record_path = Path(record_path)
        try:
            write_patch_record(record_path, image)
        except OSError as e:
            error = f"Could not write patch record '{record_path}': {e}"
            logger.error(error)
            return PatchResult.fail(
                RetCode.FILE_FAILURE, error, field=str(record_path)
            )

    try:
        image.save()
    except ImageFileError as e:
        logger.error("%s", e)
        if record_path is not None:
            # The record describes changes that never reached the disk
            record_path.unlink(missing_ok=True)
        return PatchResult.fail(RetCode.FILE_FAILURE, str(e), field=str(path))

    logger.info(
        "Patched '%s': %d field(s) rewritten", path, len(image.modifications)
    )

    return PatchResult.ok(field=str(path))
