"""
Qt version string patching.

Where QMake keeps its version string depends on the Qt release line, so
the major version selects which beacons to try:

    Qt 3:  "-version"
    Qt 4:  "-version", "QT_VERSION"
    Qt 5:  "--version", "QMAKE_VERSION", ") (Qt "

With a single candidate the beacon must be found. With several, every
candidate is tried and the patch succeeds if at least one was rewritten.
"""

import logging

from .beacon import rewrite_field_with_beacon
from .image import Image
from .types import PatchResult, RetCode

logger = logging.getLogger(__name__)


VERSION_BEACONS: dict[str, tuple[str, ...]] = {
    "3": ("-version",),
    "4": ("-version", "QT_VERSION"),
    # Qt 5 stores QT_VERSION as "QMAKE_VERSION"
    "5": ("--version", "QMAKE_VERSION", ") (Qt "),
}

# Qt 1.x and 2.x shipped without QMake.
REJECTED_MAJOR_VERSIONS = ("1", "2")


def get_major_version(version: str) -> str:
    """Return the leading component of a dotted version string."""
    return version.split(".", 1)[0]


def rewrite_version(image: Image, version: str) -> PatchResult:
    """Rewrite the Qt version string of a QMake image.

    Args:
        image: Image to modify
        version: New version, e.g. "4.8.4". An empty string skips the patch.

    Returns:
        PatchResult of the rewrite
    """
    if not version:
        return PatchResult.ok()

    major = get_major_version(version)

    if major in REJECTED_MAJOR_VERSIONS:
        error = "Qt versions 1.x and 2.x did not have QMake."
        logger.error(error)
        return PatchResult.fail(RetCode.BAD_CONFIG, error, field=version)

    beacons = VERSION_BEACONS.get(major)
    if beacons is None:
        error = (
            f"No idea on how to rewrite version string "
            f"for Qt major version '{major}'."
        )
        logger.error(error)
        return PatchResult.fail(RetCode.BAD_CONFIG, error, field=version)

    if len(beacons) == 1:
        return rewrite_field_with_beacon(image, beacons[0], version, verbose=True)

    results = [
        rewrite_field_with_beacon(image, beacon, version, verbose=False)
        for beacon in beacons
    ]
    done = [result for result in results if result.success]
    if done:
        logger.debug(
            "Version rewritten via %s", ", ".join(f"'{r.field}'" for r in done)
        )
        return done[0]

    attempted = ", ".join(f"'{beacon}'" for beacon in beacons)
    error = f"Could not update any of {attempted}."
    logger.error(error)
    return PatchResult.fail(RetCode.DATA_FAILURE, error, field=version)
