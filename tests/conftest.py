import pytest
import pathlib

from qmake_patch import Image
from image_test_utils import build_image, make_beacon_field, make_field


# =============================================================================
# Synthetic QMake images
# =============================================================================
#
# These mimic the relevant parts of real QMake executables. See
# tests/image_test_utils.py for the layout conventions.


@pytest.fixture
def qt4_image_bytes() -> bytes:
    """Image shaped like a Qt 4 QMake: help text, version beacons, paths.

    The help text contains "-version" followed by a non-printable byte, so
    only the second occurrence is a real version field.
    """
    return build_image(
        b"  -version\x00\x01Report version and exit",
        make_beacon_field(b"-version", b"4.8.1", 16),
        make_beacon_field(b"QT_VERSION", b"4.8.1", 16),
        make_field(b"qt_prfxpath=/usr/local/Trolltech/Qt-4.8.1", 256),
        make_field(b"qt_docspath=/usr/local/Trolltech/Qt-4.8.1/doc", 256),
        make_field(b"qt_libspath=/usr/local/Trolltech/Qt-4.8.1/lib", 256),
    )


@pytest.fixture
def qt4_image(qt4_image_bytes: bytes) -> Image:
    """In-memory Image of qt4_image_bytes."""
    return Image(data=bytearray(qt4_image_bytes))


@pytest.fixture
def qmake_file(tmp_path: pathlib.Path, qt4_image_bytes: bytes) -> pathlib.Path:
    """Qt 4 QMake image written to disk."""
    path = tmp_path / "qmake"
    path.write_bytes(qt4_image_bytes)
    return path
