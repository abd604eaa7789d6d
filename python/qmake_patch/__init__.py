"""
qmake-patch: In-place patching of hardcoded values in QMake executables.

QMake reads its install paths (qt_prfxpath=..., qt_libspath=..., ...) and
its Qt version string from zero-padded fields compiled into the
executable. This package rewrites those fields without changing the size
or layout of the file, and without parsing any executable format: fields
are located by their text and their capacity is inferred from the zero
padding that follows them.

    from qmake_patch import patch_qmake_binary

    result = patch_qmake_binary(
        Path("bin/qmake"),
        "4.8.4",
        ["qt_prfxpath=/opt/qt4", "qt_libspath=/opt/qt4/lib"],
    )

For in-memory work, use the lower-level operations directly:

    from qmake_patch import Image, rewrite_variable, rewrite_version
"""

from .types import (
    RetCode,
    FieldLocation,
    PatchResult,
    FIELD_RESERVED_AREA_LIMIT,
    SEARCH_BLOCK_SIZE,
)
from .scanner import (
    find_subsequence,
    find_nonzero,
    is_printable,
)
from .image import (
    Image,
    ImageFileError,
    Modification,
)
from .field import (
    resolve_field,
    rewrite_field,
    FieldResolveResult,
)
from .beacon import (
    find_beacon,
    rewrite_field_with_beacon,
)
from .variable import (
    split_variable_spec,
    find_leader,
    rewrite_variable,
)
from .version import (
    rewrite_version,
    get_major_version,
    VERSION_BEACONS,
)
from .patch import (
    patch_qmake_image,
    patch_qmake_binary,
)
from .record import (
    write_patch_record,
    read_patch_record,
)

__all__ = [
    # Result types
    "RetCode",
    "FieldLocation",
    "PatchResult",
    "FieldResolveResult",
    # Constants
    "FIELD_RESERVED_AREA_LIMIT",
    "SEARCH_BLOCK_SIZE",
    "VERSION_BEACONS",
    # Byte scanning
    "find_subsequence",
    "find_nonzero",
    "is_printable",
    # Image
    "Image",
    "ImageFileError",
    "Modification",
    # Field operations
    "resolve_field",
    "rewrite_field",
    "find_beacon",
    "rewrite_field_with_beacon",
    "split_variable_spec",
    "find_leader",
    "rewrite_variable",
    "rewrite_version",
    "get_major_version",
    # Patch runs
    "patch_qmake_image",
    "patch_qmake_binary",
    # Patch records
    "write_patch_record",
    "read_patch_record",
]
