#!/usr/bin/env python3
"""
QMake patching CLI tool.

Changes hardcoded values in a QMake executable (install paths, Qt version
string) regardless of its file format, without relying on qt.conf.

Usage:
    python -m qmake_patch.tools.patch_qmake <qmake> <version> [name=value ...]
"""

import argparse
import logging
import sys
from pathlib import Path

from qmake_patch import patch_qmake_binary, RetCode
from qmake_patch.types import DEFAULT_MODULE_NAME

HELP_ARGS = ("-h", "-?", "--help", "help")


class UsageError(Exception):
    """Raised instead of exiting when the command line cannot be parsed."""

    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def get_module_name(argv0: str | None) -> str:
    """Derive the program name shown in help text from argv[0]."""
    if not argv0:
        return DEFAULT_MODULE_NAME

    if sys.platform == "win32":
        sep = max(argv0.rfind("\\"), argv0.rfind("/"))
    else:
        sep = argv0.rfind("/")

    if sep == -1:
        return argv0
    name = argv0[sep + 1 :]
    return name or DEFAULT_MODULE_NAME


def format_help(module_name: str) -> str:
    """Build the help text for the given program name."""
    return (
        "Patching utility for QMake executables\n"
        "\n"
        "Syntax:\n"
        f"\t{module_name} {{qmake.exe}} {{version}} [name=value ...]"
        " [--record PATH] [--verbose] [--]\n"
        "where\n"
        "\tqmake.exe\n"
        "\t\tPath to QMake executable file: 'qmake', '/bin/qmake-qt5'\n"
        "\tversion\n"
        "\t\tVersion string to be written.\n"
        "\t\tPass an empty argument to skip this patch.\n"
        "\tname=value\n"
        "\t\tVariable name and its new value to be written.\n"
        "\t\tEx.: qt_prfxpath=/opt/qt4\n"
        "\t\tNote that Qt5 allows to patch just a few of them.\n"
        "\t--record PATH\n"
        "\t\tWrite a MessagePack record of the applied changes.\n"
        "\t--verbose, -v\n"
        "\t\tReport each rewrite (repeat for debug output).\n"
        "\t--\n"
        "\t\tEnd of options. Later arguments are taken as they are,\n"
        "\t\teven when they start with '-'.\n"
        "\n"
        "Example:\n"
        f"\t{module_name} ./qmake 4.8.4 qt_prfxpath=/opt/qt4"
        " qt_libspath=/opt/qt4/lib\n"
        f"\t{module_name} --record qmake.patch -- ./qmake '' -odd_name=/opt\n"
    )


def build_parser(module_name: str) -> argparse.ArgumentParser:
    # Positionals are collected as a flat list and split by main(), which
    # also appends everything after "--" to them.
    parser = _ArgumentParser(prog=module_name, add_help=False, allow_abbrev=False)
    parser.add_argument(
        "arguments",
        nargs="*",
        metavar="argument",
        help="QMake executable, version string and variables to rewrite",
    )
    parser.add_argument(
        "--record",
        type=Path,
        default=None,
        help="Write a MessagePack record of the applied changes",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Report each rewrite (repeat for debug output)",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(stream=sys.stderr, level=level, format="%(message)s")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv

    module_name = get_module_name(argv[0] if argv else None)
    args_list = list(argv[1:])

    if args_list and args_list[0] in HELP_ARGS:
        print(format_help(module_name))
        return RetCode.SUCCESS

    trailing = []
    if "--" in args_list:
        sep = args_list.index("--")
        args_list, trailing = args_list[:sep], args_list[sep + 1 :]

    parser = build_parser(module_name)
    try:
        args = parser.parse_intermixed_args(args_list)
        positionals = (args.arguments or []) + trailing
        if len(positionals) < 2:
            raise UsageError("too few arguments")
    except UsageError as e:
        print(f"{module_name}: {e}", file=sys.stderr)
        print(format_help(module_name))
        return RetCode.BAD_SYNTAX

    configure_logging(args.verbose)

    image, version, *variables = positionals
    result = patch_qmake_binary(
        Path(image),
        version,
        variables,
        record_path=args.record,
    )

    if result.success and args.record is not None:
        print(f"Patch record written to {args.record}")

    return result.code


if __name__ == "__main__":
    sys.exit(main())
