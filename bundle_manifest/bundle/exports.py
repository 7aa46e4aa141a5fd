"""Default Export-Package calculation from bundle contents."""

from __future__ import annotations

from typing import Dict

from .jar import ROOT_DIRECTORY, Package

RESERVED_ROOTS = ("META-INF", "OSGI-OPT")


def _is_reserved(directory: str) -> bool:
    return any(directory == root or directory.startswith(f"{root}/") for root in RESERVED_ROOTS)


def calculate_exports_from_contents(package: Package) -> str:
    """Return the comma separated package names of every non-empty directory.

    Metadata roots, the bundle root and directories without resources are
    skipped. An empty string means there is nothing to export.
    """

    exports: Dict[str, None] = {}
    for directory, entries in package.directories.items():
        # parent-only directories carry no resources of their own
        if not entries:
            continue
        if _is_reserved(directory) or directory == ROOT_DIRECTORY:
            continue
        if directory.endswith("/"):
            directory = directory[:-1]
        exports.setdefault(directory.replace("/", "."), None)
    return ",".join(exports)
