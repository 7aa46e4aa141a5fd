"""Shared helpers used by manifest tooling."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, BinaryIO


def write_bytes(path: Path, content: bytes) -> None:
    """Write bytes to file ensuring parent directories exist.

    The payload lands in a sibling temporary file first and is moved into
    place with ``os.replace`` so readers never observe a partial file.
    """

    write_stream(path, lambda handle: handle.write(content))


def write_stream(path: Path, writer: Callable[[BinaryIO], object]) -> None:
    """Open a temporary sibling of ``path``, hand it to ``writer`` and commit it."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            writer(handle)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
