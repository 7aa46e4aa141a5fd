"""Manifest helpers for bundle assembly."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, MutableMapping, Optional, Tuple

from .headers import split_clauses
from .utils import write_bytes

logger = logging.getLogger(__name__)

MANIFEST_VERSION = "Manifest-Version"
MANIFEST_NAME = "MANIFEST.MF"
MANIFEST_PATH = f"META-INF/{MANIFEST_NAME}"

_MAX_LINE_BYTES = 72
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ManifestSyntaxError(ValueError):
    """Raised when manifest bytes do not follow the jar manifest format."""


def _single_line(value: str) -> str:
    # a raw line break would end the main section on read-back
    if "\r" not in value and "\n" not in value:
        return value
    return " ".join(part.strip() for part in _LINE_BREAK.split(value) if part.strip())


class Manifest(MutableMapping[str, str]):
    """Ordered, case-sensitive mapping of main-section manifest headers."""

    def __init__(self, headers: Optional[Iterable[Tuple[str, str]] | Dict[str, str]] = None) -> None:
        self._headers: Dict[str, str] = {}
        if headers is not None:
            items = headers.items() if isinstance(headers, dict) else headers
            for name, value in items:
                self[name] = value

    def __getitem__(self, name: str) -> str:
        return self._headers[name]

    def __setitem__(self, name: str, value: str) -> None:
        if not name or ":" in name or any(char.isspace() for char in name):
            raise ValueError(f"Invalid manifest header name: {name!r}")
        self._headers[name] = _single_line(str(value))

    def __delitem__(self, name: str) -> None:
        del self._headers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Manifest):
            return list(self.items()) == list(other.items())
        return NotImplemented

    def __repr__(self) -> str:
        return f"Manifest({self._headers!r})"

    def copy(self) -> "Manifest":
        return Manifest(self._headers)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._headers)


def parse_manifest(data: bytes) -> Manifest:
    """Parse the main section of a jar manifest."""

    manifest = Manifest()
    current: Optional[str] = None
    for lineno, line in enumerate(_LINE_BREAK.split(data.decode("utf-8")), start=1):
        if not line:
            if current is not None or len(manifest):
                break
            continue
        if line.startswith(" "):
            if current is None:
                raise ManifestSyntaxError(f"line {lineno}: continuation without a header")
            manifest[current] = manifest[current] + line[1:]
            continue
        name, sep, value = line.partition(":")
        if not sep:
            raise ManifestSyntaxError(f"line {lineno}: missing ':' in {line!r}")
        current = name.strip()
        if current in manifest:
            logger.debug("Duplicate manifest header %s on line %d; keeping last value", current, lineno)
        try:
            manifest[current] = value[1:] if value.startswith(" ") else value
        except ValueError as exc:
            raise ManifestSyntaxError(f"line {lineno}: {exc}") from exc
    return manifest


def _wrap(line: str) -> List[str]:
    chunks: List[str] = []
    current = ""
    size = 0
    limit = _MAX_LINE_BYTES
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > limit:
            chunks.append(current)
            current = " "
            size = 1
        current += char
        size += width
    chunks.append(current)
    return chunks


def render_manifest(manifest: Manifest, *, nice: bool = False) -> bytes:
    """Render a manifest to bytes using CRLF line endings and 72 byte lines.

    With ``nice`` set, each clause of a multi-clause header starts its own
    continuation line.
    """

    headers: List[Tuple[str, str]] = [(MANIFEST_VERSION, manifest.get(MANIFEST_VERSION, "1.0"))]
    headers.extend((name, value) for name, value in manifest.items() if name != MANIFEST_VERSION)

    lines: List[str] = []
    for name, value in headers:
        clauses = split_clauses(value) if nice else []
        if len(clauses) > 1:
            logical = [f"{name}: {clauses[0]},"]
            logical.extend(f" {clause}," for clause in clauses[1:-1])
            logical.append(f" {clauses[-1]}")
        else:
            logical = [f"{name}: {value}"]
        for entry in logical:
            lines.extend(_wrap(entry))
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


def load_manifest(path: Path) -> Manifest:
    """Load a manifest from disk."""

    return parse_manifest(path.read_bytes())


def dump_manifest(manifest: Manifest, path: Path, *, nice: bool = False) -> None:
    """Write a manifest to disk."""

    write_bytes(path, render_manifest(manifest, nice=nice))
