"""In-memory model of bundle contents."""

from __future__ import annotations

import logging
import time
import zipfile
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Optional, Tuple

from .manifest import MANIFEST_PATH, Manifest, parse_manifest

logger = logging.getLogger(__name__)

ROOT_DIRECTORY = "/"


class Resource:
    """Bundle entry with lazily readable content."""

    last_modified: int = 0

    def read(self) -> bytes:  # pragma: no cover - interface
        raise NotImplementedError

    def write(self, handle: BinaryIO) -> None:
        handle.write(self.read())


class FileResource(Resource):
    """Resource backed by a file on disk; timestamp is the file mtime in ms."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.last_modified = int(path.stat().st_mtime * 1000)

    def read(self) -> bytes:
        return self.path.read_bytes()

    def __repr__(self) -> str:
        return f"FileResource({self.path})"


class EmbeddedResource(Resource):
    """Resource holding its content in memory."""

    def __init__(self, data: bytes, last_modified: int = 0) -> None:
        self.data = data
        self.last_modified = last_modified

    def read(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"EmbeddedResource({len(self.data)} bytes)"


def _split_path(path: str) -> Tuple[str, str]:
    directory, sep, name = path.rpartition("/")
    if not sep:
        return ROOT_DIRECTORY, name
    return directory, name


class Package:
    """Tree of resources plus a directory index and an attached manifest.

    ``directories`` maps a directory path (``com/example``, ``/`` for the
    root) to the resources directly inside it. Parent directories are indexed
    with empty maps so callers can tell them apart from leaf directories.
    """

    def __init__(self, name: str = "bundle", source: Optional[Path] = None) -> None:
        self.name = name
        self.source = source
        self.resources: Dict[str, Resource] = {}
        self.directories: Dict[str, Dict[str, Resource]] = {}
        self.manifest: Optional[Manifest] = None

    def put_resource(self, path: str, resource: Resource, *, overwrite: bool = True) -> bool:
        path = path.strip("/")
        if not path:
            raise ValueError("Resource path must not be empty")
        if not overwrite and path in self.resources:
            return False
        self.resources[path] = resource
        directory, name = _split_path(path)
        self.add_directory(directory)
        self.directories[directory][name] = resource
        return True

    def add_directory(self, directory: str) -> None:
        directory = directory.strip("/") or ROOT_DIRECTORY
        if directory in self.directories:
            return
        if directory != ROOT_DIRECTORY:
            parent, _ = _split_path(directory)
            self.add_directory(parent)
        self.directories[directory] = {}

    def get_resource(self, path: str) -> Optional[Resource]:
        return self.resources.get(path.strip("/"))

    def __iter__(self) -> Iterator[Tuple[str, Resource]]:
        return iter(self.resources.items())

    def __len__(self) -> int:
        return len(self.resources)

    def __repr__(self) -> str:
        return f"Package({self.name!r}, {len(self.resources)} resources)"

    @classmethod
    def load(cls, location: Path) -> "Package":
        """Load a directory tree or a zip archive into a new package."""

        location = Path(location)
        if not location.exists():
            raise FileNotFoundError(str(location))
        package = cls(name=location.name, source=location)
        if location.is_dir():
            package._load_directory(location)
        else:
            package._load_archive(location)
        manifest_resource = package.get_resource(MANIFEST_PATH)
        if manifest_resource is not None:
            package.manifest = parse_manifest(manifest_resource.read())
        return package

    def _load_directory(self, root: Path) -> None:
        for entry in sorted(root.rglob("*"), key=lambda path: path.relative_to(root).as_posix()):
            relative = entry.relative_to(root).as_posix()
            if entry.is_dir():
                self.add_directory(relative)
            elif entry.is_file():
                self.put_resource(relative, FileResource(entry))

    def _load_archive(self, archive_path: Path) -> None:
        with zipfile.ZipFile(archive_path) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    self.add_directory(info.filename)
                    continue
                timestamp = int(time.mktime(info.date_time + (0, 0, -1)) * 1000)
                self.put_resource(info.filename, EmbeddedResource(archive.read(info), timestamp))
        logger.debug("Loaded %d resources from %s", len(self.resources), archive_path)
