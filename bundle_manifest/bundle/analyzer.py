"""Analysis engine contract and a property-driven reference engine."""

from __future__ import annotations

import logging
import zipfile
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .headers import parse_header, split_clauses
from .jar import EmbeddedResource, FileResource, Package
from .manifest import MANIFEST_PATH, MANIFEST_VERSION, Manifest

logger = logging.getLogger(__name__)

EXPORT_PACKAGE = "Export-Package"
EXPORT_CONTENTS = "-exportcontents"
PRIVATE_PACKAGE = "Private-Package"
INCLUDE_RESOURCE = "Include-Resource"
BUNDLE_SYMBOLIC_NAME = "Bundle-SymbolicName"
CLASSPATH = "-classpath"
CREATED_BY = "Created-By"

# steer packaging only, never copied into the manifest
INSTRUCTION_ONLY_HEADERS = frozenset(
    {
        INCLUDE_RESOURCE,
        PRIVATE_PACKAGE,
        "Embed-Dependency",
        "Embed-Directory",
        "Embed-StripVersion",
        "Merge-Headers",
    }
)


class Analyzer(Protocol):
    """Capabilities the manifest builder needs from an analysis engine."""

    package: Optional[Package]
    errors: List[str]
    warnings: List[str]

    def load(self, location: Path) -> Package:
        ...

    def set_instruction(self, key: str, value: str) -> None:
        ...

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        ...

    def calculate_manifest(self) -> Manifest:
        ...

    def merge_manifest(self, manifest: Optional[Manifest]) -> None:
        ...

    def build(self) -> Package:
        ...

    def close(self) -> None:
        ...


class PropertyAnalyzer:
    """Engine that derives headers from its instructions without scanning code.

    Every instruction whose name starts with an upper-case letter becomes a
    manifest header; names starting with ``-`` steer the engine itself.
    """

    def __init__(self, *, created_by: str = "bundle-manifest") -> None:
        self.created_by = created_by
        self.properties: Dict[str, str] = {}
        self.package: Optional[Package] = None
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.closed = False

    def load(self, location: Path) -> Package:
        self.package = Package.load(location)
        return self.package

    def set_instruction(self, key: str, value: str) -> None:
        self.properties[key] = value

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(key, default)

    def calculate_manifest(self) -> Manifest:
        manifest = Manifest({MANIFEST_VERSION: "1.0", CREATED_BY: self.created_by})
        for key, value in self.properties.items():
            if key[:1].isupper() and value and key not in manifest and key not in INSTRUCTION_ONLY_HEADERS:
                manifest[key] = value
        self._check_exports()
        return manifest

    def merge_manifest(self, manifest: Optional[Manifest]) -> None:
        if manifest is None:
            return
        for name, value in manifest.items():
            if name in (MANIFEST_VERSION, CREATED_BY):
                continue
            self.properties.setdefault(name, value)

    def build(self) -> Package:
        package = self.package
        if package is None:
            package = Package(name=self.properties.get(BUNDLE_SYMBOLIC_NAME, "bundle"))
            self._collect_from_classpath(package)
        self._include_resources(package)
        self.package = package
        package.manifest = self.calculate_manifest()
        return package

    def close(self) -> None:
        self.package = None
        self.closed = True

    def _warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def _error(self, message: str) -> None:
        if message not in self.errors:
            self.errors.append(message)

    def _check_exports(self) -> None:
        if self.package is None:
            return
        for name in parse_header(self.properties.get(EXPORT_PACKAGE)):
            if name.startswith("!") or "*" in name:
                continue
            if not self.package.directories.get(name.replace(".", "/")):
                self._warn(f"Export-Package entry {name} matches no content in {self.package.name}")

    def _content_patterns(self) -> List[str]:
        patterns: List[str] = []
        for header in (EXPORT_PACKAGE, PRIVATE_PACKAGE):
            patterns.extend(name for name in parse_header(self.properties.get(header)) if not name.startswith("!"))
        return patterns

    def _collect_from_classpath(self, package: Package) -> None:
        sources: List[Package] = []
        for entry in split_clauses(self.properties.get(CLASSPATH)):
            path = Path(entry)
            if not path.exists():
                self._warn(f"Classpath entry does not exist: {path}")
                continue
            sources.append(Package.load(path))
        if not sources:
            return

        patterns = self._content_patterns()
        if not patterns:
            for path, resource in sources[0]:
                if path != MANIFEST_PATH:
                    package.put_resource(path, resource)
            return

        for source in sources:
            for directory, entries in source.directories.items():
                dotted = directory.replace("/", ".")
                if not entries or not any(fnmatchcase(dotted, pattern) for pattern in patterns):
                    continue
                for name, resource in entries.items():
                    package.put_resource(f"{directory}/{name}", resource, overwrite=False)

    def _include_resources(self, package: Package) -> None:
        for clause in split_clauses(self.properties.get(INCLUDE_RESOURCE)):
            entry = clause.split(";", 1)[0].strip().strip("{}")
            target, _, source = entry.rpartition("=")
            inline = source.startswith("@")
            path = Path(source.lstrip("@"))
            if not path.exists():
                self._error(f"Input file does not exist: {path}")
                continue
            if inline:
                self._inline_archive(package, path)
            elif path.is_dir():
                for child in sorted(item for item in path.rglob("*") if item.is_file()):
                    relative = child.relative_to(path).as_posix()
                    package.put_resource(f"{target}/{relative}" if target else relative, FileResource(child))
            else:
                package.put_resource(target or path.name, FileResource(path))

    def _inline_archive(self, package: Package, path: Path) -> None:
        try:
            with zipfile.ZipFile(path) as archive:
                for info in archive.infolist():
                    if info.is_dir() or info.filename == MANIFEST_PATH:
                        continue
                    package.put_resource(info.filename, EmbeddedResource(archive.read(info)))
        except zipfile.BadZipFile:
            self._error(f"Cannot inline {path}: not a zip archive")
