from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from bundle_manifest.bundle.jar import Package
from bundle_manifest.bundle.manifest import Manifest
from bundle_manifest.schemas.request import BuildRequest, ProjectInfo


class FakeAnalyzer:
    """Analyzer double recording calls; headers are the upper-case instructions."""

    def __init__(
        self,
        *,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        close_error: Optional[Exception] = None,
    ) -> None:
        self.properties: Dict[str, str] = {}
        self.package: Optional[Package] = None
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])
        self.close_error = close_error
        self.closed = False
        self.calls: List[str] = []

    def load(self, location: Path) -> Package:
        self.calls.append("load")
        self.package = Package.load(location)
        return self.package

    def set_instruction(self, key: str, value: str) -> None:
        self.properties[key] = value

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(key, default)

    def calculate_manifest(self) -> Manifest:
        self.calls.append("calculate_manifest")
        manifest = Manifest({"Manifest-Version": "1.0"})
        for key, value in self.properties.items():
            if key[:1].isupper():
                manifest[key] = value
        return manifest

    def merge_manifest(self, manifest: Optional[Manifest]) -> None:
        self.calls.append("merge_manifest")

    def build(self) -> Package:
        self.calls.append("build")
        if self.package is None:
            self.package = Package()
        self.package.manifest = self.calculate_manifest()
        return self.package

    def close(self) -> None:
        self.calls.append("close")
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def fake_analyzer() -> type[FakeAnalyzer]:
    return FakeAnalyzer


@pytest.fixture
def make_request() -> Callable[..., BuildRequest]:
    def _make(
        *,
        instructions: Optional[Dict[str, str]] = None,
        properties: Optional[Dict[str, str]] = None,
        artifact_file: Optional[Path] = None,
        packaging: str = "jar",
        manifest_entries: Optional[Dict[str, str]] = None,
        **extra: object,
    ) -> BuildRequest:
        project = ProjectInfo(
            group_id="org.example",
            artifact_id="demo",
            version="1.0-SNAPSHOT",
            packaging=packaging,
            artifact_file=artifact_file,
            manifest_entries=manifest_entries or {},
        )
        return BuildRequest(
            project=project,
            instructions=instructions or {},
            properties=properties or {},
            **extra,
        )

    return _make


def write_files(root: Path, files: Dict[str, str]) -> Path:
    for name, content in files.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


def write_jar(path: Path, files: Dict[str, str]) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return path

