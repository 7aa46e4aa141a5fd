"""Manifest generation orchestration."""

from __future__ import annotations

import logging
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from ..errors import (
    ManifestConfigurationError,
    ManifestError,
    ManifestIOError,
    ManifestInternalError,
    ManifestNotFoundError,
)
from ..schemas.request import BuildRequest
from .analyzer import (
    CLASSPATH,
    EXPORT_CONTENTS,
    EXPORT_PACKAGE,
    INCLUDE_RESOURCE,
    PRIVATE_PACKAGE,
    Analyzer,
    PropertyAnalyzer,
)
from .defaults import default_headers
from .embed import (
    BUNDLE_CLASSPATH,
    EMBED_DEPENDENCY,
    EMBED_DIRECTORY,
    EMBED_STRIP_VERSION,
    compute_embedding,
)
from .exports import calculate_exports_from_contents
from .headers import Instructions, split_clauses
from .jar import Package
from .manifest import MANIFEST_NAME, Manifest, ManifestSyntaxError, dump_manifest, load_manifest
from .merge import MERGE_HEADERS, merge_headers
from .reporting import FAILOK, is_fatal, report_problems
from .scr import export_component_descriptors
from .utils import write_stream

logger = logging.getLogger(__name__)

REMOVE_HEADERS = "-removeheaders"

_EMBED_KEYS = (EMBED_DEPENDENCY, EMBED_DIRECTORY, EMBED_STRIP_VERSION, INCLUDE_RESOURCE, BUNDLE_CLASSPATH)


@dataclass(slots=True)
class ManifestSettings:
    """Options describing one manifest invocation."""

    manifest_location: Path
    output_directory: Optional[Path] = None
    scr_location: Optional[Path] = None
    rebuild_bundle: bool = False
    unpack_bundle: bool = False
    export_scr: bool = False
    nice_manifest: bool = False
    supported_project_types: Sequence[str] = ("jar", "bundle")

    @property
    def manifest_file(self) -> Path:
        return self.manifest_location / MANIFEST_NAME

    @property
    def descriptor_location(self) -> Path:
        if self.scr_location is not None:
            return self.scr_location
        return self.output_directory or self.manifest_location.parent


@dataclass(slots=True)
class ManifestResult:
    manifest: Manifest
    manifest_path: Optional[Path]
    scr_files: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
            "manifest": self.manifest.to_dict(),
            "scr_files": [str(path) for path in self.scr_files],
            "warnings": list(self.warnings),
        }


@contextmanager
def _translated_errors(action: str) -> Iterator[None]:
    try:
        yield
    except ManifestError:
        raise
    except FileNotFoundError as exc:
        raise ManifestNotFoundError(exc.filename or exc) from exc
    except (OSError, UnicodeDecodeError, ManifestSyntaxError, zipfile.BadZipFile) as exc:
        raise ManifestIOError(f"Error trying to {action}: {exc}") from exc
    except ValueError as exc:
        raise ManifestConfigurationError(f"Invalid manifest input: {exc}") from exc
    except Exception as exc:
        logger.exception("An internal error occurred")
        raise ManifestInternalError() from exc


class ManifestBuilder:
    """Coordinates analysis, header merging and manifest output for one build unit."""

    def __init__(
        self,
        settings: ManifestSettings,
        *,
        analyzer_factory: Callable[[], Analyzer] = PropertyAnalyzer,
    ) -> None:
        self.settings = settings
        self.analyzer_factory = analyzer_factory

    def execute(self, request: BuildRequest) -> ManifestResult:
        """Generate the manifest, write it to disk and export descriptors."""

        with _translated_errors("generate Manifest"):
            analyzer = self.get_analyzer(request)

        output_file = self.settings.manifest_file
        try:
            with _translated_errors(f"write Manifest to file {output_file}"):
                manifest, scr_files = self.write_manifest(analyzer, output_file)
            warnings = list(analyzer.warnings)
        except BaseException:
            self._release(analyzer, output_file, suppress=True)
            raise
        self._release(analyzer, output_file)

        return ManifestResult(manifest=manifest, manifest_path=output_file, scr_files=scr_files, warnings=warnings)

    def get_manifest(self, request: BuildRequest) -> Manifest:
        """Compute the manifest without writing MANIFEST.MF."""

        with _translated_errors("generate Manifest"):
            analyzer = self.get_analyzer(request)
        try:
            package = self._package(analyzer)
            manifest = package.manifest or Manifest()
            if self.settings.export_scr:
                with _translated_errors("export component descriptors"):
                    export_component_descriptors(analyzer, package, self.settings.descriptor_location)
        except BaseException:
            self._release(analyzer, None, suppress=True)
            raise
        self._release(analyzer, None)
        return manifest

    def get_analyzer(self, request: BuildRequest) -> Analyzer:
        """Run the analysis for ``request`` and return the still-open analyzer.

        The caller owns the returned analyzer and must close it. On failure
        the analyzer is closed before the exception propagates.
        """

        project = request.project
        if self.settings.rebuild_bundle and project.packaging in self.settings.supported_project_types:
            return self._rebuild_bundle(request)

        location = self._resolve_location(request)
        is_output_directory = location == self.settings.output_directory

        analyzer = self.analyzer_factory()
        try:
            self._configure(analyzer, request)
            package = analyzer.load(location)

            # loose output directories do not reflect the final bundle layout yet
            explicit = (EXPORT_PACKAGE, EXPORT_CONTENTS, PRIVATE_PACKAGE)
            if all(analyzer.get_property(key) is None for key in explicit) and not is_output_directory:
                analyzer.set_instruction(EXPORT_PACKAGE, calculate_exports_from_contents(package))

            self._add_project_instructions(analyzer, request)

            if analyzer.get_property(EMBED_DEPENDENCY) is not None and is_output_directory:
                package = analyzer.build()
            else:
                analyzer.merge_manifest(package.manifest)
                package.manifest = analyzer.calculate_manifest()

            self._merge_project_manifest(request, analyzer, package)
            self._check_problems(request, analyzer)

            if self.settings.unpack_bundle:
                self._unpack(package)
        except BaseException:
            self._release(analyzer, None, suppress=True)
            raise
        return analyzer

    def write_manifest(self, analyzer: Analyzer, output_file: Path) -> tuple[Manifest, List[Path]]:
        """Write the analyzer's manifest, merging with an existing file when configured."""

        package = self._package(analyzer)
        manifest = package.manifest or Manifest()
        merge_instructions = analyzer.get_property(MERGE_HEADERS)
        if output_file.exists() and merge_instructions is not None:
            existing = load_manifest(output_file)
            manifest = merge_headers(Instructions.from_header(merge_instructions), existing, manifest)
        dump_manifest(manifest, output_file, nice=self.settings.nice_manifest)
        logger.info("Manifest written to %s", output_file)

        scr_files: List[Path] = []
        if self.settings.export_scr:
            scr_files = export_component_descriptors(analyzer, package, self.settings.descriptor_location)
        return manifest, scr_files

    def _rebuild_bundle(self, request: BuildRequest) -> Analyzer:
        analyzer = self.analyzer_factory()
        try:
            self._configure(analyzer, request)
            output_directory = self.settings.output_directory
            extra = [output_directory] if output_directory is not None and output_directory.exists() else []
            self._add_project_instructions(analyzer, request, extra_classpath=extra)
            package = analyzer.build()
            self._merge_project_manifest(request, analyzer, package)
            self._check_problems(request, analyzer)
        except BaseException:
            self._release(analyzer, None, suppress=True)
            raise
        return analyzer

    def _resolve_location(self, request: BuildRequest) -> Path:
        output_directory = self.settings.output_directory
        location = output_directory if output_directory is not None else request.project.artifact_file
        if location is None:
            raise ManifestNotFoundError("build output (no output directory or artifact file configured)")
        if not location.exists():
            if location != output_directory:
                raise ManifestNotFoundError(location)
            # resource-only build units legitimately produce no classes
            location.mkdir(parents=True, exist_ok=True)
        return location

    def _configure(self, analyzer: Analyzer, request: BuildRequest) -> None:
        for layer in (default_headers(request.project), request.properties, request.instructions):
            for key, value in layer.items():
                analyzer.set_instruction(key, value)

    def _add_project_instructions(
        self,
        analyzer: Analyzer,
        request: BuildRequest,
        *,
        extra_classpath: Sequence[Path] = (),
    ) -> None:
        classpath = [str(path) for path in (*extra_classpath, *request.classpath)]
        if classpath:
            existing = split_clauses(analyzer.get_property(CLASSPATH))
            analyzer.set_instruction(CLASSPATH, ",".join([*classpath, *existing]))

        current: Dict[str, str] = {}
        for key in _EMBED_KEYS:
            value = analyzer.get_property(key)
            if value is not None:
                current[key] = value
        for key, value in compute_embedding(current, request.dependencies).items():
            analyzer.set_instruction(key, value)

    def _merge_project_manifest(self, request: BuildRequest, analyzer: Analyzer, package: Package) -> None:
        manifest = package.manifest if package.manifest is not None else Manifest()
        for name, value in request.project.manifest_entries.items():
            manifest.setdefault(name, value)

        removals = Instructions.from_header(analyzer.get_property(REMOVE_HEADERS))
        if removals:
            for name in list(manifest):
                instruction = removals.match(name)
                if instruction is not None and not instruction.negated:
                    del manifest[name]
        package.manifest = manifest

    def _check_problems(self, request: BuildRequest, analyzer: Analyzer) -> None:
        project = request.project
        source = f"Manifest {project.group_id}:{project.artifact_id}:{project.packaging}:{project.version}"
        if report_problems(source, analyzer.warnings, analyzer.errors):
            if is_fatal(analyzer.errors, analyzer.get_property(FAILOK)):
                logger.error("Error(s) found in manifest configuration")
                raise ManifestConfigurationError(errors=list(analyzer.errors))
            logger.warning("%s: errors ignored because %s is set", source, FAILOK)

    def _unpack(self, package: Package) -> None:
        output_directory = self.settings.output_directory
        if output_directory is None:
            logger.warning("Unpack requested but no output directory configured; skipping")
            return
        for path, resource in package:
            target = output_directory / path
            # an existing file with a real timestamp is considered up to date
            if not target.exists() or resource.last_modified == 0:
                write_stream(target, resource.write)

    def _package(self, analyzer: Analyzer) -> Package:
        if analyzer.package is None:
            raise ManifestInternalError("Analyzer holds no bundle contents")
        return analyzer.package

    def _release(self, analyzer: Analyzer, output_file: Optional[Path], *, suppress: bool = False) -> None:
        try:
            analyzer.close()
        except Exception as exc:
            if suppress:
                logger.error("Failed to release analyzer: %s", exc)
                return
            target = f" to file {output_file}" if output_file is not None else ""
            raise ManifestIOError(f"Error trying to write Manifest{target}") from exc
