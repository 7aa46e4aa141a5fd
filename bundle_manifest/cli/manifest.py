"""Command-line entry point for manifest generation."""

from __future__ import annotations

import argparse
import json
import logging
import zipfile
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from bundle_manifest.bundle.builder import ManifestBuilder, ManifestSettings
from bundle_manifest.bundle.exports import calculate_exports_from_contents
from bundle_manifest.bundle.jar import Package
from bundle_manifest.bundle.manifest import ManifestSyntaxError
from bundle_manifest.errors import (
    ManifestConfigurationError,
    ManifestError,
    ManifestIOError,
    ManifestNotFoundError,
)
from bundle_manifest.schemas.request import BuildRequest, load_build_request


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "generate":
        return _handle_generate(args)
    if args.command == "exports":
        return _handle_exports(args)

    parser.error(f"Unknown command '{args.command}'")
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bundle-manifest", description="Bundle manifest generation helpers.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics written to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate MANIFEST.MF for a build unit.")
    generate.add_argument("--build-file", required=True, help="YAML build descriptor.")
    generate.add_argument("--manifest-location", help="Directory receiving MANIFEST.MF.")
    generate.add_argument("--output-dir", help="Compiled output directory to analyze.")
    generate.add_argument("--instruction", action="append", help="Instruction override key=value (repeatable).")
    generate.add_argument("--property", action="append", help="Property override key=value (repeatable).")
    generate.add_argument("--rebuild", action="store_true", help="Rebuild the full bundle in memory.")
    generate.add_argument("--unpack", action="store_true", help="Write bundle contents to the output directory.")
    generate.add_argument("--export-scr", action="store_true", help="Export Service-Component descriptors.")
    generate.add_argument("--scr-location", help="Directory receiving exported descriptors.")
    generate.add_argument("--nice", action="store_true", help="Write one clause per manifest line.")
    generate.add_argument("--workspace-root")

    exports = subparsers.add_parser("exports", help="Print the default Export-Package for a directory or archive.")
    exports.add_argument("path")

    return parser


def _handle_generate(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    build_file = _resolve_path(args.build_file, workspace)
    try:
        request = _load_request(build_file, args)
    except ManifestError as exc:
        _print_json({"error": exc.to_dict()})
        return 1

    manifest_location = (
        _resolve_path(args.manifest_location, workspace)
        if args.manifest_location
        else workspace / "META-INF"
    )
    settings = ManifestSettings(
        manifest_location=manifest_location,
        output_directory=_resolve_optional_path(args.output_dir, workspace),
        scr_location=_resolve_optional_path(args.scr_location, workspace),
        rebuild_bundle=args.rebuild,
        unpack_bundle=args.unpack,
        export_scr=args.export_scr,
        nice_manifest=args.nice,
    )

    try:
        result = ManifestBuilder(settings).execute(request)
    except ManifestError as exc:
        _print_json({"error": exc.to_dict()})
        return 1

    _print_json(result.to_dict())
    return 0


def _handle_exports(args: argparse.Namespace) -> int:
    path = Path(args.path).expanduser()
    if not path.exists():
        _print_json({"error": ManifestNotFoundError(path).to_dict()})
        return 1
    try:
        package = Package.load(path)
    except (OSError, UnicodeDecodeError, zipfile.BadZipFile, ManifestSyntaxError) as exc:
        error = ManifestIOError(f"Cannot read {path}: {exc}")
        _print_json({"error": error.to_dict()})
        return 1
    _print_json({"path": str(path), "exports": calculate_exports_from_contents(package)})
    return 0


def _load_request(build_file: Path, args: argparse.Namespace) -> BuildRequest:
    try:
        instructions = _parse_overrides(args.instruction)
        properties = _parse_overrides(args.property)
    except ValueError as exc:
        raise ManifestConfigurationError(str(exc)) from exc

    try:
        request = load_build_request(build_file)
    except FileNotFoundError as exc:
        raise ManifestNotFoundError(build_file) from exc
    except OSError as exc:
        raise ManifestIOError(f"Cannot read build file {build_file}: {exc}") from exc
    except (yaml.YAMLError, ValidationError, ValueError) as exc:
        raise ManifestConfigurationError(f"Invalid build file {build_file}: {exc}") from exc
    return request.with_overrides(instructions=instructions, properties=properties)


def _parse_overrides(values: Optional[Sequence[str]]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if not values:
        return overrides
    for entry in values:
        if "=" not in entry:
            raise ValueError(f"Override must be key=value (got '{entry}')")
        key, raw_value = entry.split("=", 1)
        overrides[key.strip()] = raw_value.strip()
    return overrides


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _resolve_optional_path(value: Optional[str], workspace: Path) -> Optional[Path]:
    if value is None:
        return None
    return _resolve_path(value, workspace)


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
