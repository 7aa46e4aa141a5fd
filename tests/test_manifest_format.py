from __future__ import annotations

from pathlib import Path

import pytest

from bundle_manifest.bundle.builder import ManifestBuilder, ManifestSettings
from bundle_manifest.bundle.manifest import Manifest, dump_manifest, load_manifest, parse_manifest, render_manifest
from bundle_manifest.schemas.request import load_build_request

from conftest import write_jar


def test_render_puts_manifest_version_first_and_uses_crlf() -> None:
    manifest = Manifest({"Bundle-Name": "demo", "Manifest-Version": "1.0"})

    rendered = render_manifest(manifest)

    assert rendered == b"Manifest-Version: 1.0\r\nBundle-Name: demo\r\n\r\n"


def test_render_defaults_manifest_version() -> None:
    rendered = render_manifest(Manifest({"Bundle-Name": "demo"}))

    assert rendered.startswith(b"Manifest-Version: 1.0\r\n")


def test_render_wraps_long_lines_at_72_bytes() -> None:
    value = ",".join(f"com.example.package{index}" for index in range(10))
    rendered = render_manifest(Manifest({"Export-Package": value}))

    lines = rendered.split(b"\r\n")
    assert all(len(line) <= 72 for line in lines)
    assert lines[2].startswith(b" ")
    assert parse_manifest(rendered)["Export-Package"] == value


def test_render_nice_puts_each_clause_on_its_own_line() -> None:
    manifest = Manifest({"Import-Package": "org.a,org.b;version=\"[1,2)\",org.c"})

    rendered = render_manifest(manifest, nice=True).decode("utf-8")

    assert "Import-Package: org.a,\r\n org.b;version=\"[1,2)\",\r\n org.c\r\n" in rendered
    assert parse_manifest(rendered.encode("utf-8"))["Import-Package"] == manifest["Import-Package"]


def test_parse_stops_at_first_named_section() -> None:
    data = (
        b"Manifest-Version: 1.0\r\n"
        b"Bundle-SymbolicName: org.example.de\r\n"
        b" mo\r\n"
        b"\r\n"
        b"Name: org/example/\r\n"
        b"Sealed: true\r\n"
    )

    manifest = parse_manifest(data)

    assert list(manifest) == ["Manifest-Version", "Bundle-SymbolicName"]
    assert manifest["Bundle-SymbolicName"] == "org.example.demo"


def test_parse_rejects_lines_without_separator() -> None:
    with pytest.raises(ValueError):
        parse_manifest(b"Manifest-Version: 1.0\r\nnot a header\r\n")


def test_manifest_rejects_invalid_header_names() -> None:
    manifest = Manifest()
    with pytest.raises(ValueError):
        manifest["Bad Name"] = "x"


def test_dump_creates_parent_directories(tmp_path: Path) -> None:
    path = tmp_path / "META-INF" / "MANIFEST.MF"
    manifest = Manifest({"Manifest-Version": "1.0", "Bundle-Version": "1.0.0.SNAPSHOT"})

    dump_manifest(manifest, path)

    assert load_manifest(path) == manifest
    assert [entry.name for entry in path.parent.iterdir()] == ["MANIFEST.MF"]


def test_multi_line_values_are_folded_onto_one_line() -> None:
    manifest = Manifest({"Bundle-Description": "first line\r\n  second line\n"})

    assert manifest["Bundle-Description"] == "first line second line"
    assert parse_manifest(render_manifest(manifest)) == Manifest(
        {"Manifest-Version": "1.0", "Bundle-Description": "first line second line"}
    )


def test_parse_only_breaks_on_cr_and_lf() -> None:
    manifest = Manifest({"Manifest-Version": "1.0", "Bundle-Name": "a b\x0bc\x85d\x1ce"})

    assert parse_manifest(render_manifest(manifest)) == manifest


def test_folded_yaml_description_round_trips(tmp_path: Path) -> None:
    write_jar(tmp_path / "demo.jar", {"org/example/Api.class": ""})
    build_file = tmp_path / "build.yaml"
    build_file.write_text(
        """
project:
  group_id: org.example
  artifact_id: demo
  version: "1.0"
  artifact_file: demo.jar
  description: >
    A demo
    bundle
instructions:
  X-Team: core
""",
        encoding="utf-8",
    )
    settings = ManifestSettings(manifest_location=tmp_path / "META-INF")

    result = ManifestBuilder(settings).execute(load_build_request(build_file))

    written = load_manifest(settings.manifest_file)
    assert written == result.manifest
    assert written["Bundle-Description"] == "A demo bundle"
    assert written["X-Team"] == "core"
