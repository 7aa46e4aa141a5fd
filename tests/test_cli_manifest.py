from __future__ import annotations

import json
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path

import yaml

from bundle_manifest.bundle.manifest import load_manifest
from bundle_manifest.cli import manifest as manifest_cli

from conftest import write_files, write_jar


def _run_cli(argv: list[str]) -> tuple[int, dict]:
    buffer = StringIO()
    with redirect_stdout(buffer):
        code = manifest_cli.main(argv)
    return code, json.loads(buffer.getvalue())


def _write_build_file(root: Path, **extra: object) -> Path:
    payload = {
        "project": {"group_id": "org.example", "artifact_id": "demo", "version": "2.1", "artifact_file": "demo.jar"},
        **extra,
    }
    path = root / "build.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_cli_generate_command(tmp_path: Path) -> None:
    write_jar(tmp_path / "demo.jar", {"org/example/api/Api.class": ""})
    _write_build_file(tmp_path, instructions={"Bundle-Vendor": "Example"})

    code, payload = _run_cli(
        [
            "generate",
            "--build-file",
            "build.yaml",
            "--instruction",
            "Bundle-Name=Demo",
            "--workspace-root",
            str(tmp_path),
        ]
    )

    assert code == 0
    manifest_path = Path(payload["manifest_path"])
    assert manifest_path == tmp_path.resolve() / "META-INF" / "MANIFEST.MF"
    written = load_manifest(manifest_path)
    assert written["Bundle-Name"] == "Demo"
    assert written["Bundle-Vendor"] == "Example"
    assert written["Bundle-Version"] == "2.1.0"
    assert payload["manifest"]["Export-Package"] == "org.example.api"


def test_cli_generate_reports_errors_as_json(tmp_path: Path) -> None:
    _write_build_file(tmp_path)

    code, payload = _run_cli(["generate", "--build-file", "build.yaml", "--workspace-root", str(tmp_path)])

    assert code == 1
    assert payload["error"]["kind"] == "not-found"
    assert "demo.jar" in payload["error"]["message"]


def test_cli_exports_command(tmp_path: Path) -> None:
    classes = write_files(tmp_path / "classes", {"org/example/Api.class": "", "META-INF/notes.txt": ""})

    code, payload = _run_cli(["exports", str(classes)])

    assert code == 0
    assert payload["exports"] == "org.example"


def test_cli_exports_missing_path(tmp_path: Path) -> None:
    code, payload = _run_cli(["exports", str(tmp_path / "absent")])

    assert code == 1
    assert payload["error"]["kind"] == "not-found"


def test_cli_generate_missing_build_file(tmp_path: Path) -> None:
    code, payload = _run_cli(["generate", "--build-file", "absent.yaml", "--workspace-root", str(tmp_path)])

    assert code == 1
    assert payload["error"]["kind"] == "not-found"
    assert "absent.yaml" in payload["error"]["message"]


def test_cli_generate_invalid_build_files(tmp_path: Path) -> None:
    (tmp_path / "broken.yaml").write_text("project: [unclosed\n", encoding="utf-8")
    _write_build_file(tmp_path, unexpected={"key": "value"})

    broken_code, broken = _run_cli(["generate", "--build-file", "broken.yaml", "--workspace-root", str(tmp_path)])
    invalid_code, invalid = _run_cli(["generate", "--build-file", "build.yaml", "--workspace-root", str(tmp_path)])

    assert (broken_code, broken["error"]["kind"]) == (1, "configuration-invalid")
    assert (invalid_code, invalid["error"]["kind"]) == (1, "configuration-invalid")


def test_cli_generate_rejects_malformed_override(tmp_path: Path) -> None:
    _write_build_file(tmp_path)

    code, payload = _run_cli(
        ["generate", "--build-file", "build.yaml", "--instruction", "Bundle-Name", "--workspace-root", str(tmp_path)]
    )

    assert code == 1
    assert payload["error"]["kind"] == "configuration-invalid"
    assert "key=value" in payload["error"]["message"]


def test_cli_exports_rejects_non_archive(tmp_path: Path) -> None:
    path = tmp_path / "demo.jar"
    path.write_text("not a zip", encoding="utf-8")

    code, payload = _run_cli(["exports", str(path)])

    assert code == 1
    assert payload["error"]["kind"] == "io-failure"
