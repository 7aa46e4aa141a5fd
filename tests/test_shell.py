from __future__ import annotations

from io import StringIO
from typing import List, Optional, TextIO, Tuple

import pytest

from bundle_manifest.shell import USAGE_SUMMARY, ComponentShellCommand


class _Registry:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Optional[str], Optional[bool]]] = []

    def list(self, bundle_id: Optional[str], out: TextIO) -> None:
        self.calls.append(("list", bundle_id, None))

    def info(self, component_id: Optional[str], out: TextIO) -> None:
        if component_id is None:
            raise ValueError("Component ID required")
        self.calls.append(("info", component_id, None))

    def change(self, component_id: Optional[str], out: TextIO, enable: bool) -> None:
        self.calls.append(("change", component_id, enable))

    def config(self, out: TextIO) -> None:
        self.calls.append(("config", None, None))


def _run(line: str) -> Tuple[_Registry, str, str]:
    registry = _Registry()
    out, err = StringIO(), StringIO()
    ComponentShellCommand(registry).execute(line, out, err)
    return registry, out.getvalue(), err.getvalue()


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("scr list", ("list", None, None)),
        ("scr list 12", ("list", "12", None)),
        ("scr info 3", ("info", "3", None)),
        ("scr enable 3", ("change", "3", True)),
        ("scr disable 3", ("change", "3", False)),
        ("scr config", ("config", None, None)),
    ],
)
def test_commands_are_routed(line: str, expected: tuple) -> None:
    registry, out, err = _run(line)

    assert registry.calls == [expected]
    assert err == ""


@pytest.mark.parametrize("line", ["scr", "scr help", "scr help bogus"])
def test_help_prints_usage_summary(line: str) -> None:
    registry, out, _ = _run(line)

    assert out.splitlines() == USAGE_SUMMARY
    assert registry.calls == []


def test_help_for_command_prints_details() -> None:
    _, out, _ = _run("scr help enable")

    assert out.startswith("\nscr enable <componentId>\n\n")
    assert "enables the component" in out


def test_unknown_command_reports_to_err() -> None:
    registry, out, err = _run("scr frobnicate")

    assert err == "Unknown command: frobnicate\n"
    assert out == ""
    assert registry.calls == []


def test_handler_value_error_goes_to_err() -> None:
    _, _, err = _run("scr info")

    assert err == "Component ID required\n"


def test_command_metadata() -> None:
    command = ComponentShellCommand(_Registry())

    assert (command.name, command.usage, command.short_description) == (
        "scr",
        "scr help",
        "Declarative Services Runtime",
    )
