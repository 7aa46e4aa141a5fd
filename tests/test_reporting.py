from __future__ import annotations

import logging

import pytest

from bundle_manifest.bundle.reporting import is_fatal, report_problems


@pytest.mark.parametrize(
    ("errors", "failok", "expected"),
    [
        ([], None, False),
        ([], "false", False),
        (["boom"], None, True),
        (["boom"], "false", True),
        (["boom"], "FALSE", True),
        (["boom"], "true", False),
        (["boom"], "", False),
        (["boom"], "no", False),
    ],
)
def test_is_fatal_policy(errors: list[str], failok: str | None, expected: bool) -> None:
    assert is_fatal(errors, failok) is expected


def test_report_problems_logs_warnings_and_errors(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="bundle_manifest.bundle.reporting")

    has_errors = report_problems("Manifest demo", ["unused export"], ["missing file"])

    assert has_errors is True
    messages = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert (logging.WARNING, "Manifest demo: Warning: unused export") in messages
    assert (logging.ERROR, "Manifest demo: Error: missing file") in messages


def test_report_problems_without_errors() -> None:
    assert report_problems("Manifest demo", ["just a warning"], []) is False
