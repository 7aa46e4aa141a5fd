"""Decide whether analyzer problems fail the build unit."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

FAILOK = "-failok"


def is_fatal(errors: Sequence[str], failok: Optional[str]) -> bool:
    """Return True when ``errors`` must fail the build.

    Any ``-failok`` value other than ``false`` (case-insensitive) downgrades
    the errors to log output; an absent property keeps them fatal.
    """

    if not errors:
        return False
    return failok is None or failok.lower() == "false"


def report_problems(source: str, warnings: Sequence[str], errors: Sequence[str]) -> bool:
    """Log analyzer output and return whether any errors were reported."""

    for warning in warnings:
        logger.warning("%s: Warning: %s", source, warning)
    for error in errors:
        logger.error("%s: Error: %s", source, error)
    return bool(errors)
