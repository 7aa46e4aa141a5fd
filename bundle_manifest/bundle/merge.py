"""Selective merge of freshly computed headers into an existing manifest."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .headers import Instruction, Instructions, split_clauses
from .manifest import Manifest

logger = logging.getLogger(__name__)

MERGE_HEADERS = "Merge-Headers"

KEEP = "keep"
REPLACE = "replace"
UNION = "union"
MERGE_DIRECTIVES = (KEEP, REPLACE, UNION)

# headers whose clauses are package names default to a union
_UNION_BY_DEFAULT = ("Import-Package", "Export-Package")


def union_values(existing: str, fresh: str) -> str:
    """Join two header values keeping existing clauses first, without duplicates."""

    clauses: Dict[str, None] = {}
    for clause in split_clauses(existing):
        clauses.setdefault(clause, None)
    for clause in split_clauses(fresh):
        clauses.setdefault(clause, None)
    return ",".join(clauses)


def _directive_for(instruction: Instruction, name: str) -> str:
    default = UNION if name in _UNION_BY_DEFAULT else KEEP
    directive = (instruction.directive("merge", default) or default).lower()
    if directive not in MERGE_DIRECTIVES:
        raise ValueError(
            f"Unknown merge directive '{directive}' for {instruction.pattern}; "
            f"expected one of {', '.join(MERGE_DIRECTIVES)}"
        )
    return directive


def _merge_value(directive: str, existing: Optional[str], fresh: Optional[str]) -> Optional[str]:
    if existing is None:
        return fresh
    if fresh is None or existing == fresh:
        return fresh if directive == REPLACE else existing
    if directive == KEEP:
        return existing
    if directive == REPLACE:
        return fresh
    return union_values(existing, fresh)


def merge_headers(instructions: Instructions, existing: Manifest, fresh: Manifest) -> Manifest:
    """Return the manifest to write when ``existing`` is already on disk.

    Headers matched by a non-negated instruction are merged according to its
    ``merge:=`` directive (``keep``, ``replace`` or ``union``). Every other
    header takes the freshly computed value.
    """

    merged = Manifest()
    names = list(fresh)
    names.extend(name for name in existing if name not in fresh)
    for name in names:
        instruction = instructions.match(name)
        if instruction is None or instruction.negated:
            if name in fresh:
                merged[name] = fresh[name]
            continue
        value = _merge_value(_directive_for(instruction, name), existing.get(name), fresh.get(name))
        if value is not None:
            merged[name] = value
    logger.debug("Merged %d existing and %d fresh headers into %d", len(existing), len(fresh), len(merged))
    return merged
