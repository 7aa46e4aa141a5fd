"""Translate Embed-Dependency clauses into packaging instructions."""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from ..schemas.request import DependencyInfo
from .headers import parse_header, split_clauses

logger = logging.getLogger(__name__)

EMBED_DEPENDENCY = "Embed-Dependency"
EMBED_DIRECTORY = "Embed-Directory"
EMBED_STRIP_VERSION = "Embed-StripVersion"
EMBEDDED_ARTIFACTS = "Embedded-Artifacts"
BUNDLE_CLASSPATH = "Bundle-ClassPath"
INCLUDE_RESOURCE = "Include-Resource"

_ATTRIBUTES = {
    "groupId": lambda dep: dep.group_id,
    "artifactId": lambda dep: dep.artifact_id,
    "scope": lambda dep: dep.scope,
    "type": lambda dep: dep.type,
    "classifier": lambda dep: dep.classifier or "",
    "optional": lambda dep: "true" if dep.optional else "false",
}


def _value_matches(expression: str, value: str) -> bool:
    """Match ``a|b|!c`` style alternatives against ``value``."""

    positives: List[str] = []
    for alternative in expression.split("|"):
        alternative = alternative.strip()
        if alternative.startswith("!"):
            if fnmatchcase(value, alternative[1:]):
                return False
        elif alternative:
            positives.append(alternative)
    return not positives or any(fnmatchcase(value, pattern) for pattern in positives)


def _clause_matches(key: str, attrs: Mapping[str, str], dependency: DependencyInfo) -> bool:
    if not _value_matches(key, dependency.artifact_id):
        return False
    for name, expression in attrs.items():
        getter = _ATTRIBUTES.get(name)
        if getter is not None and not _value_matches(expression, getter(dependency)):
            return False
    return True


def _embedded_name(dependency: DependencyInfo, file: Path, strip_version: bool) -> str:
    if not strip_version:
        return file.name
    suffix = f"-{dependency.classifier}" if dependency.classifier else ""
    extension = file.suffix or f".{dependency.type}"
    return f"{dependency.artifact_id}{suffix}{extension}"


def compute_embedding(instructions: Mapping[str, str], dependencies: Iterable[DependencyInfo]) -> Dict[str, str]:
    """Return the instructions needed to embed the selected dependencies.

    Matching dependencies are added to ``Include-Resource`` (inlined with
    ``@`` when the clause says ``inline=true``) and, when not inlined, to
    ``Bundle-ClassPath``. ``Embedded-Artifacts`` records what was embedded.
    """

    clauses = parse_header(instructions.get(EMBED_DEPENDENCY))
    if not clauses:
        return {}

    directory = (instructions.get(EMBED_DIRECTORY) or ".").strip("/") or "."
    strip_version = (instructions.get(EMBED_STRIP_VERSION) or "false").lower() == "true"

    resources = split_clauses(instructions.get(INCLUDE_RESOURCE))
    classpath = split_clauses(instructions.get(BUNDLE_CLASSPATH)) or ["."]
    embedded: List[str] = []

    for dependency in dependencies:
        match: Optional[Mapping[str, str]] = None
        for key, attrs in clauses.items():
            if _clause_matches(key, attrs, dependency):
                match = attrs
                break
        if match is None:
            continue
        if dependency.file is None:
            logger.warning("Cannot embed %s:%s, no artifact file resolved", dependency.group_id, dependency.artifact_id)
            continue

        if match.get("inline", "false").lower() == "true":
            resources.append(f"@{dependency.file}")
            continue

        name = _embedded_name(dependency, dependency.file, strip_version)
        path = name if directory == "." else f"{directory}/{name}"
        resources.append(f"{path}={dependency.file}")
        if path not in classpath:
            classpath.append(path)
        classifier = f';c="{dependency.classifier}"' if dependency.classifier else ""
        embedded.append(
            f'{path};g="{dependency.group_id}";a="{dependency.artifact_id}";v="{dependency.version}"{classifier}'
        )

    result: Dict[str, str] = {}
    if resources:
        result[INCLUDE_RESOURCE] = ",".join(resources)
    if embedded:
        result[BUNDLE_CLASSPATH] = ",".join(classpath)
        result[EMBEDDED_ARTIFACTS] = ",".join(embedded)
    return result
