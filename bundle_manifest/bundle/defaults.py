"""Project-derived default headers."""

from __future__ import annotations

import re
from typing import Dict

from ..schemas.request import ProjectInfo

_VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[.-](.*))?$")
_QUALIFIER_INVALID = re.compile(r"[^A-Za-z0-9_-]")


def _clean_qualifier(qualifier: str) -> str:
    return _QUALIFIER_INVALID.sub("_", qualifier)


def bundle_version(version: str) -> str:
    """Convert a build version such as ``1.0-SNAPSHOT`` to ``1.0.0.SNAPSHOT``."""

    match = _VERSION_PATTERN.match(version.strip())
    if match is None:
        return f"0.0.0.{_clean_qualifier(version.strip())}"
    major, minor, micro, qualifier = match.groups()
    result = f"{major}.{minor or 0}.{micro or 0}"
    if qualifier:
        result += f".{_clean_qualifier(qualifier)}"
    return result


def bundle_symbolic_name(group_id: str, artifact_id: str) -> str:
    """Derive a symbolic name, folding an artifact id that repeats the group."""

    last_section = group_id.rsplit(".", 1)[-1]
    if artifact_id == last_section:
        return group_id
    if artifact_id.startswith(last_section):
        suffix = artifact_id[len(last_section):].lstrip(".-_")
        if suffix:
            return f"{group_id}.{suffix}"
        return group_id
    return f"{group_id}.{artifact_id}"


def default_headers(project: ProjectInfo) -> Dict[str, str]:
    """Headers seeded before properties and instructions are applied."""

    headers = {
        "Bundle-ManifestVersion": "2",
        "Bundle-SymbolicName": bundle_symbolic_name(project.group_id, project.artifact_id),
        "Bundle-Version": bundle_version(project.version),
        "Bundle-Name": project.name or project.artifact_id,
    }
    optional = {
        "Bundle-Description": project.description,
        "Bundle-Vendor": project.vendor,
        "Bundle-License": project.license,
        "Bundle-DocURL": project.url,
    }
    headers.update({name: value for name, value in optional.items() if value})
    return headers
