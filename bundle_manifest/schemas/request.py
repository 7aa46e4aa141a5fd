"""Pydantic models describing one manifest build request."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


class DependencyInfo(BaseModel):
    group_id: str
    artifact_id: str
    version: str
    scope: str = "compile"
    type: str = "jar"
    classifier: Optional[str] = None
    optional: bool = False
    file: Optional[Path] = Field(default=None, description="Resolved artifact file for the dependency.")

    model_config = ConfigDict(extra="forbid", frozen=True)


class ProjectInfo(BaseModel):
    group_id: str
    artifact_id: str
    version: str
    packaging: str = "jar"
    name: Optional[str] = None
    description: Optional[str] = None
    vendor: Optional[str] = None
    license: Optional[str] = None
    url: Optional[str] = None
    artifact_file: Optional[Path] = Field(default=None, description="Artifact produced by the build unit, if any.")
    manifest_entries: Dict[str, str] = Field(
        default_factory=dict,
        description="Headers configured on the build unit itself, merged after analysis.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("manifest_entries", mode="before")
    @classmethod
    def _coerce_entries(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): _stringify(item) for key, item in value.items()}
        return value


class BuildRequest(BaseModel):
    project: ProjectInfo
    dependencies: List[DependencyInfo] = Field(default_factory=list)
    instructions: Dict[str, str] = Field(default_factory=dict)
    properties: Dict[str, str] = Field(default_factory=dict)
    classpath: List[Path] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("instructions", "properties", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): _stringify(item) for key, item in value.items()}
        return value

    def with_overrides(
        self,
        *,
        instructions: Optional[Dict[str, str]] = None,
        properties: Optional[Dict[str, str]] = None,
    ) -> "BuildRequest":
        """Return a new request with extra instructions/properties layered on top."""

        return self.model_copy(
            update={
                "instructions": {**self.instructions, **(instructions or {})},
                "properties": {**self.properties, **(properties or {})},
            }
        )


def _resolve(value: Any, base: Path) -> Any:
    if value is None:
        return None
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else base / path


def load_build_request(path: Path) -> BuildRequest:
    """Load a build request from a YAML descriptor.

    Relative artifact, dependency and classpath paths are resolved against the
    descriptor's directory.
    """

    payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"Build descriptor {path} must contain a mapping")
    base = path.parent.resolve()

    project = payload.get("project")
    if isinstance(project, dict) and project.get("artifact_file"):
        project["artifact_file"] = _resolve(project["artifact_file"], base)
    for dependency in payload.get("dependencies") or []:
        if isinstance(dependency, dict) and dependency.get("file"):
            dependency["file"] = _resolve(dependency["file"], base)
    if payload.get("classpath"):
        payload["classpath"] = [_resolve(entry, base) for entry in payload["classpath"]]

    return BuildRequest.model_validate(payload)
