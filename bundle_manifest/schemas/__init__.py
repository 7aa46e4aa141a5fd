"""Schema definitions for manifest build requests."""

from .request import BuildRequest, DependencyInfo, ProjectInfo, load_build_request

__all__ = [
    "BuildRequest",
    "DependencyInfo",
    "ProjectInfo",
    "load_build_request",
]
