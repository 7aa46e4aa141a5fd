"""Bundle manifest generation for component-oriented packaging."""

__version__ = "0.1.0"
from .bundle.builder import ManifestBuilder, ManifestResult, ManifestSettings
from .bundle.manifest import Manifest
from .errors import (
    ManifestConfigurationError,
    ManifestError,
    ManifestIOError,
    ManifestInternalError,
    ManifestNotFoundError,
)
from .schemas.request import BuildRequest, DependencyInfo, ProjectInfo, load_build_request
from .shell import ComponentCommands, ComponentShellCommand

__all__ = [
    "__version__",
    "BuildRequest",
    "ComponentCommands",
    "ComponentShellCommand",
    "DependencyInfo",
    "Manifest",
    "ManifestBuilder",
    "ManifestConfigurationError",
    "ManifestError",
    "ManifestIOError",
    "ManifestInternalError",
    "ManifestNotFoundError",
    "ManifestResult",
    "ManifestSettings",
    "ProjectInfo",
    "load_build_request",
]
