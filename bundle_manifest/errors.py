"""Error types raised while generating bundle manifests."""

from __future__ import annotations


class ManifestError(RuntimeError):
    """Base class for failures that abort a manifest invocation."""

    kind = "internal-error"

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": str(self)}


class ManifestNotFoundError(ManifestError):
    """Raised when the artifact or output directory to analyze is missing."""

    kind = "not-found"

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Cannot find {path} (manifest generation must run after the compile phase)")


class ManifestIOError(ManifestError):
    """Raised when reading or writing bundle content fails."""

    kind = "io-failure"


class ManifestConfigurationError(ManifestError):
    """Raised when the analyzer reports errors and -failok does not suppress them."""

    kind = "configuration-invalid"

    def __init__(self, message: str = "Error(s) found in manifest configuration", *, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)


class ManifestInternalError(ManifestError):
    """Raised for unexpected failures inside the analysis engine."""

    kind = "internal-error"

    def __init__(self, message: str = "Internal error in bundle-manifest") -> None:
        super().__init__(message)


__all__ = [
    "ManifestConfigurationError",
    "ManifestError",
    "ManifestIOError",
    "ManifestInternalError",
    "ManifestNotFoundError",
]
