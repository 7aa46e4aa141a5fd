"""Bundle analysis and manifest assembly utilities."""

from .analyzer import Analyzer, PropertyAnalyzer
from .builder import ManifestBuilder, ManifestResult, ManifestSettings
from .exports import calculate_exports_from_contents
from .jar import EmbeddedResource, FileResource, Package, Resource
from .manifest import Manifest, dump_manifest, load_manifest
from .merge import merge_headers
from .scr import export_component_descriptors

__all__ = [
    "Analyzer",
    "EmbeddedResource",
    "FileResource",
    "Manifest",
    "ManifestBuilder",
    "ManifestResult",
    "ManifestSettings",
    "Package",
    "PropertyAnalyzer",
    "Resource",
    "calculate_exports_from_contents",
    "dump_manifest",
    "export_component_descriptors",
    "load_manifest",
    "merge_headers",
]
