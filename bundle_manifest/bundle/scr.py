"""Export of declarative service component descriptors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol

from .headers import parse_header
from .jar import Package, Resource
from .utils import write_stream

logger = logging.getLogger(__name__)

SERVICE_COMPONENT = "Service-Component"


class _PropertySource(Protocol):
    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:  # pragma: no cover - interface
        ...


def _write_descriptor(resource: Resource, destination: Path) -> Path:
    write_stream(destination, resource.write)
    return destination


def export_component_descriptors(analyzer: _PropertySource, package: Package, scr_location: Path) -> List[Path]:
    """Copy every resource named by ``Service-Component`` below ``scr_location``.

    A root naming a directory exports each resource inside it, any other root
    is looked up as a single resource. Existing files are overwritten and the
    first filesystem error aborts the export.
    """

    scr_location.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for root in parse_header(analyzer.get_property(SERVICE_COMPONENT)):
        location = scr_location / root
        entries = package.directories.get(root.strip("/"))
        if entries:
            for name, resource in entries.items():
                written.append(_write_descriptor(resource, location / name))
            continue
        resource = package.get_resource(root)
        if resource is not None:
            written.append(_write_descriptor(resource, location))
        else:
            logger.debug("Service-Component root %s not found in %s", root, package.name)
    return written
