"""Remote sources: extension catalog, HTTP downloads, and registry layout.

Public API::

    from depsmith.registry import ExtensionCatalog, download, artifact_url
"""

from __future__ import annotations

from depsmith.registry.extensions import ExtensionCatalog, ExtensionInfo, is_extension_id
from depsmith.registry.http_client import download, make_client
from depsmith.registry.maven import artifact_url, registry_descriptor

__all__ = [
    "ExtensionCatalog",
    "ExtensionInfo",
    "artifact_url",
    "download",
    "is_extension_id",
    "make_client",
    "registry_descriptor",
]
