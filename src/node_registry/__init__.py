"""
Node Registry - Discovery and registration of node implementations.

This package provides:
- NodeDefinition: Metadata about a registered node
- CredentialDefinition: Metadata about a registered credential type
- NodePackManifest: Package metadata for a node pack
- NodeRegistry: Central registry for discovering nodes and credentials

Supports entry-points based discovery for plugin node packs.
"""

from .models import CredentialDefinition, NodeDefinition, NodePackManifest
from .registry import NODE_PACK_ENTRY_POINT, NodeRegistry, get_global_registry

__all__ = [
    "CredentialDefinition",
    "NodeDefinition",
    "NodePackManifest",
    "NodeRegistry",
    "NODE_PACK_ENTRY_POINT",
    "get_global_registry",
]
