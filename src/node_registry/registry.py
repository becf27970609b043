"""
Node Registry - Central registry for node and credential discovery.

Supports multiple discovery methods:
1. Manual registration
2. Entry-points (for plugin node packs)
3. Module scanning
"""

from __future__ import annotations

import importlib
import inspect
import logging
from importlib.metadata import entry_points
from typing import Dict, Iterator, List, Optional, Type, TYPE_CHECKING

from .models import CredentialDefinition, NodeDefinition, NodePackManifest


if TYPE_CHECKING:
    from node_sdk.basenode import BaseNode
    from node_sdk.credentials import BaseCredential


logger = logging.getLogger(__name__)

# Entry point group for node packs
NODE_PACK_ENTRY_POINT = "saas_nodepack.nodepacks"


class NodeRegistry:
    """
    Central registry for discovering and instantiating nodes.

    Nodes can be registered via:
    - register_node(): Manual registration
    - discover_entry_points(): Automatic discovery via entry points
    - register_pack(): Register all nodes and credentials from a pack

    Usage:
        registry = NodeRegistry()
        registry.discover_entry_points()

        # Get a node class
        node_class = registry.get_node_class("typeformTrigger")

        # Create instance
        node = registry.create_node("typeformTrigger")
    """

    def __init__(self):
        """Initialize empty registry."""
        self._nodes: Dict[str, NodeDefinition] = {}
        self._node_classes: Dict[str, Type["BaseNode"]] = {}
        self._credentials: Dict[str, CredentialDefinition] = {}
        self._credential_classes: Dict[str, Type["BaseCredential"]] = {}
        self._packs: Dict[str, NodePackManifest] = {}
        self._discovered = False

    def register_node(
        self,
        node_class: Type["BaseNode"],
        node_type: Optional[str] = None,
    ) -> NodeDefinition:
        """
        Register a node class.

        Args:
            node_class: BaseNode subclass
            node_type: Override node type (uses class.type if not provided)

        Returns:
            NodeDefinition for the registered node
        """
        if node_type is None:
            node_type = getattr(node_class, "type", node_class.__name__.lower())

        definition = NodeDefinition.from_node_class(node_class)
        definition.node_type = node_type

        if node_type in self._node_classes and self._node_classes[node_type] is not node_class:
            logger.warning("Node type %s re-registered by %s", node_type, definition.node_class)

        self._nodes[node_type] = definition
        self._node_classes[node_type] = node_class

        logger.debug("Registered node: %s", node_type)
        return definition

    def register_credential(
        self,
        credential_class: Type["BaseCredential"],
    ) -> CredentialDefinition:
        """Register a credential type by its class."""
        definition = CredentialDefinition.from_credential_class(credential_class)

        self._credentials[definition.name] = definition
        self._credential_classes[definition.name] = credential_class

        logger.debug("Registered credential: %s", definition.name)
        return definition

    def register_pack(
        self,
        manifest: NodePackManifest,
        node_classes: Dict[str, Type["BaseNode"]],
        credential_classes: Optional[Dict[str, Type["BaseCredential"]]] = None,
    ) -> None:
        """
        Register a node pack with its nodes and credentials.

        Args:
            manifest: Pack manifest
            node_classes: Map of node_type -> node class
            credential_classes: Map of credential name -> credential class
        """
        self._packs[manifest.name] = manifest

        for node_type, node_class in node_classes.items():
            definition = self.register_node(node_class, node_type)
            definition.node_pack = manifest.name

        for credential_class in (credential_classes or {}).values():
            self.register_credential(credential_class)

        logger.info(
            "Registered pack '%s' with %d nodes and %d credentials",
            manifest.name,
            len(node_classes),
            len(credential_classes or {}),
        )

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Discover node packs via entry points.

        Entry points are defined in pyproject.toml:

            [project.entry-points."saas_nodepack.nodepacks"]
            mypack = "mypack:register_nodes"

        The entry point should be a function that returns:
        - (manifest, node_classes, credential_classes)
        - (manifest, node_classes)
        - Or just a node_classes dict

        Args:
            force: Re-discover even if already done

        Returns:
            Number of packs discovered
        """
        if self._discovered and not force:
            return len(self._packs)

        count = 0

        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            try:
                register_func = ep.load()
                result = register_func()
            except Exception:
                # One broken plugin must not hide the others
                logger.exception("Failed to load node pack '%s'", ep.name)
                continue

            if isinstance(result, tuple):
                self.register_pack(*result)
            elif isinstance(result, dict):
                manifest = NodePackManifest(
                    name=ep.name,
                    nodes=list(result.keys()),
                )
                self.register_pack(manifest, result)
            else:
                logger.error("Node pack '%s' returned %r", ep.name, type(result).__name__)
                continue

            count += 1
            logger.info("Discovered node pack: %s", ep.name)

        self._discovered = True
        return count

    def discover_module(self, module_path: str) -> int:
        """
        Discover nodes from a module.

        Scans module for concrete BaseNode subclasses and registers them.

        Args:
            module_path: Module path to import (e.g., 'nodepacks.saas')

        Returns:
            Number of nodes discovered
        """
        from node_sdk.basenode import BaseNode

        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.error("Failed to import module '%s': %s", module_path, e)
            return 0

        count = 0
        for name in dir(module):
            obj = getattr(module, name)
            if (
                isinstance(obj, type)
                and issubclass(obj, BaseNode)
                and not inspect.isabstract(obj)
            ):
                self.register_node(obj)
                count += 1

        return count

    def get_node(self, node_type: str) -> Optional[NodeDefinition]:
        """Get node definition by type."""
        return self._nodes.get(node_type)

    def get_node_class(self, node_type: str) -> Optional[Type["BaseNode"]]:
        """Get node class by type."""
        return self._node_classes.get(node_type)

    def create_node(self, node_type: str) -> Optional["BaseNode"]:
        """
        Create a node instance.

        Args:
            node_type: Node type identifier

        Returns:
            Node instance or None if not found
        """
        node_class = self.get_node_class(node_type)
        if node_class:
            return node_class()
        return None

    def get_credential(self, name: str) -> Optional[CredentialDefinition]:
        """Get credential definition by type name."""
        return self._credentials.get(name)

    def get_credential_class(self, name: str) -> Optional[Type["BaseCredential"]]:
        """Get credential class by type name."""
        return self._credential_classes.get(name)

    def list_nodes(self) -> List[NodeDefinition]:
        """List all registered nodes."""
        return list(self._nodes.values())

    def list_credentials(self) -> List[CredentialDefinition]:
        """List all registered credential types."""
        return list(self._credentials.values())

    def list_packs(self) -> List[NodePackManifest]:
        """List all registered packs."""
        return list(self._packs.values())

    def list_node_types(self) -> List[str]:
        """List all registered node types."""
        return list(self._nodes.keys())

    def has_node(self, node_type: str) -> bool:
        """Check if node type is registered."""
        return node_type in self._nodes

    def __len__(self) -> int:
        """Number of registered nodes."""
        return len(self._nodes)

    def __iter__(self) -> Iterator[NodeDefinition]:
        """Iterate over node definitions."""
        return iter(self._nodes.values())

    def __contains__(self, node_type: str) -> bool:
        """Check if node type is registered."""
        return self.has_node(node_type)


# Global registry instance
_global_registry: Optional[NodeRegistry] = None


def get_global_registry() -> NodeRegistry:
    """Get the global node registry (lazy initialized)."""
    global _global_registry
    if _global_registry is None:
        _global_registry = NodeRegistry()
    return _global_registry


def register_node(
    node_class: Type["BaseNode"],
    node_type: Optional[str] = None,
) -> NodeDefinition:
    """Register a node in the global registry."""
    return get_global_registry().register_node(node_class, node_type)


__all__ = [
    "NodeRegistry",
    "get_global_registry",
    "register_node",
    "NODE_PACK_ENTRY_POINT",
]
