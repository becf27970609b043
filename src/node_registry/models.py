"""
Node Registry Models - Metadata structures for nodes, credentials and node packs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from node_sdk.basenode import NodeCredential, NodeParameter


class NodeDefinition(BaseModel):
    """
    Metadata about a registered node.

    Contains everything the host needs to list, render and instantiate a node.
    """
    model_config = ConfigDict(extra="allow")

    # Identity
    node_type: str = Field(..., description="Unique node type identifier")
    version: int = Field(1, description="Node version")

    # Display
    display_name: str = Field(..., description="Human-readable name")
    description: str = Field("", description="Node description")
    icon: str = Field("file:icon.svg", description="Node icon")
    group: List[str] = Field(default_factory=list, description="Categories")

    # Technical
    node_class: Optional[str] = Field(None, description="Fully qualified class name")
    node_pack: Optional[str] = Field(None, description="Source node pack")

    # Runtime
    inputs: List[str] = Field(default_factory=lambda: ["main"])
    outputs: List[str] = Field(default_factory=lambda: ["main"])
    credentials: List[Dict[str, Any]] = Field(default_factory=list)
    parameters: List[Dict[str, Any]] = Field(default_factory=list)
    webhooks: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Webhook routes the host must expose for trigger nodes",
    )
    load_options: List[str] = Field(
        default_factory=list,
        description="Public names of load-options methods",
    )

    @property
    def is_trigger(self) -> bool:
        return bool(self.webhooks)

    @field_validator("parameters")
    @classmethod
    def validate_parameters(cls, v: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Every parameter must be a well-formed NodeParameter with a unique name."""
        seen: Dict[str, int] = {}
        for parameter in v:
            NodeParameter.model_validate(parameter)
            seen[parameter["name"]] = seen.get(parameter["name"], 0) + 1
        # Same name is allowed when displayOptions make the variants exclusive
        for parameter in v:
            if seen[parameter["name"]] > 1 and not parameter.get("displayOptions"):
                raise ValueError(f"Duplicate parameter '{parameter['name']}'")
        return v

    @field_validator("credentials")
    @classmethod
    def validate_credentials(cls, v: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Every credential slot must name a credential type."""
        for credential in v:
            NodeCredential.model_validate(credential)
        return v

    @classmethod
    def from_node_class(cls, node_class: Type) -> "NodeDefinition":
        """Create definition from a BaseNode class."""
        node_type = getattr(node_class, "type", node_class.__name__.lower())
        version = getattr(node_class, "version", 1)
        description = getattr(node_class, "description", {}) or {}
        properties = getattr(node_class, "properties", {}) or {}
        methods = getattr(node_class, "methods", {}) or {}

        credentials = description.get("credentials") or properties.get("credentials", [])

        return cls(
            node_type=node_type,
            version=version,
            display_name=description.get("displayName", node_type),
            description=description.get("description", ""),
            icon=description.get("icon", "file:icon.svg"),
            group=description.get("group", []),
            node_class=f"{node_class.__module__}.{node_class.__name__}",
            inputs=description.get("inputs", ["main"]),
            outputs=description.get("outputs", ["main"]),
            credentials=list(credentials),
            parameters=list(properties.get("parameters", [])),
            webhooks=list(description.get("webhooks", [])),
            load_options=sorted(methods.get("loadOptions", {})),
        )


class NodePackManifest(BaseModel):
    """
    Manifest for a node pack (collection of nodes).

    Used for discovery and registration of bundled nodes.
    """
    model_config = ConfigDict(extra="allow")

    # Identity
    name: str = Field(..., description="Pack name (e.g., 'saas')")
    version: str = Field("1.0.0", description="Pack version")
    description: str = Field("", description="Pack description")

    # Author
    author: str = Field("", description="Author name")
    license: str = Field("MIT", description="License type")

    # Contents
    nodes: List[str] = Field(
        default_factory=list,
        description="List of node types in this pack"
    )
    credentials: List[str] = Field(
        default_factory=list,
        description="List of credential types in this pack"
    )

    # Technical
    entry_point: str = Field(
        "",
        description="Module path for node discovery (e.g., 'nodepacks.saas')"
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodePackManifest":
        """Create from dictionary."""
        return cls.model_validate(data)


class CredentialDefinition(BaseModel):
    """
    Definition of a credential type.
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Credential type name")
    display_name: str = Field(..., description="Human-readable name")
    description: str = Field("", description="Credential description")
    documentation_url: Optional[str] = Field(None, description="Vendor docs for obtaining the credential")

    # Fields
    properties: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Credential properties/fields"
    )

    # Authentication
    auth_type: str = Field("generic", description="Auth type: generic, oauth2, etc.")

    credential_class: Optional[str] = Field(None, description="Fully qualified class name")

    @classmethod
    def from_credential_class(cls, credential_class: Type) -> "CredentialDefinition":
        """Create definition from a BaseCredential class."""
        definition = credential_class.get_definition()
        return cls(
            name=definition["name"],
            display_name=definition["display_name"],
            documentation_url=definition.get("documentation_url"),
            properties=definition["properties"],
            auth_type="oauth2" if "oAuth2Api" in definition.get("extends", []) else "generic",
            credential_class=f"{credential_class.__module__}.{credential_class.__name__}",
        )


__all__ = [
    "NodeDefinition",
    "NodePackManifest",
    "CredentialDefinition",
]
