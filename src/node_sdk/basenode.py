"""
BaseNode - Abstract base class for Python node implementations.

The host workflow platform owns scheduling, persistence, credential storage
and webhook dispatch. Nodes only see the NodeExecutionContext handed to them
through set_context(); everything a node needs from the host goes through it.

All nodes execute synchronously and every HTTP call carries a timeout.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Literal, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field

from node_sdk.http import HttpApiError, HttpClient, NodeTimeoutError
from node_sdk.observability import with_node_context


logger = logging.getLogger(__name__)


# ==============================================================================
# NodeParameterType
# ==============================================================================

NodeParameterType = Literal[
    "string", "number", "boolean", "options", "multiOptions",
    "color", "json", "collection", "fixedCollection", "dateTime",
    "node", "resourceLocator", "notice", "array", "code",
]


# ==============================================================================
# NodeParameter - Pydantic model for defining parameters
# ==============================================================================

class NodeParameter(BaseModel):
    """
    A single parameter in the node's properties.

    Can be used both as Pydantic model and as dict in properties.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Parameter key (internal name)")
    display_name: str = Field(..., alias="displayName", description="Human-readable label")
    type: NodeParameterType = Field(..., description="Parameter type")
    default: Any = Field(None, description="Default value")
    required: bool = Field(False, description="Is parameter required?")
    description: Optional[str] = Field(None, description="Help text")
    placeholder: Optional[str] = Field(None, description="Input placeholder")
    options: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Options for options/multiOptions/collection types"
    )
    type_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="typeOptions",
        description="Type options such as loadOptionsMethod"
    )
    display_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="displayOptions",
        description="Conditional visibility"
    )


class NodeCredential(BaseModel):
    """Credential requirement definition."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Credential type name")
    required: bool = Field(True, description="Is credential required?")
    display_name: Optional[str] = Field(None, alias="displayName")
    display_options: Optional[Dict[str, Any]] = Field(None, alias="displayOptions")


# ==============================================================================
# NodeExecutionData - Output data format
# ==============================================================================

class NodeExecutionData(TypedDict, total=False):
    """
    Single item of execution output data.

    Format: {"json": {...}, "binary": {...}, "pairedItem": {"item": 0}}
    """
    json: Dict[str, Any]
    binary: Optional[Dict[str, Any]]
    pairedItem: Optional[Dict[str, int]]


class NodePropertyOption(TypedDict):
    """Entry returned by a load-options method."""
    name: str
    value: Any


# ==============================================================================
# BaseNode - Abstract base class
# ==============================================================================

class BaseNode(ABC):
    """
    Abstract base class for all Python node implementations.

    Nodes define:
    - type: Unique identifier (e.g., "bitwarden")
    - version: Node version number
    - description: Node metadata dict
    - properties: Parameters and credentials
    - methods: Load-options methods exposed to the host UI

    And implement execute() which processes input items.

    Example:

        class PhantombusterNode(BaseNode):
            type = "phantombuster"
            version = 1

            methods = {"loadOptions": {"getAgents": "get_agents"}}

            def get_agents(self) -> List[NodePropertyOption]:
                ...

            def execute(self) -> List[List[NodeExecutionData]]:
                items = self.get_input_data()
                ...
                return [results]
    """

    # Required class attributes (override in subclasses)
    type: str = "base"
    version: int = 1

    description: Dict[str, Any] = {
        "displayName": "Base Node",
        "name": "base",
        "description": "",
        "group": [],
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties: Dict[str, Any] = {
        "parameters": [],
        "credentials": [],
    }

    # Host UI calls these by public name, mapped to method names on the class
    methods: Dict[str, Dict[str, str]] = {}

    # Continue processing other items if one fails
    continue_on_fail: bool = False

    def __init__(self) -> None:
        """Initialize node instance."""
        self.logger = logging.getLogger(f"node.{self.type}")
        self._context: Optional[NodeExecutionContext] = None

    @abstractmethod
    def execute(self) -> List[List[NodeExecutionData]]:
        """
        Execute node operation.

        Returns:
            List[List[NodeExecutionData]]: Nested list of execution results.
            - Outer list represents output branches (usually 1)
            - Inner list represents items in that branch

        Raises:
            NodeOperationError: On operation failure
            NodeApiError: On API call failure
        """
        raise NotImplementedError

    # ==== Context Management ====

    def set_context(self, context: "NodeExecutionContext") -> None:
        """Set the execution context."""
        self._context = context

    @property
    def context(self) -> "NodeExecutionContext":
        if self._context is None:
            raise NodeOperationError("No context set", node=self)
        return self._context

    def log_context(self) -> Dict[str, Any]:
        """Logging `extra` naming the workflow and node this instance runs for."""
        context = self._context
        return with_node_context(
            workflow_id=context.workflow_id if context else None,
            node_name=context.node_name if context else None,
            node_type=self.type,
        )

    # ==== Helper methods for subclasses ====

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """
        Get parameter value.

        Args:
            name: Parameter name, dot notation reaches into collections
                  (e.g. 'additionalFields.limit')
            item_index: Index of item (for expression resolution)
            default: Default if not set
        """
        if self._context is None:
            return default
        return self._context.get_node_parameter(name, item_index, default)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """
        Get credentials by type name.

        Args:
            name: Credential type name (e.g., "typeformApi")

        Returns:
            Credentials dict with decrypted values
        """
        return self.context.get_credentials(name)

    def get_input_data(self) -> List[Dict[str, Any]]:
        """
        Get input items from previous node.

        Returns:
            List of input items, each with 'json' key.
        """
        if self._context is None:
            return []
        return self._context.get_input_data()

    def helpers_request(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Make HTTP request with timeout enforcement.

        Replaces the host's plain request helper. Raises NodeApiError on
        any non-2xx answer, with the status code and parsed body attached.
        """
        return self.context.helpers_request(method, url, **kwargs)

    def helpers_request_oauth2(
        self,
        credential_type: str,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """Make HTTP request authenticated with an OAuth2 credential."""
        return self.context.helpers_request_oauth2(credential_type, method, url, **kwargs)

    # ==== Webhook helpers ====

    def get_workflow_static_data(self, kind: str = "node") -> Dict[str, Any]:
        """Host-persisted static data; mutate the returned dict in place."""
        return self.context.get_workflow_static_data(kind)

    def get_node_webhook_url(self, name: str = "default") -> str:
        return self.context.get_node_webhook_url(name)

    def get_body_data(self) -> Dict[str, Any]:
        return self.context.get_body_data()

    def get_header_data(self) -> Dict[str, Any]:
        return self.context.get_header_data()

    def get_query_data(self) -> Dict[str, Any]:
        return self.context.get_query_data()

    @staticmethod
    def return_json_array(
        data: Union[Dict[str, Any], List[Dict[str, Any]]],
    ) -> List[NodeExecutionData]:
        """Wrap a dict or list of dicts into execution items."""
        if isinstance(data, dict):
            data = [data]
        return [{"json": entry} for entry in data]

    # ==== Load options ====

    def load_options(self, method_name: str) -> List[NodePropertyOption]:
        """
        Run a load-options method by its public name.

        Raises:
            NodeOperationError: If the node does not expose that method
        """
        attribute = self.methods.get("loadOptions", {}).get(method_name)
        handler: Optional[Callable[[], List[NodePropertyOption]]] = (
            getattr(self, attribute, None) if attribute else None
        )
        if handler is None:
            raise NodeOperationError(
                f"Node '{self.type}' has no load options method '{method_name}'",
                node=self,
            )
        return handler()

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get full node definition for registration."""
        return {
            "type": cls.type,
            "version": cls.version,
            "description": cls.description,
            "properties": cls.properties,
            "methods": {
                kind: sorted(entries) for kind, entries in cls.methods.items()
            },
        }


# ==============================================================================
# NodeExecutionContext - Runtime context for node execution
# ==============================================================================

class NodeExecutionContext:
    """
    Runtime context provided to nodes during execution.

    Provides access to:
    - Parameters
    - Credentials
    - Input data
    - Static data and webhook request data
    - HTTP helpers
    """

    def __init__(
        self,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: Optional[List[Dict[str, Any]]] = None,
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
        static_data: Optional[Dict[str, Dict[str, Any]]] = None,
        webhook_urls: Optional[Dict[str, str]] = None,
        body_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._parameters = parameters
        self._credentials = credentials
        self._input_data = input_data if input_data is not None else [{"json": {}}]
        self.workflow_id = workflow_id
        self.node_name = node_name
        self._static_data = static_data if static_data is not None else {}
        self._webhook_urls = webhook_urls or {}
        self._body_data = body_data or {}
        self._headers = headers or {}
        self._query = query or {}

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """
        Get parameter value supporting dot notation with array indexing.

        Examples: 'formId', 'additionalFields.limit', 'groups.0.id'
        """
        current: Any = self._parameters
        for key in name.split("."):
            if key.isdigit() and isinstance(current, list):
                index = int(key)
                if not 0 <= index < len(current):
                    return default
                current = current[index]
            elif isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """Get credentials by type name."""
        if name not in self._credentials:
            raise NodeOperationError(f"Credentials '{name}' not found")
        return self._credentials[name]

    def get_input_data(self) -> List[Dict[str, Any]]:
        """Get input items."""
        return self._input_data

    def get_workflow_static_data(self, kind: str = "node") -> Dict[str, Any]:
        if kind not in ("node", "global"):
            raise NodeOperationError(f"Unknown static data type '{kind}'")
        return self._static_data.setdefault(kind, {})

    def get_node_webhook_url(self, name: str = "default") -> str:
        if name not in self._webhook_urls:
            raise NodeOperationError(f"No webhook URL registered for '{name}'")
        return self._webhook_urls[name]

    def get_body_data(self) -> Dict[str, Any]:
        return self._body_data

    def get_header_data(self) -> Dict[str, Any]:
        return self._headers

    def get_query_data(self) -> Dict[str, Any]:
        return self._query

    def helpers_request(
        self,
        method: str,
        url: str,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Make HTTP request and return the parsed body.

        Raises:
            NodeApiError: On transport failure, timeout or non-2xx status
        """
        client = HttpClient(timeout=timeout)
        try:
            response = client.request(method, url, **kwargs)
            response.raise_for_status()
        except HttpApiError as e:
            raise NodeApiError(
                str(e),
                status_code=e.status_code,
                response_body=e.response_body,
            ) from e
        except NodeTimeoutError as e:
            raise NodeApiError(str(e)) from e
        return response.body()

    def helpers_request_oauth2(
        self,
        credential_type: str,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> Any:
        """
        Make HTTP request with the OAuth2 access token of a credential.

        Token refresh belongs to the host's credential store; an absent
        token is reported instead of silently sending an anonymous call.
        """
        credentials = self.get_credentials(credential_type)
        token_data = credentials.get("oauthTokenData") or {}
        access_token = token_data.get("access_token")
        if not access_token:
            raise NodeOperationError(
                f"Credentials '{credential_type}' have no OAuth2 access token"
            )
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {access_token}"
        return self.helpers_request(method, url, headers=headers, **kwargs)


# ==============================================================================
# Errors
# ==============================================================================

class NodeOperationError(Exception):
    """Error during node operation."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        item_index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.node = node
        self.item_index = item_index
        super().__init__(message)


class NodeApiError(NodeOperationError):
    """Error from external API call."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message, node)
        self.status_code = status_code
        self.response_body = response_body


# ==============================================================================
# Exports
# ==============================================================================

__all__ = [
    "BaseNode",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodePropertyOption",
    "NodeParameter",
    "NodeCredential",
    "NodeParameterType",
    "NodeOperationError",
    "NodeApiError",
]
