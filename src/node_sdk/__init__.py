"""
Node SDK - the seam between connector nodes and the host workflow platform.

This package provides:
- BaseNode: Abstract base class for action nodes
- WebhookTriggerNode: Base class for nodes started by vendor webhooks
- NodeExecutionContext: Runtime context the host hands to a node
- BaseCredential: Base class for credential type definitions

All nodes execute synchronously; every HTTP call carries a timeout.
"""

from .basenode import (
    BaseNode,
    NodeExecutionContext,
    NodeExecutionData,
    NodePropertyOption,
    NodeParameter,
    NodeCredential,
    NodeParameterType,
    NodeOperationError,
    NodeApiError,
)
from .credentials import BaseCredential, OAuth2Credential
from .http import HttpClient, HttpResponse, HttpApiError, NodeTimeoutError
from .trigger import WEBHOOK_ID_KEY, WebhookResponseData, WebhookTriggerNode

__version__ = "1.0.0"

__all__ = [
    "NodeExecutionData",
    "NodePropertyOption",
    # Context
    "NodeExecutionContext",
    # Base classes
    "BaseNode",
    "WebhookTriggerNode",
    "WebhookResponseData",
    "WEBHOOK_ID_KEY",
    "BaseCredential",
    "OAuth2Credential",
    "NodeParameter",
    "NodeCredential",
    "NodeParameterType",
    # Errors
    "NodeOperationError",
    "NodeApiError",
    # HTTP
    "HttpClient",
    "HttpResponse",
    "HttpApiError",
    "NodeTimeoutError",
]
