"""
Phantombuster API helpers.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from node_sdk import BaseNode, NodeApiError, NodeOperationError
from node_sdk.config import get_settings


logger = logging.getLogger(__name__)

CREDENTIAL_TYPE = "phantombusterApi"


def phantombuster_api_request(
    node: BaseNode,
    method: str,
    path: str,
    body: Optional[Dict[str, Any]] = None,
    qs: Optional[Dict[str, Any]] = None,
) -> Any:
    """Make an API request to Phantombuster, authenticated by API key header."""
    credentials = node.get_credentials(CREDENTIAL_TYPE)

    try:
        return node.helpers_request(
            method,
            f"{get_settings().phantombuster_api_url}{path}",
            headers={"X-Phantombuster-Key": credentials.get("apiKey")},
            params=qs or None,
            json=body or None,
        )
    except NodeApiError as e:
        # Keep the vendor context but attach it to this node
        raise NodeApiError(
            e.message,
            node=node,
            status_code=e.status_code,
            response_body=e.response_body,
        ) from e


def validate_json(text: Optional[str], name: str) -> Any:
    """Parse a JSON parameter, naming the parameter on failure."""
    try:
        return json.loads(text)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise NodeOperationError(f"{name} must provide a valid JSON")


__all__ = [
    "CREDENTIAL_TYPE",
    "phantombuster_api_request",
    "validate_json",
]
