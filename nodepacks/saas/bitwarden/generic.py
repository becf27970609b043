"""
Bitwarden Public API helpers shared by the Bitwarden node.

Every request needs an organization access token obtained through the
OAuth2 client-credentials grant; callers fetch it once per execution with
get_access_token() and pass it to bitwarden_api_request().
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from node_sdk import BaseNode, NodeApiError, NodePropertyOption
from node_sdk.config import get_settings


logger = logging.getLogger(__name__)

CREDENTIAL_TYPE = "bitwardenApi"

# https://github.com/bitwarden/server/blob/master/src/Core/Enums/DeviceType.cs
DEVICE_TYPE_WINDOWS_DESKTOP = 2


def get_token_url(node: BaseNode) -> str:
    """Return the access token URL based on the user's environment."""
    credentials = node.get_credentials(CREDENTIAL_TYPE)
    if credentials.get("environment", "cloudHosted") == "cloudHosted":
        return get_settings().bitwarden_cloud_identity_url
    return f"{str(credentials.get('domain', '')).rstrip('/')}/identity/connect/token"


def get_base_url(node: BaseNode) -> str:
    """Return the base API URL based on the user's environment."""
    credentials = node.get_credentials(CREDENTIAL_TYPE)
    if credentials.get("environment", "cloudHosted") == "cloudHosted":
        return get_settings().bitwarden_cloud_api_url
    return f"{str(credentials.get('domain', '')).rstrip('/')}/api"


def get_access_token(node: BaseNode) -> str:
    """Retrieve the access token needed for every API request to Bitwarden."""
    credentials = node.get_credentials(CREDENTIAL_TYPE)
    settings = get_settings()

    form = {
        "client_id": credentials.get("clientId"),
        "client_secret": credentials.get("clientSecret"),
        "grant_type": "client_credentials",
        "scope": "api.organization",
        "deviceName": settings.device_identifier,
        "deviceType": DEVICE_TYPE_WINDOWS_DESKTOP,
        "deviceIdentifier": settings.device_identifier,
    }

    try:
        response = node.helpers_request(
            "POST",
            get_token_url(node),
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except NodeApiError as e:
        raise NodeApiError(
            f"Bitwarden token request failed: {e.message}",
            node=node,
            status_code=e.status_code,
            response_body=e.response_body,
        ) from e

    token = response.get("access_token") if isinstance(response, dict) else None
    if not token:
        raise NodeApiError(
            "Bitwarden token response did not contain an access token",
            node=node,
            response_body=response,
        )
    return token


def bitwarden_api_request(
    node: BaseNode,
    method: str,
    endpoint: str,
    qs: Optional[Dict[str, Any]],
    body: Optional[Dict[str, Any]],
    token: str,
) -> Any:
    """Make an authenticated API request to Bitwarden."""
    headers = {
        "user-agent": get_settings().user_agent,
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }

    try:
        return node.helpers_request(
            method,
            f"{get_base_url(node)}{endpoint}",
            headers=headers,
            params=qs or None,
            json=body or None,
        )
    except NodeApiError as e:
        if e.status_code == 404:
            raise NodeApiError(
                "Bitwarden error response [404]: Not found",
                node=node,
                status_code=404,
                response_body=e.response_body,
            ) from e

        message = e.response_body.get("Message") if isinstance(e.response_body, dict) else None
        if message:
            raise NodeApiError(
                f"Bitwarden error response [{e.status_code}]: {message}",
                node=node,
                status_code=e.status_code,
                response_body=e.response_body,
            ) from e
        raise


def handle_get_all(
    node: BaseNode,
    item_index: int,
    method: str,
    endpoint: str,
    qs: Optional[Dict[str, Any]],
    body: Optional[Dict[str, Any]],
    token: str,
) -> List[Dict[str, Any]]:
    """Supplement a `getAll` operation with `returnAll` and `limit` parameters."""
    response = bitwarden_api_request(node, method, endpoint, qs, body, token)
    data = response.get("data") or []

    if node.get_node_parameter("returnAll", item_index, False):
        return data

    limit = int(node.get_node_parameter("limit", item_index, 10))
    return data[:limit]


def load_resource(node: BaseNode, resource: str) -> List[NodePropertyOption]:
    """Load a resource so that it can be selected by name from a dropdown."""
    token = get_access_token(node)
    response = bitwarden_api_request(node, "GET", f"/public/{resource}", {}, {}, token)

    return [
        {"name": entry.get("name") or entry["id"], "value": entry["id"]}
        for entry in response.get("data") or []
    ]
