"""
Formstack API helpers shared by the Formstack trigger.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

from node_sdk import BaseNode, NodeApiError, NodePropertyOption
from node_sdk.config import get_settings


logger = logging.getLogger(__name__)

TOKEN_CREDENTIAL_TYPE = "formstackApi"
OAUTH2_CREDENTIAL_TYPE = "formstackOAuth2Api"

PER_PAGE = 200


class FormstackFieldFormat(str, Enum):
    """Which attribute of a form field keys the submitted values."""
    ID = "id"
    LABEL = "label"
    NAME = "name"


class FormstackSubmissionValue(TypedDict):
    field: str
    value: Any


class FormstackWebhookBody(TypedDict, total=False):
    FormID: str
    UniqueID: str


def api_request(
    node: BaseNode,
    method: str,
    endpoint: str,
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
) -> Any:
    """Make an API request to Formstack."""
    url = f"{get_settings().formstack_api_url.rstrip('/')}/{endpoint}"
    authentication = node.get_node_parameter("authentication", 0, "accessToken")

    try:
        if authentication == "accessToken":
            credentials = node.get_credentials(TOKEN_CREDENTIAL_TYPE)
            return node.helpers_request(
                method,
                url,
                headers={"Authorization": f"Bearer {credentials.get('accessToken')}"},
                params=query,
                json=body,
            )
        return node.helpers_request_oauth2(
            OAUTH2_CREDENTIAL_TYPE, method, url, params=query, json=body
        )
    except NodeApiError as e:
        raise NodeApiError(
            f"Formstack error response: {e.message}",
            node=node,
            status_code=e.status_code,
            response_body=e.response_body,
        ) from e


def api_request_all_items(
    node: BaseNode,
    method: str,
    endpoint: str,
    body: Optional[Dict[str, Any]],
    data_key: str,
    query: Optional[Dict[str, Any]] = None,
) -> Dict[str, List[Any]]:
    """Make requests to a paginated Formstack endpoint and collect every entry under data_key."""
    return_data: Dict[str, List[Any]] = {"items": []}
    page = 0

    while True:
        page += 1
        response = api_request(
            node, method, endpoint, body, {**(query or {}), "per_page": PER_PAGE, "page": page}
        )
        return_data["items"].extend(response.get(data_key) or [])

        total = response.get("total")
        if total is None or math.ceil(int(total) / PER_PAGE) <= page:
            break

    return return_data


def get_forms(node: BaseNode) -> List[NodePropertyOption]:
    """Return all the available forms, folders excluded."""
    response = api_request_all_items(node, "GET", "form.json", {}, "forms", {"folders": "false"})
    return [{"name": form.get("name"), "value": form.get("id")} for form in response["items"]]


def get_fields(node: BaseNode, form_id: str) -> Dict[str, Dict[str, Any]]:
    """Return the fields of a form keyed by field id."""
    response = api_request_all_items(node, "GET", f"form/{form_id}.json", {}, "fields")
    return {str(field["id"]): field for field in response["items"]}


def get_submission(node: BaseNode, unique_id: str) -> List[FormstackSubmissionValue]:
    """Return the submitted values of a submission."""
    response = api_request_all_items(node, "GET", f"submission/{unique_id}.json", {}, "data")
    return response["items"]


__all__ = [
    "TOKEN_CREDENTIAL_TYPE",
    "OAUTH2_CREDENTIAL_TYPE",
    "FormstackFieldFormat",
    "FormstackSubmissionValue",
    "FormstackWebhookBody",
    "api_request",
    "api_request_all_items",
    "get_forms",
    "get_fields",
    "get_submission",
]
