"""
Typeform API helpers shared by the Typeform trigger.

Authentication is chosen per node through the 'authentication' parameter:
'accessToken' sends a personal token, 'oAuth2' lets the host sign the call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TypedDict

from node_sdk import BaseNode, NodeApiError, NodePropertyOption
from node_sdk.config import get_settings


logger = logging.getLogger(__name__)

TOKEN_CREDENTIAL_TYPE = "typeformApi"
OAUTH2_CREDENTIAL_TYPE = "typeformOAuth2Api"

PAGE_SIZE = 200

# Answers of these types carry their value one level deeper
SUBVALUE_KEYS = ("label", "labels")


class TypeformDefinitionField(TypedDict):
    id: str
    title: str


class TypeformDefinition(TypedDict):
    fields: List[TypeformDefinitionField]


def api_request(
    node: BaseNode,
    method: str,
    endpoint: str,
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
) -> Any:
    """Make an API request to Typeform."""
    url = f"{get_settings().typeform_api_url.rstrip('/')}/{endpoint}"
    authentication = node.get_node_parameter("authentication", 0, "accessToken")

    try:
        if authentication == "accessToken":
            credentials = node.get_credentials(TOKEN_CREDENTIAL_TYPE)
            return node.helpers_request(
                method,
                url,
                headers={"Authorization": f"bearer {credentials.get('accessToken')}"},
                params=query,
                json=body,
            )
        return node.helpers_request_oauth2(
            OAUTH2_CREDENTIAL_TYPE, method, url, params=query, json=body
        )
    except NodeApiError as e:
        if e.status_code == 401:
            raise NodeApiError(
                "The Typeform credentials are not valid!",
                node=node,
                status_code=401,
                response_body=e.response_body,
            ) from e

        error_body = e.response_body if isinstance(e.response_body, dict) else {}
        if error_body.get("description"):
            raise NodeApiError(
                f"Typeform error response [{e.status_code} - {error_body.get('code')}]: "
                f"{error_body['description']}",
                node=node,
                status_code=e.status_code,
                response_body=e.response_body,
            ) from e

        raise


def api_request_all_items(
    node: BaseNode,
    method: str,
    endpoint: str,
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
) -> Dict[str, List[Any]]:
    """Make requests to a paginated Typeform endpoint and collect every item."""
    return_data: Dict[str, List[Any]] = {}
    page = 0

    while True:
        page += 1
        response = api_request(
            node, method, endpoint, body, {**(query or {}), "page_size": PAGE_SIZE, "page": page}
        )
        if response.get("items") is not None:
            return_data.setdefault("items", []).extend(response["items"])

        logger.debug("Fetched page %s of %s", page, endpoint)

        page_count = response.get("page_count")
        if page_count is None or page_count <= page:
            break

    return return_data


def get_forms(node: BaseNode) -> List[NodePropertyOption]:
    """Return all the available forms."""
    response = api_request_all_items(node, "GET", "forms")

    if response.get("items") is None:
        raise NodeApiError("No data got returned", node=node)

    return [{"name": form.get("title"), "value": form.get("id")} for form in response["items"]]


def simplify_answers(
    definition: TypeformDefinition,
    answers: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Collapse Typeform answers into {field title: value}.

    Titles may contain recall placeholders ({{field:...}}) which are turned
    into square brackets so the keys stay readable.
    """
    titles_by_id = {
        field["id"]: field["title"].replace("{{", "[").replace("}}", "]")
        for field in definition.get("fields", [])
    }

    converted: Dict[str, Any] = {}
    for answer in answers:
        value = answer.get(answer.get("type", ""))
        if isinstance(value, dict):
            for key in SUBVALUE_KEYS:
                if key in value:
                    value = value[key]
                    break

        field_id = answer.get("field", {}).get("id")
        converted[titles_by_id.get(field_id, field_id)] = value

    return converted


__all__ = [
    "TOKEN_CREDENTIAL_TYPE",
    "OAUTH2_CREDENTIAL_TYPE",
    "TypeformDefinition",
    "TypeformDefinitionField",
    "api_request",
    "api_request_all_items",
    "get_forms",
    "simplify_answers",
]
