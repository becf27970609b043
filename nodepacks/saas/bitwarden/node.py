"""
Bitwarden Node - manage an organization's collections, groups, members and
read its event log through the Bitwarden Public API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from node_sdk import BaseNode, NodeExecutionData, NodeOperationError, NodePropertyOption

from .generic import (
    CREDENTIAL_TYPE,
    bitwarden_api_request,
    get_access_token,
    handle_get_all,
    load_resource,
)


logger = logging.getLogger(__name__)

MEMBER_TYPES = [
    {"name": "Owner", "value": 0},
    {"name": "Admin", "value": 1},
    {"name": "User", "value": 2},
    {"name": "Manager", "value": 3},
]


def _show(resource: str, *operations: str) -> Dict[str, Any]:
    return {"show": {"resource": [resource], "operation": list(operations)}}


def _id_parameter(resource: str, name: str, display_name: str, *operations: str) -> Dict[str, Any]:
    return {
        "displayName": display_name,
        "name": name,
        "type": "string",
        "default": "",
        "required": True,
        "description": f"The identifier of the {resource}",
        "displayOptions": _show(resource, *operations),
    }


def _return_all_parameters(resource: str) -> List[Dict[str, Any]]:
    return [
        {
            "displayName": "Return All",
            "name": "returnAll",
            "type": "boolean",
            "default": False,
            "description": "Whether to return all results or only up to a given limit",
            "displayOptions": _show(resource, "getAll"),
        },
        {
            "displayName": "Limit",
            "name": "limit",
            "type": "number",
            "default": 10,
            "typeOptions": {"minValue": 1},
            "description": "Max number of results to return",
            "displayOptions": {
                "show": {"resource": [resource], "operation": ["getAll"], "returnAll": [False]}
            },
        },
    ]


COLLECTIONS_OPTION = {
    "displayName": "Collections",
    "name": "collections",
    "type": "multiOptions",
    "typeOptions": {"loadOptionsMethod": "getCollections"},
    "default": [],
}

EXTERNAL_ID_OPTION = {
    "displayName": "External ID",
    "name": "externalId",
    "type": "string",
    "default": "",
}

ACCESS_ALL_OPTION = {
    "displayName": "Access All",
    "name": "accessAll",
    "type": "boolean",
    "default": False,
}


class BitwardenNode(BaseNode):
    """
    Bitwarden - credential vault organization management.

    Resources: collection, event, group, member.
    """

    type = "bitwarden"
    version = 1

    description = {
        "displayName": "Bitwarden",
        "name": "bitwarden",
        "icon": "file:bitwarden.svg",
        "group": ["transform"],
        "subtitle": '={{$parameter["operation"] + ": " + $parameter["resource"]}}',
        "description": "Consume the Bitwarden API",
        "version": 1,
        "defaults": {"name": "Bitwarden", "color": "#ffffff"},
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Resource",
                "name": "resource",
                "type": "options",
                "default": "collection",
                "options": [
                    {"name": "Collection", "value": "collection"},
                    {"name": "Event", "value": "event"},
                    {"name": "Group", "value": "group"},
                    {"name": "Member", "value": "member"},
                ],
            },
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "default": "get",
                "options": [
                    {"name": "Create", "value": "create"},
                    {"name": "Delete", "value": "delete"},
                    {"name": "Get", "value": "get"},
                    {"name": "Get All", "value": "getAll"},
                    {"name": "Get Groups", "value": "getGroups"},
                    {"name": "Get Members", "value": "getMembers"},
                    {"name": "Update", "value": "update"},
                    {"name": "Update Groups", "value": "updateGroups"},
                    {"name": "Update Members", "value": "updateMembers"},
                ],
            },
            _id_parameter("collection", "collectionId", "Collection ID", "delete", "get", "update"),
            _id_parameter(
                "group", "groupId", "Group ID",
                "delete", "get", "getMembers", "update", "updateMembers",
            ),
            _id_parameter(
                "member", "memberId", "Member ID",
                "delete", "get", "getGroups", "update", "updateGroups",
            ),
            *_return_all_parameters("collection"),
            *_return_all_parameters("event"),
            *_return_all_parameters("group"),
            *_return_all_parameters("member"),
            {
                "displayName": "Name",
                "name": "name",
                "type": "string",
                "default": "",
                "required": True,
                "displayOptions": _show("group", "create"),
            },
            {
                "displayName": "Type",
                "name": "type",
                "type": "options",
                "default": 2,
                "required": True,
                "options": MEMBER_TYPES,
                "displayOptions": _show("member", "create"),
            },
            {
                "displayName": "Email",
                "name": "email",
                "type": "string",
                "default": "",
                "required": True,
                "displayOptions": _show("member", "create"),
            },
            {**ACCESS_ALL_OPTION, "displayOptions": {
                "show": {"resource": ["group", "member"], "operation": ["create"]}
            }},
            {
                "displayName": "Additional Fields",
                "name": "additionalFields",
                "type": "collection",
                "placeholder": "Add Field",
                "default": {},
                "options": [COLLECTIONS_OPTION, EXTERNAL_ID_OPTION],
                "displayOptions": {
                    "show": {"resource": ["group", "member"], "operation": ["create"]}
                },
            },
            {
                "displayName": "Update Fields",
                "name": "updateFields",
                "type": "collection",
                "placeholder": "Add Field",
                "default": {},
                "options": [
                    ACCESS_ALL_OPTION,
                    COLLECTIONS_OPTION,
                    EXTERNAL_ID_OPTION,
                    {
                        "displayName": "Groups",
                        "name": "groups",
                        "type": "multiOptions",
                        "typeOptions": {"loadOptionsMethod": "getGroups"},
                        "default": [],
                    },
                    {"displayName": "Name", "name": "name", "type": "string", "default": ""},
                    {"displayName": "Type", "name": "type", "type": "options", "default": 2,
                     "options": MEMBER_TYPES},
                ],
                "displayOptions": {
                    "show": {"resource": ["collection", "group", "member"], "operation": ["update"]}
                },
            },
            {
                "displayName": "Member IDs",
                "name": "memberIds",
                "type": "string",
                "default": "",
                "description": "Comma-separated list of IDs of members to set in the group",
                "displayOptions": _show("group", "updateMembers"),
            },
            {
                "displayName": "Group IDs",
                "name": "groupIds",
                "type": "string",
                "default": "",
                "description": "Comma-separated list of IDs of groups to set for the member",
                "displayOptions": _show("member", "updateGroups"),
            },
            {
                "displayName": "Filters",
                "name": "filters",
                "type": "collection",
                "placeholder": "Add Filter",
                "default": {},
                "options": [
                    {"displayName": "Acting User ID", "name": "actingUserId",
                     "type": "string", "default": ""},
                    {"displayName": "End Date", "name": "end", "type": "dateTime", "default": ""},
                    {"displayName": "Item ID", "name": "itemID", "type": "string", "default": ""},
                    {"displayName": "Start Date", "name": "start", "type": "dateTime", "default": ""},
                ],
                "displayOptions": _show("event", "getAll"),
            },
        ],
        "credentials": [
            {"name": CREDENTIAL_TYPE, "required": True},
        ],
    }

    methods = {
        "loadOptions": {
            "getCollections": "get_collections",
            "getGroups": "get_groups",
        },
    }

    # ==== Load options ====

    def get_collections(self) -> List[NodePropertyOption]:
        return load_resource(self, "collections")

    def get_groups(self) -> List[NodePropertyOption]:
        return load_resource(self, "groups")

    # ==== Execution ====

    def execute(self) -> List[List[NodeExecutionData]]:
        items = self.get_input_data()
        token = get_access_token(self)

        return_items: List[NodeExecutionData] = []

        for i in range(len(items)):
            resource = self.get_node_parameter("resource", i, "collection")
            operation = self.get_node_parameter("operation", i, "get")
            handler = getattr(self, f"_{resource}_{operation}", None)

            try:
                if handler is None:
                    raise NodeOperationError(
                        f"The operation '{operation}' is not supported for resource '{resource}'",
                        node=self,
                        item_index=i,
                    )
                result = handler(i, token)
            except NodeOperationError as e:
                if not self.continue_on_fail:
                    raise
                logger.warning("Bitwarden %s/%s failed: %s", resource, operation, e.message)
                return_items.append({"json": {"error": e.message}, "pairedItem": {"item": i}})
                continue

            results = result if isinstance(result, list) else [result]
            return_items.extend({"json": r, "pairedItem": {"item": i}} for r in results)

        return [return_items]

    def _request(self, method: str, endpoint: str, token: str, body: Any = None, qs: Any = None) -> Any:
        response = bitwarden_api_request(self, method, endpoint, qs or {}, body or {}, token)
        # DELETE and PUT on id lists answer with an empty body
        return response if response else {"success": True}

    @staticmethod
    def _split_ids(value: Any) -> List[str]:
        if isinstance(value, list):
            return [str(v).strip() for v in value if str(v).strip()]
        return [part.strip() for part in str(value or "").split(",") if part.strip()]

    @staticmethod
    def _collection_refs(ids: List[str]) -> List[Dict[str, Any]]:
        return [{"id": collection_id, "ReadOnly": False} for collection_id in ids]

    # ---- collection ----

    def _collection_delete(self, i: int, token: str) -> Dict[str, Any]:
        collection_id = self.get_node_parameter("collectionId", i)
        return self._request("DELETE", f"/public/collections/{collection_id}", token)

    def _collection_get(self, i: int, token: str) -> Dict[str, Any]:
        collection_id = self.get_node_parameter("collectionId", i)
        return self._request("GET", f"/public/collections/{collection_id}", token)

    def _collection_getAll(self, i: int, token: str) -> List[Dict[str, Any]]:
        return handle_get_all(self, i, "GET", "/public/collections", {}, {}, token)

    def _collection_update(self, i: int, token: str) -> Dict[str, Any]:
        collection_id = self.get_node_parameter("collectionId", i)
        update_fields = self.get_node_parameter("updateFields", i, {}) or {}

        if not update_fields:
            raise NodeOperationError(
                "Please enter at least one field to update for the collection.",
                node=self,
                item_index=i,
            )

        body: Dict[str, Any] = {}
        if "groups" in update_fields:
            body["groups"] = self._collection_refs(self._split_ids(update_fields["groups"]))
        if "externalId" in update_fields:
            body["externalId"] = update_fields["externalId"]

        return self._request("PUT", f"/public/collections/{collection_id}", token, body=body)

    # ---- event ----

    def _event_getAll(self, i: int, token: str) -> List[Dict[str, Any]]:
        filters = self.get_node_parameter("filters", i, {}) or {}
        qs = {key: value for key, value in filters.items() if value not in (None, "")}
        return handle_get_all(self, i, "GET", "/public/events", qs, {}, token)

    # ---- group ----

    def _group_create(self, i: int, token: str) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "name": self.get_node_parameter("name", i),
            "AccessAll": bool(self.get_node_parameter("accessAll", i, False)),
        }
        additional_fields = self.get_node_parameter("additionalFields", i, {}) or {}
        if additional_fields.get("collections"):
            body["collections"] = self._collection_refs(
                self._split_ids(additional_fields["collections"])
            )
        if additional_fields.get("externalId"):
            body["externalId"] = additional_fields["externalId"]

        return self._request("POST", "/public/groups", token, body=body)

    def _group_delete(self, i: int, token: str) -> Dict[str, Any]:
        group_id = self.get_node_parameter("groupId", i)
        return self._request("DELETE", f"/public/groups/{group_id}", token)

    def _group_get(self, i: int, token: str) -> Dict[str, Any]:
        group_id = self.get_node_parameter("groupId", i)
        return self._request("GET", f"/public/groups/{group_id}", token)

    def _group_getAll(self, i: int, token: str) -> List[Dict[str, Any]]:
        return handle_get_all(self, i, "GET", "/public/groups", {}, {}, token)

    def _group_getMembers(self, i: int, token: str) -> List[Dict[str, Any]]:
        group_id = self.get_node_parameter("groupId", i)
        member_ids = bitwarden_api_request(
            self, "GET", f"/public/groups/{group_id}/member-ids", {}, {}, token
        )
        return [{"memberId": member_id} for member_id in member_ids or []]

    def _group_update(self, i: int, token: str) -> Dict[str, Any]:
        group_id = self.get_node_parameter("groupId", i)
        update_fields = self.get_node_parameter("updateFields", i, {}) or {}

        if not update_fields:
            raise NodeOperationError(
                "Please enter at least one field to update for the group.",
                node=self,
                item_index=i,
            )

        # The API replaces the whole group, so unchanged required fields come from the current one
        if "name" not in update_fields or "accessAll" not in update_fields:
            current = bitwarden_api_request(self, "GET", f"/public/groups/{group_id}", {}, {}, token)
            update_fields = {
                "name": current.get("name"),
                "accessAll": current.get("accessAll", False),
                **update_fields,
            }

        body: Dict[str, Any] = {
            "name": update_fields["name"],
            "AccessAll": bool(update_fields["accessAll"]),
        }
        if "collections" in update_fields:
            body["collections"] = self._collection_refs(self._split_ids(update_fields["collections"]))
        if "externalId" in update_fields:
            body["externalId"] = update_fields["externalId"]

        return self._request("PUT", f"/public/groups/{group_id}", token, body=body)

    def _group_updateMembers(self, i: int, token: str) -> Dict[str, Any]:
        group_id = self.get_node_parameter("groupId", i)
        member_ids = self._split_ids(self.get_node_parameter("memberIds", i, ""))
        return self._request(
            "PUT", f"/public/groups/{group_id}/member-ids", token, body={"memberIds": member_ids}
        )

    # ---- member ----

    def _member_create(self, i: int, token: str) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": self.get_node_parameter("type", i, 2),
            "email": self.get_node_parameter("email", i),
            "AccessAll": bool(self.get_node_parameter("accessAll", i, False)),
        }
        additional_fields = self.get_node_parameter("additionalFields", i, {}) or {}
        if additional_fields.get("collections"):
            body["collections"] = self._collection_refs(
                self._split_ids(additional_fields["collections"])
            )
        if additional_fields.get("externalId"):
            body["externalId"] = additional_fields["externalId"]

        return self._request("POST", "/public/members", token, body=body)

    def _member_delete(self, i: int, token: str) -> Dict[str, Any]:
        member_id = self.get_node_parameter("memberId", i)
        return self._request("DELETE", f"/public/members/{member_id}", token)

    def _member_get(self, i: int, token: str) -> Dict[str, Any]:
        member_id = self.get_node_parameter("memberId", i)
        return self._request("GET", f"/public/members/{member_id}", token)

    def _member_getAll(self, i: int, token: str) -> List[Dict[str, Any]]:
        return handle_get_all(self, i, "GET", "/public/members", {}, {}, token)

    def _member_getGroups(self, i: int, token: str) -> List[Dict[str, Any]]:
        member_id = self.get_node_parameter("memberId", i)
        group_ids = bitwarden_api_request(
            self, "GET", f"/public/members/{member_id}/group-ids", {}, {}, token
        )
        return [{"groupId": group_id} for group_id in group_ids or []]

    def _member_update(self, i: int, token: str) -> Dict[str, Any]:
        member_id = self.get_node_parameter("memberId", i)
        update_fields = self.get_node_parameter("updateFields", i, {}) or {}

        if not update_fields:
            raise NodeOperationError(
                "Please enter at least one field to update for the member.",
                node=self,
                item_index=i,
            )

        if "type" not in update_fields or "accessAll" not in update_fields:
            current = bitwarden_api_request(self, "GET", f"/public/members/{member_id}", {}, {}, token)
            update_fields = {
                "type": current.get("type"),
                "accessAll": current.get("accessAll", False),
                **update_fields,
            }

        body: Dict[str, Any] = {
            "type": update_fields["type"],
            "AccessAll": bool(update_fields["accessAll"]),
        }
        if "collections" in update_fields:
            body["collections"] = self._collection_refs(self._split_ids(update_fields["collections"]))
        if "externalId" in update_fields:
            body["externalId"] = update_fields["externalId"]

        return self._request("PUT", f"/public/members/{member_id}", token, body=body)

    def _member_updateGroups(self, i: int, token: str) -> Dict[str, Any]:
        member_id = self.get_node_parameter("memberId", i)
        group_ids = self._split_ids(self.get_node_parameter("groupIds", i, ""))
        return self._request(
            "PUT", f"/public/members/{member_id}/group-ids", token, body={"groupIds": group_ids}
        )
