"""
Phantombuster Node - list, inspect, launch and delete automation agents.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from node_sdk import BaseNode, NodeExecutionData, NodeOperationError, NodePropertyOption

from .generic import CREDENTIAL_TYPE, phantombuster_api_request, validate_json


logger = logging.getLogger(__name__)


def _show(*operations: str, **extra: List[Any]) -> Dict[str, Any]:
    return {"show": {"resource": ["agent"], "operation": list(operations), **extra}}


class PhantombusterNode(BaseNode):
    """
    Phantombuster - cloud automation agents ("phantoms").

    Operations on resource 'agent': delete, get, getAll, getOutput, launch.
    """

    type = "phantombuster"
    version = 1

    description = {
        "displayName": "Phantombuster",
        "name": "phantombuster",
        "icon": "file:phantombuster.png",
        "group": ["input"],
        "subtitle": '={{$parameter["operation"] + ": " + $parameter["resource"]}}',
        "description": "Consume Phantombuster API",
        "version": 1,
        "defaults": {"name": "Phantombuster", "color": "#62d0ff"},
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Resource",
                "name": "resource",
                "type": "options",
                "default": "agent",
                "options": [{"name": "Agent", "value": "agent"}],
            },
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "default": "launch",
                "options": [
                    {"name": "Delete", "value": "delete", "description": "Delete an agent by ID"},
                    {"name": "Get", "value": "get", "description": "Get an agent by ID"},
                    {"name": "Get All", "value": "getAll", "description": "Get all agents of the current user's organization"},
                    {"name": "Get Output", "value": "getOutput", "description": "Get the output of the most recent container of an agent"},
                    {"name": "Launch", "value": "launch", "description": "Add an agent to the launch queue"},
                ],
                "displayOptions": {"show": {"resource": ["agent"]}},
            },
            {
                "displayName": "Agent ID",
                "name": "agentId",
                "type": "options",
                "typeOptions": {"loadOptionsMethod": "getAgents"},
                "default": "",
                "required": True,
                "displayOptions": _show("delete", "get", "getOutput", "launch"),
            },
            {
                "displayName": "Return All",
                "name": "returnAll",
                "type": "boolean",
                "default": False,
                "description": "Whether to return all results or only up to a given limit",
                "displayOptions": _show("getAll"),
            },
            {
                "displayName": "Limit",
                "name": "limit",
                "type": "number",
                "default": 50,
                "typeOptions": {"minValue": 1, "maxValue": 100},
                "description": "Max number of results to return",
                "displayOptions": _show("getAll", returnAll=[False]),
            },
            {
                "displayName": "Resolve Data",
                "name": "resolveData",
                "type": "boolean",
                "default": True,
                "description": "By default the output is presented as string. If this option gets activated, it will resolve the data automatically.",
                "displayOptions": _show("getOutput", "launch"),
            },
            {
                "displayName": "JSON Parameters",
                "name": "jsonParameters",
                "type": "boolean",
                "default": False,
                "displayOptions": _show("launch"),
            },
            {
                "displayName": "Additional Fields",
                "name": "additionalFields",
                "type": "collection",
                "placeholder": "Add Field",
                "default": {},
                "displayOptions": _show("launch"),
                "options": [
                    {
                        "displayName": "Arguments (JSON)",
                        "name": "argumentsJson",
                        "type": "json",
                        "default": "",
                        "displayOptions": {"show": {"/jsonParameters": [True]}},
                    },
                    {
                        "displayName": "Arguments",
                        "name": "argumentsUi",
                        "type": "fixedCollection",
                        "placeholder": "Add Argument",
                        "typeOptions": {"multipleValues": True},
                        "default": {},
                        "displayOptions": {"show": {"/jsonParameters": [False]}},
                        "options": [
                            {
                                "name": "argumentValues",
                                "displayName": "Argument",
                                "values": [
                                    {"displayName": "Key", "name": "key", "type": "string", "default": ""},
                                    {"displayName": "Value", "name": "value", "type": "string", "default": ""},
                                ],
                            },
                        ],
                    },
                    {
                        "displayName": "Bonus Argument (JSON)",
                        "name": "bonusArgumentJson",
                        "type": "json",
                        "default": "",
                        "displayOptions": {"show": {"/jsonParameters": [True]}},
                    },
                    {
                        "displayName": "Bonus Argument",
                        "name": "bonusArgumentUi",
                        "type": "fixedCollection",
                        "placeholder": "Add Argument",
                        "typeOptions": {"multipleValues": True},
                        "default": {},
                        "displayOptions": {"show": {"/jsonParameters": [False]}},
                        "options": [
                            {
                                "name": "bonusArgumentValue",
                                "displayName": "Argument",
                                "values": [
                                    {"displayName": "Key", "name": "key", "type": "string", "default": ""},
                                    {"displayName": "Value", "name": "value", "type": "string", "default": ""},
                                ],
                            },
                        ],
                    },
                    {
                        "displayName": "Manual Launch",
                        "name": "manualLaunch",
                        "type": "boolean",
                        "default": False,
                        "description": "If set, the agent will be considered as launched manually",
                    },
                    {
                        "displayName": "Save Argument",
                        "name": "saveArgument",
                        "type": "boolean",
                        "default": False,
                        "description": "If true, argument will be saved as the default launch options for the agent",
                    },
                ],
            },
        ],
        "credentials": [
            {"name": CREDENTIAL_TYPE, "required": True},
        ],
    }

    methods = {
        "loadOptions": {
            "getAgents": "get_agents",
        },
    }

    # ==== Load options ====

    def get_agents(self) -> List[NodePropertyOption]:
        agents = phantombuster_api_request(self, "GET", "/agents/fetch-all") or []
        return [{"name": agent.get("name"), "value": agent.get("id")} for agent in agents]

    # ==== Execution ====

    def execute(self) -> List[List[NodeExecutionData]]:
        items = self.get_input_data()
        return_items: List[NodeExecutionData] = []

        operations = {
            "delete": self._delete,
            "get": self._get,
            "getAll": self._get_all,
            "getOutput": self._get_output,
            "launch": self._launch,
        }

        for i in range(len(items)):
            resource = self.get_node_parameter("resource", i, "agent")
            operation = self.get_node_parameter("operation", i, "launch")

            try:
                if resource != "agent" or operation not in operations:
                    raise NodeOperationError(
                        f"The operation '{operation}' is not supported for resource '{resource}'",
                        node=self,
                        item_index=i,
                    )
                result = operations[operation](i)
            except NodeOperationError as e:
                if not self.continue_on_fail:
                    raise
                logger.warning("Phantombuster %s failed: %s", operation, e.message)
                return_items.append({"json": {"error": e.message}, "pairedItem": {"item": i}})
                continue

            results = result if isinstance(result, list) else [result]
            return_items.extend({"json": r, "pairedItem": {"item": i}} for r in results)

        return [return_items]

    def _delete(self, i: int) -> Dict[str, Any]:
        agent_id = self.get_node_parameter("agentId", i)
        phantombuster_api_request(self, "POST", "/agents/delete", body={"id": agent_id})
        return {"success": True}

    def _get(self, i: int) -> Dict[str, Any]:
        agent_id = self.get_node_parameter("agentId", i)
        return phantombuster_api_request(self, "GET", "/agents/fetch", qs={"id": agent_id})

    def _get_all(self, i: int) -> List[Dict[str, Any]]:
        agents = phantombuster_api_request(self, "GET", "/agents/fetch-all") or []
        if self.get_node_parameter("returnAll", i, False):
            return agents
        limit = int(self.get_node_parameter("limit", i, 50))
        return agents[:limit]

    def _get_output(self, i: int) -> Dict[str, Any]:
        agent_id = self.get_node_parameter("agentId", i)
        output = phantombuster_api_request(self, "GET", "/agents/fetch-output", qs={"id": agent_id})

        if not self.get_node_parameter("resolveData", i, True):
            return output

        container = phantombuster_api_request(
            self,
            "GET",
            "/containers/fetch-result-object",
            qs={"id": output.get("containerId")},
        )
        result_object = container.get("resultObject")
        if result_object is None:
            return {}
        if isinstance(result_object, str):
            return validate_json(result_object, "Result object")
        return result_object

    def _launch(self, i: int) -> Dict[str, Any]:
        agent_id = self.get_node_parameter("agentId", i)
        json_parameters = self.get_node_parameter("jsonParameters", i, False)
        additional_fields = self.get_node_parameter("additionalFields", i, {}) or {}

        body: Dict[str, Any] = {"id": agent_id}

        if json_parameters:
            if additional_fields.get("argumentsJson"):
                body["argument"] = validate_json(additional_fields["argumentsJson"], "Arguments")
            if additional_fields.get("bonusArgumentJson"):
                body["bonusArgument"] = validate_json(
                    additional_fields["bonusArgumentJson"], "Bonus Argument"
                )
        else:
            arguments = self._key_values(additional_fields.get("argumentsUi"), "argumentValues")
            if arguments:
                body["argument"] = arguments
            bonus = self._key_values(additional_fields.get("bonusArgumentUi"), "bonusArgumentValue")
            if bonus:
                body["bonusArgument"] = bonus

        for flag in ("manualLaunch", "saveArgument"):
            if flag in additional_fields:
                body[flag] = bool(additional_fields[flag])

        launched = phantombuster_api_request(self, "POST", "/agents/launch", body=body)

        if not self.get_node_parameter("resolveData", i, True):
            return launched

        return phantombuster_api_request(
            self, "GET", "/containers/fetch", qs={"id": launched.get("containerId")}
        )

    @staticmethod
    def _key_values(ui: Any, key: str) -> Dict[str, Any]:
        entries = (ui or {}).get(key) or []
        return {entry["key"]: entry.get("value") for entry in entries if entry.get("key")}


__all__ = ["PhantombusterNode"]
