"""
Formstack Trigger - starts a workflow on a Formstack form submission.

Formstack only posts the submission identifiers, so each request is
resolved into field values with one or two follow-up API calls.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from node_sdk import (
    NodeOperationError,
    NodePropertyOption,
    WebhookResponseData,
    WebhookTriggerNode,
)

from .generic import (
    OAUTH2_CREDENTIAL_TYPE,
    TOKEN_CREDENTIAL_TYPE,
    FormstackFieldFormat,
    api_request,
    get_fields,
    get_forms,
    get_submission,
)


logger = logging.getLogger(__name__)


def _auth_credential(name: str, method: str) -> Dict[str, Any]:
    return {
        "name": name,
        "required": True,
        "displayOptions": {"show": {"authentication": [method]}},
    }


class FormstackTriggerNode(WebhookTriggerNode):
    """Receives Formstack submissions through a registered webhook."""

    type = "formstackTrigger"
    version = 1

    description = {
        "displayName": "Formstack Trigger",
        "name": "formstackTrigger",
        "icon": "file:formstack.svg",
        "group": ["trigger"],
        "version": 1,
        "subtitle": '=Form ID: {{$parameter["formId"]}}',
        "description": "Starts the workflow on a Formstack form submission.",
        "defaults": {"name": "Formstack Trigger", "color": "#21b573"},
        "inputs": [],
        "outputs": ["main"],
        "webhooks": [
            {
                "name": "default",
                "httpMethod": "POST",
                "responseMode": "onReceived",
                "path": "formstack-webhook",
            },
        ],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Authentication",
                "name": "authentication",
                "type": "options",
                "options": [
                    {"name": "Access Token", "value": "accessToken"},
                    {"name": "OAuth2", "value": "oAuth2"},
                ],
                "default": "accessToken",
            },
            {
                "displayName": "Form",
                "name": "formId",
                "type": "options",
                "typeOptions": {"loadOptionsMethod": "getForms"},
                "options": [],
                "default": "",
                "required": True,
                "description": "Form which should trigger workflow on submission",
            },
            {
                "displayName": "Field Format",
                "name": "fieldFormat",
                "type": "options",
                "options": [
                    {"name": "ID", "value": FormstackFieldFormat.ID.value},
                    {"name": "Label", "value": FormstackFieldFormat.LABEL.value},
                    {"name": "Name", "value": FormstackFieldFormat.NAME.value},
                ],
                "default": FormstackFieldFormat.ID.value,
                "description": "Whether to use the ID, Name or Label as the field key / column header",
            },
        ],
        "credentials": [
            _auth_credential(TOKEN_CREDENTIAL_TYPE, "accessToken"),
            _auth_credential(OAUTH2_CREDENTIAL_TYPE, "oAuth2"),
        ],
    }

    methods = {
        "loadOptions": {
            "getForms": "get_forms",
        },
    }

    def get_forms(self) -> List[NodePropertyOption]:
        return get_forms(self)

    # ==== Webhook lifecycle ====

    def check_exists(self) -> bool:
        webhook_url = self.get_node_webhook_url("default")
        form_id = self.get_node_parameter("formId")
        webhook_id = self.get_webhook_id()

        response = api_request(self, "GET", f"form/{form_id}/webhook.json")

        if webhook_id is None:
            return False

        for item in response.get("webhooks") or []:
            if str(item.get("id")) == str(webhook_id) and item.get("url") == webhook_url:
                return True

        return False

    def create(self) -> bool:
        webhook_url = self.get_node_webhook_url("default")
        form_id = self.get_node_parameter("formId")

        # TODO: register a handshake key and check it on incoming requests
        body = {
            "url": webhook_url,
            "standardize_field_values": True,
            "include_field_type": True,
            "content_type": "json",
        }
        response = api_request(self, "POST", f"form/{form_id}/webhook.json", body)

        self.store_webhook_id(response.get("id"))
        return True

    def delete(self) -> bool:
        webhook_id = self.get_webhook_id()

        if webhook_id is not None:
            try:
                api_request(self, "DELETE", f"webhook/{webhook_id}.json")
            except NodeOperationError as e:
                logger.warning("Could not delete Formstack webhook %s: %s", webhook_id, e.message, extra=self.log_context())
                return False
            self.clear_webhook_id()

        return True

    # ==== Request handling ====

    def webhook(self) -> WebhookResponseData:
        body_data = self.get_body_data()
        field_format = FormstackFieldFormat(
            self.get_node_parameter("fieldFormat", 0, FormstackFieldFormat.ID.value)
        )

        submission = get_submission(self, body_data.get("UniqueID"))

        data: Dict[str, Any] = {}
        if field_format is FormstackFieldFormat.ID:
            for form_field in submission:
                data[form_field["field"]] = form_field.get("value")
        else:
            fields = get_fields(self, body_data.get("FormID"))
            for form_field in submission:
                field_id = str(form_field["field"])
                key = fields.get(field_id, {}).get(field_format.value, field_id)
                data[key] = form_field.get("value")

        return {"workflowData": [self.return_json_array(data)]}


__all__ = ["FormstackTriggerNode"]
