"""
Typeform Trigger - starts a workflow on a Typeform form submission.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, List

from node_sdk import (
    NodeApiError,
    NodeOperationError,
    NodePropertyOption,
    WebhookResponseData,
    WebhookTriggerNode,
)
from node_sdk.config import get_settings

from .generic import (
    OAUTH2_CREDENTIAL_TYPE,
    TOKEN_CREDENTIAL_TYPE,
    api_request,
    get_forms,
    simplify_answers,
)


logger = logging.getLogger(__name__)


def _auth_credential(name: str, method: str) -> Dict[str, Any]:
    return {
        "name": name,
        "required": True,
        "displayOptions": {"show": {"authentication": [method]}},
    }


class TypeformTriggerNode(WebhookTriggerNode):
    """Receives Typeform form responses through a registered webhook."""

    type = "typeformTrigger"
    version = 1

    description = {
        "displayName": "Typeform Trigger",
        "name": "typeformTrigger",
        "icon": "file:typeform.svg",
        "group": ["trigger"],
        "version": 1,
        "subtitle": '=Form ID: {{$parameter["formId"]}}',
        "description": "Starts the workflow on a Typeform form submission.",
        "defaults": {"name": "Typeform Trigger", "color": "#404040"},
        "inputs": [],
        "outputs": ["main"],
        "webhooks": [
            {
                "name": "default",
                "httpMethod": "POST",
                "responseMode": "onReceived",
                "path": "webhook",
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
                "displayName": "Simplify Answers",
                "name": "simplifyAnswers",
                "type": "boolean",
                "default": True,
                "description": 'Converts the answers to a key:value pair ("FIELD_TITLE":"USER_ANSWER") to be easily processable',
            },
            {
                "displayName": "Only Answers",
                "name": "onlyAnswers",
                "type": "boolean",
                "default": True,
                "description": "Returns only the answers of the form and not any of the other data",
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

        response = api_request(self, "GET", f"forms/{form_id}/webhooks")

        for item in response.get("items") or []:
            if item.get("form_id") == form_id and item.get("url") == webhook_url:
                self.store_webhook_id(item.get("tag"))
                return True

        return False

    def create(self) -> bool:
        webhook_url = self.get_node_webhook_url("default")
        form_id = self.get_node_parameter("formId")
        tag = f"{get_settings().webhook_tag_prefix}-{secrets.token_hex(6)}"

        # TODO: verify the typeform-signature header once the raw request body is exposed
        body = {
            "url": webhook_url,
            "enabled": True,
            "verify_ssl": True,
        }
        api_request(self, "PUT", f"forms/{form_id}/webhooks/{tag}", body)

        self.store_webhook_id(tag)
        return True

    def delete(self) -> bool:
        form_id = self.get_node_parameter("formId")
        tag = self.get_webhook_id()

        if tag is not None:
            try:
                api_request(self, "DELETE", f"forms/{form_id}/webhooks/{tag}")
            except NodeOperationError as e:
                logger.warning("Could not delete Typeform webhook %s: %s", tag, e.message, extra=self.log_context())
                return False
            self.clear_webhook_id()

        return True

    # ==== Request handling ====

    def webhook(self) -> WebhookResponseData:
        body_data = self.get_body_data()

        simplify = self.get_node_parameter("simplifyAnswers", 0, True)
        only_answers = self.get_node_parameter("onlyAnswers", 0, True)

        form_response = body_data.get("form_response")
        if (
            not isinstance(form_response, dict)
            or form_response.get("definition") is None
            or form_response.get("answers") is None
        ):
            raise NodeApiError(
                "Expected definition/answers data is missing!",
                node=self,
                response_body=body_data,
            )

        answers = form_response["answers"]

        if simplify:
            converted = simplify_answers(form_response["definition"], answers)
            if only_answers:
                return {"workflowData": [self.return_json_array(converted)]}
            # Keep the full payload but with the answers collapsed
            body_data = {**body_data, "form_response": {**form_response, "answers": converted}}
        elif only_answers:
            # One item per raw answer; a list as item json would not fit the host item format
            return {"workflowData": [self.return_json_array(answers)]}

        return {"workflowData": [self.return_json_array(body_data)]}


__all__ = ["TypeformTriggerNode"]
