"""
WebhookTriggerNode - base class for nodes started by a vendor webhook.

Lifecycle driven by the host:

1. On activation the host calls check_exists(); when it answers False the
   host calls create(), which registers the webhook with the vendor and
   stores the vendor's identifier in the node's static data.
2. Each incoming request is handed to webhook() through the context
   (body, headers, query) and the returned workflowData starts a run.
3. On deactivation the host calls delete(), which unregisters the webhook
   and clears the stored identifier.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional, TypedDict

from node_sdk.basenode import BaseNode, NodeExecutionData


logger = logging.getLogger(__name__)

WEBHOOK_ID_KEY = "webhookId"


class WebhookResponseData(TypedDict, total=False):
    """Result of handling one webhook request."""
    workflowData: List[List[NodeExecutionData]]
    webhookResponse: Any


class WebhookTriggerNode(BaseNode):
    """
    Trigger node backed by a webhook registered with a third-party vendor.

    Subclasses declare their route in description["webhooks"] and implement
    the lifecycle methods plus webhook().
    """

    @abstractmethod
    def check_exists(self) -> bool:
        """Return True when the vendor already calls our webhook URL."""

    @abstractmethod
    def create(self) -> bool:
        """Register the webhook with the vendor."""

    @abstractmethod
    def delete(self) -> bool:
        """Unregister the webhook; False when the vendor refused."""

    @abstractmethod
    def webhook(self) -> WebhookResponseData:
        """Translate an incoming vendor request into workflow items."""

    def execute(self) -> List[List[NodeExecutionData]]:
        """Run the trigger on the request currently held by the context."""
        return self.webhook().get("workflowData", [[]])

    # ==== Registration state ====

    def get_webhook_id(self) -> Optional[Any]:
        return self.get_workflow_static_data("node").get(WEBHOOK_ID_KEY)

    def store_webhook_id(self, webhook_id: Any) -> None:
        self.get_workflow_static_data("node")[WEBHOOK_ID_KEY] = webhook_id
        logger.info("Stored webhook id %s", webhook_id, extra=self.log_context())

    def clear_webhook_id(self) -> None:
        self.get_workflow_static_data("node").pop(WEBHOOK_ID_KEY, None)

    @classmethod
    def get_webhook_descriptions(cls) -> List[Dict[str, Any]]:
        return list(cls.description.get("webhooks", []))


__all__ = [
    "WEBHOOK_ID_KEY",
    "WebhookResponseData",
    "WebhookTriggerNode",
]
