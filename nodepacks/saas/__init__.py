"""
SaaS Node Pack - connectors for third-party SaaS APIs.

This pack provides:
- BitwardenNode: Organization collections, groups, members and events
- PhantombusterNode: Automation agents
- TypeformTriggerNode: Starts workflows on Typeform submissions
- FormstackTriggerNode: Starts workflows on Formstack submissions
"""

from .bitwarden import BitwardenNode
from .formstack import FormstackTriggerNode
from .phantombuster import PhantombusterNode
from .typeform import TypeformTriggerNode
from .manifest import CREDENTIAL_CLASSES, MANIFEST, NODE_CLASSES, register_nodes

__all__ = [
    "BitwardenNode",
    "PhantombusterNode",
    "TypeformTriggerNode",
    "FormstackTriggerNode",
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
