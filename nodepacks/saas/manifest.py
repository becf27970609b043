"""
SaaS Node Pack Manifest - Registration function for entry-points.
"""

from node_registry.models import NodePackManifest

from .bitwarden import BitwardenNode
from .credentials import (
    BitwardenApiCredential,
    FormstackApiCredential,
    FormstackOAuth2ApiCredential,
    PhantombusterApiCredential,
    TypeformApiCredential,
    TypeformOAuth2ApiCredential,
)
from .formstack import FormstackTriggerNode
from .phantombuster import PhantombusterNode
from .typeform import TypeformTriggerNode


# Node classes by type
NODE_CLASSES = {
    BitwardenNode.type: BitwardenNode,
    PhantombusterNode.type: PhantombusterNode,
    TypeformTriggerNode.type: TypeformTriggerNode,
    FormstackTriggerNode.type: FormstackTriggerNode,
}

# Credential classes by type name
CREDENTIAL_CLASSES = {
    credential.name: credential
    for credential in (
        BitwardenApiCredential,
        PhantombusterApiCredential,
        TypeformApiCredential,
        TypeformOAuth2ApiCredential,
        FormstackApiCredential,
        FormstackOAuth2ApiCredential,
    )
}


MANIFEST = NodePackManifest(
    name="saas",
    version="1.0.0",
    description="Connector nodes for Bitwarden, Phantombuster, Typeform and Formstack",
    author="saas-nodepack",
    license="MIT",
    nodes=list(NODE_CLASSES),
    credentials=list(CREDENTIAL_CLASSES),
    entry_point="nodepacks.saas",
)


def register_nodes():
    """
    Entry point function for node pack discovery.

    Returns tuple of (manifest, node_classes, credential_classes).
    """
    return MANIFEST, NODE_CLASSES, CREDENTIAL_CLASSES


__all__ = [
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
