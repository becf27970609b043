"""Observability package."""
from node_sdk.observability.logging import (
    NodeContextFilter,
    setup_logging,
    with_node_context,
)

__all__ = ["NodeContextFilter", "setup_logging", "with_node_context"]
