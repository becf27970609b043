"""Bitwarden organization management node."""

from .node import BitwardenNode

__all__ = ["BitwardenNode"]
