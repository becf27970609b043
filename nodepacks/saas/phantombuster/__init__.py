"""Phantombuster agent node."""

from .node import PhantombusterNode

__all__ = ["PhantombusterNode"]
