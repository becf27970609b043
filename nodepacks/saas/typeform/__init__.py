"""Typeform webhook trigger."""

from .trigger import TypeformTriggerNode

__all__ = ["TypeformTriggerNode"]
