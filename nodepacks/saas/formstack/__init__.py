"""Formstack webhook trigger."""

from .generic import FormstackFieldFormat
from .trigger import FormstackTriggerNode

__all__ = ["FormstackFieldFormat", "FormstackTriggerNode"]
