"""Credential types used by the SaaS node pack."""

from .bitwarden import BitwardenApiCredential
from .formstack import FormstackApiCredential, FormstackOAuth2ApiCredential
from .phantombuster import PhantombusterApiCredential
from .typeform import TypeformApiCredential, TypeformOAuth2ApiCredential

__all__ = [
    "BitwardenApiCredential",
    "FormstackApiCredential",
    "FormstackOAuth2ApiCredential",
    "PhantombusterApiCredential",
    "TypeformApiCredential",
    "TypeformOAuth2ApiCredential",
]
