"""
Formstack credentials: access token or OAuth2.
"""
from typing import Any, Dict

from node_sdk import BaseCredential, OAuth2Credential
from node_sdk.config import get_settings


def _forms_url() -> str:
    return f"{get_settings().formstack_api_url.rstrip('/')}/form.json?per_page=1"


class FormstackApiCredential(BaseCredential):
    """Formstack access token"""

    name = "formstackApi"
    display_name = "Formstack API"
    documentation_url = "https://developers.formstack.com/reference/api-overview"
    properties = [
        {
            "name": "accessToken",
            "displayName": "Access Token",
            "type": "string",
            "default": "",
            "required": True,
            "typeOptions": {"password": True},
        },
    ]

    def test(self) -> Dict[str, Any]:
        return self._probe(
            "GET",
            _forms_url(),
            "Formstack",
            headers={"Authorization": f"Bearer {self.data.get('accessToken')}"},
        )


class FormstackOAuth2ApiCredential(OAuth2Credential):
    """Formstack OAuth2 application"""

    name = "formstackOAuth2Api"
    display_name = "Formstack OAuth2 API"
    documentation_url = "https://developers.formstack.com/reference/api-overview"
    auth_url = "https://www.formstack.com/api/v2/oauth2/authorize"
    access_token_url = "https://www.formstack.com/api/v2/oauth2/token"
    scope = ""
    properties = []

    def test(self) -> Dict[str, Any]:
        validation = self.validate()
        if not validation["valid"]:
            return {"success": False, "message": validation["message"]}
        return self.probe_with_token("GET", _forms_url(), "Formstack")
