"""
Typeform credentials: personal access token or OAuth2.
"""
from typing import Any, Dict

from node_sdk import BaseCredential, OAuth2Credential
from node_sdk.config import get_settings


def _me_url() -> str:
    return f"{get_settings().typeform_api_url.rstrip('/')}/me"


class TypeformApiCredential(BaseCredential):
    """Typeform personal access token"""

    name = "typeformApi"
    display_name = "Typeform API"
    documentation_url = "https://developer.typeform.com/get-started/personal-access-token/"
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
            _me_url(),
            "Typeform",
            headers={"Authorization": f"bearer {self.data.get('accessToken')}"},
        )


class TypeformOAuth2ApiCredential(OAuth2Credential):
    """Typeform OAuth2 application"""

    name = "typeformOAuth2Api"
    display_name = "Typeform OAuth2 API"
    documentation_url = "https://developer.typeform.com/get-started/applications/"
    auth_url = "https://api.typeform.com/oauth/authorize"
    access_token_url = "https://api.typeform.com/oauth/token"
    scope = "webhooks:write,webhooks:read,forms:read"
    properties = []

    def test(self) -> Dict[str, Any]:
        validation = self.validate()
        if not validation["valid"]:
            return {"success": False, "message": validation["message"]}
        return self.probe_with_token("GET", _me_url(), "Typeform")
