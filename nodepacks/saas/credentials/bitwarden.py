"""
Bitwarden API credential: organization client id/secret exchanged for a
bearer token through the client-credentials grant.
"""
from typing import Any, Dict

from node_sdk import BaseCredential
from node_sdk.config import get_settings


class BitwardenApiCredential(BaseCredential):
    """Bitwarden organization API key"""

    name = "bitwardenApi"
    display_name = "Bitwarden API"
    documentation_url = "https://bitwarden.com/help/public-api/"
    properties = [
        {
            "name": "clientId",
            "displayName": "Client ID",
            "type": "string",
            "default": "",
            "required": True,
        },
        {
            "name": "clientSecret",
            "displayName": "Client Secret",
            "type": "string",
            "default": "",
            "required": True,
            "typeOptions": {"password": True},
        },
        {
            "name": "environment",
            "displayName": "Environment",
            "type": "options",
            "default": "cloudHosted",
            "options": [
                {"name": "Cloud-hosted", "value": "cloudHosted"},
                {"name": "Self-hosted", "value": "selfHosted"},
            ],
        },
        {
            "name": "domain",
            "displayName": "Self-hosted domain",
            "type": "string",
            "default": "",
            "required": True,
            "placeholder": "https://www.mydomain.com",
            "displayOptions": {"show": {"environment": ["selfHosted"]}},
        },
    ]

    def get_token_url(self) -> str:
        if self.data.get("environment", "cloudHosted") == "cloudHosted":
            return get_settings().bitwarden_cloud_identity_url
        return f"{str(self.data.get('domain', '')).rstrip('/')}/identity/connect/token"

    def test(self) -> Dict[str, Any]:
        """Request an organization token; success means the key pair is accepted."""
        settings = get_settings()
        result = self._probe(
            "POST",
            self.get_token_url(),
            "Bitwarden",
            data={
                "client_id": self.data.get("clientId"),
                "client_secret": self.data.get("clientSecret"),
                "grant_type": "client_credentials",
                "scope": "api.organization",
                "deviceName": settings.device_identifier,
                "deviceType": 2,
                "deviceIdentifier": settings.device_identifier,
            },
        )
        if result["success"] and not result["data"].get("access_token"):
            return {"success": False, "message": "Bitwarden returned no access token"}
        # Never hand the token back to the caller
        result.pop("data", None)
        return result
