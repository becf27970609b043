"""
Phantombuster API credential.
"""
from typing import Any, Dict

from node_sdk import BaseCredential
from node_sdk.config import get_settings


class PhantombusterApiCredential(BaseCredential):
    """Phantombuster API key, sent as the X-Phantombuster-Key header"""

    name = "phantombusterApi"
    display_name = "Phantombuster API"
    documentation_url = "https://hub.phantombuster.com/reference"
    properties = [
        {
            "name": "apiKey",
            "displayName": "API Key",
            "type": "string",
            "default": "",
            "required": True,
            "typeOptions": {"password": True},
        },
    ]

    def get_auth_headers(self) -> Dict[str, str]:
        api_key = self.data.get("apiKey")
        if not api_key:
            raise ValueError("API key not found in credentials")
        return {"X-Phantombuster-Key": api_key}

    def test(self) -> Dict[str, Any]:
        validation = self.validate()
        if not validation["valid"]:
            return {"success": False, "message": validation["message"]}
        return self._probe(
            "GET",
            f"{get_settings().phantombuster_api_url}/agents/fetch-all",
            "Phantombuster",
            headers=self.get_auth_headers(),
        )
