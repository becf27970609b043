"""
Base credential class that all credential types should inherit from.
"""
from typing import Any, ClassVar, Dict, List, Optional

import requests

from node_sdk.config import get_settings


class BaseCredential:
    """Base class for all credential types"""

    # Class variables to be overridden by subclasses
    name: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    documentation_url: ClassVar[Optional[str]] = None
    properties: ClassVar[List[Dict[str, Any]]] = []

    def __init__(self, data: Dict[str, Any]):
        """
        Initialize with credential data

        Args:
            data: Dictionary containing credential values
        """
        self.data = data

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get the credential type definition for registration"""
        return {
            "name": cls.name,
            "display_name": cls.display_name,
            "documentation_url": cls.documentation_url,
            "properties": cls.properties,
        }

    def test(self) -> Dict[str, Any]:
        """
        Test if the credential is valid

        Returns:
            Dictionary with test results (success, message)
        """
        raise NotImplementedError("Test method not implemented")

    def validate(self) -> Dict[str, Any]:
        """
        Validate that all required properties are provided

        Returns:
            Dictionary with validation results
        """
        missing_fields = []

        for prop in self.properties:
            if not prop.get("required", False) or self.data.get(prop["name"]):
                continue
            # Fields hidden by displayOptions do not apply to this credential
            shown = prop.get("displayOptions", {}).get("show", {})
            if all(self.data.get(key) in values for key, values in shown.items()):
                missing_fields.append(prop["name"])

        if missing_fields:
            return {
                "valid": False,
                "message": f"Missing required fields: {', '.join(missing_fields)}"
            }

        return {"valid": True}

    def _probe(
        self,
        method: str,
        url: str,
        vendor: str,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """
        Call a cheap authenticated endpoint and report whether it accepted us.

        On success the parsed body is returned under "data".
        """
        validation = self.validate()
        if not validation["valid"]:
            return {"success": False, "message": validation["message"]}

        try:
            response = requests.request(
                method, url, timeout=get_settings().http_timeout, **kwargs
            )
        except requests.Timeout:
            return {
                "success": False,
                "message": "Connection timeout. Please check your network or server URL."
            }
        except requests.RequestException as e:
            return {"success": False, "message": f"Connection error: {str(e)}"}

        if response.status_code in (401, 403):
            return {
                "success": False,
                "message": f"{vendor} rejected the credentials ({response.status_code})."
            }
        if not response.ok:
            return {
                "success": False,
                "message": f"{vendor} API error: {response.status_code} - {response.text}"
            }

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}
        return {
            "success": True,
            "message": f"Successfully connected to {vendor}",
            "data": data,
        }


class OAuth2Credential(BaseCredential):
    """
    OAuth2 authorization-code credential.

    The host runs the consent flow and stores the result in oauthTokenData;
    test() only checks that token against the vendor.
    """

    auth_url: ClassVar[str] = ""
    access_token_url: ClassVar[str] = ""
    scope: ClassVar[str] = ""

    @classmethod
    def oauth2_properties(cls) -> List[Dict[str, Any]]:
        return [
            {"name": "grantType", "displayName": "Grant Type", "type": "hidden",
             "default": "authorizationCode"},
            {"name": "authUrl", "displayName": "Authorization URL", "type": "hidden",
             "default": cls.auth_url, "required": True},
            {"name": "accessTokenUrl", "displayName": "Access Token URL", "type": "hidden",
             "default": cls.access_token_url, "required": True},
            {"name": "clientId", "displayName": "Client ID", "type": "string",
             "default": "", "required": True},
            {"name": "clientSecret", "displayName": "Client Secret", "type": "string",
             "default": "", "required": True, "typeOptions": {"password": True}},
            {"name": "scope", "displayName": "Scope", "type": "hidden", "default": cls.scope},
            {"name": "authQueryParameters", "displayName": "Auth URI Query Parameters",
             "type": "hidden", "default": ""},
            {"name": "authentication", "displayName": "Authentication", "type": "hidden",
             "default": "header"},
        ]

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        definition = super().get_definition()
        definition["properties"] = cls.oauth2_properties() + list(cls.properties)
        definition["extends"] = ["oAuth2Api"]
        return definition

    def validate(self) -> Dict[str, Any]:
        # authUrl/accessTokenUrl are fixed by the class, only the client pair is user input
        missing = [key for key in ("clientId", "clientSecret") if not self.data.get(key)]
        if missing:
            return {"valid": False, "message": f"Missing required fields: {', '.join(missing)}"}
        return {"valid": True}

    def get_access_token(self) -> Optional[str]:
        return (self.data.get("oauthTokenData") or {}).get("access_token")

    def probe_with_token(self, method: str, url: str, vendor: str) -> Dict[str, Any]:
        access_token = self.get_access_token()
        if not access_token:
            return {
                "success": False,
                "message": "No OAuth2 access token stored. Connect the account first."
            }
        return self._probe(method, url, vendor, headers={"Authorization": f"Bearer {access_token}"})
