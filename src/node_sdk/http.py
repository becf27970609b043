"""
HTTP Client - Timeout-bounded HTTP requests for nodes.

All HTTP calls MUST use timeouts. This module provides a small wrapper
around requests with sensible defaults and structured responses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import requests
from requests.exceptions import Timeout, RequestException

from node_sdk.config import get_settings


logger = logging.getLogger(__name__)


class NodeTimeoutError(Exception):
    """Raised when an HTTP request times out."""

    def __init__(self, message: str, timeout: float, url: str):
        self.timeout = timeout
        self.url = url
        super().__init__(message)


class HttpApiError(Exception):
    """Error from HTTP request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
        url: Optional[str] = None,
        method: Optional[str] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        self.url = url
        self.method = method
        super().__init__(message)


class HttpResponse:
    """
    Wrapper for HTTP response with convenient accessors.
    """

    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def text(self) -> str:
        return self._response.text

    def json(self) -> Any:
        """Parse response as JSON."""
        return self._response.json()

    def body(self) -> Any:
        """
        Parsed body: JSON when the payload decodes, the raw text otherwise,
        and an empty dict for empty payloads (e.g. 204 No Content).
        """
        if not self._response.content:
            return {}
        try:
            return self._response.json()
        except ValueError:
            return self.text

    @property
    def ok(self) -> bool:
        """True if status code is 2xx."""
        return self._response.ok

    def raise_for_status(self) -> None:
        """Raise HttpApiError if status code indicates error."""
        if not self.ok:
            raise HttpApiError(
                message=f"HTTP {self.status_code}: {self._response.reason}",
                status_code=self.status_code,
                response_body=self.body(),
                url=str(self._response.url),
                method=self._response.request.method if self._response.request else None,
            )


class HttpClient:
    """
    HTTP client that never sends a request without a timeout.

    Vendor helpers build their own URLs and auth headers; the client only
    bounds the call and turns transport failures into SDK errors.

    Usage:
        client = HttpClient(timeout=10)
        response = client.get("https://api.typeform.com/me")
        data = response.body()
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or get_settings().http_timeout

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Union[Dict[str, Any], str, bytes]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> HttpResponse:
        """
        Make HTTP request with timeout enforcement.

        Empty ``params`` and ``json`` mappings are not sent at all, so a GET
        never carries an empty JSON body.

        Raises:
            NodeTimeoutError: If request times out
            HttpApiError: If the request could not be sent
        """
        request_timeout = timeout or self.timeout

        if not params:
            params = None
        if isinstance(json, dict) and not json:
            json = None

        logger.debug("HTTP %s %s params=%s", method, url, params)

        try:
            response = requests.request(
                method=method,
                url=url,
                params=params,
                json=json,
                data=data,
                headers=headers,
                timeout=request_timeout,
                **kwargs,
            )
            return HttpResponse(response)

        except Timeout as e:
            raise NodeTimeoutError(
                message=f"Request timed out after {request_timeout}s",
                timeout=request_timeout,
                url=url,
            ) from e

        except RequestException as e:
            raise HttpApiError(
                message=f"Request failed: {e}",
                url=url,
                method=method,
            ) from e

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> HttpResponse:
        return self.request("GET", url, params=params, **kwargs)

    def post(self, url: str, json: Any = None, **kwargs: Any) -> HttpResponse:
        return self.request("POST", url, json=json, **kwargs)
