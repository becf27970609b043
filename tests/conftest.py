"""Pytest configuration and fixtures."""
import json
import os
from typing import Any, Dict, List, Optional
from unittest.mock import Mock, patch

import pytest

from node_sdk import NodeExecutionContext
from node_sdk.config import reset_settings

# Set test environment variables
os.environ["NODEPACK_ENV"] = "test"
os.environ["NODEPACK_LOG_JSON"] = "false"

WEBHOOK_URL = "https://host.example.com/webhook/abc/webhook"


def make_response(payload: Any = None, status_code: int = 200, method: str = "GET") -> Mock:
    """Build a requests.Response stand-in carrying a JSON payload."""
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = "OK" if response.ok else "Error"
    response.url = "https://api.example.com"
    response.request = Mock(method=method)
    response.headers = {"Content-Type": "application/json"}

    if payload is None:
        response.content = b""
        response.text = ""
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.text = json.dumps(payload)
        response.content = response.text.encode()
        response.json.return_value = payload
    return response


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached globally; every test starts from the environment."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def mock_request():
    """Patch the single outgoing HTTP call used by every node."""
    with patch("node_sdk.http.requests.request") as request:
        yield request


@pytest.fixture
def make_node():
    """Instantiate a node class wired to a fresh execution context."""

    def _make(
        node_class,
        parameters: Optional[Dict[str, Any]] = None,
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
        input_data: Optional[List[Dict[str, Any]]] = None,
        **context_kwargs: Any,
    ):
        context_kwargs.setdefault("webhook_urls", {"default": WEBHOOK_URL})
        node = node_class()
        node.set_context(
            NodeExecutionContext(
                parameters=parameters or {},
                credentials=credentials or {},
                input_data=input_data,
                **context_kwargs,
            )
        )
        return node

    return _make


def request_kwargs(mock_request: Mock, call_index: int = -1) -> Dict[str, Any]:
    """Keyword arguments of one recorded requests.request call."""
    return mock_request.call_args_list[call_index].kwargs
