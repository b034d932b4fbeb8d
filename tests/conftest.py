"""Shared fixtures: settings, mock loggers, sessions and streamed HTTP responses."""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from api_console.config import AppSettings

TEST_API_URL = "https://api.example.test/api/hi"


@pytest.fixture
def settings():
    return AppSettings(
        tenant_id="00000000-0000-0000-0000-000000000001",
        client_id="00000000-0000-0000-0000-000000000002",
        api_url=TEST_API_URL,
        scopes=["api://00000000-0000-0000-0000-000000000002/api.access"],
        redirect_uri="http://localhost:8400",
    )


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


def make_response(status_code=200, body=b"", reason="OK", encoding="utf-8", chunks=None, headers=None):
    """Build a MagicMock standing in for a streamed requests.Response."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = headers if headers is not None else {}
    response.reason = reason
    response.encoding = encoding
    if isinstance(body, str):
        body = body.encode("utf-8")
    response.iter_content.return_value = iter(chunks if chunks is not None else [body])
    return response


@pytest.fixture
def mock_session():
    return MagicMock(spec=requests.Session)


CONFIG_ENV_KEYS = ("AZURE_TENANT_ID", "AZURE_CLIENT_ID", "API_URL", "API_SCOPES", "REDIRECT_URI", "API_CONSOLE_CONFIG")


@pytest.fixture
def clean_env():
    """Strip config override variables so tests only see the file they write."""
    env = {k: v for k, v in os.environ.items() if k not in CONFIG_ENV_KEYS}
    with patch.dict(os.environ, env, clear=True):
        yield
