"""Minimal client for the protected API endpoint.

Responsibilities:
 - Attach the access token as a Bearer credential on the outgoing request.
 - Issue a GET to the configured API URL and read the full body (streamed, so cancellation is
   honored between chunks).
 - Reject non-success status codes with a descriptive ApiError.
 - Pretty-print JSON bodies; pass anything else through untouched.

The requests.Session is shared for connection pooling, so the Authorization header is passed per
request and the session's default headers are never modified.
"""

import json
import logging
from typing import Optional

import charset_normalizer
import requests

from .cancellation import CancellationToken
from .config import AppSettings
from .exceptions import ApiError, InvalidArgumentError, OperationCancelled, require

CHUNK_SIZE = 64 * 1024


def decode_body(body: bytes, response: requests.Response) -> str:
    """Decode with the declared charset; otherwise try UTF-8, then detect like Response.apparent_encoding."""
    content_type = (response.headers or {}).get("Content-Type", "")
    if "charset=" in content_type.lower() and response.encoding:
        return body.decode(response.encoding, errors="replace")
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        best = charset_normalizer.from_bytes(body).best()
        return body.decode(best.encoding if best else "utf-8", errors="replace")


def format_response(content: str) -> str:
    """Pretty-print `content` if it is JSON, otherwise return it unchanged."""
    try:
        parsed = json.loads(content)
    except (TypeError, ValueError):
        return content
    return json.dumps(parsed, indent=2, ensure_ascii=False)


class ApiCaller:
    """Calls the configured API with a Bearer token and returns the formatted body."""

    def __init__(self, session: requests.Session, settings: AppSettings, logger: logging.Logger):
        self.session = require(session, "session")
        self.settings = require(settings, "settings")
        self.logger = require(logger, "logger")

    @staticmethod
    def _validate_access_token(access_token: Optional[str]) -> None:
        if not isinstance(access_token, str) or not access_token.strip():
            raise InvalidArgumentError("Access token cannot be null or empty", name="access_token")

    def _read_body(self, response: requests.Response, cancellation: CancellationToken) -> str:
        chunks = []
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            cancellation.raise_if_cancelled()
            if chunk:
                chunks.append(chunk)
        return decode_body(b"".join(chunks), response)

    def _request_timeout(self, cancellation: CancellationToken) -> float:
        remaining = cancellation.remaining()
        if remaining is None:
            return self.settings.request_timeout
        return min(self.settings.request_timeout, remaining)

    def call_api(self, access_token: str, cancellation: Optional[CancellationToken] = None) -> str:
        """Call the API endpoint and return the (formatted) response body.

        Raises:
            InvalidArgumentError: when access_token is missing, empty or whitespace.
            ApiError: on non-success status codes, transport failures or unexpected errors.
            OperationCancelled: if the cancellation token fires before or during the call.
        """
        self._validate_access_token(access_token)
        cancellation = cancellation or CancellationToken()

        try:
            cancellation.raise_if_cancelled()
            headers = {
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            }
            self.logger.debug("GET %s", self.settings.api_url)
            response = self.session.get(
                self.settings.api_url,
                headers=headers,
                timeout=self._request_timeout(cancellation),
                stream=True,
            )
            try:
                content = self._read_body(response, cancellation)
            finally:
                response.close()

            if not 200 <= response.status_code < 300:
                self.logger.error("API call failed with status %s", response.status_code)
                raise ApiError(f"API call failed with status code {response.status_code} {response.reason or ''}".rstrip())

            return format_response(content)
        except requests.RequestException as e:
            # a transport timeout caused by the cancellation deadline is a cancellation
            cancellation.raise_if_cancelled()
            self.logger.error("HTTP request failed: %s", e)
            raise ApiError("An error occurred while calling the API", e) from e
        except (OperationCancelled, ApiError):
            raise
        except Exception as e:
            self.logger.exception("API call error")
            raise ApiError("An unexpected error occurred during the API call", e) from e
