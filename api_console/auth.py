"""Authentication helper for the protected API.

This module wraps MSAL's PublicClientApplication to obtain a delegated access token through the
interactive (browser) flow. MSAL opens the system browser and listens on the loopback redirect URI
for the authorization code.

Design notes:
 - The MSAL client handle is built lazily, once per Authenticator, and reused for every call.
 - MSAL reports failures as a result dict carrying `error` / `error_description`; these are
   raised as IdentityProviderError and translated into AuthenticationError at the boundary.
 - MSAL's interactive call cannot be interrupted, so cancellation is checked before and after it
   and any deadline on the CancellationToken is forwarded as MSAL's `timeout`.
 - Token caching (acquire_token_silent) is deliberately absent: every run signs in again.
"""

import logging
import threading
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

import msal

from .cancellation import CancellationToken
from .config import AppSettings
from .exceptions import AuthenticationError, OperationCancelled, require


class IdentityProviderError(Exception):
    """An error result returned by the identity provider (MSAL error dict)."""

    def __init__(self, error: Optional[str], description: Optional[str] = None):
        self.error = error or "unknown_error"
        self.description = description or ""
        super().__init__(f"{self.error}: {self.description}" if self.description else self.error)


def build_public_client(settings: AppSettings) -> msal.PublicClientApplication:
    """Default client factory: a public client bound to the configured tenant authority."""
    return msal.PublicClientApplication(
        client_id=settings.client_id,
        authority=settings.authority,
    )


class Authenticator:
    """Acquire Azure AD access tokens for the configured scopes via interactive sign-in."""

    def __init__(
        self,
        settings: AppSettings,
        logger: logging.Logger,
        client_factory: Optional[Callable[[AppSettings], msal.PublicClientApplication]] = None,
    ):
        self.settings = require(settings, "settings")
        self.logger = require(logger, "logger")
        self.client_factory = client_factory or build_public_client
        self._client: Optional[msal.PublicClientApplication] = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> msal.PublicClientApplication:
        with self._client_lock:
            if self._client is None:
                client = self.client_factory(self.settings)
                if client is None:
                    raise RuntimeError("Identity client factory returned no client")
                self._client = client
            return self._client

    def _redirect_port(self) -> Optional[int]:
        # MSAL only needs the loopback port; the host is always localhost
        return urlparse(self.settings.redirect_uri).port

    def get_access_token(self, cancellation: Optional[CancellationToken] = None) -> str:
        """Return a bearer token string for the configured scopes.

        Raises:
            AuthenticationError: if sign-in fails or MSAL misbehaves.
            OperationCancelled: if the cancellation token fires before or during sign-in.
        """
        cancellation = cancellation or CancellationToken()
        try:
            cancellation.raise_if_cancelled()
            app = self._get_client()

            self.logger.debug("Starting interactive sign-in for scopes %s", list(self.settings.scopes))
            result: Dict = app.acquire_token_interactive(
                scopes=list(self.settings.scopes),
                port=self._redirect_port(),
                timeout=cancellation.remaining(),
            )
            # A deadline that expired while the browser was open surfaces as cancellation
            cancellation.raise_if_cancelled()

            if not result or "access_token" not in result:
                result = result or {}
                raise IdentityProviderError(result.get("error"), result.get("error_description"))
            self.logger.debug("Interactive sign-in succeeded")
            return result["access_token"]
        except IdentityProviderError as e:
            self.logger.error("Authentication failed: %s", e)
            raise AuthenticationError(f"Failed to authenticate with Azure AD: {e}", e) from e
        except (OperationCancelled, AuthenticationError):
            raise
        except Exception as e:
            self.logger.exception("Authentication error")
            raise AuthenticationError("An unexpected error occurred during authentication", e) from e
