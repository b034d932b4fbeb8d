"""Configuration loading and the strongly-typed settings record.

Centralizes parsing of `config.json` (or an override via the API_CONSOLE_CONFIG env var) into a
frozen dataclass so the rest of the application reads settings it cannot mutate. Required values
are validated on construction; a bad file fails before any sign-in is attempted.

Environment variables override individual values from the file, which keeps tenant-specific
identifiers out of source control:
 - AZURE_TENANT_ID, AZURE_CLIENT_ID, API_URL, REDIRECT_URI
 - API_SCOPES (space-separated list)
"""

import json
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
from urllib.parse import urlparse

from .exceptions import InvalidArgumentError

CONFIG_FILENAME = "config.json"
DEFAULT_AUTHORITY_HOST = "https://login.microsoftonline.com"

_ENV_OVERRIDES = {
    "tenant_id": "AZURE_TENANT_ID",
    "client_id": "AZURE_CLIENT_ID",
    "api_url": "API_URL",
    "redirect_uri": "REDIRECT_URI",
}


@dataclass(frozen=True)
class AppSettings:
    tenant_id: str
    client_id: str
    api_url: str
    redirect_uri: str
    scopes: Tuple[str, ...] = field(default_factory=tuple)
    authority_host: str = DEFAULT_AUTHORITY_HOST
    # Seconds before the HTTP call gives up waiting on the server
    request_timeout: float = 30.0

    def __post_init__(self):
        for name in ("tenant_id", "client_id", "api_url", "redirect_uri", "authority_host"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidArgumentError(f"Setting '{name}' must be a non-empty string", name=name)

        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidArgumentError(
                f"Setting 'api_url' must be an absolute http(s) URL, got '{self.api_url}'", name="api_url"
            )

        scopes = self.scopes if self.scopes is not None else ()
        if isinstance(scopes, str):
            scopes = (scopes,)
        # frozen: normalise lists from JSON into an immutable tuple
        object.__setattr__(self, "scopes", tuple(scopes))
        for scope in self.scopes:
            if not isinstance(scope, str) or not scope.strip():
                raise InvalidArgumentError("Every scope must be a non-empty string", name="scopes")

        if self.request_timeout is None or self.request_timeout <= 0:
            raise InvalidArgumentError("Setting 'request_timeout' must be positive", name="request_timeout")

    @property
    def authority(self) -> str:
        """Authority URL = login host + tenant id (tenant GUID or domain)."""
        return f"{self.authority_host.rstrip('/')}/{self.tenant_id}"

    @staticmethod
    def load(path: Optional[str] = None) -> "AppSettings":
        config_path = path or os.environ.get("API_CONSOLE_CONFIG") or CONFIG_FILENAME
        if not os.path.exists(config_path):
            raise FileNotFoundError(
                f"Config file '{config_path}' not found. Copy 'config.example.json' to 'config.json' and fill values."
            )
        with open(config_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise InvalidArgumentError(f"Config file '{config_path}' must contain a JSON object")
        return AppSettings.from_dict(raw)

    @staticmethod
    def from_dict(raw: dict) -> "AppSettings":
        values = {**raw}
        for key, env_name in _ENV_OVERRIDES.items():
            env_value = os.environ.get(env_name)
            if env_value:
                values[key] = env_value
        env_scopes = os.environ.get("API_SCOPES")
        if env_scopes:
            values["scopes"] = env_scopes.split()

        missing = [k for k in ("tenant_id", "client_id", "api_url", "redirect_uri") if not values.get(k)]
        if missing:
            raise InvalidArgumentError(f"Missing required settings: {', '.join(missing)}")

        kwargs = dict(
            tenant_id=values["tenant_id"],
            client_id=values["client_id"],
            api_url=values["api_url"],
            redirect_uri=values["redirect_uri"],
            scopes=values.get("scopes") or (),
        )
        if values.get("authority_host"):
            kwargs["authority_host"] = values["authority_host"]
        if values.get("request_timeout") is not None:
            kwargs["request_timeout"] = float(values["request_timeout"])
        return AppSettings(**kwargs)
