"""Device endpoint configuration.

A :class:`DeviceEndpoint` is resolved once per session (explicitly, from the
credential store mapping, or from ``EAPI_*`` environment variables) and is
immutable for the lifetime of the client built from it.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PORT = 443
DEFAULT_TIMEOUT = 10
DEFAULT_USE_HTTPS = True
DEFAULT_VERIFY_SSL = False
API_PATH = "command-api"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _as_flag(value: Any, default: bool) -> bool:
    """``True``/``1``/``"yes"``/... as a bool; strings like ``"0"`` or ``"false"`` are false."""
    if value is None:
        return default
    if isinstance(value, str):
        if value.strip() == "":
            return default
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _env_flag(name: str, default: bool) -> bool:
    return _as_flag(os.getenv(name), default)


class DeviceEndpoint(BaseModel):
    """Connection parameters for one switch's eAPI endpoint."""

    model_config = ConfigDict(frozen=True)

    host: str
    username: str
    password: str = Field(default="", repr=False)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    use_https: bool = DEFAULT_USE_HTTPS
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    verify_ssl: bool = DEFAULT_VERIFY_SSL

    @property
    def protocol(self) -> str:
        return "https" if self.use_https else "http"

    @property
    def url(self) -> str:
        """Full URL of the JSON-RPC endpoint."""
        return f"{self.protocol}://{self.host}:{self.port}/{API_PATH}"

    @classmethod
    def from_credentials(cls, creds: Mapping[str, Any]) -> DeviceEndpoint:
        """Build an endpoint from a credential-store record.

        Accepts the collaborator's keys (``host``, ``port``, ``useHttps``,
        ``username``, ``password``, ``timeoutSeconds``); missing or null
        values fall back to the module defaults.
        """
        port = creds.get("port")
        use_https = creds.get("useHttps", creds.get("use_https"))
        timeout = creds.get("timeoutSeconds", creds.get("timeout"))
        verify_ssl = creds.get("verifySsl", creds.get("verify_ssl"))

        return cls(
            host=creds.get("host") or creds.get("ip_address") or "",
            username=creds.get("username") or "",
            password=creds.get("password") or "",
            port=int(port) if port is not None else DEFAULT_PORT,
            use_https=_as_flag(use_https, DEFAULT_USE_HTTPS),
            timeout=float(timeout) if timeout is not None else DEFAULT_TIMEOUT,
            verify_ssl=_as_flag(verify_ssl, DEFAULT_VERIFY_SSL),
        )

    @classmethod
    def from_env(cls, prefix: str = "EAPI_", **overrides: Any) -> DeviceEndpoint:
        """Build an endpoint from ``<prefix>HOST``, ``<prefix>USERNAME``, ... variables.

        Keyword overrides that are not ``None`` win over the environment.
        """
        values: dict[str, Any] = {
            "host": os.getenv(f"{prefix}HOST", ""),
            "username": os.getenv(f"{prefix}USERNAME", "admin"),
            "password": os.getenv(f"{prefix}PASSWORD", ""),
            "port": int(os.getenv(f"{prefix}PORT", str(DEFAULT_PORT))),
            "use_https": _env_flag(f"{prefix}USE_HTTPS", DEFAULT_USE_HTTPS),
            "timeout": float(os.getenv(f"{prefix}TIMEOUT", str(DEFAULT_TIMEOUT))),
            "verify_ssl": _env_flag(f"{prefix}VERIFY_SSL", DEFAULT_VERIFY_SSL),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
