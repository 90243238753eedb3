"""Exception hierarchy for eAPI switch management."""

from __future__ import annotations

from typing import Any


class SwitchError(Exception):
    """Base exception for all switch management errors."""


class TransportError(SwitchError):
    """HTTP round trip failed (connection, TLS, timeout or non-200 status)."""

    def __init__(self, message: str, raw: str | None = None, status_code: int | None = None):
        self.raw = raw if raw is not None else message
        self.status_code = status_code
        super().__init__(message)


class ProtocolError(SwitchError):
    """Response was not valid JSON or carried a JSON-RPC error member."""

    def __init__(self, message: str, code: int | None = None, data: Any = None):
        self.code = code
        self.data = data
        super().__init__(message)


class ConfigSequenceExhausted(ProtocolError):
    """Every configuration-mode entry sequence was rejected by the device."""

    def __init__(self, message: str, attempts: int = 0, last_error: SwitchError | None = None):
        self.attempts = attempts
        self.last_error = last_error
        code = last_error.code if isinstance(last_error, ProtocolError) else None
        data = last_error.data if isinstance(last_error, ProtocolError) else None
        super().__init__(message, code=code, data=data)


class ConfigurationError(SwitchError):
    """Invalid configuration request (VLAN id, mode, address, ...)."""
