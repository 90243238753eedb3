"""JSON-RPC envelope models for the eAPI ``runCmds`` method."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from eapimgmt.exceptions import ProtocolError


class ResponseFormat(str, Enum):
    """Response format requested from the device."""

    JSON = "json"
    TEXT = "text"


class Command(BaseModel):
    """A command carrying an extra input parameter (e.g. an enable password)."""

    cmd: str
    input: str | None = None

    def to_wire(self) -> dict[str, str]:
        wire = {"cmd": self.cmd}
        if self.input is not None:
            wire["input"] = self.input
        return wire


class RpcRequest(BaseModel):
    """A single ``runCmds`` call: ordered commands plus the response format."""

    method: str = "runCmds"
    cmds: list[str | Command] = Field(default_factory=list)
    format: ResponseFormat = ResponseFormat.JSON

    def to_payload(self) -> dict[str, Any]:
        """Render the fixed JSON-RPC 2.0 envelope sent to the device."""
        return {
            "jsonrpc": "2.0",
            "method": self.method,
            "params": {
                "version": 1,
                "cmds": [c if isinstance(c, str) else c.to_wire() for c in self.cmds],
                "format": self.format.value,
            },
            "id": 1,
        }


class RpcErrorPayload(BaseModel):
    code: int | None = None
    message: str = "Unknown error"
    data: Any = None


class RpcResult(BaseModel):
    """Decoded response: per-command results in submission order, or an error."""

    result: list[Any] | None = None
    error: RpcErrorPayload | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise :class:`ProtocolError` (``eAPI Error: <message>``) if the device reported one."""
        if self.error is not None:
            raise ProtocolError(f"eAPI Error: {self.error.message}", code=self.error.code, data=self.error.data)
