"""eAPI JSON-RPC transport over HTTP(S) with Basic authentication."""

from __future__ import annotations

from types import TracebackType
from typing import Any, Iterable, Mapping, Self

import requests
from loguru import logger

from eapimgmt.config import DeviceEndpoint
from eapimgmt.exceptions import ProtocolError, TransportError
from eapimgmt.models.rpc import Command, ResponseFormat, RpcErrorPayload, RpcRequest, RpcResult

_RESOLVE_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated with hostname",
)


class EAPITransport:
    """Issues ``runCmds`` requests against one device.

    Each :meth:`execute` is a single blocking POST; there are no retries at
    this layer. The underlying ``requests.Session`` is opened lazily and is
    not meant to be shared between threads.
    """

    def __init__(self, endpoint: DeviceEndpoint):
        self.endpoint = endpoint
        self._session: requests.Session | None = None

    @property
    def host(self) -> str:
        return self.endpoint.host

    def connect(self) -> None:
        """Open the HTTP session with Basic auth and TLS settings applied."""
        self._session = requests.Session()
        self._session.auth = (self.endpoint.username, self.endpoint.password)
        self._session.verify = self.endpoint.verify_ssl
        self._session.headers["Content-Type"] = "application/json"
        logger.debug("eAPI session opened for {}", self.endpoint.url)

    def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            self._session.close()
            self._session = None

    def is_connected(self) -> bool:
        return self._session is not None

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect()

    @staticmethod
    def normalize_commands(commands: Iterable[Any]) -> list[str | Command]:
        """Keep plain strings, :class:`Command` objects and ``{"cmd": ...}`` mappings."""
        normalized: list[str | Command] = []
        for cmd in commands:
            if isinstance(cmd, (str, Command)):
                normalized.append(cmd)
            elif isinstance(cmd, Mapping) and isinstance(cmd.get("cmd"), str):
                inp = cmd.get("input")
                normalized.append(Command(cmd=cmd["cmd"], input=None if inp is None else str(inp)))
            else:
                logger.debug("Dropping unsupported command entry: {!r}", cmd)
        return normalized

    def build_request(self, commands: Iterable[Any], fmt: ResponseFormat | str = ResponseFormat.JSON) -> RpcRequest:
        return RpcRequest(cmds=self.normalize_commands(commands), format=ResponseFormat(fmt))

    def execute(self, commands: Iterable[Any], fmt: ResponseFormat | str = ResponseFormat.JSON) -> list[Any]:
        """Run commands in one request.

        Args:
            commands: Ordered command strings or command objects.
            fmt: ``json`` for structured results, ``text`` for CLI output.

        Returns:
            One result per submitted command, in submission order.

        Raises:
            TransportError: Connection, TLS, timeout or non-200 HTTP status.
            ProtocolError: Body is not JSON or carries an ``error`` member.
        """
        request = self.build_request(commands, fmt)
        session = self._ensure_session()
        timeout = self.endpoint.timeout
        logger.debug(
            "runCmds on {} ({}): {}",
            self.host,
            request.format.value,
            [c if isinstance(c, str) else c.cmd for c in request.cmds],
        )

        try:
            resp = session.post(self.endpoint.url, json=request.to_payload(), timeout=timeout)
        except requests.Timeout as e:
            raise TransportError(f"Connection timed out after {timeout:g}s: {e}", raw=str(e)) from e
        except requests.exceptions.SSLError as e:
            raise TransportError(f"TLS Error: {e}", raw=str(e)) from e
        except requests.ConnectionError as e:
            raise TransportError(self._describe_connection_error(e), raw=str(e)) from e
        except requests.RequestException as e:
            raise TransportError(f"Request Error: {e}", raw=str(e)) from e

        if resp.status_code != 200:
            raise TransportError(
                f"HTTP Error: {resp.status_code}",
                raw=(resp.text or "")[:500],
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError as e:
            raise ProtocolError(f"JSON Decode Error: {e}") from e

        parsed = self.parse_response(body)
        parsed.raise_for_error()
        return parsed.result or []

    def run_command(self, command: str | Command, fmt: ResponseFormat | str = ResponseFormat.JSON) -> Any:
        """Run one command and return its result (``{}`` when the device sent none)."""
        results = self.execute([command], fmt)
        return results[0] if results else {}

    @staticmethod
    def parse_response(body: Any) -> RpcResult:
        """Turn a decoded body into an :class:`RpcResult`.

        An RPC ``error`` member is kept on the result; only bodies that are not
        a JSON-RPC response at all raise.
        """
        if not isinstance(body, dict):
            raise ProtocolError("JSON Decode Error: response is not a JSON object")

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                code = error.get("code")
                payload = RpcErrorPayload(
                    code=code if isinstance(code, int) else None,
                    message=str(error.get("message") or "Unknown error"),
                    data=error.get("data"),
                )
            else:
                payload = RpcErrorPayload(message=str(error))
            return RpcResult(error=payload)

        result = body.get("result")
        if result is None:
            return RpcResult(result=[])
        if not isinstance(result, list):
            raise ProtocolError("Malformed eAPI response: 'result' is not a list")
        return RpcResult(result=result)

    def _describe_connection_error(self, exc: requests.ConnectionError) -> str:
        text = str(exc)
        if any(marker in text.lower() for marker in _RESOLVE_FAILURE_MARKERS):
            return f"Could not resolve host: {self.host} ({text})"
        return f"Connection Error: failed to connect to {self.host}: {text}"

    def _ensure_session(self) -> requests.Session:
        if self._session is None:
            self.connect()
        assert self._session is not None
        return self._session
