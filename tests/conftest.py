"""Shared fixtures for the eapimgmt test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from eapimgmt.config import DeviceEndpoint
from eapimgmt.exceptions import ProtocolError

# ── endpoint / transport mocks ────────────────────────────────────────


@pytest.fixture()
def endpoint():
    """DeviceEndpoint for a lab switch."""
    return DeviceEndpoint(host="10.0.0.2", username="admin", password="secret")


@pytest.fixture()
def mock_transport():
    """MagicMock of EAPITransport with execute/run_command."""
    transport = MagicMock()
    transport.host = "10.0.0.2"
    transport.execute.return_value = [{}]
    transport.run_command.return_value = {}
    return transport


@pytest.fixture()
def command_router():
    """Factory fixture: route run_command/execute by command string.

    Values are results, or exceptions to raise. Unknown commands raise an
    ``invalid command`` ProtocolError like a device would.
    """

    def _make(transport: MagicMock, responses: dict):
        def _lookup(command):
            if command not in responses:
                raise ProtocolError(f"eAPI Error: CLI command 1 of 1 '{command}' failed: invalid command")
            value = responses[command]
            if isinstance(value, Exception):
                raise value
            return value

        def run_command(command, fmt="json"):
            return _lookup(command)

        def execute(commands, fmt="json"):
            return [_lookup(c) if c not in ("enable", "terminal length 0") else {} for c in commands]

        transport.run_command.side_effect = run_command
        transport.execute.side_effect = execute
        return transport

    return _make
