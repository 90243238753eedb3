"""Tests for the eAPI JSON-RPC transport."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from eapimgmt.eapi.transport import EAPITransport
from eapimgmt.exceptions import ProtocolError, TransportError
from eapimgmt.models.rpc import Command


def _response(status_code=200, body=None, text="", json_error=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture()
def session():
    with patch("eapimgmt.eapi.transport.requests.Session") as mock_session_class:
        mock_session = MagicMock()
        mock_session.headers = {}
        mock_session_class.return_value = mock_session
        yield mock_session


class TestSessionLifecycle:
    def test_connect_sets_auth_and_tls(self, session, endpoint):
        transport = EAPITransport(endpoint)
        transport.connect()

        assert session.auth == ("admin", "secret")
        assert session.verify is False
        assert session.headers["Content-Type"] == "application/json"
        assert transport.is_connected()

    def test_disconnect_closes_session(self, session, endpoint):
        transport = EAPITransport(endpoint)
        transport.connect()
        transport.disconnect()

        session.close.assert_called_once()
        assert not transport.is_connected()

    def test_context_manager(self, session, endpoint):
        with EAPITransport(endpoint) as transport:
            assert transport.is_connected()
        assert not transport.is_connected()


class TestExecute:
    def test_envelope_and_results(self, session, endpoint):
        session.post.return_value = _response(body={"jsonrpc": "2.0", "id": 1, "result": [{}, {"vlans": {}}]})
        transport = EAPITransport(endpoint)

        results = transport.execute(["enable", "show vlan"])

        assert results == [{}, {"vlans": {}}]
        args, kwargs = session.post.call_args
        assert args[0] == "https://10.0.0.2:443/command-api"
        assert kwargs["timeout"] == 10
        assert kwargs["json"] == {
            "jsonrpc": "2.0",
            "method": "runCmds",
            "params": {"version": 1, "cmds": ["enable", "show vlan"], "format": "json"},
            "id": 1,
        }

    def test_text_format_and_command_objects(self, session, endpoint):
        session.post.return_value = _response(body={"result": [{}, {"output": "ok"}]})
        transport = EAPITransport(endpoint)

        transport.execute([Command(cmd="enable", input="pw"), {"cmd": "show clock"}, 42], fmt="text")

        params = session.post.call_args.kwargs["json"]["params"]
        assert params["format"] == "text"
        assert params["cmds"] == [{"cmd": "enable", "input": "pw"}, {"cmd": "show clock"}]

    def test_missing_result_is_empty(self, session, endpoint):
        session.post.return_value = _response(body={"jsonrpc": "2.0", "id": 1})
        assert EAPITransport(endpoint).execute(["show version"]) == []

    def test_run_command_returns_first_result(self, session, endpoint):
        session.post.return_value = _response(body={"result": [{"hostname": "sw1"}]})
        assert EAPITransport(endpoint).run_command("show hostname") == {"hostname": "sw1"}

    def test_opens_session_lazily(self, session, endpoint):
        session.post.return_value = _response(body={"result": [{}]})
        transport = EAPITransport(endpoint)
        assert not transport.is_connected()

        transport.execute(["show version"])

        assert transport.is_connected()


class TestExecuteErrors:
    def test_timeout(self, session, endpoint):
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(TransportError, match="^Connection timed out") as exc_info:
            EAPITransport(endpoint).execute(["show version"])
        assert exc_info.value.raw == "read timed out"

    def test_connection_refused(self, session, endpoint):
        session.post.side_effect = requests.ConnectionError("[Errno 111] Connection refused")

        with pytest.raises(TransportError, match="failed to connect") as exc_info:
            EAPITransport(endpoint).execute(["show version"])
        assert "Connection refused" in exc_info.value.raw

    def test_unresolvable_host(self, session, endpoint):
        session.post.side_effect = requests.ConnectionError("Name or service not known")

        with pytest.raises(TransportError, match="^Could not resolve host"):
            EAPITransport(endpoint).execute(["show version"])

    def test_tls_error(self, session, endpoint):
        session.post.side_effect = requests.exceptions.SSLError("certificate verify failed")

        with pytest.raises(TransportError, match="^TLS Error"):
            EAPITransport(endpoint).execute(["show version"])

    def test_non_200_status(self, session, endpoint):
        session.post.return_value = _response(status_code=401, text="Unauthorized")

        with pytest.raises(TransportError, match="HTTP Error: 401") as exc_info:
            EAPITransport(endpoint).execute(["show version"])
        assert exc_info.value.status_code == 401
        assert exc_info.value.raw == "Unauthorized"

    def test_invalid_json(self, session, endpoint):
        session.post.return_value = _response(json_error=ValueError("Expecting value"))

        with pytest.raises(ProtocolError, match="^JSON Decode Error"):
            EAPITransport(endpoint).execute(["show version"])

    def test_error_member(self, session, endpoint):
        session.post.return_value = _response(
            body={"error": {"code": 1002, "message": "CLI command 2 of 2 'foo' failed: invalid command", "data": []}}
        )

        with pytest.raises(ProtocolError, match="^eAPI Error: .*invalid command") as exc_info:
            EAPITransport(endpoint).execute(["enable", "foo"])
        assert exc_info.value.code == 1002
        assert exc_info.value.data == []


class TestParseResponse:
    def test_non_object_body(self):
        with pytest.raises(ProtocolError):
            EAPITransport.parse_response(["not", "an", "object"])

    def test_string_error_member(self):
        parsed = EAPITransport.parse_response({"error": "boom"})
        assert not parsed.ok
        assert parsed.error.message == "boom"
        with pytest.raises(ProtocolError, match="eAPI Error: boom"):
            parsed.raise_for_error()

    def test_error_member_kept_on_result(self):
        parsed = EAPITransport.parse_response(
            {"error": {"code": 1002, "message": "CLI command 2 of 2 'foo' failed: invalid command", "data": []}}
        )
        assert parsed.result is None
        assert (parsed.error.code, parsed.error.data) == (1002, [])
        with pytest.raises(ProtocolError, match="invalid command") as exc_info:
            parsed.raise_for_error()
        assert exc_info.value.code == 1002

    def test_error_without_message(self):
        parsed = EAPITransport.parse_response({"error": {"code": 1}})
        with pytest.raises(ProtocolError, match="Unknown error"):
            parsed.raise_for_error()

    def test_result_not_a_list(self):
        with pytest.raises(ProtocolError, match="Malformed"):
            EAPITransport.parse_response({"result": {"a": 1}})

    def test_ok(self):
        parsed = EAPITransport.parse_response({"result": [{"a": 1}]})
        assert parsed.ok
        assert parsed.result == [{"a": 1}]
