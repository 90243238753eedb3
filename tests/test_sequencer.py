"""Tests for configuration-mode sequencing."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from eapimgmt.eapi.sequencer import (
    CONFIG_MODE_PREFIXES,
    EXHAUSTED_MESSAGE,
    AttemptStatus,
    ConfigSequencer,
    is_recoverable,
)
from eapimgmt.exceptions import (
    ConfigSequenceExhausted,
    ConfigurationError,
    ProtocolError,
    TransportError,
)

INVALID = ProtocolError("eAPI Error: CLI command 2 of 3 'configure' failed: invalid command")


class TestIsRecoverable:
    @pytest.mark.parametrize(
        "message",
        [
            "eAPI Error: invalid command",
            "eAPI Error: CLI command 1 of 2 'enable' FAILED",
            "eAPI Error: Permission denied",
        ],
    )
    def test_recoverable_protocol_errors(self, message):
        assert is_recoverable(ProtocolError(message))

    def test_other_protocol_error_is_fatal(self):
        assert not is_recoverable(ProtocolError("eAPI Error: incomplete command"))

    def test_transport_error_is_fatal_even_with_marker(self):
        assert not is_recoverable(TransportError("Connection Error: failed to connect to 10.0.0.2"))


class TestConfigSequencer:
    def test_first_sequence_succeeds(self, mock_transport):
        mock_transport.execute.return_value = [{}, {}, {}]
        seq = ConfigSequencer(mock_transport)

        result = seq.apply(["vlan 10"])

        assert result == [{}, {}, {}]
        mock_transport.execute.assert_called_once_with(["enable", "configure", "vlan 10"])

    def test_third_sequence_succeeds_without_fourth(self, mock_transport):
        """Two recoverable rejections, then success: sequence 4 is never tried."""
        mock_transport.execute.side_effect = [INVALID, INVALID, [{}, {}, {"ok": True}]]
        seq = ConfigSequencer(mock_transport)

        result = seq.apply(["vlan 10"])

        assert result == [{}, {}, {"ok": True}]
        assert mock_transport.execute.call_count == 3
        calls = [c.args[0] for c in mock_transport.execute.call_args_list]
        assert calls == [
            ["enable", "configure", "vlan 10"],
            ["configure", "vlan 10"],
            ["enable", "configure terminal", "vlan 10"],
        ]

    def test_fatal_error_aborts_immediately(self, mock_transport):
        fatal = ProtocolError("eAPI Error: incomplete command")
        mock_transport.execute.side_effect = fatal
        seq = ConfigSequencer(mock_transport)

        with pytest.raises(ProtocolError) as exc_info:
            seq.apply(["vlan 10"])

        assert exc_info.value is fatal
        assert mock_transport.execute.call_count == 1

    def test_transport_error_propagates_unchanged(self, mock_transport):
        error = TransportError("Connection timed out after 10s: read timeout")
        mock_transport.execute.side_effect = error

        with pytest.raises(TransportError) as exc_info:
            ConfigSequencer(mock_transport).apply(["vlan 10"])

        assert exc_info.value is error
        assert mock_transport.execute.call_count == 1

    def test_exhaustion_reports_last_recoverable_error(self, mock_transport):
        last = ProtocolError("eAPI Error: permission denied", code=1002)
        mock_transport.execute.side_effect = [INVALID, INVALID, INVALID, last]

        with pytest.raises(ConfigSequenceExhausted) as exc_info:
            ConfigSequencer(mock_transport).apply(["vlan 10"])

        assert str(exc_info.value) == "eAPI Error: permission denied"
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last
        assert exc_info.value.attempts == 4
        assert mock_transport.execute.call_count == len(CONFIG_MODE_PREFIXES)

    def test_exhaustion_without_prefixes_uses_generic_message(self, mock_transport):
        with pytest.raises(ConfigSequenceExhausted, match=EXHAUSTED_MESSAGE):
            ConfigSequencer(mock_transport, prefixes=[]).apply(["vlan 10"])
        mock_transport.execute.assert_not_called()

    def test_empty_commands_rejected(self, mock_transport):
        with pytest.raises(ConfigurationError):
            ConfigSequencer(mock_transport).apply([])
        mock_transport.execute.assert_not_called()

    def test_attempt_returns_explicit_status(self):
        transport = MagicMock()
        transport.execute.side_effect = INVALID
        attempt = ConfigSequencer(transport).attempt(("configure",), ["vlan 10"])

        assert attempt.status is AttemptStatus.RECOVERABLE
        assert attempt.error is INVALID
        assert attempt.result is None
