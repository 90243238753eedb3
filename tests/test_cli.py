"""Tests for the eapimgmt command-line interface."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from eapimgmt.cli import build_endpoint, build_parser, main
from eapimgmt.eapi.classifier import ErrorCategory, HealthStatus, PollResult
from eapimgmt.exceptions import ProtocolError, TransportError
from eapimgmt.models.interface import LinkState, PortMode
from eapimgmt.models.port_channel import LacpMode
from eapimgmt.models.vlan import Vlan

ENV_VARS = ("HOST", "USERNAME", "PASSWORD", "PORT", "USE_HTTPS", "TIMEOUT", "VERIFY_SSL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(f"EAPI_{name}", raising=False)


@pytest.fixture()
def mock_switch():
    """Patch EAPISwitch in the CLI; yields (class mock, switch inside the with block)."""
    with patch("eapimgmt.cli.EAPISwitch") as switch_cls:
        switch = MagicMock()
        switch_cls.return_value.__enter__.return_value = switch
        yield switch_cls, switch


def _run(*argv: str) -> None:
    main(["--host", "10.0.0.2", "--password", "secret", *argv])


class TestBuildParser:
    def test_vlan_create(self):
        args = build_parser().parse_args(["vlan", "create", "100", "--name", "servers"])
        assert (args.command, args.vlan_command, args.vlan_id, args.name) == ("vlan", "create", 100, "servers")

    def test_interface_config(self):
        args = build_parser().parse_args(
            ["interface", "config", "Ethernet5", "--mode", "trunk", "--vlans", "10,20", "--native-vlan", "1"]
        )
        assert args.interface == "Ethernet5"
        assert args.mode == "trunk"
        assert args.native_vlan == 1

    def test_shutdown_flags_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["interface", "config", "Ethernet1", "--shutdown", "--no-shutdown"])

    def test_lacp_mode_default_and_choices(self):
        args = build_parser().parse_args(["port-channel", "add-member", "10", "Ethernet1"])
        assert args.lacp_mode == "active"
        with pytest.raises(SystemExit):
            build_parser().parse_args(["port-channel", "add-member", "10", "Ethernet1", "--lacp-mode", "fast"])


class TestBuildEndpoint:
    def test_arguments_win_over_env(self, monkeypatch):
        monkeypatch.setenv("EAPI_HOST", "10.9.9.9")
        monkeypatch.setenv("EAPI_PORT", "8443")
        parsed = build_parser().parse_args(["--host", "10.0.0.2", "--http", "monitor"])

        endpoint = build_endpoint(parsed)

        assert endpoint.host == "10.0.0.2"
        assert endpoint.port == 8443
        assert endpoint.use_https is False
        assert endpoint.username == "admin"

    def test_env_only(self, monkeypatch):
        monkeypatch.setenv("EAPI_HOST", "sw1.lab")
        endpoint = build_endpoint(build_parser().parse_args(["--verify-ssl", "monitor"]))
        assert endpoint.host == "sw1.lab"
        assert endpoint.verify_ssl is True


class TestMain:
    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1

    def test_missing_subcommand(self, mock_switch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run("vlan")
        assert exc_info.value.code == 1
        assert "subcommand" in capsys.readouterr().err
        mock_switch[0].assert_not_called()

    def test_missing_host(self, mock_switch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["vlan", "list"])
        assert exc_info.value.code == 1
        assert "no host" in capsys.readouterr().err

    def test_invalid_port(self, mock_switch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--host", "10.0.0.2", "--port", "0", "vlan", "list"])
        assert exc_info.value.code == 1
        assert "invalid connection settings" in capsys.readouterr().err

    def test_vlan_list(self, mock_switch, capsys):
        switch_cls, switch = mock_switch
        switch.vlan.list_vlans.return_value = [Vlan(vlan_id=10, name="Data")]

        _run("vlan", "list")

        endpoint = switch_cls.call_args.args[0]
        assert endpoint.host == "10.0.0.2"
        assert endpoint.password == "secret"
        out = capsys.readouterr().out
        assert "10" in out
        assert "Data" in out

    def test_vlan_list_empty(self, mock_switch, capsys):
        mock_switch[1].vlan.list_vlans.return_value = []
        _run("vlan", "list")
        assert "No VLANs found" in capsys.readouterr().out

    def test_vlan_create(self, mock_switch, capsys):
        _run("vlan", "create", "100", "--name", "servers")
        mock_switch[1].vlan.create_vlan.assert_called_once_with(100, "servers")
        assert "created successfully" in capsys.readouterr().out

    def test_interface_config(self, mock_switch):
        _run("interface", "config", "Ethernet5", "--mode", "trunk", "--vlans", "10,20", "--shutdown")

        interface, config = mock_switch[1].interfaces.configure_interface.call_args.args
        assert interface == "Ethernet5"
        assert config.mode is PortMode.TRUNK
        assert config.vlan_list() == "10,20"
        assert config.admin_state is LinkState.DOWN

    def test_port_channel_add_member(self, mock_switch):
        _run("port-channel", "add-member", "10", "Ethernet1")
        mock_switch[1].port_channel.add_member.assert_called_once_with("10", "Ethernet1", LacpMode.ACTIVE)

    def test_port_channel_create_with_members(self, mock_switch):
        _run("port-channel", "create", "Po10", "--members", "Ethernet1, Ethernet2", "--lacp-mode", "passive")

        name, config = mock_switch[1].port_channel.create_port_channel.call_args.args
        assert name == "Po10"
        assert config.members == ["Ethernet1", "Ethernet2"]
        assert config.lacp_mode is LacpMode.PASSIVE

    def test_clock_timezone_with_offset(self, mock_switch):
        mock_switch[1].monitoring.show_clock.return_value = "Fri Oct 17 12:00:00 2025"
        mock_switch[1].monitoring.get_clock_timezone_config.return_value = "clock timezone CET +1"

        _run("clock", "--timezone", "CET", "--offset", "+1")

        mock_switch[1].system.set_clock_timezone.assert_called_once_with("CET", "+1")

    def test_transceiver(self, mock_switch, capsys):
        mock_switch[1].monitoring.get_interfaces_transceiver.return_value = {}
        _run("transceiver", "--interface", "Et2")
        mock_switch[1].monitoring.get_interfaces_transceiver.assert_called_once_with("Et2")
        assert "No transceiver readings" in capsys.readouterr().out

    def test_logs(self, mock_switch, capsys):
        mock_switch[1].monitoring.get_logs.return_value = "line1\nline2"
        _run("logs", "--lines", "2")
        mock_switch[1].monitoring.get_logs.assert_called_once_with(2)
        assert "line2" in capsys.readouterr().out

    def test_poll_down_exits_1(self, mock_switch, capsys):
        mock_switch[1].poll.return_value = PollResult(
            host="10.0.0.2",
            status=HealthStatus.DOWN,
            error="Connection timed out",
            error_category=ErrorCategory.CONNECTION,
        )
        with pytest.raises(SystemExit) as exc_info:
            _run("poll")
        assert exc_info.value.code == 1
        assert "connection" in capsys.readouterr().out

    @pytest.mark.parametrize("error", [TransportError("Connection refused"), ProtocolError("eAPI Error: failed")])
    def test_switch_error_exits_1(self, mock_switch, capsys, error):
        mock_switch[1].vlan.delete_vlan.side_effect = error
        with pytest.raises(SystemExit) as exc_info:
            _run("vlan", "delete", "10")
        assert exc_info.value.code == 1
        assert f"Error: {error}" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, mock_switch):
        mock_switch[1].system.save_running_config.side_effect = KeyboardInterrupt
        with pytest.raises(SystemExit) as exc_info:
            _run("save-config")
        assert exc_info.value.code == 130
