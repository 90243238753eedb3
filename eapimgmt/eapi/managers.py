"""eAPI managers for monitoring, VLAN, interface, port-channel and system operations.

Reads go straight to the transport; when a device rejects a command
(``ProtocolError``) the next alternate command is tried. Transport failures
always propagate. Configuration pushes go through the
:class:`~eapimgmt.eapi.sequencer.ConfigSequencer`.
"""

from __future__ import annotations

import ipaddress
import json
import re
from datetime import datetime
from typing import Any, Sequence

from loguru import logger

from eapimgmt.eapi import normalizers
from eapimgmt.eapi.sequencer import ConfigSequencer
from eapimgmt.eapi.textparse import (
    extract_log_text,
    extract_text_output,
    filter_by_interface,
    parse_default_gateway,
    parse_transceiver_text,
    tail_lines,
)
from eapimgmt.eapi.transport import EAPITransport
from eapimgmt.exceptions import ConfigurationError, ProtocolError
from eapimgmt.models.environment import EnvironmentStatus
from eapimgmt.models.interface import Interface, InterfaceConfig, LinkState, PortMode
from eapimgmt.models.mac import MacEntry
from eapimgmt.models.port_channel import LacpMode, PortChannel, PortChannelConfig
from eapimgmt.models.system import ManagementInterface, VersionInfo
from eapimgmt.models.transceiver import TransceiverReading
from eapimgmt.models.vlan import Vlan, is_valid_vlan_id

VLAN_NAME_MAX_LENGTH = 32
MANAGEMENT_INTERFACE = "Management1"
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
LOG_SEQUENCES = (("enable", "terminal length 0", "show logging"), ("enable", "show logging"))


def run_first_supported(transport: EAPITransport, alternatives: Sequence[Any], fmt: str = "json") -> list[Any]:
    """Execute the first command list the device accepts.

    Each entry of ``alternatives`` is a command string or a list of commands.
    Only ``ProtocolError`` moves on to the next alternative; the last one is
    re-raised when none is accepted.
    """
    last_error: ProtocolError | None = None
    for alternative in alternatives:
        commands = [alternative] if isinstance(alternative, str) else list(alternative)
        try:
            return transport.execute(commands, fmt)
        except ProtocolError as e:
            logger.debug("{} rejected by {}: {}", commands, transport.host, e)
            last_error = e
    assert last_error is not None
    raise last_error


def sanitize_vlan_name(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_-]", "_", name)[:VLAN_NAME_MAX_LENGTH]


def validate_vlan_id(vlan_id: int) -> int:
    if not is_valid_vlan_id(vlan_id):
        raise ConfigurationError(f"Invalid VLAN ID: {vlan_id} (must be 1-4094)")
    return vlan_id


class _EAPIManager:
    def __init__(self, transport: EAPITransport, sequencer: ConfigSequencer | None = None):
        self._transport = transport
        self._sequencer = sequencer or ConfigSequencer(transport)

    def _run(self, command: str, fmt: str = "json") -> Any:
        return self._transport.run_command(command, fmt)

    def _apply(self, commands: list[str]) -> list[Any]:
        return self._sequencer.apply(commands)


class MonitoringManager(_EAPIManager):
    """Read-only status queries."""

    def get_version(self) -> VersionInfo:
        return normalizers.normalize_version(self._run("show version"))

    def get_hostname(self) -> str:
        return normalizers.normalize_hostname(self._run("show hostname"))

    def get_environment(self) -> EnvironmentStatus:
        """Power, cooling and temperature status.

        Tries the combined queries first; if the device rejects both, each
        section is queried on its own and whichever answer is merged.
        """
        try:
            results = run_first_supported(self._transport, ["show system environment all", "show environment all"])
            return normalizers.normalize_environment(results[0] if results else {})
        except ProtocolError:
            logger.debug("Combined environment query unsupported on {}, querying sections", self._transport.host)

        sections: dict[str, Any] = {}
        for section in ("power", "cooling", "temperature"):
            try:
                sections[section] = self._run(f"show environment {section}")
            except ProtocolError as e:
                logger.debug("show environment {} failed: {}", section, e)
        return normalizers.merge_environment(**sections)

    def get_locator_led(self) -> Any:
        """Locator LED state, or ``{}`` when the device supports neither command."""
        try:
            results = run_first_supported(self._transport, ["show locator-led", "show chassis locator-led"])
        except ProtocolError:
            return {}
        return results[0] if results else {}

    def get_logs(self, lines: int | None = None) -> str | None:
        """Device log text (last ``lines`` lines if given), ``None`` if nothing found.

        A sequence that is accepted but yields no log text moves on to the next
        one, as does a rejected one.
        """
        accepted = False
        last_error: ProtocolError | None = None
        for commands in LOG_SEQUENCES:
            try:
                results = self._transport.execute(list(commands), "text")
            except ProtocolError as e:
                logger.debug("{} rejected: {}", commands, e)
                last_error = e
                continue
            accepted = True
            text = extract_log_text(results)
            if text is not None:
                return tail_lines(text, lines)
        if not accepted and last_error is not None:
            raise last_error
        return None

    def get_mac_address_table(self, vlan: int | None = None, interface: str | None = None) -> list[MacEntry]:
        suffix = ""
        if vlan is not None:
            suffix += f" vlan {validate_vlan_id(vlan)}"
        if interface:
            suffix += f" interface {interface}"
        results = run_first_supported(
            self._transport,
            [f"show mac address-table{suffix}", f"show mac address-table dynamic{suffix}"],
        )
        return normalizers.normalize_mac_table(results[0] if results else {})

    def get_interfaces_transceiver(self, interface: str | None = None) -> dict[str, TransceiverReading]:
        """DOM readings per interface; JSON first, the CLI table as fallback.

        All interfaces are always queried and ``interface`` is matched
        client-side; some firmware ignores or rejects the argument.
        """
        command = "show interfaces transceiver"

        readings: dict[str, TransceiverReading] = {}
        try:
            readings = normalizers.normalize_transceivers(self._run(command))
        except ProtocolError as e:
            logger.debug("JSON transceiver query failed: {}", e)
        if interface:
            readings = filter_by_interface(readings, interface)
        if readings:
            return readings

        text = extract_text_output(self._run(command, "text"))
        return parse_transceiver_text(text, interface)

    def get_running_config(self) -> str:
        return extract_text_output(self._run("show running-config", "text")) or ""

    def show_clock(self) -> str:
        try:
            text = extract_text_output(self._run("show clock", "text"))
            if text:
                return text
        except ProtocolError as e:
            logger.debug("Text show clock failed: {}", e)

        results = self._transport.execute(["enable", "show clock"])
        clock = results[1] if len(results) > 1 else {}
        return extract_text_output(clock) or json.dumps(clock)

    def get_clock_timezone_config(self) -> str:
        output = self._run("show running-config | include ^clock timezone", "text")
        return (extract_text_output(output) or "").strip()

    def get_management_interface(self) -> ManagementInterface:
        """Management1 address and the default gateway, each best-effort."""
        mgmt = ManagementInterface()
        try:
            results = run_first_supported(
                self._transport, [f"show ip interface {MANAGEMENT_INTERFACE}", "show ip interface brief"]
            )
            mgmt = normalizers.normalize_management_address(results[0] if results else {})
        except ProtocolError as e:
            logger.debug("Management address query failed: {}", e)

        mgmt.gateway = self._default_gateway()
        return mgmt

    def _default_gateway(self) -> str | None:
        for command in ("show ip route 0.0.0.0/0", "show ip default-gateway"):
            try:
                gateway = normalizers.normalize_default_route(self._run(command))
            except ProtocolError:
                continue
            if gateway:
                return gateway
        try:
            return parse_default_gateway(extract_text_output(self._run("show ip route", "text")))
        except ProtocolError:
            return None


class VLANManager(_EAPIManager):
    """VLAN listing and configuration."""

    def list_vlans(self) -> list[Vlan]:
        return normalizers.normalize_vlans(self._run("show vlan"))

    def create_vlan(self, vlan_id: int, name: str = "") -> None:
        """Create a VLAN.

        Args:
            vlan_id: VLAN ID (1-4094).
            name: Optional name; characters outside ``[A-Za-z0-9_-]`` become
                ``_`` and it is cut to 32 characters.
        """
        validate_vlan_id(vlan_id)
        commands = [f"vlan {vlan_id}"]
        if name:
            commands.append(f"name {sanitize_vlan_name(name)}")
        self._apply(commands)
        logger.info("Created VLAN {}{}", vlan_id, f" ({name})" if name else "")

    def delete_vlan(self, vlan_id: int) -> None:
        validate_vlan_id(vlan_id)
        self._apply([f"no vlan {vlan_id}"])
        logger.info("Deleted VLAN {}", vlan_id)


def _switchport_commands(
    mode: PortMode | None, vlan: int | None, native_vlan: int | None, trunk_vlans: str
) -> list[str]:
    if mode is PortMode.ACCESS:
        if vlan is None:
            raise ConfigurationError("Access mode requires a VLAN")
        return ["switchport mode access", f"switchport access vlan {vlan}"]
    if mode is PortMode.TRUNK:
        commands = ["switchport mode trunk"]
        if native_vlan is not None:
            commands.append(f"switchport trunk native vlan {native_vlan}")
        if trunk_vlans:
            commands.append(f"switchport trunk allowed vlan {trunk_vlans}")
        return commands
    if mode is PortMode.ROUTED:
        return ["no switchport"]
    return []


def _common_commands(description: str | None, admin_state: LinkState | None) -> list[str]:
    commands = []
    if description is not None:
        commands.append(f"description {description}" if description else "no description")
    if admin_state is LinkState.DOWN:
        commands.append("shutdown")
    elif admin_state is LinkState.UP:
        commands.append("no shutdown")
    return commands


class InterfaceManager(_EAPIManager):
    """Interface state and switchport configuration."""

    def get_interfaces(self) -> list[Interface]:
        return normalizers.normalize_interfaces(self._run("show interfaces"))

    def get_interfaces_status(self) -> dict[str, Any]:
        return normalizers.interface_status_map(self._run("show interfaces status"))

    def get_interfaces_switchport(self) -> dict[str, Any]:
        return normalizers.switchport_map(self._run("show interfaces switchport"))

    def list_interfaces(self) -> list[Interface]:
        """Interfaces with oper/admin state filled in from the status query."""
        interfaces = self.get_interfaces()
        try:
            status = self.get_interfaces_status()
        except ProtocolError as e:
            logger.debug("Interface status unavailable: {}", e)
            return interfaces

        for interface in interfaces:
            entry = status.get(interface.name)
            if not isinstance(entry, dict):
                continue
            link = str(entry.get("linkStatus") or "").lower()
            if link == "disabled":
                interface.admin_status = LinkState.DOWN
            if link == "connected" or str(entry.get("lineProtocolStatus") or "").lower() == "up":
                interface.oper_status = LinkState.UP
        return interfaces

    def configure_interface(self, interface: str, config: InterfaceConfig) -> None:
        commands = _switchport_commands(config.mode, config.vlan, config.native_vlan, config.vlan_list())
        commands += _common_commands(config.description, config.admin_state)
        if not commands:
            raise ConfigurationError(f"Nothing to configure on {interface}")
        self._apply([f"interface {interface}", *commands])
        logger.info("Configured interface {}", interface)


class PortChannelManager(_EAPIManager):
    """Port-channel (LACP) management."""

    def get_port_channels(self) -> list[PortChannel]:
        return normalizers.normalize_port_channels(self._run("show port-channel"))

    def get_port_channel_detail(self, name: str | None = None) -> Any:
        if name is None:
            return self._run("show port-channel detailed")
        return self._run(f"show port-channel {self.extract_number(name)} detailed")

    def get_port_channel_load_balance(self, name: str | None = None) -> Any:
        alternatives = []
        if name is not None:
            alternatives.append(f"show port-channel {self.extract_number(name)} load-balance")
        alternatives += ["show port-channel load-balance", "show port-channel traffic", "show port-channel detailed"]
        results = run_first_supported(self._transport, alternatives)
        return results[0] if results else {}

    @staticmethod
    def extract_number(name: str | int) -> int:
        """``Port-Channel10`` / ``Po10`` / ``10`` -> 10."""
        text = str(name).strip()
        match = re.search(r"(\d+)$", text) or re.search(r"(\d+)", text)
        if not match:
            raise ConfigurationError(f"Invalid port-channel name: {name}")
        return int(match.group(1))

    @staticmethod
    def lacp_mode(mode: LacpMode | str) -> LacpMode:
        try:
            return LacpMode(str(mode.value if isinstance(mode, LacpMode) else mode).lower())
        except ValueError as e:
            raise ConfigurationError(f"Invalid LACP mode: {mode} (must be active, passive or on)") from e

    @staticmethod
    def _member_commands(number: int, members: list[str], mode: LacpMode) -> list[str]:
        commands = []
        for member in members:
            commands += [f"interface {member}", f"channel-group {number} mode {mode.value}"]
        return commands

    @staticmethod
    def _interface_commands(config: PortChannelConfig) -> list[str]:
        commands = _switchport_commands(config.mode, config.vlan, config.native_vlan, config.trunk_vlan_list())
        commands += _common_commands(config.description, config.admin_state)
        return commands

    def create_port_channel(self, name: str | int, config: PortChannelConfig | None = None) -> None:
        """Create ``Port-Channel<N>``; ``config.members`` join it with ``config.lacp_mode``."""
        number = self.extract_number(name)
        config = config or PortChannelConfig()
        commands = [f"interface Port-Channel{number}", *self._interface_commands(config)]
        commands += self._member_commands(number, config.members, config.lacp_mode)
        self._apply(commands)
        logger.info("Created Port-Channel{}", number)

    def configure_port_channel(self, name: str | int, config: PortChannelConfig) -> None:
        number = self.extract_number(name)
        commands = self._interface_commands(config)
        members = self._member_commands(number, config.members, config.lacp_mode)
        if not commands and not members:
            raise ConfigurationError(f"Nothing to configure on Port-Channel{number}")
        self._apply([f"interface Port-Channel{number}", *commands, *members])
        logger.info("Configured Port-Channel{}", number)

    def delete_port_channel(self, name: str | int) -> None:
        number = self.extract_number(name)
        self._apply([f"no interface Port-Channel{number}"])
        logger.info("Deleted Port-Channel{}", number)

    def add_member(self, name: str | int, interface: str, mode: LacpMode | str = LacpMode.ACTIVE) -> None:
        number = self.extract_number(name)
        lacp = self.lacp_mode(mode)
        self._apply(self._member_commands(number, [interface], lacp))
        logger.info("Added {} to Port-Channel{} ({})", interface, number, lacp.value)

    def remove_member(self, interface: str) -> None:
        self._apply([f"interface {interface}", "no channel-group"])
        logger.info("Removed {} from its port-channel", interface)


class SystemManager(_EAPIManager):
    """Clock, management interface and configuration persistence."""

    def save_running_config(self) -> None:
        self._transport.execute(["enable", "copy running-config startup-config"])
        logger.info("Saved running-config on {}", self._transport.host)

    def set_clock(self, when: datetime) -> None:
        command = f"clock set {when:%H:%M:%S} {when.day} {MONTHS[when.month - 1]} {when.year}"
        self._transport.execute(["enable", command])
        logger.info("Clock set on {}", self._transport.host)

    def set_clock_timezone(self, timezone: str, offset: str | None = None) -> None:
        """Set the clock timezone, optionally with a UTC offset (e.g. ``+1`` or ``-5 30``)."""
        timezone = timezone.strip()
        if not timezone or not re.fullmatch(r"[A-Za-z0-9_+\-/]+", timezone):
            raise ConfigurationError(f"Invalid timezone: {timezone!r}")
        command = f"clock timezone {timezone}"
        offset = offset.strip() if offset is not None else ""
        if offset:
            if not re.fullmatch(r"[+-]?\d{1,2}(?:[: ]\d{2})?", offset):
                raise ConfigurationError(f"Invalid timezone offset: {offset!r}")
            command += f" {offset}"
        self._apply([command])

    def configure_management_interface(self, address: str, gateway: str | None = None) -> None:
        """Set the Management1 address (CIDR notation) and optional default gateway."""
        try:
            iface = ipaddress.IPv4Interface(address)
        except ValueError as e:
            raise ConfigurationError(f"Invalid IP address: {address}") from e
        if "/" not in address:
            raise ConfigurationError(f"Address must include a prefix length: {address}")

        commands = [f"interface {MANAGEMENT_INTERFACE}", f"ip address {iface.with_prefixlen}"]
        if gateway:
            try:
                ipaddress.IPv4Address(gateway)
            except ValueError as e:
                raise ConfigurationError(f"Invalid gateway: {gateway}") from e
            commands += ["exit", f"ip default-gateway {gateway}"]
        self._apply(commands)
        logger.info("Configured {} on {}: {}", MANAGEMENT_INTERFACE, self._transport.host, iface.with_prefixlen)
