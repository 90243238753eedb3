"""eAPI switch client."""

from __future__ import annotations

from types import TracebackType
from typing import Any, Self

from loguru import logger

from eapimgmt.config import DeviceEndpoint
from eapimgmt.eapi.classifier import DeviceHealth, PollResult
from eapimgmt.eapi.managers import InterfaceManager, MonitoringManager, PortChannelManager, SystemManager, VLANManager
from eapimgmt.eapi.sequencer import ConfigSequencer
from eapimgmt.eapi.transport import EAPITransport
from eapimgmt.exceptions import SwitchError


class EAPISwitch:
    """High-level client for one eAPI switch.

    The endpoint is resolved by the caller and fixed for the lifetime of the
    client.

    Usage::

        endpoint = DeviceEndpoint(host="10.0.0.2", username="admin", password="secret")
        with EAPISwitch(endpoint) as switch:
            for vlan in switch.vlan.list_vlans():
                print(vlan.vlan_id, vlan.name)
            switch.vlan.create_vlan(100, "servers")
    """

    def __init__(self, endpoint: DeviceEndpoint, transport: EAPITransport | None = None):
        self.endpoint = endpoint
        self._transport = transport or EAPITransport(endpoint)
        self._sequencer = ConfigSequencer(self._transport)

        # Lazy-initialized managers
        self._monitoring: MonitoringManager | None = None
        self._vlan: VLANManager | None = None
        self._interfaces: InterfaceManager | None = None
        self._port_channel: PortChannelManager | None = None
        self._system: SystemManager | None = None

    @property
    def host(self) -> str:
        return self.endpoint.host

    @property
    def transport(self) -> EAPITransport:
        return self._transport

    @property
    def monitoring(self) -> MonitoringManager:
        """Read-only status queries."""
        if self._monitoring is None:
            self._monitoring = MonitoringManager(self._transport, self._sequencer)
        return self._monitoring

    @property
    def vlan(self) -> VLANManager:
        if self._vlan is None:
            self._vlan = VLANManager(self._transport, self._sequencer)
        return self._vlan

    @property
    def interfaces(self) -> InterfaceManager:
        if self._interfaces is None:
            self._interfaces = InterfaceManager(self._transport, self._sequencer)
        return self._interfaces

    @property
    def port_channel(self) -> PortChannelManager:
        """Port-channel (LACP) management."""
        if self._port_channel is None:
            self._port_channel = PortChannelManager(self._transport, self._sequencer)
        return self._port_channel

    @property
    def system(self) -> SystemManager:
        if self._system is None:
            self._system = SystemManager(self._transport, self._sequencer)
        return self._system

    def execute(self, commands: list[Any], fmt: str = "json") -> list[Any]:
        """Run raw commands without entering configuration mode."""
        return self._transport.execute(commands, fmt)

    def apply_config(self, commands: list[Any]) -> list[Any]:
        """Push configuration commands, trying each mode-entry sequence in turn."""
        return self._sequencer.apply(commands)

    def test_connection(self) -> bool:
        """True if ``show version`` succeeds."""
        try:
            self.monitoring.get_version()
        except SwitchError as e:
            logger.warning("Connection test to {} failed: {}", self.host, e)
            return False
        return True

    def poll(self, health: DeviceHealth | None = None) -> PollResult:
        """Status poll: version and hostname must succeed, environment is best-effort.

        Args:
            health: State record to update; a fresh one is used if omitted.
        """
        health = health or DeviceHealth(host=self.host)
        try:
            version = self.monitoring.get_version()
            hostname = self.monitoring.get_hostname()
        except SwitchError as e:
            category = health.record_failure(e)
            return PollResult(host=self.host, status=health.status, error=str(e), error_category=category)

        health.record_success()

        environment_alert = False
        try:
            environment_alert = self.monitoring.get_environment().has_alert
        except SwitchError as e:
            logger.debug("Environment check on {} failed: {}", self.host, e)

        return PollResult(
            host=self.host,
            status=health.status,
            hostname=hostname or None,
            version=version,
            environment_alert=environment_alert,
        )

    def connect(self) -> None:
        self._transport.connect()

    def disconnect(self) -> None:
        """Drop managers and close the HTTP session."""
        self._monitoring = None
        self._vlan = None
        self._interfaces = None
        self._port_channel = None
        self._system = None

        if self._transport.is_connected():
            self._transport.disconnect()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect()
