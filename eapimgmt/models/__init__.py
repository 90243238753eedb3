"""Data models for eAPI switch management."""

from eapimgmt.models.environment import EnvironmentComponent, EnvironmentStatus
from eapimgmt.models.interface import Interface, InterfaceConfig, LinkState, PortMode
from eapimgmt.models.mac import MacEntry
from eapimgmt.models.port_channel import LacpMode, PortChannel, PortChannelConfig
from eapimgmt.models.rpc import Command, ResponseFormat, RpcErrorPayload, RpcRequest, RpcResult
from eapimgmt.models.system import ManagementInterface, VersionInfo
from eapimgmt.models.transceiver import TransceiverReading
from eapimgmt.models.vlan import Vlan

__all__ = [
    "Command",
    "EnvironmentComponent",
    "EnvironmentStatus",
    "Interface",
    "InterfaceConfig",
    "LacpMode",
    "LinkState",
    "MacEntry",
    "ManagementInterface",
    "PortChannel",
    "PortChannelConfig",
    "PortMode",
    "ResponseFormat",
    "RpcErrorPayload",
    "RpcRequest",
    "RpcResult",
    "TransceiverReading",
    "VersionInfo",
    "Vlan",
]
