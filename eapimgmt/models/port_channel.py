"""Port-channel (LAG) data models."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field

from eapimgmt.models.interface import LinkState, PortMode
from eapimgmt.models.vlan import VLAN_ID_MAX, VLAN_ID_MIN


class LacpMode(str, Enum):
    """Channel-group mode applied to member interfaces."""

    ACTIVE = "active"
    PASSIVE = "passive"
    ON = "on"


class PortChannel(BaseModel):
    """Canonical port-channel with its member interfaces."""

    name: str
    members: list[str] = Field(default_factory=list)
    mode: str = "unknown"
    lacp_mode: str = "unknown"

    @property
    def number(self) -> int | None:
        match = re.search(r"(\d+)$", self.name)
        return int(match.group(1)) if match else None


class PortChannelConfig(BaseModel):
    """Desired port-channel interface configuration.

    LACP mode is applied on the members, not on the port-channel itself:
    each interface in ``members`` gets ``channel-group <N> mode <lacp_mode>``.
    """

    mode: PortMode | None = None
    vlan: int | None = Field(default=None, ge=VLAN_ID_MIN, le=VLAN_ID_MAX)
    native_vlan: int | None = Field(default=None, ge=VLAN_ID_MIN, le=VLAN_ID_MAX)
    trunk_vlans: list[int] | str | None = None
    members: list[str] = Field(default_factory=list)
    lacp_mode: LacpMode = LacpMode.ACTIVE
    description: str | None = None
    admin_state: LinkState | None = None

    def trunk_vlan_list(self) -> str:
        if isinstance(self.trunk_vlans, list):
            return ",".join(str(v) for v in self.trunk_vlans)
        return (self.trunk_vlans or "").strip()
