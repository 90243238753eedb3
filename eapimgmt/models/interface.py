"""Interface and switchport data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from eapimgmt.models.vlan import VLAN_ID_MAX, VLAN_ID_MIN


class LinkState(str, Enum):
    """Administrative or operational state of an interface."""

    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"


class PortMode(str, Enum):
    """Switchport mode requested in a configuration push."""

    ACCESS = "access"
    TRUNK = "trunk"
    ROUTED = "routed"


class Interface(BaseModel):
    """Canonical interface state merged from ``show interfaces`` style queries."""

    name: str
    admin_status: LinkState = LinkState.UNKNOWN
    oper_status: LinkState = LinkState.UNKNOWN
    mode: str = "unknown"
    vlan_id: int | None = None
    native_vlan_id: int | None = None
    trunk_vlans: str | None = None
    speed: int | str | None = None
    description: str | None = None
    port_type: str | None = None


class InterfaceConfig(BaseModel):
    """Desired interface configuration.

    ``mode`` access needs ``vlan``; trunk uses ``vlans`` (list or
    comma-separated string) and the optional ``native_vlan``.
    """

    mode: PortMode | None = None
    vlan: int | None = Field(default=None, ge=VLAN_ID_MIN, le=VLAN_ID_MAX)
    vlans: list[int] | str | None = None
    native_vlan: int | None = Field(default=None, ge=VLAN_ID_MIN, le=VLAN_ID_MAX)
    admin_state: LinkState | None = None
    description: str | None = None

    @field_validator("vlans")
    @classmethod
    def _check_vlans(cls, value: list[int] | str | None) -> list[int] | str | None:
        if isinstance(value, list):
            bad = [v for v in value if not VLAN_ID_MIN <= v <= VLAN_ID_MAX]
            if bad:
                raise ValueError(f"invalid VLAN IDs in trunk list: {bad}")
        return value

    def vlan_list(self) -> str:
        """Allowed VLANs rendered for ``switchport trunk allowed vlan``."""
        if isinstance(self.vlans, list):
            return ",".join(str(v) for v in self.vlans)
        return (self.vlans or "").strip()
