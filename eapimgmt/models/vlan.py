"""VLAN-related data models."""

from __future__ import annotations

from pydantic import BaseModel, Field

VLAN_ID_MIN = 1
VLAN_ID_MAX = 4094


class Vlan(BaseModel):
    """A VLAN as reported by the switch."""

    vlan_id: int = Field(ge=VLAN_ID_MIN, le=VLAN_ID_MAX)
    name: str | None = None
    description: str | None = None


def is_valid_vlan_id(vlan_id: int | None) -> bool:
    return vlan_id is not None and VLAN_ID_MIN <= vlan_id <= VLAN_ID_MAX
