"""MAC address table data model."""

from __future__ import annotations

from pydantic import BaseModel


class MacEntry(BaseModel):
    """One learned or static MAC address table entry."""

    mac_address: str
    vlan_id: int | None = None
    interface: str | None = None
    entry_type: str | None = None
