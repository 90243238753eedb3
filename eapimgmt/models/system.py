"""System-related data models."""

from __future__ import annotations

from pydantic import BaseModel


class VersionInfo(BaseModel):
    """Subset of ``show version`` the poll workflow stores."""

    model_name: str = ""
    version: str = ""
    serial_number: str = ""
    system_mac_address: str = ""
    uptime: float = 0.0


class ManagementInterface(BaseModel):
    """Management1 address and the default gateway."""

    ip_address: str | None = None
    mask_length: int | None = None
    gateway: str | None = None
