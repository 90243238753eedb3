"""Environment (power, cooling, temperature) data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

_HEALTHY_COMPONENT_STATES = ("ok", "connected")
_HEALTHY_SYSTEM_STATES = ("normal", "ok")


def _healthy(status: str, healthy: tuple[str, ...]) -> bool:
    # EOS reports e.g. "temperatureOk" / "coolingOk"
    status = status.lower()
    return status in healthy or status.endswith("ok")


class EnvironmentComponent(BaseModel):
    """A power supply, fan tray or temperature sensor."""

    name: str
    status: str | None = None
    in_alert: bool = False
    details: dict[str, Any] = Field(default_factory=dict)


class EnvironmentStatus(BaseModel):
    """Combined environment status.

    A section the device did not answer for is ``None``; an answered section
    with no components is an empty list.
    """

    power_supplies: list[EnvironmentComponent] | None = None
    fans: list[EnvironmentComponent] | None = None
    temp_sensors: list[EnvironmentComponent] | None = None
    system_status: str = "unknown"

    def is_empty(self) -> bool:
        return self.power_supplies is None and self.fans is None and self.temp_sensors is None

    @property
    def has_alert(self) -> bool:
        """True if any component or the overall system status looks unhealthy."""
        for component in (self.power_supplies or []) + (self.fans or []):
            if not _healthy(component.status or "ok", _HEALTHY_COMPONENT_STATES):
                return True
        if any(sensor.in_alert for sensor in self.temp_sensors or []):
            return True
        if self.system_status == "unknown":
            return False
        return not _healthy(self.system_status, _HEALTHY_SYSTEM_STATES)
