"""Transceiver DOM reading model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TransceiverReading(BaseModel):
    """Digital optical monitoring values for one interface.

    Each field is set only when the device reported a finite, non-sentinel
    number. Serialise with :meth:`as_dict` to get the camelCase wire names
    (``biasCurrent``, ``txPower``, ``rxPower``) without the missing fields.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    temperature: float | None = None
    voltage: float | None = None
    bias_current: float | None = None
    tx_power: float | None = None
    rx_power: float | None = None

    def is_empty(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
