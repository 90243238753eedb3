"""Error classification and device health tracking."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from eapimgmt.models.system import VersionInfo

CONNECTION_ERROR_PHRASES: tuple[str, ...] = (
    "connection timed out",
    "connection refused",
    "could not resolve host",
    "failed to connect",
    "connection reset",
    "no route to host",
    "network is unreachable",
)


class ErrorCategory(str, Enum):
    """Connection problems vs. errors the device reported while reachable."""

    CONNECTION = "connection"
    OPERATION = "operation"


class HealthStatus(str, Enum):
    UNKNOWN = "unknown"
    UP = "up"
    DOWN = "down"


def classify_error(error: BaseException | str) -> ErrorCategory:
    """Classify by substring match on the lowercased message."""
    message = str(error).lower()
    if any(phrase in message for phrase in CONNECTION_ERROR_PHRASES):
        return ErrorCategory.CONNECTION
    return ErrorCategory.OPERATION


class DeviceHealth(BaseModel):
    """Last known reachability of one device.

    ``UP`` only after a fully successful status query; any failure, whatever
    its category, sets ``DOWN``. The category is kept for diagnostics only.
    """

    host: str
    status: HealthStatus = HealthStatus.UNKNOWN
    last_error: str | None = None
    error_category: ErrorCategory | None = None
    last_checked: datetime | None = None

    def record_success(self) -> None:
        if self.status is not HealthStatus.UP:
            logger.info("{} is up", self.host)
        self.status = HealthStatus.UP
        self.last_error = None
        self.error_category = None
        self.last_checked = datetime.now(timezone.utc)

    def record_failure(self, error: BaseException | str) -> ErrorCategory:
        category = classify_error(error)
        if self.status is not HealthStatus.DOWN:
            logger.warning("{} is down ({}): {}", self.host, category.value, error)
        self.status = HealthStatus.DOWN
        self.last_error = str(error)
        self.error_category = category
        self.last_checked = datetime.now(timezone.utc)
        return category


class PollResult(BaseModel):
    """Outcome of one status poll."""

    host: str
    status: HealthStatus
    hostname: str | None = None
    version: VersionInfo | None = None
    environment_alert: bool = False
    error: str | None = None
    error_category: ErrorCategory | None = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.status is HealthStatus.UP
