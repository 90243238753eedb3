"""Arista eAPI switch management library.

Queries switch state (VLANs, interfaces, port-channels, environment, MAC
tables, transceivers, logs) and pushes configuration over the eAPI JSON-RPC
interface.
"""

__version__ = "0.0.1"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink and enable this package's log records."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "INFO")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


from eapimgmt.config import DeviceEndpoint  # noqa: E402
from eapimgmt.eapi.client import EAPISwitch  # noqa: E402
from eapimgmt.exceptions import (  # noqa: E402
    ConfigSequenceExhausted,
    ConfigurationError,
    ProtocolError,
    SwitchError,
    TransportError,
)

__all__ = [
    "glogger",
    "configure_logging",
    "DeviceEndpoint",
    "EAPISwitch",
    "SwitchError",
    "TransportError",
    "ProtocolError",
    "ConfigSequenceExhausted",
    "ConfigurationError",
]
