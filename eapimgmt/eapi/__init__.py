"""eAPI device command client: transport, sequencer, normalizers and classifier."""

from eapimgmt.eapi.classifier import DeviceHealth, ErrorCategory, HealthStatus, PollResult, classify_error
from eapimgmt.eapi.client import EAPISwitch
from eapimgmt.eapi.sequencer import ConfigSequencer
from eapimgmt.eapi.transport import EAPITransport

__all__ = [
    "ConfigSequencer",
    "DeviceHealth",
    "EAPISwitch",
    "EAPITransport",
    "ErrorCategory",
    "HealthStatus",
    "PollResult",
    "classify_error",
]
