"""Configuration-mode entry with ordered fallback sequences.

Firmware and eAPI setups disagree on which privilege and mode-entry commands
are accepted, so a configuration push is tried behind each candidate prefix
in turn until one is accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Sequence

from loguru import logger

from eapimgmt.exceptions import ConfigSequenceExhausted, ConfigurationError, ProtocolError, SwitchError

CONFIG_MODE_PREFIXES: tuple[tuple[str, ...], ...] = (
    ("enable", "configure"),
    ("configure",),
    ("enable", "configure terminal"),
    ("configure terminal",),
)

RECOVERABLE_MARKERS: tuple[str, ...] = ("invalid command", "failed", "permission")

EXHAUSTED_MESSAGE = "Failed to enter configuration mode"


class CommandRunner(Protocol):
    def execute(self, commands: Sequence[Any], fmt: str = ...) -> list[Any]: ...


class AttemptStatus(Enum):
    SUCCESS = "success"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


@dataclass(frozen=True)
class SequenceAttempt:
    """Outcome of pushing the commands behind one candidate prefix."""

    prefix: tuple[str, ...]
    status: AttemptStatus
    result: list[Any] | None = None
    error: SwitchError | None = None


def is_recoverable(error: SwitchError) -> bool:
    """Only RPC-level rejections mentioning a mode/privilege problem move on."""
    if not isinstance(error, ProtocolError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in RECOVERABLE_MARKERS)


class ConfigSequencer:
    """Push configuration commands, trying each mode-entry prefix in order."""

    def __init__(self, transport: CommandRunner, prefixes: Sequence[Sequence[str]] = CONFIG_MODE_PREFIXES):
        self._transport = transport
        self.prefixes = tuple(tuple(p) for p in prefixes)

    def attempt(self, prefix: tuple[str, ...], commands: Sequence[Any]) -> SequenceAttempt:
        try:
            result = self._transport.execute([*prefix, *commands])
        except SwitchError as e:
            status = AttemptStatus.RECOVERABLE if is_recoverable(e) else AttemptStatus.FATAL
            return SequenceAttempt(prefix=prefix, status=status, error=e)
        return SequenceAttempt(prefix=prefix, status=AttemptStatus.SUCCESS, result=result)

    def apply(self, commands: Sequence[Any]) -> list[Any]:
        """Run ``commands`` in configuration mode.

        Returns:
            Per-command results of the accepted sequence (prefix included).

        Raises:
            ConfigurationError: ``commands`` is empty.
            ConfigSequenceExhausted: Every prefix was rejected with a
                recoverable error.
            SwitchError: The first non-recoverable error, unchanged.
        """
        if not commands:
            raise ConfigurationError("No configuration commands given")

        last_error: SwitchError | None = None
        for index, prefix in enumerate(self.prefixes, start=1):
            outcome = self.attempt(prefix, commands)
            if outcome.status is AttemptStatus.SUCCESS:
                if index > 1:
                    logger.info("Configuration accepted with sequence {} ({})", index, " / ".join(prefix))
                return outcome.result or []

            assert outcome.error is not None
            if outcome.status is AttemptStatus.FATAL:
                raise outcome.error

            logger.debug("Sequence {} ({}) rejected: {}", index, " / ".join(prefix), outcome.error)
            last_error = outcome.error

        message = str(last_error) if last_error else EXHAUSTED_MESSAGE
        raise ConfigSequenceExhausted(message, attempts=len(self.prefixes), last_error=last_error) from last_error
