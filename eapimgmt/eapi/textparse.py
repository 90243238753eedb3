"""Parsers for free-form CLI text returned by the device.

Used when a structured (``json``) query returns nothing usable, or when a
command only exists in ``text`` format.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, TypeVar

from eapimgmt.models.transceiver import TransceiverReading

T = TypeVar("T")

TRANSCEIVER_HEADER = re.compile(r"Temp.*Voltage.*Current.*Tx Power.*Rx Power", re.IGNORECASE)
UNIT_ROW = re.compile(r"^Port\s+\(", re.IGNORECASE)
SEPARATOR_ROW = re.compile(r"^[-\s]+$")
_IFACE = r"Et\d+(?:/\d+)*|Ethernet\d+(?:/\d+)*|Management\d+|Port-Channel\d+"
INTERFACE_ROW = re.compile(rf"^({_IFACE})\s+(.+)$", re.IGNORECASE)
INTERFACE_LINE = re.compile(rf"^({_IFACE})\b", re.IGNORECASE)
TIMESTAMP = re.compile(r"^\d+:\d+:\d+")
KEY_VALUE = re.compile(r"^([^:]+):\s*(.+)$")
DEFAULT_ROUTE = re.compile(r"0\.0\.0\.0/0.*?via\s+([0-9.]+)")

SENTINELS = ("N/A", "-")

# Column order of the transceiver table
READING_FIELDS = ("temperature", "voltage", "bias_current", "tx_power", "rx_power")

BLOCK_KEY_ALIASES = {
    "temperature": "temperature",
    "temp": "temperature",
    "voltage": "voltage",
    "vcc": "voltage",
    "supply_voltage": "voltage",
    "current": "bias_current",
    "bias_current": "bias_current",
    "tx_bias": "bias_current",
    "tx_bias_current": "bias_current",
    "laser_bias_current": "bias_current",
    "tx_power": "tx_power",
    "optical_tx_power": "tx_power",
    "output_power": "tx_power",
    "rx_power": "rx_power",
    "optical_rx_power": "rx_power",
    "input_power": "rx_power",
}

_ABBREVIATIONS = (
    ("eth", "ethernet"),
    ("et", "ethernet"),
    ("ma", "management"),
    ("po", "portchannel"),
)


def parse_number(token: Any) -> float | None:
    """Return ``token`` as a finite float, or ``None`` for sentinels and junk."""
    if isinstance(token, bool) or token is None:
        return None
    if isinstance(token, (int, float)):
        value = float(token)
        return value if math.isfinite(value) else None
    if not isinstance(token, str):
        return None
    token = token.strip()
    if not token or token.upper() in SENTINELS:
        return None
    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def expand_interface_name(name: str) -> str:
    """``Et2`` -> ``Ethernet2``; other names are returned unchanged."""
    return re.sub(r"^Et(?=\d)", "Ethernet", name.strip(), flags=re.IGNORECASE)


def canonical_interface_name(name: str) -> str:
    """Comparison key: lowercase, abbreviations expanded, separators stripped."""
    value = re.sub(r"[\s\-_]+", "", name.strip().lower())
    for short, full in _ABBREVIATIONS:
        if re.match(rf"{short}\d", value):
            return full + value[len(short) :]
    return value


def interface_matches(requested: str, found: str) -> bool:
    """Exact canonical match, or one canonical name contained in the other."""
    want = canonical_interface_name(requested)
    have = canonical_interface_name(found)
    if not want or not have:
        return False
    return want == have or want in have or have in want


def filter_by_interface(entries: Mapping[str, T], requested: str) -> dict[str, T]:
    """Keep entries for ``requested``; exact matches win over containment."""
    want = canonical_interface_name(requested)
    exact = {name: value for name, value in entries.items() if canonical_interface_name(name) == want}
    if exact:
        return exact
    return {name: value for name, value in entries.items() if interface_matches(requested, name)}


def parse_transceiver_text(text: Any, interface: str | None = None) -> dict[str, TransceiverReading]:
    """Parse ``show interfaces transceiver`` text output.

    Expected format::

                   Temp       Voltage   Current   Tx Power  Rx Power
        Port       (Celsius)  (Volts)   (mA)      (dBm)     (dBm)     Last Update
        ---------- ---------- --------- --------- --------- --------- -----------
        Et2        46.71      3.31      33.48     -2.97     -3.86     0:00:00 ago

    Falls back to ``key: value`` blocks (one per interface line) when no table
    header is present.
    """
    if not isinstance(text, str) or not text.strip():
        return {}

    lines = [line.strip() for line in text.splitlines()]
    readings, header_found = _parse_transceiver_table(lines)
    if not header_found:
        readings = _parse_transceiver_blocks(lines)

    if interface:
        readings = filter_by_interface(readings, interface)
    return readings


def _parse_transceiver_table(lines: list[str]) -> tuple[dict[str, TransceiverReading], bool]:
    readings: dict[str, TransceiverReading] = {}
    in_table = False

    for line in lines:
        if not line:
            continue
        if TRANSCEIVER_HEADER.search(line):
            in_table = True
            continue
        if not in_table or SEPARATOR_ROW.match(line) or UNIT_ROW.match(line):
            continue

        match = INTERFACE_ROW.match(line)
        if not match:
            continue

        name = expand_interface_name(match.group(1))
        values = [v for v in match.group(2).split() if not TIMESTAMP.match(v)]
        reading = TransceiverReading(**{field: parse_number(v) for field, v in zip(READING_FIELDS, values)})
        if not reading.is_empty():
            readings[name] = reading

    return readings, in_table


def _normalize_block_key(key: str) -> str:
    key = re.sub(r"\(.*?\)", "", key).strip().lower()
    return re.sub(r"[\s\-]+", "_", key)


def _store_block(readings: dict[str, TransceiverReading], name: str | None, fields: dict[str, float]) -> None:
    if name and fields:
        readings[name] = TransceiverReading(**fields)


def _parse_transceiver_blocks(lines: list[str]) -> dict[str, TransceiverReading]:
    readings: dict[str, TransceiverReading] = {}
    current: str | None = None
    fields: dict[str, float] = {}

    for line in lines:
        if not line:
            continue

        iface = INTERFACE_LINE.match(line)
        if iface:
            _store_block(readings, current, fields)
            current = expand_interface_name(iface.group(1))
            fields = {}
            continue

        if current is None:
            continue
        kv = KEY_VALUE.match(line)
        if not kv:
            continue
        field = BLOCK_KEY_ALIASES.get(_normalize_block_key(kv.group(1)))
        if field is None:
            continue
        value = parse_number(kv.group(2).split()[0])
        if value is not None:
            fields[field] = value

    _store_block(readings, current, fields)
    return readings


def _log_text_from(item: Any, depth: int = 0) -> str | None:
    if isinstance(item, str):
        return item if item.strip() else None
    if not isinstance(item, dict) or depth > 3:
        return None

    output = item.get("output")
    if isinstance(output, str) and output.strip():
        return output

    messages = item.get("messages")
    if isinstance(messages, list):
        lines: list[str] = []
        for msg in messages:
            if isinstance(msg, str):
                lines.append(msg)
            elif isinstance(msg, dict) and isinstance(msg.get("message"), str):
                lines.append(msg["message"])
        lines = [line for line in lines if line]
        if lines:
            return "\n".join(lines)

    for value in item.values():
        if isinstance(value, dict):
            found = _log_text_from(value, depth + 1)
            if found:
                return found
    return None


def extract_log_text(results: Any) -> str | None:
    """Find log text in a ``show logging`` result list.

    The last result is checked first, then every result in order. Returns
    ``None`` when no ``output`` string or ``messages`` list is found.
    """
    if not isinstance(results, list) or not results:
        return None
    found = _log_text_from(results[-1])
    if found:
        return found
    for item in results:
        found = _log_text_from(item)
        if found:
            return found
    return None


def extract_text_output(result: Any) -> str | None:
    """The ``output`` string of a text-format result."""
    if isinstance(result, str):
        return result
    if isinstance(result, dict) and isinstance(result.get("output"), str):
        return result["output"]
    return None


def tail_lines(text: str, lines: int | None) -> str:
    if not lines or lines <= 0:
        return text
    return "\n".join(text.splitlines()[-lines:])


def parse_default_gateway(text: Any) -> str | None:
    """Next hop of the default route in ``show ip route`` text output."""
    if not isinstance(text, str):
        return None
    match = DEFAULT_ROUTE.search(text)
    return match.group(1) if match else None
