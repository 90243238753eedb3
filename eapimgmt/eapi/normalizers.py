"""Turn loosely-typed eAPI JSON results into canonical models.

Every public normalizer is total: a payload it cannot make sense of yields an
empty result (logged at debug level as a normalization miss), never an
exception.
"""

from __future__ import annotations

import functools
import re
from typing import Any, Callable, Iterable, Iterator, TypeVar

from loguru import logger

from eapimgmt.eapi.shapes import (
    INTERFACE_KEY_PREFIXES,
    Matcher,
    ShapeMatch,
    keyed_by_interface,
    list_of_dicts,
    nested,
    passthrough,
    probe,
    wrapped,
)
from eapimgmt.eapi.textparse import parse_number, parse_transceiver_text
from eapimgmt.models.environment import EnvironmentComponent, EnvironmentStatus
from eapimgmt.models.interface import Interface, LinkState
from eapimgmt.models.mac import MacEntry
from eapimgmt.models.port_channel import PortChannel
from eapimgmt.models.system import ManagementInterface, VersionInfo
from eapimgmt.models.transceiver import TransceiverReading
from eapimgmt.models.vlan import Vlan, is_valid_vlan_id

R = TypeVar("R")

INTERFACE_STATUS_MATCHERS: tuple[Matcher, ...] = (
    wrapped("interfaceStatuses"),
    wrapped("interfaces"),
    wrapped("ports"),
    keyed_by_interface(),
    passthrough(),
)

INTERFACE_MATCHERS: tuple[Matcher, ...] = (
    wrapped("interfaces"),
    keyed_by_interface(any_key=True),
    passthrough(),
)

SWITCHPORT_MATCHERS: tuple[Matcher, ...] = (
    wrapped("switchports"),
    wrapped("interfaces"),
    wrapped("ports"),
    passthrough(),
)

PORT_CHANNEL_MATCHERS: tuple[Matcher, ...] = (
    wrapped("portChannels"),
    wrapped("portChannelInterfaces"),
    wrapped("interfaces"),
    keyed_by_interface(("port-channel",), any_key=True),
    passthrough(),
)

MAC_TABLE_MATCHERS: tuple[Matcher, ...] = (
    nested("unicastTable", "tableEntries"),
    wrapped("tableEntries"),
    wrapped("entries"),
    list_of_dicts(),
    passthrough(),
)

TRANSCEIVER_PREFIXES = ("ethernet", "management", "port-channel")

ACCESS_VLAN_KEYS = ("accessVlan", "accessVlanId", "vlanId")
NATIVE_VLAN_KEYS = ("nativeVlan", "nativeVlanId", "trunkNativeVlan", "trunkingNativeVlanId")
TRUNK_VLAN_KEYS = ("trunkVlans", "trunkAllowedVlans", "trunkingVlans")
MODE_KEYS = ("mode", "switchportMode", "interfaceMode")
SPEED_KEYS = ("bandwidth", "speed", "linkSpeed")
PORT_TYPE_KEYS = (
    "type",
    "Type",
    "portType",
    "interfaceType",
    "moduleType",
    "mediaType",
    "transceiverType",
    "physicalMediaType",
)
MEMBER_KEYS = ("interfaces", "members", "activePorts", "inactivePorts", "ports")
INTERFACE_FIELD_KEYS = (
    "name",
    "interface",
    "interfaceStatus",
    "linkStatus",
    "lineProtocolStatus",
    "operStatus",
    "adminStatus",
    "switchportInfo",
    "vlanInformation",
    *MODE_KEYS,
    *SPEED_KEYS,
)

TRANSCEIVER_JSON_KEYS = {
    "temperature": ("temperature", "temp"),
    "voltage": ("voltage", "vcc"),
    "bias_current": ("biasCurrent", "txBias", "current", "bias"),
    "tx_power": ("txPower", "outputPower"),
    "rx_power": ("rxPower", "inputPower"),
}

_ADMIN_DOWN = ("down", "disabled", "admindown", "shutdown")
_OPER_UP = ("up", "connected")


def total(default: Callable[[], R]) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorator: any failure inside the normalizer yields ``default()``."""

    def decorator(func: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> R:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.debug("Normalization miss in {}: {}: {}", func.__name__, type(e).__name__, e)
                return default()

        return wrapper

    return decorator


def as_int(value: Any) -> int | None:
    """Integer value of ``value``, accepting digit strings and integral floats."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and re.fullmatch(r"\s*-?\d+\s*", value):
        return int(value)
    return None


def first_present(mapping: Any, *keys: str) -> Any:
    """Value of the first key that is present and not ``None``."""
    if not isinstance(mapping, dict):
        return None
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _entries(data: Any) -> Iterator[tuple[Any, Any]]:
    """(key, value) pairs of a dict, or (None, item) for a list."""
    if isinstance(data, dict):
        yield from data.items()
    elif isinstance(data, list):
        for item in data:
            yield None, item


def _probe_data(payload: Any, matchers: Iterable[Matcher], required: tuple[str, ...] | None = None) -> Any:
    """Data of the first matching shape.

    With ``required``, a passthrough match keeps only the entries carrying one
    of those keys.
    """
    found: ShapeMatch | None = probe(payload, tuple(matchers))
    if found is None:
        return None
    logger.trace("Payload matched shape {}", found.shape)
    if required is None or found.shape != "passthrough":
        return found.data
    return {k: v for k, v in found.data.items() if isinstance(v, dict) and any(key in v for key in required)}


# VLANs


def _vlan_name(value: Any) -> str | None:
    return _text(first_present(value, "name", "vlanName", "nameAlias"))


def _vlan_keyed_by_id(key: Any, value: Any) -> Vlan | None:
    vlan_id = as_int(key)
    if not is_valid_vlan_id(vlan_id):
        return None
    description = _text(value.get("description")) if isinstance(value, dict) else None
    return Vlan(vlan_id=vlan_id, name=_vlan_name(value), description=description)


def _vlan_object_with_id(key: Any, value: Any) -> Vlan | None:
    if not isinstance(value, dict):
        return None
    vlan_id = None
    for id_key in ("vlanId", "id", "vlan"):
        vlan_id = as_int(value.get(id_key))
        if vlan_id is not None:
            break
    if not is_valid_vlan_id(vlan_id):
        return None
    return Vlan(vlan_id=vlan_id, name=_vlan_name(value), description=_text(value.get("description")))


VLAN_ENTRY_SHAPES: tuple[Callable[[Any, Any], Vlan | None], ...] = (_vlan_keyed_by_id, _vlan_object_with_id)


@total(list)
def normalize_vlans(payload: Any) -> list[Vlan]:
    """``show vlan`` result -> VLANs with ids in 1..4094, in payload order."""
    data = _probe_data(payload, (wrapped("vlans"), passthrough(), list_of_dicts()))
    vlans: list[Vlan] = []
    for key, value in _entries(data):
        for shape in VLAN_ENTRY_SHAPES:
            vlan = shape(key, value)
            if vlan is not None:
                vlans.append(vlan)
                break
    return vlans


# Interfaces


def _index_by_name(items: list[Any]) -> dict[str, Any]:
    indexed: dict[str, Any] = {}
    for item in items:
        name = _text(first_present(item, "name", "interface"))
        if name:
            indexed[name] = item
    return indexed


def _as_interface_map(data: Any) -> dict[str, Any]:
    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return _index_by_name(data)
    return {}


@total(dict)
def interface_status_map(payload: Any) -> dict[str, Any]:
    """``show interfaces status`` result -> ``{interface name: status entry}``."""
    return _as_interface_map(_probe_data(payload, INTERFACE_STATUS_MATCHERS))


@total(dict)
def switchport_map(payload: Any) -> dict[str, Any]:
    """``show interfaces switchport`` result -> ``{interface name: switchport entry}``."""
    return _as_interface_map(_probe_data(payload, SWITCHPORT_MATCHERS))


def _first_in(sources: list[dict[str, Any]], keys: tuple[str, ...]) -> Any:
    for key in keys:
        for source in sources:
            value = source.get(key)
            if value is not None:
                return value
    return None


def _first_int_in(sources: list[dict[str, Any]], keys: tuple[str, ...]) -> int | None:
    for key in keys:
        for source in sources:
            value = as_int(source.get(key))
            if value is not None:
                return value
    return None


def _admin_state(raw: Any, link: Any) -> LinkState:
    if raw is None:
        # derive from interfaceStatus/linkStatus
        link = (_text(link) or "").lower()
        if not link:
            return LinkState.UNKNOWN
        return LinkState.DOWN if link == "disabled" else LinkState.UP
    state = str(raw).strip().lower()
    if state in ("", "unknown"):
        return LinkState.UNKNOWN
    return LinkState.DOWN if state in _ADMIN_DOWN else LinkState.UP


def _oper_state(raw: Any) -> LinkState:
    state = (_text(raw) or "").strip().lower()
    if state in ("", "unknown"):
        return LinkState.UNKNOWN
    return LinkState.UP if state in _OPER_UP else LinkState.DOWN


def _trunk_vlans(value: Any) -> str | None:
    if isinstance(value, list):
        return ",".join(str(v) for v in value) or None
    text = _text(value)
    if text is None:
        return None
    return text.strip() or None


def interface_from_entry(key: Any, value: dict[str, Any]) -> Interface | None:
    """Canonicalise one interface entry; ``key`` is the map key it was found under."""
    name = _text(first_present(value, "name", "interface")) or (key if isinstance(key, str) else None)
    if not name:
        return None

    sources = [value] + [value[k] for k in ("switchportInfo", "vlanInformation") if isinstance(value.get(k), dict)]
    link = first_present(value, "interfaceStatus", "linkStatus")
    oper = first_present(value, "operStatus", "linkStatus", "lineProtocolStatus", "interfaceStatus")
    mode = _text(_first_in(sources, MODE_KEYS))
    port_type = _text(first_present(value, *PORT_TYPE_KEYS))
    speed = first_present(value, *SPEED_KEYS)

    return Interface(
        name=name,
        admin_status=_admin_state(first_present(value, "adminStatus", "admin_state"), link),
        oper_status=_oper_state(oper),
        mode=mode.lower() if mode else "unknown",
        vlan_id=_first_int_in(sources, ACCESS_VLAN_KEYS),
        native_vlan_id=_first_int_in(sources, NATIVE_VLAN_KEYS),
        trunk_vlans=_trunk_vlans(_first_in(sources, TRUNK_VLAN_KEYS)),
        speed=speed if isinstance(speed, (int, str)) and not isinstance(speed, bool) else None,
        description=_text(first_present(value, "description", "desc")),
        port_type=port_type if port_type and port_type.lower() != "unknown" else None,
    )


def build_interfaces(entries: Any) -> list[Interface]:
    interfaces: list[Interface] = []
    for key, value in _entries(entries):
        if not isinstance(value, dict):
            continue
        interface = interface_from_entry(key, value)
        if interface is not None:
            interfaces.append(interface)
    return interfaces


@total(list)
def normalize_interfaces(payload: Any) -> list[Interface]:
    """``show interfaces`` result (wrapped or flat) -> canonical interfaces."""
    return build_interfaces(_probe_data(payload, INTERFACE_MATCHERS, INTERFACE_FIELD_KEYS))


@total(list)
def normalize_interface_status(payload: Any) -> list[Interface]:
    return build_interfaces(interface_status_map(payload))


# Port-channels


def _member_names(data: dict[str, Any]) -> list[str]:
    names: list[str] = []
    for key in MEMBER_KEYS:
        members = data.get(key)
        if isinstance(members, dict):
            names.extend(k for k in members if isinstance(k, str))
        elif isinstance(members, list):
            for member in members:
                name = member if isinstance(member, str) else _text(first_present(member, "name", "interface"))
                if name:
                    names.append(name)
    return list(dict.fromkeys(names))


def _lacp_mode(data: dict[str, Any]) -> str | None:
    mode = _text(first_present(data, "lacpMode", "protocol"))
    if mode:
        return mode
    for key in ("activePorts", "inactivePorts", "interfaces", "members"):
        members = data.get(key)
        if isinstance(members, dict):
            for member in members.values():
                mode = _text(first_present(member, "lacpMode"))
                if mode:
                    return mode
    return None


@total(list)
def normalize_port_channels(payload: Any) -> list[PortChannel]:
    """``show port-channel`` result -> port-channels with their members."""
    channels: list[PortChannel] = []
    for key, value in _entries(_probe_data(payload, PORT_CHANNEL_MATCHERS, MEMBER_KEYS)):
        data = value if isinstance(value, dict) else {}
        name = _text(first_present(data, "name", "interface")) or (key if isinstance(key, str) else None)
        if not name:
            continue
        mode = _text(first_present(data, "mode", "switchportMode"))
        lacp = _lacp_mode(data)
        channels.append(
            PortChannel(
                name=name,
                members=_member_names(data),
                mode=mode.lower() if mode else "unknown",
                lacp_mode=lacp.lower() if lacp else "unknown",
            )
        )
    return channels


# MAC address table


@total(list)
def normalize_mac_table(payload: Any) -> list[MacEntry]:
    entries: list[MacEntry] = []
    for _, value in _entries(_probe_data(payload, MAC_TABLE_MATCHERS)):
        mac = _text(first_present(value, "macAddress", "mac_address", "mac"))
        if not mac:
            continue
        entries.append(
            MacEntry(
                mac_address=mac,
                vlan_id=as_int(first_present(value, "vlanId", "vlan")),
                interface=_text(first_present(value, "interface", "port")),
                entry_type=_text(first_present(value, "entryType", "type")),
            )
        )
    return entries


# Environment


def environment_components(section: Any) -> list[EnvironmentComponent] | None:
    """Components of one environment section; ``None`` if the section is absent."""
    if not isinstance(section, (dict, list)):
        return None
    components: list[EnvironmentComponent] = []
    for index, (key, value) in enumerate(_entries(section), start=1):
        if not isinstance(value, dict):
            continue
        name = _text(first_present(value, "name", "label")) or (str(key) if key is not None else str(index))
        components.append(
            EnvironmentComponent(
                name=name,
                status=_text(first_present(value, "status", "state", "hwStatus")),
                in_alert=bool(first_present(value, "inAlertState", "alert") or False),
                details=value,
            )
        )
    return components


def _power_section(payload: Any) -> Any:
    return first_present(payload, "powerSupplySlots", "powerSupplies")


def _cooling_section(payload: Any) -> Any:
    return first_present(payload, "fanTraySlots", "fans")


def _temperature_section(payload: Any) -> Any:
    return first_present(payload, "tempSensors", "temperature")


@total(EnvironmentStatus)
def normalize_environment(payload: Any) -> EnvironmentStatus:
    """Combined ``show (system) environment all`` result."""
    if not isinstance(payload, dict) or not payload:
        return EnvironmentStatus()
    status = _text(first_present(payload, "systemStatus", "status"))
    env = EnvironmentStatus(
        power_supplies=environment_components(_power_section(payload)),
        fans=environment_components(_cooling_section(payload)),
        temp_sensors=environment_components(_temperature_section(payload)),
    )
    if status:
        env.system_status = status
    elif not env.is_empty():
        env.system_status = "normal"
    return env


@total(EnvironmentStatus)
def merge_environment(power: Any = None, cooling: Any = None, temperature: Any = None) -> EnvironmentStatus:
    """Recombine the per-section queries; ``None`` marks a query that failed."""

    def section(payload: Any, extract: Callable[[Any], Any]) -> list[EnvironmentComponent] | None:
        if payload is None:
            return None
        return environment_components(extract(payload)) or []

    env = EnvironmentStatus(
        power_supplies=section(power, _power_section),
        fans=section(cooling, _cooling_section),
        temp_sensors=section(temperature, _temperature_section),
    )
    if not env.is_empty():
        env.system_status = _text(first_present(temperature, "systemStatus")) or "normal"
    return env


# Transceivers


def _reading_from_json(value: dict[str, Any]) -> TransceiverReading:
    fields = {}
    for field, keys in TRANSCEIVER_JSON_KEYS.items():
        number = parse_number(first_present(value, *keys))
        if number is not None:
            fields[field] = number
    return TransceiverReading(**fields)


def _nested_interfaces(payload: Any) -> ShapeMatch | None:
    if not isinstance(payload, dict):
        return None
    for value in payload.values():
        if isinstance(value, dict) and isinstance(value.get("interfaces"), dict):
            return ShapeMatch(shape="nested:*.interfaces", data=value["interfaces"])
    return None


TRANSCEIVER_MATCHERS: tuple[Matcher, ...] = (
    wrapped("interfaces"),
    wrapped("output"),
    keyed_by_interface(TRANSCEIVER_PREFIXES, any_key=True),
    _nested_interfaces,
)


@total(dict)
def normalize_transceivers(payload: Any) -> dict[str, TransceiverReading]:
    """``show interfaces transceiver`` JSON -> ``{interface: reading}``.

    Some firmware wraps the CLI table in ``{"output": "..."}``; that text is
    handed to :func:`parse_transceiver_text`.
    """
    if isinstance(payload, dict) and isinstance(payload.get("output"), str):
        return parse_transceiver_text(payload["output"])

    readings: dict[str, TransceiverReading] = {}
    data = _probe_data(payload, TRANSCEIVER_MATCHERS)
    if not isinstance(data, dict):
        return readings
    for name, value in data.items():
        if not isinstance(value, dict):
            continue
        reading = _reading_from_json(value)
        if not reading.is_empty():
            readings[str(name)] = reading
    return readings


# System


@total(VersionInfo)
def normalize_version(payload: Any) -> VersionInfo:
    if not isinstance(payload, dict):
        return VersionInfo()
    uptime = parse_number(payload.get("uptime"))
    return VersionInfo(
        model_name=_text(payload.get("modelName")) or "",
        version=_text(payload.get("version")) or "",
        serial_number=_text(payload.get("serialNumber")) or "",
        system_mac_address=_text(payload.get("systemMacAddress")) or "",
        uptime=uptime or 0.0,
    )


@total(str)
def normalize_hostname(payload: Any) -> str:
    return _text(first_present(payload, "hostname", "fqdn")) or ""


MANAGEMENT_ADDRESS_MATCHERS: tuple[Matcher, ...] = (
    nested("interfaces", "Management1", "interfaceAddress", "primaryIp"),
    nested("interfaces", "Management1", "interfaceAddress", "ipAddr"),
    nested("Management1", "interfaceAddress", "primaryIp"),
    nested("interfaceAddress", "primaryIp"),
    nested("interfaces", "Management1"),
)


@total(ManagementInterface)
def normalize_management_address(payload: Any) -> ManagementInterface:
    """Management1 address from ``show ip interface`` (full or brief)."""
    data = _probe_data(payload, MANAGEMENT_ADDRESS_MATCHERS)
    address = _text(first_present(data, "address", "ipAddress"))
    if not address or address == "0.0.0.0":
        return ManagementInterface()
    return ManagementInterface(ip_address=address, mask_length=as_int(first_present(data, "maskLen", "maskLength")))


def _next_hop(route: Any) -> str | None:
    if isinstance(route, list):
        route = route[0] if route else None
    if not isinstance(route, dict):
        return None
    hop = _text(first_present(route, "via", "nextHop"))
    if hop:
        return hop
    vias = route.get("vias")
    if isinstance(vias, list) and vias:
        return _text(first_present(vias[0], "nexthopAddr", "nextHop", "via"))
    return None


@total(lambda: None)
def normalize_default_route(payload: Any) -> str | None:
    """Gateway of ``0.0.0.0/0`` in a ``show ip route`` or ``show ip default-gateway`` result."""
    routes = first_present(first_present(first_present(payload, "vrfs"), "default"), "routes")
    if routes is None:
        routes = first_present(payload, "routes")
    hop = _next_hop(first_present(routes, "0.0.0.0/0"))
    if hop:
        return hop
    return _text(first_present(payload, "defaultGateway", "gateway"))


__all__ = [
    "INTERFACE_KEY_PREFIXES",
    "as_int",
    "build_interfaces",
    "environment_components",
    "first_present",
    "interface_from_entry",
    "interface_status_map",
    "merge_environment",
    "normalize_default_route",
    "normalize_environment",
    "normalize_hostname",
    "normalize_interface_status",
    "normalize_interfaces",
    "normalize_mac_table",
    "normalize_management_address",
    "normalize_port_channels",
    "normalize_transceivers",
    "normalize_version",
    "normalize_vlans",
    "switchport_map",
    "total",
]
