"""CLI for eAPI switch management.

Connection parameters default to the ``EAPI_*`` environment variables
(``EAPI_HOST``, ``EAPI_USERNAME``, ``EAPI_PASSWORD``, ``EAPI_PORT``,
``EAPI_USE_HTTPS``, ``EAPI_TIMEOUT``, ``EAPI_VERIFY_SSL``).

Examples:
  eapimgmt --host 10.0.0.2 --username admin --password <PW> monitor

  eapimgmt --host 10.0.0.2 --password <PW> vlan create 100 --name servers

  eapimgmt --host 10.0.0.2 --password <PW> \\
      interface config Ethernet5 --mode trunk --vlans 10,20 --native-vlan 1

  eapimgmt --host 10.0.0.2 --password <PW> port-channel add-member 10 Ethernet1 --lacp-mode active

  eapimgmt --host 10.0.0.2 --password <PW> transceiver --interface Et2
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from typing import Any, Callable

from pydantic import ValidationError
from tabulate import tabulate

from eapimgmt.config import DeviceEndpoint
from eapimgmt.eapi.client import EAPISwitch
from eapimgmt.exceptions import SwitchError
from eapimgmt.models.interface import InterfaceConfig, LinkState, PortMode
from eapimgmt.models.port_channel import LacpMode, PortChannelConfig


def _print_table(rows: list[list[Any]], headers: list[str], empty: str) -> None:
    if not rows:
        print(empty)
        return
    print(tabulate(rows, headers=headers, tablefmt="simple"))


def cmd_monitor(switch: EAPISwitch, args: argparse.Namespace) -> None:
    """Show system, environment and interface summary."""
    print("=== System Info ===")
    info = switch.monitoring.get_version()
    rows = [
        ["Hostname", switch.monitoring.get_hostname()],
        ["Model", info.model_name],
        ["Version", info.version],
        ["Serial", info.serial_number],
        ["MAC", info.system_mac_address],
        ["Uptime", f"{info.uptime:.0f}s"],
    ]
    print(tabulate(rows, tablefmt="plain"))

    print("\n=== Environment ===")
    cmd_env(switch, args)

    print("\n=== Interfaces ===")
    interfaces = switch.interfaces.list_interfaces()
    up_count = sum(1 for i in interfaces if i.oper_status is LinkState.UP)
    print(f"{up_count}/{len(interfaces)} interfaces up")


def cmd_poll(switch: EAPISwitch, args: argparse.Namespace) -> None:
    result = switch.poll()
    rows = [
        ["Status", result.status.value],
        ["Hostname", result.hostname or "-"],
        ["Version", result.version.version if result.version else "-"],
        ["Environment alert", "yes" if result.environment_alert else "no"],
    ]
    if result.error:
        rows += [["Error", result.error], ["Category", result.error_category.value if result.error_category else "-"]]
    print(tabulate(rows, tablefmt="plain"))
    if not result.ok:
        sys.exit(1)


def cmd_vlan_list(switch: EAPISwitch, args: argparse.Namespace) -> None:
    vlans = switch.vlan.list_vlans()
    rows = [[v.vlan_id, v.name or "", v.description or ""] for v in vlans]
    _print_table(rows, ["VLAN", "Name", "Description"], "No VLANs found")


def cmd_vlan_create(switch: EAPISwitch, args: argparse.Namespace) -> None:
    switch.vlan.create_vlan(args.vlan_id, args.name or "")
    print(f"VLAN {args.vlan_id} created successfully")


def cmd_vlan_delete(switch: EAPISwitch, args: argparse.Namespace) -> None:
    switch.vlan.delete_vlan(args.vlan_id)
    print(f"VLAN {args.vlan_id} deleted successfully")


def cmd_interface_list(switch: EAPISwitch, args: argparse.Namespace) -> None:
    rows = [
        [
            i.name,
            i.admin_status.value,
            i.oper_status.value,
            i.mode,
            i.vlan_id or "",
            i.trunk_vlans or "",
            i.speed or "",
            i.description or "",
        ]
        for i in switch.interfaces.list_interfaces()
    ]
    headers = ["Interface", "Admin", "Oper", "Mode", "VLAN", "Trunk VLANs", "Speed", "Description"]
    _print_table(rows, headers, "No interfaces found")


def cmd_interface_status(switch: EAPISwitch, args: argparse.Namespace) -> None:
    status = switch.interfaces.get_interfaces_status()
    rows = []
    for name, entry in status.items():
        entry = entry if isinstance(entry, dict) else {}
        rows.append(
            [name, entry.get("linkStatus", ""), entry.get("lineProtocolStatus", ""), entry.get("description", "")]
        )
    _print_table(rows, ["Interface", "Link", "Protocol", "Description"], "No interface status found")


def _admin_state(args: argparse.Namespace) -> LinkState | None:
    if args.shutdown:
        return LinkState.DOWN
    if args.no_shutdown:
        return LinkState.UP
    return None


def cmd_interface_config(switch: EAPISwitch, args: argparse.Namespace) -> None:
    config = InterfaceConfig(
        mode=PortMode(args.mode) if args.mode else None,
        vlan=args.vlan,
        vlans=args.vlans,
        native_vlan=args.native_vlan,
        admin_state=_admin_state(args),
        description=args.description,
    )
    switch.interfaces.configure_interface(args.interface, config)
    print(f"Interface {args.interface} configured successfully")


def cmd_port_channel_list(switch: EAPISwitch, args: argparse.Namespace) -> None:
    channels = switch.port_channel.get_port_channels()
    rows = [[pc.name, ", ".join(pc.members) or "-", pc.mode, pc.lacp_mode] for pc in channels]
    _print_table(rows, ["Port-Channel", "Members", "Mode", "LACP"], "No port-channels configured")


def cmd_port_channel_create(switch: EAPISwitch, args: argparse.Namespace) -> None:
    config = PortChannelConfig(
        mode=PortMode(args.mode) if args.mode else None,
        vlan=args.vlan,
        native_vlan=args.native_vlan,
        trunk_vlans=args.vlans,
        members=[m.strip() for m in (args.members or "").split(",") if m.strip()],
        lacp_mode=LacpMode(args.lacp_mode),
        description=args.description,
    )
    switch.port_channel.create_port_channel(args.name, config)
    print(f"Port-Channel {args.name} created successfully")


def cmd_port_channel_delete(switch: EAPISwitch, args: argparse.Namespace) -> None:
    switch.port_channel.delete_port_channel(args.name)
    print(f"Port-Channel {args.name} deleted successfully")


def cmd_port_channel_add_member(switch: EAPISwitch, args: argparse.Namespace) -> None:
    switch.port_channel.add_member(args.name, args.interface, LacpMode(args.lacp_mode))
    print(f"{args.interface} added to Port-Channel {args.name}")


def cmd_port_channel_remove_member(switch: EAPISwitch, args: argparse.Namespace) -> None:
    switch.port_channel.remove_member(args.interface)
    print(f"{args.interface} removed from its port-channel")


def cmd_env(switch: EAPISwitch, args: argparse.Namespace) -> None:
    env = switch.monitoring.get_environment()
    rows = []
    for section, components in (("power", env.power_supplies), ("fan", env.fans), ("temperature", env.temp_sensors)):
        for c in components or []:
            rows.append([section, c.name, c.status or "-", "ALERT" if c.in_alert else ""])
    _print_table(rows, ["Section", "Name", "Status", ""], "No environment data")
    print(f"System status: {env.system_status}{' (ALERT)' if env.has_alert else ''}")


def cmd_mac(switch: EAPISwitch, args: argparse.Namespace) -> None:
    entries = switch.monitoring.get_mac_address_table(vlan=args.vlan, interface=args.interface)
    rows = [[e.vlan_id or "", e.mac_address, e.entry_type or "", e.interface or ""] for e in entries]
    _print_table(rows, ["VLAN", "MAC Address", "Type", "Interface"], "No MAC address entries")


def cmd_transceiver(switch: EAPISwitch, args: argparse.Namespace) -> None:
    readings = switch.monitoring.get_interfaces_transceiver(args.interface)
    rows = [
        [name, r.temperature, r.voltage, r.bias_current, r.tx_power, r.rx_power] for name, r in readings.items()
    ]
    headers = ["Interface", "Temp (C)", "Voltage (V)", "Bias (mA)", "Tx (dBm)", "Rx (dBm)"]
    _print_table(rows, headers, "No transceiver readings")


def cmd_logs(switch: EAPISwitch, args: argparse.Namespace) -> None:
    text = switch.monitoring.get_logs(args.lines)
    print(text if text is not None else "No log output")


def cmd_running_config(switch: EAPISwitch, args: argparse.Namespace) -> None:
    print(switch.monitoring.get_running_config())


def cmd_save_config(switch: EAPISwitch, args: argparse.Namespace) -> None:
    switch.system.save_running_config()
    print("Running configuration saved")


def cmd_clock(switch: EAPISwitch, args: argparse.Namespace) -> None:
    if args.timezone:
        switch.system.set_clock_timezone(args.timezone, args.offset)
    if args.set_now:
        switch.system.set_clock(datetime.now())
    print(switch.monitoring.show_clock().strip())
    tz = switch.monitoring.get_clock_timezone_config()
    if tz:
        print(tz)


def _add_switchport_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--mode", choices=[m.value for m in PortMode])
    parser.add_argument("--vlan", type=int, help="Access VLAN ID")
    parser.add_argument("--vlans", help="Allowed trunk VLANs (e.g. 10,20,30-40)")
    parser.add_argument("--native-vlan", type=int, help="Trunk native VLAN ID")
    parser.add_argument("--description", help="Interface description")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for eAPI switch management."""
    parser = argparse.ArgumentParser(
        prog="eapimgmt",
        description="eAPI switch management: monitor, VLAN, interface and port-channel configuration",
    )
    parser.add_argument("--host", help="Switch IP address or hostname (env: EAPI_HOST)")
    parser.add_argument("--username", help="eAPI username (env: EAPI_USERNAME, default: admin)")
    parser.add_argument("--password", help="eAPI password (env: EAPI_PASSWORD)")
    parser.add_argument("--port", type=int, help="eAPI port (env: EAPI_PORT, default: 443)")
    parser.add_argument("--http", action="store_true", help="Use plain HTTP instead of HTTPS")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 10)")
    parser.add_argument("--verify-ssl", action="store_true", help="Verify TLS certificates")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("monitor", help="Show monitoring information")
    subparsers.add_parser("poll", help="Run a status poll (exit 1 if the device is down)")

    # vlan
    vlan_parser = subparsers.add_parser("vlan", help="VLAN management")
    vlan_sub = vlan_parser.add_subparsers(dest="vlan_command", help="VLAN commands")
    vlan_sub.add_parser("list", help="List all VLANs")
    vlan_create = vlan_sub.add_parser("create", help="Create a VLAN")
    vlan_create.add_argument("vlan_id", type=int, help="VLAN ID (1-4094)")
    vlan_create.add_argument("--name", help="VLAN name")
    vlan_delete = vlan_sub.add_parser("delete", help="Delete a VLAN")
    vlan_delete.add_argument("vlan_id", type=int, help="VLAN ID to delete")

    # interface
    if_parser = subparsers.add_parser("interface", help="Interface management")
    if_sub = if_parser.add_subparsers(dest="interface_command", help="Interface commands")
    if_sub.add_parser("list", help="List interfaces")
    if_sub.add_parser("status", help="Show interface link status")
    if_config = if_sub.add_parser("config", help="Configure an interface")
    if_config.add_argument("interface", help="Interface name (e.g. Ethernet5)")
    _add_switchport_args(if_config)
    state = if_config.add_mutually_exclusive_group()
    state.add_argument("--shutdown", action="store_true", help="Disable the interface")
    state.add_argument("--no-shutdown", action="store_true", help="Enable the interface")

    # port-channel
    pc_parser = subparsers.add_parser("port-channel", help="Port-channel (LACP) management")
    pc_sub = pc_parser.add_subparsers(dest="port_channel_command", help="Port-channel commands")
    pc_sub.add_parser("list", help="List port-channels")
    pc_create = pc_sub.add_parser("create", help="Create a port-channel")
    pc_create.add_argument("name", help="Port-channel number or name (e.g. 10 or Port-Channel10)")
    _add_switchport_args(pc_create)
    pc_create.add_argument("--members", help="Member interfaces (e.g. Ethernet1,Ethernet2)")
    pc_create.add_argument("--lacp-mode", choices=[m.value for m in LacpMode], default=LacpMode.ACTIVE.value)
    pc_delete = pc_sub.add_parser("delete", help="Delete a port-channel")
    pc_delete.add_argument("name", help="Port-channel number or name")
    pc_add = pc_sub.add_parser("add-member", help="Add an interface to a port-channel")
    pc_add.add_argument("name", help="Port-channel number or name")
    pc_add.add_argument("interface", help="Member interface")
    pc_add.add_argument("--lacp-mode", choices=[m.value for m in LacpMode], default=LacpMode.ACTIVE.value)
    pc_remove = pc_sub.add_parser("remove-member", help="Remove an interface from its port-channel")
    pc_remove.add_argument("interface", help="Member interface")

    subparsers.add_parser("env", help="Show power, cooling and temperature status")

    mac = subparsers.add_parser("mac", help="Show the MAC address table")
    mac.add_argument("--vlan", type=int, help="Only this VLAN")
    mac.add_argument("--interface", help="Only this interface")

    transceiver = subparsers.add_parser("transceiver", help="Show transceiver DOM readings")
    transceiver.add_argument("--interface", help="Only this interface (e.g. Et2)")

    logs = subparsers.add_parser("logs", help="Show the device log")
    logs.add_argument("--lines", type=int, help="Only the last N lines")

    subparsers.add_parser("running-config", help="Show the running configuration")
    subparsers.add_parser("save-config", help="Copy running-config to startup-config")

    clock = subparsers.add_parser("clock", help="Show (and optionally set) the device clock")
    clock.add_argument("--timezone", help="Set the clock timezone")
    clock.add_argument("--offset", help="UTC offset for --timezone (e.g. +1 or -5 30)")
    clock.add_argument("--set-now", action="store_true", help="Set the device clock to local time")

    return parser


HANDLERS: dict[tuple[str, str | None], Callable[[EAPISwitch, argparse.Namespace], None]] = {
    ("monitor", None): cmd_monitor,
    ("poll", None): cmd_poll,
    ("vlan", "list"): cmd_vlan_list,
    ("vlan", "create"): cmd_vlan_create,
    ("vlan", "delete"): cmd_vlan_delete,
    ("interface", "list"): cmd_interface_list,
    ("interface", "status"): cmd_interface_status,
    ("interface", "config"): cmd_interface_config,
    ("port-channel", "list"): cmd_port_channel_list,
    ("port-channel", "create"): cmd_port_channel_create,
    ("port-channel", "delete"): cmd_port_channel_delete,
    ("port-channel", "add-member"): cmd_port_channel_add_member,
    ("port-channel", "remove-member"): cmd_port_channel_remove_member,
    ("env", None): cmd_env,
    ("mac", None): cmd_mac,
    ("transceiver", None): cmd_transceiver,
    ("logs", None): cmd_logs,
    ("running-config", None): cmd_running_config,
    ("save-config", None): cmd_save_config,
    ("clock", None): cmd_clock,
}

_SUBCOMMAND_DESTS = {
    "vlan": "vlan_command",
    "interface": "interface_command",
    "port-channel": "port_channel_command",
}


def build_endpoint(parsed: argparse.Namespace) -> DeviceEndpoint:
    """Command-line values win over the ``EAPI_*`` environment."""
    return DeviceEndpoint.from_env(
        host=parsed.host,
        username=parsed.username,
        password=parsed.password,
        port=parsed.port,
        use_https=False if parsed.http else None,
        timeout=parsed.timeout,
        verify_ssl=True if parsed.verify_ssl else None,
    )


def main(args: list[str] | None = None) -> None:
    """Main entry point for the eAPI management CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    sub_dest = _SUBCOMMAND_DESTS.get(parsed.command)
    key = (parsed.command, getattr(parsed, sub_dest) if sub_dest else None)
    handler = HANDLERS.get(key)
    if handler is None:
        print(f"Usage: eapimgmt ... {parsed.command} <subcommand> (see --help)", file=sys.stderr)
        sys.exit(1)

    try:
        endpoint = build_endpoint(parsed)
    except ValidationError as e:
        print(f"Error: invalid connection settings: {e}", file=sys.stderr)
        sys.exit(1)
    if not endpoint.host:
        print("Error: no host given (use --host or EAPI_HOST)", file=sys.stderr)
        sys.exit(1)

    try:
        with EAPISwitch(endpoint) as switch:
            handler(switch, parsed)
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except SwitchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
