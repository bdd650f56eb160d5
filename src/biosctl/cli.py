"""Command line interface for biosctl."""

from __future__ import annotations

import argparse
import logging
import os
import platform
import sys
from importlib import metadata
from pathlib import Path

from biosctl.common.report import (
    DeviceInfo,
    format_attribute,
    format_device,
    format_header,
    format_listing,
    to_json,
)
from biosctl.core.config import ConfigError, FirmwareConfig, load_local_config, parse_firmware_config, resolve_config_path
from biosctl.core.errors import AttributeNotFoundError, BiosctlError, iter_causes
from biosctl.core.logging import level_from_verbosity, setup_logging
from biosctl.core.secrets import DEFAULT_SECRETS_PATH, SecretsConfigError, resolve_admin_password
from biosctl.core.values import printable_name
from biosctl.firmware.attributes import find_attribute
from biosctl.firmware.device import Device
from biosctl.firmware.session import admin_session

PROGRAM_NAME = "biosctl"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""

    verbosity_parent = argparse.ArgumentParser(add_help=False)
    verbosity = verbosity_parent.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=argparse.SUPPRESS,
        help="Increase log output; pass several times for more",
    )
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=argparse.SUPPRESS,
        help="Decrease log output; pass several times for less",
    )

    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Manage BIOS/EFI settings exposed through /sys/class/firmware-attributes.",
        parents=[verbosity_parent],
    )
    parser.add_argument(
        "-D",
        "--device-name",
        default=None,
        help="Firmware attributes device (default: firmware.device from local.yml, else dell-wmi-sysman)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Firmware attributes root directory. Overrides local.yml firmware.root.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to local.yml (default: $BIOSCTL_CONFIG or /etc/biosctl/local.yml)",
    )
    parser.add_argument(
        "--secrets",
        type=Path,
        default=DEFAULT_SECRETS_PATH,
        help="Path to the secrets file holding admin passwords (YAML)",
    )
    parser.add_argument("--password", default=None, help="BIOS admin password for authentication")
    parser.add_argument("-V", dest="short_version", action="store_true", help="Print version information")
    parser.add_argument(
        "--version", dest="long_version", action="store_true", help="Print detailed version information"
    )

    subcommands = parser.add_subparsers(dest="command", title="commands")

    print_parser = subcommands.add_parser("print", help="Describe all settings, or a single one")
    print_parser.add_argument("attribute", nargs="?", metavar="SETTING")
    print_parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")

    subcommands.add_parser("list", help="List setting names")

    get_parser = subcommands.add_parser("get", help="Print the value of a setting")
    get_mode = get_parser.add_mutually_exclusive_group()
    get_mode.add_argument("-d", "--default", action="store_true", help="Print the default value")
    get_mode.add_argument("-n", "--name", action="store_true", help="Print the display name")
    get_parser.add_argument("attribute", metavar="SETTING")

    set_parser = subcommands.add_parser("set", help="Change the value of a setting")
    set_parser.add_argument("attribute", metavar="SETTING")
    set_parser.add_argument("value", metavar="VALUE")

    info_parser = subcommands.add_parser("info", help="Show device summary and authentication methods")
    info_parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")

    subcommands.add_parser(
        "needs-reboot",
        help="Print whether a reboot is pending; exit status 1 when not",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.short_version or args.long_version:
        _print_version(long=args.long_version)
        return 0

    try:
        local_config = load_local_config(resolve_config_path(args.config))
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    cli_level = level_from_verbosity(getattr(args, "verbose", 0) or 0, getattr(args, "quiet", 0) or 0)
    logger = setup_logging(local_config, cli_level=cli_level)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        firmware = parse_firmware_config(local_config)
        device = _resolve_device(args, firmware)
        return _dispatch(args, device, firmware, logger)
    except (BiosctlError, ConfigError, SecretsConfigError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        for cause in iter_causes(exc):
            logger.info("cause: %s", cause)
        return 1


def _resolve_device(args: argparse.Namespace, firmware: FirmwareConfig) -> Device:
    name = args.device_name if args.device_name is not None else firmware.device
    root = args.root if args.root is not None else firmware.root
    return Device.from_name(name, root)


def _dispatch(args: argparse.Namespace, device: Device, firmware: FirmwareConfig, logger: logging.Logger) -> int:
    log_extra = {"device": device.name}
    logger.debug("running command=%s path=%s", args.command, device.path, extra=log_extra)

    if args.command == "print":
        return _run_print(device, args.attribute, args.json)
    if args.command == "list":
        print(format_listing(device.name, device.attributes()))
        return 0
    if args.command == "get":
        return _run_get(device, args.attribute, default=args.default, name=args.name)
    if args.command == "set":
        return _run_set(args, device, firmware, logger)
    if args.command == "info":
        return _run_info(device, args.json, logger)
    if args.command == "needs-reboot":
        if device.modified():
            print("true")
            return 0
        print("false")
        return 1

    raise BiosctlError(f"Unknown command: {args.command}")


def _run_print(device: Device, attribute_name: str | None, as_json: bool) -> int:
    attributes = device.attributes()
    if attribute_name is not None:
        attribute = find_attribute(attributes, attribute_name)
        if attribute is None:
            raise AttributeNotFoundError(device.name, attribute_name)
        attributes = [attribute]

    if as_json:
        print(to_json({"device": printable_name(device.name), "attributes": [a.to_dict() for a in attributes]}))
    elif attribute_name is not None:
        print(format_header(device.name))
        print(format_attribute(attributes[0]))
    else:
        print(format_device(device.name, attributes))
    return 0


def _run_get(device: Device, attribute_name: str, default: bool, name: bool) -> int:
    attribute = device.require_attribute(attribute_name)
    if default:
        print(attribute.default_value.display())
    elif name:
        print(attribute.display_name)
    else:
        print(attribute.current_value.display())
    return 0


def _run_set(args: argparse.Namespace, device: Device, firmware: FirmwareConfig, logger: logging.Logger) -> int:
    attribute = device.require_attribute(args.attribute)
    password = resolve_admin_password(device.name, args.password, args.secrets, logger)

    if password is None:
        device.set_value(attribute, os.fsencode(args.value))
    else:
        with admin_session(device, password, firmware.admin_authentication):
            device.set_value(attribute, os.fsencode(args.value))
    return 0


def _run_info(device: Device, as_json: bool, logger: logging.Logger) -> int:
    info = DeviceInfo(
        name=device.name,
        attribute_count=len(device.attributes()),
        pending_reboot=device.modified(),
        authentications=device.authentications(),
    )
    if not info.authentications:
        logger.warning("no authentication methods found for device '%s'", device.name, extra={"device": device.name})

    print(to_json(info.to_dict()) if as_json else info.format())
    return 0


def _print_version(long: bool) -> None:
    try:
        version = metadata.version(PROGRAM_NAME)
    except metadata.PackageNotFoundError:
        version = "unknown"

    print(f"{PROGRAM_NAME} {version}")
    if long:
        print(f"{platform.python_implementation()} {platform.python_version()}")


if __name__ == "__main__":
    raise SystemExit(main())
