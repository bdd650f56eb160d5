"""Attribute catalog: discovery, typing and mutation of firmware settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from biosctl.core.errors import (
    AttributeWriteError,
    BiosctlError,
    DeviceStateError,
    UnknownAttributeTypeError,
)
from biosctl.core.models import Attribute, AttributeType, EnumerationType, IntegerType, StringType
from biosctl.core.values import FieldValue, read_signed, read_unsigned, read_value, try_read_value, write_value
from biosctl.firmware.catalog import build_catalog

logger = logging.getLogger(__name__)

ATTRIBUTES_DIRECTORY = "attributes"
PENDING_REBOOT_FILE = "pending_reboot"
POSSIBLE_VALUES_SEPARATOR = ";"


def read_attribute_type(name: str, path: Path) -> AttributeType:
    """Read ``type`` and the metadata files belonging to that type."""

    type_name = read_value(path, "type")
    if type_name == "enumeration":
        possible_values = read_value(path, "possible_values")
        return EnumerationType(possible_values=tuple(possible_values.split(POSSIBLE_VALUES_SEPARATOR)))
    if type_name == "integer":
        return IntegerType(
            min=read_signed(path, "min_value"),
            max=read_signed(path, "max_value"),
            step=read_unsigned(path, "scalar_increment"),
        )
    if type_name == "string":
        return StringType(
            min_length=read_unsigned(path, "min_length"),
            max_length=read_unsigned(path, "max_length"),
        )
    raise UnknownAttributeTypeError(name, type_name)


def make_attribute_builder(device_path: Path):
    """Return a catalog builder producing attributes owned by ``device_path``."""

    def build(name: str, path: Path) -> Attribute:
        current_value = try_read_value(path, "current_value")
        default_value = try_read_value(path, "default_value")
        display_name = read_value(path, "display_name")
        display_name_language_code = read_value(path, "display_name_language_code")
        return Attribute(
            name=name,
            type=read_attribute_type(name, path),
            current_value=current_value,
            default_value=default_value,
            display_name=display_name,
            display_name_language_code=display_name_language_code,
            device_path=device_path,
        )

    return build


def enumerate_attributes(device_path: Path, device: str = "-") -> list[Attribute]:
    """Build every valid attribute of the device rooted at ``device_path``."""

    return build_catalog(
        device_path / ATTRIBUTES_DIRECTORY, "attribute", device, make_attribute_builder(device_path)
    )


def find_attribute(attributes: list[Attribute], name: str | bytes) -> Attribute | None:
    """Return the attribute whose entry name equals ``name`` byte for byte."""

    wanted = os.fsdecode(name)
    for attribute in attributes:
        if attribute.name == wanted:
            return attribute
    return None


def set_attribute_value(attribute: Attribute, value: str | bytes, device: str = "-") -> FieldValue:
    """Write ``value`` to the attribute's ``current_value`` and re-read it.

    The re-read result replaces ``attribute.current_value``; it may be a
    failure if the firmware rejected the value.
    """

    target = attribute.path / "current_value"
    log_extra = {"device": device}
    logger.debug("writing value %r to attribute %s", value, target, extra=log_extra)
    try:
        write_value(target, value)
    except OSError as exc:
        raise AttributeWriteError(target) from exc

    attribute.current_value = try_read_value(attribute.path, "current_value")
    if attribute.current_value.ok:
        logger.info("attribute %s now reads '%s'", attribute.name, attribute.current_value.value, extra=log_extra)
    else:
        logger.warning(
            "attribute %s could not be read back: %s", attribute.name, attribute.current_value.error, extra=log_extra
        )
    return attribute.current_value


def read_pending_reboot(device_path: Path, device: str = "-") -> bool:
    """Return ``True`` when the device reports a configuration change pending reboot."""

    attributes_path = device_path / ATTRIBUTES_DIRECTORY
    logger.debug("reading pending reboot flag under %s", attributes_path, extra={"device": device})
    try:
        flag = read_unsigned(attributes_path, PENDING_REBOOT_FILE, bits=8)
    except BiosctlError as exc:
        raise DeviceStateError(f"failed to read pending reboot state for device '{device}'") from exc
    return flag == 1
