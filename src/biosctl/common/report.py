"""Text and JSON rendering of attributes and authentication methods."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterable

from biosctl.core.models import Attribute, Authentication, EnumerationType, IntegerType, StringType
from biosctl.core.values import printable_name


def format_attribute(attribute: Attribute) -> str:
    """Render the full description block of one attribute."""

    lines = [printable_name(attribute.name), f"    Name: {attribute.display_name}", f"    Type: {attribute.type.label}"]
    attribute_type = attribute.type
    if isinstance(attribute_type, IntegerType):
        lines.append(f"        Min: {attribute_type.min}")
        lines.append(f"        Max: {attribute_type.max}")
        lines.append(f"        Step: {attribute_type.step}")
    elif isinstance(attribute_type, StringType):
        lines.append(f"        Min: {attribute_type.min_length}")
        lines.append(f"        Max: {attribute_type.max_length}")
    elif isinstance(attribute_type, EnumerationType):
        lines.append("        Possible Values:")
        lines.extend(f"            {value}" for value in attribute_type.possible_values)
    lines.append(f"    Current value: {attribute.current_value.display()}")
    lines.append(f"    Default value: {attribute.default_value.display()}")
    return "\n".join(lines)


def format_header(device_name: str) -> str:
    return f"Device: {printable_name(device_name)}\n"


def format_device(device_name: str, attributes: Iterable[Attribute]) -> str:
    blocks = [format_header(device_name)]
    blocks.extend(format_attribute(attribute) for attribute in attributes)
    return "\n".join(blocks)


def format_listing(device_name: str, attributes: Iterable[Attribute]) -> str:
    lines = [format_header(device_name)]
    lines.extend(f"{printable_name(attribute.name)}: {attribute.display_name}" for attribute in attributes)
    return "\n".join(lines)


def format_authentication(authentication: Authentication) -> str:
    status = "Enabled" if authentication.is_enabled else "Disabled"
    return "\n".join(
        [
            f"        {printable_name(authentication.name)}",
            f"            Role: {authentication.role.description}",
            f"            Status: {status}",
        ]
    )


@dataclass(slots=True)
class DeviceInfo:
    """Summary shown by ``biosctl info``."""

    name: str
    attribute_count: int
    pending_reboot: bool
    authentications: list[Authentication] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": printable_name(self.name),
            "attribute_count": self.attribute_count,
            "pending_reboot": self.pending_reboot,
            "authentications": [authentication.to_dict() for authentication in self.authentications],
        }

    def format(self) -> str:
        lines = [f"Device: {printable_name(self.name)}", f"    {self.attribute_count} attributes"]
        if self.pending_reboot:
            lines.append("\n    Reboot pending: configuration was modified!")
        if self.authentications:
            lines.append("\n    Authentication methods:")
            lines.extend(format_authentication(authentication) for authentication in self.authentications)
        return "\n".join(lines)


def to_json(payload: object) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)
