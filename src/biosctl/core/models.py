"""Data models for firmware attributes and authentication methods."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Literal, Union

from biosctl.core.values import FieldValue, printable_name

AuthenticationRoleKind = Literal["bios-admin", "power-on", "unknown"]


@dataclass(frozen=True, slots=True)
class IntegerType:
    """Integer attribute bounded by ``min``/``max`` in increments of ``step``."""

    kind: ClassVar[str] = "integer"
    label: ClassVar[str] = "Integer"

    min: int
    max: int
    step: int

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "min": self.min, "max": self.max, "step": self.step}


@dataclass(frozen=True, slots=True)
class StringType:
    """Free-form string attribute with a length range."""

    kind: ClassVar[str] = "string"
    label: ClassVar[str] = "String"

    min_length: int
    max_length: int

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "min_length": self.min_length, "max_length": self.max_length}


@dataclass(frozen=True, slots=True)
class EnumerationType:
    """Attribute restricted to an ordered set of values."""

    kind: ClassVar[str] = "enumeration"
    label: ClassVar[str] = "Enumeration"

    possible_values: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind, "possible_values": list(self.possible_values)}


AttributeType = Union[IntegerType, StringType, EnumerationType]


def _error_text(field_value: FieldValue) -> str | None:
    return None if field_value.error is None else printable_name(str(field_value.error))


@dataclass(slots=True)
class Attribute:
    """A single configurable firmware setting.

    ``device_path`` is a copy of the owning device's root path. It is only
    used to locate ``current_value`` when writing.
    """

    name: str
    type: AttributeType
    current_value: FieldValue
    default_value: FieldValue
    display_name: str
    display_name_language_code: str
    device_path: Path

    @property
    def path(self) -> Path:
        return self.device_path / "attributes" / self.name

    def to_dict(self) -> dict[str, object]:
        return {
            "name": printable_name(self.name),
            "display_name": self.display_name,
            "display_name_language_code": self.display_name_language_code,
            **self.type.to_dict(),
            "current_value": self.current_value.value,
            "current_value_error": _error_text(self.current_value),
            "default_value": self.default_value.value,
            "default_value_error": _error_text(self.default_value),
        }


@dataclass(frozen=True, slots=True)
class AuthenticationRole:
    """Role of an authentication method; ``raw`` keeps the firmware text."""

    kind: AuthenticationRoleKind
    raw: str

    @classmethod
    def parse(cls, raw: str) -> AuthenticationRole:
        if raw == "bios-admin":
            return cls(kind="bios-admin", raw=raw)
        if raw == "power-on":
            return cls(kind="power-on", raw=raw)
        return cls(kind="unknown", raw=raw)

    @property
    def description(self) -> str:
        if self.kind == "bios-admin":
            return "Change BIOS Settings"
        if self.kind == "power-on":
            return "Power on computer"
        return f"Unknown role ({self.raw})"


@dataclass(slots=True)
class Authentication:
    """An authentication method such as the admin or power-on password."""

    name: str
    is_enabled: bool
    min_password_length: int
    max_password_length: int
    role: AuthenticationRole

    def to_dict(self) -> dict[str, object]:
        return {
            "name": printable_name(self.name),
            "is_enabled": self.is_enabled,
            "min_password_length": self.min_password_length,
            "max_password_length": self.max_password_length,
            "role": self.role.kind,
            "role_raw": self.role.raw,
        }
