"""Device handle binding a firmware-attributes device name to its sysfs root."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from biosctl.core.config import DEFAULT_FIRMWARE_ROOT
from biosctl.core.errors import AttributeNotFoundError
from biosctl.core.models import Attribute, Authentication
from biosctl.core.values import FieldValue
from biosctl.firmware.attributes import (
    ATTRIBUTES_DIRECTORY,
    enumerate_attributes,
    find_attribute,
    read_pending_reboot,
    set_attribute_value,
)
from biosctl.firmware.authentication import AUTHENTICATION_DIRECTORY, enumerate_authentications


@dataclass(frozen=True, slots=True)
class Device:
    """A firmware-attributes device such as ``dell-wmi-sysman``.

    ``name`` is decoded with ``os.fsdecode`` so names that are not valid
    UTF-8 survive unchanged. Every accessor re-reads the filesystem.
    """

    name: str
    path: Path

    @classmethod
    def from_name(cls, name: str | bytes, root: str | Path = DEFAULT_FIRMWARE_ROOT) -> Device:
        decoded = os.fsdecode(name)
        return cls(name=decoded, path=Path(root) / decoded)

    @property
    def attributes_path(self) -> Path:
        return self.path / ATTRIBUTES_DIRECTORY

    @property
    def authentication_path(self) -> Path:
        return self.path / AUTHENTICATION_DIRECTORY

    def attributes(self) -> list[Attribute]:
        return enumerate_attributes(self.path, self.name)

    def authentications(self) -> list[Authentication]:
        return enumerate_authentications(self.path, self.name)

    def attribute(self, name: str | bytes) -> Attribute | None:
        """Return the attribute called ``name`` or ``None`` when there is none."""

        return find_attribute(self.attributes(), name)

    def require_attribute(self, name: str | bytes) -> Attribute:
        attribute = self.attribute(name)
        if attribute is None:
            raise AttributeNotFoundError(self.name, os.fsdecode(name))
        return attribute

    def set_value(self, attribute: Attribute, value: str | bytes) -> FieldValue:
        """Write ``value`` to ``attribute`` and return the value read back."""

        return set_attribute_value(attribute, value, self.name)

    def modified(self) -> bool:
        """Whether a settings change is waiting for a reboot."""

        return read_pending_reboot(self.path, self.name)
