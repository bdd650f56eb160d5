"""Authentication catalog: admin and power-on password slots."""

from __future__ import annotations

from pathlib import Path

from biosctl.core.models import Authentication, AuthenticationRole
from biosctl.core.values import read_unsigned, read_value
from biosctl.firmware.catalog import build_catalog

AUTHENTICATION_DIRECTORY = "authentication"


def build_authentication(name: str, path: Path) -> Authentication:
    is_enabled = read_value(path, "is_enabled") != "0"
    return Authentication(
        name=name,
        is_enabled=is_enabled,
        min_password_length=read_unsigned(path, "min_password_length"),
        max_password_length=read_unsigned(path, "max_password_length"),
        role=AuthenticationRole.parse(read_value(path, "role")),
    )


def enumerate_authentications(device_path: Path, device: str = "-") -> list[Authentication]:
    """Build every valid authentication method of the device rooted at ``device_path``."""

    return build_catalog(device_path / AUTHENTICATION_DIRECTORY, "authentication", device, build_authentication)
