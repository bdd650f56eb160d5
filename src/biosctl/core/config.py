"""Configuration helpers for biosctl."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_PATH = Path("/etc/biosctl/local.yml")
CONFIG_ENV = "BIOSCTL_CONFIG"

DEFAULT_FIRMWARE_ROOT = Path("/sys/class/firmware-attributes")
DEFAULT_DEVICE_NAME = "dell-wmi-sysman"
DEFAULT_ADMIN_AUTHENTICATION = "Admin"


class ConfigError(ValueError):
    """Raised when local.yml cannot be parsed or validated."""


@dataclass(slots=True)
class FirmwareConfig:
    """Settings from the ``firmware`` section of local.yml."""

    root: Path = DEFAULT_FIRMWARE_ROOT
    device: str = DEFAULT_DEVICE_NAME
    admin_authentication: str = DEFAULT_ADMIN_AUTHENTICATION


def resolve_config_path(cli_path: str | Path | None) -> Path:
    """Pick the config file path with priority: CLI > ``BIOSCTL_CONFIG`` > default."""

    if cli_path:
        return Path(cli_path).expanduser()
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_local_config(config_path: Path, logger: logging.Logger | None = None) -> Mapping[str, Any]:
    """Load local.yml and return its top-level mapping.

    A missing file yields an empty mapping. A file that exists but cannot be
    read or parsed raises :class:`ConfigError`.
    """

    logger = logger or logging.getLogger(__name__)
    if not config_path.exists():
        logger.debug("local config not found at %s", config_path)
        return {}

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to read config file: {config_path}") from exc

    if not isinstance(data, Mapping):
        raise ConfigError(f"{config_path}: top-level structure must be a mapping.")

    logger.debug("local config loaded from %s", config_path)
    return data


def _optional_string(section: Mapping[str, Any], field: str, context: str) -> str | None:
    value = section.get(field)
    if value is None:
        return None
    if not isinstance(value, str) or value == "":
        raise ConfigError(f"{context}: field '{field}' must be a non-empty string.")
    return value


def parse_firmware_config(local_config: Mapping[str, Any]) -> FirmwareConfig:
    """Validate the ``firmware`` section, falling back to defaults per field."""

    section = local_config.get("firmware")
    if section is None:
        return FirmwareConfig()
    if not isinstance(section, Mapping):
        raise ConfigError("firmware: section must be a mapping.")

    root = _optional_string(section, "root", "firmware")
    device = _optional_string(section, "device", "firmware")
    admin_authentication = _optional_string(section, "admin_authentication", "firmware")

    return FirmwareConfig(
        root=Path(root).expanduser() if root else DEFAULT_FIRMWARE_ROOT,
        device=device or DEFAULT_DEVICE_NAME,
        admin_authentication=admin_authentication or DEFAULT_ADMIN_AUTHENTICATION,
    )
