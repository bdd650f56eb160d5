"""Admin password resolution.

Passwords are taken from the command line, then from environment variables,
then from ``secrets.yml``. No password at all is a valid outcome: settings
that are not protected can be changed without unlocking the firmware.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

ENV_PREFIX = "BIOSCTL_SECRET_"
DEFAULT_SECRETS_PATH = Path("/etc/biosctl/secrets.yml")


class SecretsConfigError(ValueError):
    """Raised when the secrets file is missing required structure."""


@dataclass(slots=True)
class Secrets:
    """Admin passwords keyed by device name."""

    entries: Mapping[str, str]
    source_path: Path
    missing_source: bool = False

    def get(self, device: str) -> str | None:
        return self.entries.get(device)


def _normalize_device_name(device: str) -> str:
    """Convert a device name to ``UPPER_SNAKE_CASE`` for env lookup."""

    normalized = re.sub(r"[^A-Z0-9]+", "_", device.upper())
    return normalized.strip("_")


def _load_file_secrets(path: Path) -> Secrets:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw_data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise SecretsConfigError(f"Unable to read secrets file: {path}") from exc

    if not isinstance(raw_data, Mapping):
        raise SecretsConfigError("Top-level secrets.yml structure must be a mapping.")

    raw_secrets = raw_data.get("secrets")
    if raw_secrets is None:
        raise SecretsConfigError("Field 'secrets' is required in secrets.yml.")
    if not isinstance(raw_secrets, Mapping):
        raise SecretsConfigError("Field 'secrets' must be a mapping of device names.")

    entries: dict[str, str] = {}
    for device, entry in raw_secrets.items():
        if not isinstance(entry, Mapping):
            raise SecretsConfigError(f"Secret '{device}' must be a mapping.")

        password = entry.get("password")
        if password is None:
            raise SecretsConfigError(f"Secret '{device}' is missing required field 'password'.")
        if not isinstance(password, str):
            raise SecretsConfigError(f"Secret '{device}' field 'password' must be a string.")

        entries[str(device)] = password

    return Secrets(entries=entries, source_path=path)


def env_password(device: str) -> str | None:
    """Return the password from ``BIOSCTL_SECRET_<DEVICE>`` if set."""

    return os.getenv(f"{ENV_PREFIX}{_normalize_device_name(device)}")


def load_secrets(path: Path = DEFAULT_SECRETS_PATH, logger: logging.Logger | None = None) -> Secrets:
    """Load secrets from ``path``; a missing file yields no entries."""

    logger = logger or logging.getLogger(__name__)
    if not path.exists():
        logger.debug("Secrets file not found at %s", path)
        return Secrets(entries={}, source_path=path, missing_source=True)

    secrets = _load_file_secrets(path)
    logger.debug("Secrets file loaded path=%s entries=%d", path, len(secrets.entries))
    return secrets


def resolve_admin_password(
    device: str,
    cli_password: str | None = None,
    secrets_path: Path = DEFAULT_SECRETS_PATH,
    logger: logging.Logger | None = None,
) -> str | None:
    """Resolve the admin password for ``device``.

    Resolution order:
    1. ``--password`` on the command line
    2. Environment variable ``BIOSCTL_SECRET_<DEVICE>``
    3. ``secrets.yml``
    """

    logger = logger or logging.getLogger(__name__)
    log_extra = {"device": device}
    if cli_password is not None:
        logger.debug("admin password source=cli", extra=log_extra)
        return cli_password

    value = env_password(device)
    if value is not None:
        logger.debug("admin password source=env", extra=log_extra)
        return value

    value = load_secrets(secrets_path, logger).get(device)
    if value is not None:
        logger.debug("admin password source=secrets_file", extra=log_extra)
    return value
