"""Admin password session for changing protected settings.

Firmware drivers such as ``dell-wmi-sysman`` accept the admin password in
``authentication/<name>/current_password``. Settings can be changed while it
is set; writing an empty value locks them again.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from biosctl.core.config import DEFAULT_ADMIN_AUTHENTICATION
from biosctl.core.errors import AdminSessionError
from biosctl.core.values import write_value
from biosctl.firmware.device import Device

logger = logging.getLogger(__name__)

PASSWORD_FILE = "current_password"


@contextmanager
def admin_session(device: Device, password: str, authentication: str = DEFAULT_ADMIN_AUTHENTICATION) -> Iterator[None]:
    """Unlock ``device`` with ``password`` for the duration of the block."""

    password_path = device.authentication_path / authentication / PASSWORD_FILE
    log_extra = {"device": device.name}
    try:
        write_value(password_path, password)
    except OSError as exc:
        raise AdminSessionError(f"failed to unlock BIOS via {password_path}") from exc
    logger.info("BIOS unlocked for changes using authentication %s", authentication, extra=log_extra)

    try:
        yield
    finally:
        try:
            write_value(password_path, "")
        except OSError as exc:
            raise AdminSessionError(f"failed to clear BIOS password at {password_path}") from exc
        logger.info("BIOS password cleared", extra=log_extra)
