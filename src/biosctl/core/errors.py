"""Exception hierarchy for biosctl."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator


class BiosctlError(Exception):
    """Base class for all biosctl errors."""


class ValueReadError(BiosctlError):
    """Raised when a value file is missing, unreadable or not valid text."""

    def __init__(self, path: Path, cause: BaseException | None = None) -> None:
        reason = f": {cause.strerror or cause}" if isinstance(cause, OSError) else ""
        if isinstance(cause, UnicodeDecodeError):
            reason = ": not valid UTF-8 text"
        super().__init__(f"failed to read value '{path.name}' at {path}{reason}")
        self.path = path
        self.cause = cause


class ValueParseError(BiosctlError, ValueError):
    """Raised when a numeric value file does not hold a valid number."""

    def __init__(self, path: Path, text: str, expected: str) -> None:
        super().__init__(f"value '{path.name}' is not a valid {expected}: '{text}'")
        self.path = path
        self.text = text


class EnumerationError(BiosctlError):
    """Raised when a catalog directory cannot be listed."""

    def __init__(self, path: Path, kind: str) -> None:
        super().__init__(f"failed to list {kind} entries at path '{path}'")
        self.path = path
        self.kind = kind


class EntryError(BiosctlError):
    """A single catalog entry could not be built."""

    def __init__(self, kind: str, name: str, message: str | None = None) -> None:
        super().__init__(message or f"invalid {kind} '{name}'")
        self.kind = kind
        self.name = name


class UnknownAttributeTypeError(EntryError):
    """The ``type`` discriminator names no known attribute type."""

    def __init__(self, name: str, type_name: str) -> None:
        super().__init__("attribute", name, f"Unknown attribute type: '{type_name}'")
        self.type_name = type_name


class AttributeNotFoundError(BiosctlError):
    """No attribute with the requested name exists on the device."""

    def __init__(self, device: str, name: str) -> None:
        super().__init__(f"no setting with name '{name}' on device '{device}'")
        self.device = device
        self.name = name


class AttributeWriteError(BiosctlError):
    """Writing a new current value failed."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"failed to write value to '{path}'")
        self.path = path


class DeviceStateError(BiosctlError):
    """The device-wide pending reboot flag could not be determined."""


class AdminSessionError(BiosctlError):
    """The admin password could not be written or cleared."""


def iter_causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield the explicit cause chain of ``exc``, excluding ``exc`` itself."""

    seen: set[int] = {id(exc)}
    cause = exc.__cause__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        yield cause
        cause = cause.__cause__
