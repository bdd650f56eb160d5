"""Reading and writing single-value sysfs files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from biosctl.core.errors import ValueParseError, ValueReadError

ACCESS_DENIED = "<Access Denied>"

_SIGNED_PATTERN = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True, slots=True)
class FieldValue:
    """Outcome of reading a value that is allowed to fail.

    Exactly one of ``value`` and ``error`` is set.
    """

    value: str | None = None
    error: ValueReadError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the value or raise the stored read error."""

        if self.error is not None:
            raise self.error
        return self.value or ""

    def display(self, placeholder: str = ACCESS_DENIED) -> str:
        return placeholder if self.error is not None else (self.value or "")


def printable_name(name: str) -> str:
    """Return ``name`` safe for display; undecodable bytes become U+FFFD."""

    return os.fsencode(name).decode("utf-8", "replace")


def read_value(directory: str | Path, file_name: str) -> str:
    """Read ``directory/file_name`` and strip trailing whitespace.

    Leading content is preserved verbatim. Any I/O or decoding failure is
    raised as :class:`ValueReadError`.
    """

    path = Path(directory) / file_name
    try:
        raw = path.read_bytes()
        text = raw.decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValueReadError(path, exc) from exc
    return text.rstrip()


def try_read_value(directory: str | Path, file_name: str) -> FieldValue:
    """Like :func:`read_value` but capture the failure in a :class:`FieldValue`."""

    try:
        return FieldValue(value=read_value(directory, file_name))
    except ValueReadError as exc:
        return FieldValue(error=exc)


def _parse(directory: str | Path, file_name: str, pattern: re.Pattern[str], low: int, high: int, expected: str) -> int:
    path = Path(directory) / file_name
    text = read_value(directory, file_name)
    if not pattern.fullmatch(text):
        raise ValueParseError(path, text, expected)
    number = int(text)
    if number < low or number > high:
        raise ValueParseError(path, text, expected)
    return number


def read_signed(directory: str | Path, file_name: str, bits: int = 64) -> int:
    """Read a signed integer that must fit in ``bits`` bits."""

    limit = 1 << (bits - 1)
    return _parse(directory, file_name, _SIGNED_PATTERN, -limit, limit - 1, f"signed {bits}-bit integer")


def read_unsigned(directory: str | Path, file_name: str, bits: int = 64) -> int:
    """Read an unsigned integer that must fit in ``bits`` bits."""

    return _parse(directory, file_name, _UNSIGNED_PATTERN, 0, (1 << bits) - 1, f"unsigned {bits}-bit integer")


def write_value(path: Path, value: str | bytes) -> None:
    """Overwrite ``path`` with ``value`` exactly as given.

    ``str`` values are encoded with the filesystem encoding so that names
    decoded with ``os.fsdecode`` round-trip byte for byte.
    """

    data = value if isinstance(value, bytes) else os.fsencode(value)
    with path.open("wb") as handle:
        handle.write(data)
