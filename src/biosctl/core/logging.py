"""Central logging configuration for biosctl.

Logs go to stderr so that reports on stdout stay machine-readable. The
``logging`` section of ``local.yml`` sets the level and, optionally, a log
directory; if that directory is not writable ``./logs`` is tried before file
logging is given up. ``BIOSCTL_LOG`` and the ``-v``/``-q`` flags override the
configured level. Secrets are scrubbed from log messages and the ``device``
context is always present to satisfy the required format.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

DEFAULT_FILENAME = "biosctl.log"
DEFAULT_LEVEL = logging.WARNING
DEFAULT_VERBOSITY = 2
FALLBACK_DIRECTORY = Path("./logs")
LEVEL_ENV = "BIOSCTL_LOG"
# Above CRITICAL, so nothing is emitted.
OFF = logging.CRITICAL + 10

LOG_FORMAT = "%(asctime)s | %(levelname)s | device=%(device)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(slots=True)
class LoggingConfig:
    """Configuration values loaded from local.yml or defaults."""

    directory: Path | None
    filename: str
    level: int


class DeviceContextFilter(logging.Filter):
    """Ensure every record contains a device name."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "device", None):
            record.device = "-"
        return True


class SecretScrubberFilter(logging.Filter):
    """Remove obvious secrets from log messages."""

    SECRET_PATTERN = re.compile(r"(password|secret|token)=([^\s]+)", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            return True
        cleaned = self.SECRET_PATTERN.sub(r"\1=***", message)
        if cleaned != message:
            record.msg = cleaned
            record.args = ()
        return True


def level_from_verbosity(verbose: int, quiet: int, default: int = DEFAULT_VERBOSITY) -> int | None:
    """Map ``-v``/``-q`` counts to a level, or ``None`` when neither was given."""

    level = default + verbose - quiet
    if level == default:
        return None
    if level <= 0:
        return OFF
    if level == 1:
        return logging.ERROR
    if level == 2:
        return logging.WARNING
    if level == 3:
        return logging.INFO
    return logging.DEBUG


def _level_from_value(raw_level: Any) -> int | None:
    if isinstance(raw_level, str):
        if raw_level.lower() == "off":
            return OFF
        level = logging.getLevelName(raw_level.upper())
        if isinstance(level, int):
            return level
    if isinstance(raw_level, int) and not isinstance(raw_level, bool):
        return raw_level
    return None


def parse_logging_config(local_config: Mapping[str, Any] | None) -> LoggingConfig:
    section = local_config.get("logging") if local_config else None
    if not isinstance(section, Mapping):
        section = {}

    directory_value = section.get("directory")
    filename_value = section.get("filename")

    directory = Path(directory_value).expanduser() if directory_value else None
    filename = str(filename_value) if filename_value else DEFAULT_FILENAME
    level = _level_from_value(section.get("level"))

    return LoggingConfig(directory=directory, filename=filename, level=DEFAULT_LEVEL if level is None else level)


def _ensure_writable_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    marker = path / ".write-test"
    with marker.open("a", encoding="utf-8"):
        marker.touch()
    marker.unlink(missing_ok=True)


def _determine_log_directory(target: Path, fallback: Path) -> tuple[Path | None, bool]:
    for index, candidate in enumerate((target, fallback)):
        try:
            _ensure_writable_directory(candidate)
            return candidate, index == 1
        except OSError:
            continue
    return None, True


def _build_handlers(log_path: Path | None) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    filters: list[logging.Filter] = [DeviceContextFilter(), SecretScrubberFilter()]

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_path is not None:
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        for filter_ in filters:
            handler.addFilter(filter_)

    return handlers


def setup_logging(local_config: Mapping[str, Any] | None = None, cli_level: int | None = None) -> logging.Logger:
    """Configure application-wide logging.

    Parameters
    ----------
    local_config:
        Parsed ``local.yml`` mapping; only its ``logging`` section is used.
    cli_level:
        Level derived from ``-v``/``-q``; wins over everything else.
    """

    config = parse_logging_config(local_config)
    env_level = _level_from_value(os.getenv(LEVEL_ENV))
    if cli_level is not None:
        level = cli_level
    elif env_level is not None:
        level = env_level
    else:
        level = config.level

    log_path: Path | None = None
    used_fallback = False
    if config.directory is not None:
        log_directory, used_fallback = _determine_log_directory(config.directory, FALLBACK_DIRECTORY)
        if log_directory is not None:
            log_path = log_directory / config.filename

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in _build_handlers(log_path):
        root_logger.addHandler(handler)

    logger = logging.getLogger("biosctl")
    logger.setLevel(level)
    logger.propagate = True

    if config.directory is not None and log_path is None:
        logger.warning("Logging directory '%s' is not writable. File logging disabled.", config.directory)
    elif used_fallback:
        logger.warning(
            "Logging directory '%s' is not writable. Falling back to '%s'.",
            config.directory,
            log_path.parent if log_path else FALLBACK_DIRECTORY,
        )

    if log_path is not None:
        logger.debug("Logging initialized at %s", log_path)
    return logger
