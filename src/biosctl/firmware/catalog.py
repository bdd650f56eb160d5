"""Shared directory walk for attribute and authentication catalogs.

Each subdirectory of a catalog directory is one entry. Entries are built
independently: a failure while building one entry is recorded in its
:class:`EntryOutcome`, logged, and the entry is left out of the result.
Only a catalog directory that cannot be listed is fatal.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, TypeVar

from biosctl.core.errors import BiosctlError, EnumerationError, iter_causes

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class EntryOutcome:
    """Result of building a single catalog entry."""

    name: str
    item: Any = None
    error: Exception | None = None


def list_entry_directories(directory: Path, kind: str, device: str) -> list[tuple[str, Path]]:
    """Return ``(name, path)`` for every subdirectory of ``directory``.

    Regular files (such as ``pending_reboot``) are skipped without a warning.
    """

    logger.debug("reading device %s path %s", kind, directory, extra={"device": device})
    try:
        with os.scandir(directory) as iterator:
            entries = list(iterator)
    except OSError as exc:
        raise EnumerationError(directory, kind) from exc

    result: list[tuple[str, Path]] = []
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as exc:
            logger.warning("skipping %s '%s': %s", kind, entry.name, exc, extra={"device": device})
            continue
        if not is_dir:
            logger.debug("ignoring non-directory %s entry '%s'", kind, entry.name, extra={"device": device})
            continue
        result.append((entry.name, Path(entry.path)))
    return result


def build_entry(name: str, path: Path, builder: Callable[[str, Path], T]) -> EntryOutcome:
    """Run ``builder`` for one entry and capture its failure instead of raising."""

    try:
        return EntryOutcome(name=name, item=builder(name, path))
    except (BiosctlError, OSError, ValueError) as exc:
        return EntryOutcome(name=name, error=exc)


def collect_entries(outcomes: Iterable[EntryOutcome], kind: str, device: str) -> list[T]:
    """Log failed outcomes and return the items of the successful ones."""

    items: list[T] = []
    for outcome in outcomes:
        if outcome.error is None and outcome.item is not None:
            items.append(outcome.item)
            continue

        log_extra = {"device": device}
        logger.warning("skipping %s '%s' with error: %s", kind, outcome.name, outcome.error, extra=log_extra)
        if outcome.error is not None:
            for cause in iter_causes(outcome.error):
                logger.info("cause: %s", cause, extra=log_extra)
    return items


def build_catalog(directory: Path, kind: str, device: str, builder: Callable[[str, Path], T]) -> list[T]:
    """Enumerate ``directory`` and build one item per valid entry."""

    entries = list_entry_directories(directory, kind, device)
    outcomes = [build_entry(name, path, builder) for name, path in entries]
    return collect_entries(outcomes, kind, device)
