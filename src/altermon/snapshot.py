"""Snapshot generations and change classification."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from .events import ChangeEvent, EventType
from .resources import StatProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceEntry:
    """State of one resource as observed during a single scan pass."""

    path: str
    permissions: int
    is_directory: bool
    modified_time: Optional[float] = None


Generation = Dict[str, ResourceEntry]


class SnapshotBuilder:
    """Records the current generation and classifies it against the previous one.

    ``previous`` stays ``None`` until the first pass completes; that pass only
    establishes the baseline and never produces events.
    """

    def __init__(self, stat_provider: StatProvider):
        self._stat = stat_provider
        self._previous: Optional[Generation] = None
        self._current: Generation = {}

    @property
    def is_first_pass(self) -> bool:
        return self._previous is None

    @property
    def previous(self) -> Optional[Generation]:
        return self._previous

    @property
    def current(self) -> Generation:
        return self._current

    def classify(self, path: str) -> Optional[ChangeEvent]:
        """Record ``path`` in the current generation and return its change, if any.

        Raises ``StatError`` when the stat provider cannot read the path.
        """

        if path in self._current:
            return None

        resource = self._stat.stat(path)
        entry = ResourceEntry(
            path=path,
            permissions=resource.permissions,
            is_directory=resource.is_directory,
            modified_time=None if resource.is_directory else resource.modified_time,
        )
        self._current[path] = entry

        if self._previous is None:
            return None

        old = self._previous.get(path)
        if old is None:
            return _event(EventType.CREATED, entry)

        # type, then permissions, then mtime; the first difference wins
        if old.is_directory != entry.is_directory:
            return _event(EventType.CHANGED, entry)

        if old.permissions != entry.permissions:
            return _event(EventType.CHANGED, entry)

        if entry.is_directory:
            return None

        if _is_newer(entry.modified_time, old.modified_time):
            return _event(EventType.CHANGED, entry)

        return None

    def removals(self) -> Iterator[ChangeEvent]:
        """Yield REMOVED for every previous path missing from the current generation."""

        if self._previous is None:
            return
        for path, old in self._previous.items():
            if path not in self._current:
                yield _event(EventType.REMOVED, old)

    def swap(self) -> None:
        """Promote the current generation to previous and start an empty one."""

        self._previous = self._current
        self._current = {}

    def acknowledge(self, events: Iterable[ChangeEvent]) -> None:
        """Fold an interrupted pass into the previous generation.

        Entries observed before the interruption replace their previous
        state and reported removals are forgotten, so the next pass does not
        report the same changes again.
        """

        if self._previous is None:
            self.swap()
            return
        self._previous.update(self._current)
        for event in events:
            if event.event_type is EventType.REMOVED:
                self._previous.pop(event.path, None)
        self._current = {}


def _event(event_type: EventType, entry: ResourceEntry) -> ChangeEvent:
    return ChangeEvent(
        event_type=event_type,
        path=entry.path,
        is_directory=entry.is_directory,
        mtime=entry.modified_time,
    )


def _is_newer(mtime: Optional[float], previous_mtime: Optional[float]) -> bool:
    if mtime is None:
        return False
    if previous_mtime is None:
        return True
    return mtime > previous_mtime
