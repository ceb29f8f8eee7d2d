"""Shared fixtures: an in-memory filesystem and scripted sleep for the monitor."""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set

import pytest

from altermon.resources import ResourceStat, StatError


class StopMonitoring(Exception):
    """Raised by the scripted sleep to end an otherwise infinite monitor loop."""


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeFilesystem:
    """Acts as both stat provider and directory lister.

    Paths are listed in insertion order. ``scan_cost`` is added to the clock
    after each directory listing is exhausted.
    """

    def __init__(self, clock: Optional[FakeClock] = None) -> None:
        self.resources: Dict[str, ResourceStat] = {}
        self.vanished: Set[str] = set()
        self.listed: List[str] = []
        self.cache_clears = 0
        self.clock = clock or FakeClock()
        self.scan_cost = 0.0

    def add_file(self, path: str, mtime: float, permissions: int = 0o644) -> None:
        self.resources[path] = ResourceStat(permissions=permissions, is_directory=False, modified_time=mtime)

    def add_dir(self, path: str, permissions: int = 0o755) -> None:
        self.resources[path] = ResourceStat(permissions=permissions, is_directory=True)

    def remove(self, path: str) -> None:
        del self.resources[path]

    def vanish(self, path: str) -> None:
        """Keep listing ``path`` but fail to stat it."""
        self.vanished.add(path)

    def stat(self, path: str) -> ResourceStat:
        if path in self.vanished or path not in self.resources:
            raise StatError(path)
        return self.resources[path]

    def clear_cache(self) -> None:
        self.cache_clears += 1

    def list(self, directory: str) -> Iterator[str]:
        prefix = directory.rstrip("/") + "/"
        candidates = list(self.resources) + sorted(self.vanished - set(self.resources))
        for path in candidates:
            if path.startswith(prefix):
                self.listed.append(path)
                yield path
        self.clock.now += self.scan_cost


class ScriptedSleep:
    """Runs one scripted step per sleep call, then stops the monitor."""

    def __init__(self, steps: Sequence[Optional[Callable[[], None]]]) -> None:
        self.steps = list(steps)
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        index = len(self.calls)
        self.calls.append(seconds)
        if index >= len(self.steps):
            raise StopMonitoring()
        step = self.steps[index]
        if step is not None:
            step()


class RecordingCallback:
    def __init__(self) -> None:
        self.calls: list = []

    def __call__(self, payload) -> None:
        self.calls.append(payload)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fs(clock: FakeClock) -> FakeFilesystem:
    return FakeFilesystem(clock)


@pytest.fixture
def callback() -> RecordingCallback:
    return RecordingCallback()
