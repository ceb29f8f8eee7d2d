"""Polling alteration monitor: scan cycle controller and event dispatcher."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from .events import ChangeEvent
from .resources import DirectoryLister, FilesystemLister, OsStatProvider, StatProvider
from .snapshot import SnapshotBuilder

logger = logging.getLogger(__name__)

SCAN_INTERVAL_MIN = 5

ChangeCallback = Callable[[Any], None]


@dataclass
class MonitorStats:
    """Counters emitted by the monitor for observability."""

    cycles: int = 0
    interrupted_cycles: int = 0
    events_emitted: int = 0
    callback_calls: int = 0


class AlterationMonitor:
    """Polls directory trees and reports created, changed and removed resources.

    In batch mode (the default) ``callback`` receives the list of events found
    by a pass. With ``invokes_callback_for_each_file`` the pass stops at the
    first event and ``callback`` receives each event on its own.
    """

    def __init__(
        self,
        directories: Sequence[str],
        callback: ChangeCallback,
        invokes_callback_for_each_file: bool = False,
        *,
        scan_interval_min: float = SCAN_INTERVAL_MIN,
        stat_provider: Optional[StatProvider] = None,
        lister: Optional[DirectoryLister] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._directories = list(directories)
        self._callback = callback
        self._invokes_callback_for_each_file = invokes_callback_for_each_file
        self._scan_interval_min = scan_interval_min
        self._scan_interval = scan_interval_min
        self._stat = stat_provider if stat_provider is not None else OsStatProvider()
        self._lister = lister if lister is not None else FilesystemLister()
        self._sleep = sleep
        self._clock = clock
        self._snapshots = SnapshotBuilder(self._stat)
        self._event_queue: List[ChangeEvent] = []
        self._stats = MonitorStats()

    @property
    def scan_interval(self) -> float:
        return self._scan_interval

    @property
    def stats(self) -> MonitorStats:
        return self._stats

    @property
    def pending_events(self) -> List[ChangeEvent]:
        return list(self._event_queue)

    def monitor(self) -> None:
        """Watch the target directories forever, invoking the callback on changes.

        Only returns by raising, e.g. ``StatError`` from the stat provider.
        """

        logger.info(
            "Starting monitor for %s (interval %ss, %s dispatch)",
            ", ".join(self._directories),
            self._scan_interval,
            "per-event" if self._invokes_callback_for_each_file else "batch",
        )
        try:
            while True:
                self.wait_for_changes()
                self.dispatch()
        finally:
            logger.info(
                "Monitor stopped after %s cycles, %s events",
                self._stats.cycles,
                self._stats.events_emitted,
            )

    def wait_for_changes(self) -> None:
        """Sleep and scan until a pass leaves events in the queue."""

        while True:
            self._sleep(self._scan_interval)
            if self.scan():
                return

    def scan(self) -> bool:
        """Run one scan pass and return whether events are waiting for dispatch."""

        self._stat.clear_cache()
        self._stats.cycles += 1

        started_at = self._clock()
        if not self._traverse():
            self._interrupt()
            return True
        self._widen_interval(self._clock() - started_at)

        for event in self._snapshots.removals():
            if self._enqueue(event):
                self._interrupt()
                return True

        self._snapshots.swap()
        if self._event_queue:
            logger.debug("Scan pass queued %s events", len(self._event_queue))
        return bool(self._event_queue)

    def dispatch(self) -> None:
        """Deliver queued events to the callback and empty the queue."""

        if not self._event_queue:
            return

        if not self._invokes_callback_for_each_file:
            events = list(self._event_queue)
            self._event_queue.clear()
            logger.debug("Dispatching %s events", len(events))
            self._invoke_callback(events)
            return

        while self._event_queue:
            self._invoke_callback(self._event_queue.pop(0))

    def _traverse(self) -> bool:
        """Classify every listed path; False when the pass was cut short."""

        for directory in self._directories:
            for path in self._lister.list(directory):
                event = self._snapshots.classify(path)
                if event is not None and self._enqueue(event):
                    return False
        return True

    def _enqueue(self, event: ChangeEvent) -> bool:
        """Queue ``event``; True when the pass must stop for per-event dispatch."""

        self._event_queue.append(event)
        self._stats.events_emitted += 1
        return self._invokes_callback_for_each_file

    def _interrupt(self) -> None:
        self._stats.interrupted_cycles += 1
        self._snapshots.acknowledge(self._event_queue)

    def _widen_interval(self, elapsed: float) -> None:
        if elapsed > self._scan_interval_min and elapsed > self._scan_interval:
            logger.info("Scan took %.1fs; widening scan interval from %ss", elapsed, self._scan_interval)
            self._scan_interval = elapsed

    def _invoke_callback(self, payload: Any) -> None:
        self._stats.callback_calls += 1
        self._callback(payload)
