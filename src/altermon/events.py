"""Change event models shared across monitor components."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    """Kinds of alteration reported by the monitor."""

    CREATED = "created"
    CHANGED = "changed"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """A single alteration observed in one of the watched directories."""

    event_type: EventType
    path: str
    is_directory: Optional[bool] = None
    mtime: Optional[float] = None

    def describe(self) -> str:
        details = [f"type={self.event_type.value}", f"path={self.path}"]
        if self.is_directory:
            details.append("directory")
        if self.mtime is not None:
            details.append(f"mtime={self.mtime}")
        return ", ".join(details)
