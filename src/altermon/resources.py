"""Filesystem collaborators: stat retrieval and directory listing."""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Protocol

logger = logging.getLogger(__name__)


class StatError(Exception):
    """Raised when permissions or the modified time of a path cannot be read."""

    def __init__(self, path: str, reason: str = "stat failed"):
        super().__init__(f"{reason}: {path}")
        self.path = path


@dataclass(frozen=True)
class ResourceStat:
    """Metadata returned by a stat provider for one path."""

    permissions: int
    is_directory: bool
    modified_time: Optional[float] = None


class StatProvider(Protocol):
    def stat(self, path: str) -> ResourceStat:
        ...

    def clear_cache(self) -> None:
        ...


class DirectoryLister(Protocol):
    def list(self, directory: str) -> Iterable[str]:
        ...


class OsStatProvider:
    """Reads metadata with ``os.stat``; every call hits the filesystem."""

    def stat(self, path: str) -> ResourceStat:
        try:
            result = os.stat(path)
        except OSError as exc:
            raise StatError(path, reason=exc.strerror or "stat failed") from exc

        is_directory = stat.S_ISDIR(result.st_mode)
        return ResourceStat(
            permissions=stat.S_IMODE(result.st_mode),
            is_directory=is_directory,
            modified_time=None if is_directory else result.st_mtime,
        )

    def clear_cache(self) -> None:
        """Nothing is cached; kept for providers that memoize metadata."""


class FilesystemLister:
    """Yields files and subdirectories beneath a root directory."""

    def __init__(
        self,
        *,
        recursive: bool = True,
        include_patterns: Iterable[str] = (),
        exclude_patterns: Iterable[str] = (),
    ):
        self._recursive = recursive
        self._include_patterns: List[str] = list(include_patterns)
        self._exclude_patterns: List[str] = list(exclude_patterns)

    def list(self, directory: str) -> Iterator[str]:
        root = Path(directory).absolute()
        if not root.is_dir():
            logger.warning("Watch directory %s does not exist; skipping", root)
            return
        for path in _iter_paths(root, recursive=self._recursive):
            if path.is_symlink() and not path.exists():
                logger.debug("Skipping dangling symlink %s", path)
                continue
            if _matches_patterns(path, self._include_patterns, self._exclude_patterns):
                yield str(path)


def _iter_paths(root: Path, *, recursive: bool) -> Iterator[Path]:
    if recursive:
        yield from root.rglob("*")
    else:
        yield from root.glob("*")


def _matches_patterns(path: Path, include_patterns: List[str], exclude_patterns: List[str]) -> bool:
    name = path.name
    full = str(path)

    if exclude_patterns and any(fnmatch(name, pat) or fnmatch(full, pat) for pat in exclude_patterns):
        return False

    if not include_patterns:
        return True

    return any(fnmatch(name, pat) or fnmatch(full, pat) for pat in include_patterns)
