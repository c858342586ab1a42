"""Per-entry processing: pattern test, metadata read, recovery and hook."""

from __future__ import annotations

import logging
import os
import re
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from collectfiles import EntryReadError

logger = logging.getLogger(__name__)

Hook = Callable[[Path], Path]
RecoveryFn = Callable[[OSError], Path]


@dataclass(frozen=True, slots=True)
class Entry:
    """A single filesystem entry whose metadata was read successfully.

    Attributes:
        path: Path of the entry as built during traversal.
        depth: Parent directory depth from the traversal root; the
            root's direct children have depth 0.
        is_dir: Whether the entry (after following symlinks) is a
            directory.
    """

    path: Path
    depth: int
    is_dir: bool


def raise_entry_error(error: OSError) -> NoReturn:
    """Default recovery function: abort the traversal."""
    path = Path(error.filename) if error.filename is not None else None
    raise EntryReadError(path, error.strerror or str(error)) from error


def read_entry(dir_entry: os.DirEntry[str], depth: int) -> Entry:
    """Read metadata for a directory entry.

    Follows symlinks, so a dangling link fails here.

    Raises:
        OSError: If the entry's metadata cannot be read.
    """
    st = dir_entry.stat()
    return Entry(path=Path(dir_entry.path), depth=depth, is_dir=stat.S_ISDIR(st.st_mode))


class EntryProcessor:
    """Decide whether an entry is admitted and in which form.

    A single instance is shared by every worker thread, so it holds no
    mutable state. ``hook`` and ``on_error`` must be safe to call
    concurrently.
    """

    def __init__(
        self,
        pattern: re.Pattern[str] | None = None,
        hook: Hook | None = None,
        on_error: RecoveryFn = raise_entry_error,
    ) -> None:
        self._pattern = pattern
        self._hook = hook
        self._on_error = on_error

    def matches(self, path: Path) -> bool:
        """Return whether ``path`` passes the inclusion pattern.

        The full path string is searched, so ``"\\.md$"`` selects by
        extension and ``"docs/"`` selects by directory.
        """
        if self._pattern is None:
            return True
        return self._pattern.search(str(path)) is not None

    def recover(self, error: OSError) -> Path:
        """Resolve an I/O error into an admitted path.

        The recovery function's result counts as a matched path and is
        passed through the hook. Anything the recovery function raises
        propagates to the caller.
        """
        substitute = self._on_error(error)
        logger.debug("Recovered from %s -> %s", error, substitute)
        return self._apply_hook(substitute)

    def process(self, dir_entry: os.DirEntry[str], depth: int) -> Path | None:
        """Process one entry.

        Args:
            dir_entry: Entry yielded by ``os.scandir``.
            depth: Depth of the entry below the traversal root.

        Returns:
            Path | None: Path to admit, or ``None`` when the entry does
            not match the pattern.
        """
        path = Path(dir_entry.path)
        if not self.matches(path):
            return None
        try:
            entry = read_entry(dir_entry, depth)
        except OSError as exc:
            return self.recover(exc)
        if entry.is_dir:
            logger.debug("Admitting directory at depth limit %d: %s", entry.depth, entry.path)
        return self._apply_hook(entry.path)

    def _apply_hook(self, path: Path) -> Path:
        if self._hook is None:
            return path
        return self._hook(path)
