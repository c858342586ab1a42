"""collectfiles — parallel recursive file collection with a fluent builder."""

from __future__ import annotations

from pathlib import Path

__version__ = "0.1.0"


class CollectFilesError(Exception):
    """Base class for every error raised by collectfiles."""


class PatternError(CollectFilesError, ValueError):
    """Raised when a target regular expression fails to compile.

    Raised by ``with_target_regex`` itself, so the failure surfaces
    before any filesystem access takes place.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid regular expression {pattern!r}: {reason}")
        self.pattern = pattern


class RootReadError(CollectFilesError):
    """Raised when the root directory cannot be listed.

    Never routed through the recovery function: no traversal can
    begin without the root's entries.
    """

    def __init__(self, root: Path, reason: str) -> None:
        super().__init__(f"cannot read root directory '{root}': {reason}")
        self.root = root


class EntryReadError(CollectFilesError):
    """Raised by the default recovery function for an unreadable entry."""

    def __init__(self, path: Path | None, reason: str) -> None:
        where = f"'{path}'" if path is not None else "entry"
        super().__init__(f"cannot read {where}: {reason}")
        self.path = path


from collectfiles.builder import CollectFiles  # noqa: E402

__all__ = [
    "CollectFiles",
    "CollectFilesError",
    "EntryReadError",
    "PatternError",
    "RootReadError",
    "__version__",
]
