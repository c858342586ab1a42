"""Fluent configuration builder for a single traversal."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path

from collectfiles.filter import compile_exclude_spec, compile_target_regex
from collectfiles.processor import Hook, RecoveryFn
from collectfiles.scanner import TraversalConfig, collect


class CollectFiles:
    """Build a traversal plan and run it.

    Every ``with_*`` method returns a new builder and leaves the
    receiver untouched, so partially configured builders can be shared
    and reused. Options may be set in any order; any may be omitted.

    Example::

        paths = (
            CollectFiles("/srv/docs")
            .with_depth(1)
            .with_target_regex(r"\\.md$")
            .with_hook(lambda path: path.with_suffix(".mutated"))
            .collect()
        )
    """

    __slots__ = ("_config", "_exclude_patterns", "_target_regex")

    def __init__(self, root_path: str | os.PathLike[str]) -> None:
        """Initialize a builder with default options.

        Args:
            root_path: Directory to traverse. Not checked until
                ``collect()`` runs.
        """
        self._config = TraversalConfig(root_path=Path(root_path))
        self._target_regex: str | None = None
        self._exclude_patterns: tuple[str, ...] = ()

    def __repr__(self) -> str:
        return (
            f"CollectFiles({str(self._config.root_path)!r}, depth={self.depth!r}, "
            f"target_regex={self._target_regex!r})"
        )

    def _derive(self, **changes: object) -> CollectFiles:
        clone = object.__new__(CollectFiles)
        clone._config = replace(self._config, **changes)
        clone._target_regex = self._target_regex
        clone._exclude_patterns = self._exclude_patterns
        return clone

    @property
    def config(self) -> TraversalConfig:
        """The immutable execution plan ``collect()`` will run."""
        return self._config

    @property
    def root_dir(self) -> Path:
        return self._config.root_path

    @property
    def depth(self) -> int | None:
        return self._config.max_depth

    @property
    def target_regex(self) -> str | None:
        """Source of the configured inclusion pattern, if any."""
        return self._target_regex

    @property
    def hook(self) -> Hook | None:
        return self._config.hook

    def with_depth(self, depth: int) -> CollectFiles:
        """Limit descent to ``depth`` directory levels below the root.

        ``0`` yields the root's direct entries only. Directories at the
        limit are returned as entries themselves.

        Raises:
            ValueError: If ``depth`` is negative.
        """
        if depth < 0:
            raise ValueError(f"depth must be non-negative, got {depth}")
        return self._derive(max_depth=depth)

    def with_target_regex(self, pattern: str) -> CollectFiles:
        """Keep only paths whose full string contains a match for ``pattern``.

        Raises:
            PatternError: If ``pattern`` does not compile.
        """
        clone = self._derive(pattern=compile_target_regex(pattern))
        clone._target_regex = pattern
        return clone

    def with_hook(self, hook: Hook) -> CollectFiles:
        """Transform every admitted path with ``hook``.

        The hook runs on worker threads and must not mutate the
        filesystem or unsynchronized shared state.
        """
        return self._derive(hook=hook)

    def with_unwrap_or_else(self, on_error: RecoveryFn) -> CollectFiles:
        """Substitute ``on_error(error)`` for any entry that cannot be read.

        The substitute is admitted as if it had matched and then passes
        through the hook. Exceptions raised by ``on_error`` abort the
        traversal. It may be called concurrently from several threads.
        """
        return self._derive(on_error=on_error)

    def with_exclude(self, patterns: Iterable[str]) -> CollectFiles:
        """Skip paths matching gitignore-style ``patterns``.

        Patterns are matched relative to the root. Excluded directories
        are not descended into. Repeated calls accumulate.
        """
        if isinstance(patterns, str):
            patterns = [patterns]
        combined = self._exclude_patterns + tuple(patterns)
        clone = self._derive(exclude=compile_exclude_spec(combined) if combined else None)
        clone._exclude_patterns = combined
        return clone

    def with_gitignore(self, enabled: bool = True) -> CollectFiles:
        """Honour the root's ``.gitignore`` file when it is readable."""
        return self._derive(use_gitignore=enabled)

    def with_max_workers(self, max_workers: int) -> CollectFiles:
        """Set the traversal thread pool size.

        Raises:
            ValueError: If ``max_workers`` is less than 1.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        return self._derive(max_workers=max_workers)

    def collect(self) -> list[Path]:
        """Run the traversal and return the collected paths.

        Raises:
            RootReadError: If the root directory cannot be listed.
            EntryReadError: If an entry is unreadable and no recovery
                function was configured.
        """
        return collect(self._config)
