"""Entry filtering: target regex compilation and gitignore-style exclusion."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path, PurePath

from pathspec import GitIgnoreSpec

from collectfiles import PatternError

logger = logging.getLogger(__name__)


def compile_target_regex(pattern: str) -> re.Pattern[str]:
    """Compile an inclusion pattern.

    Args:
        pattern: Regular expression source, matched later with
            ``re.search`` against the full path string.

    Returns:
        re.Pattern[str]: Compiled pattern.

    Raises:
        PatternError: If ``pattern`` is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise PatternError(pattern, str(exc)) from exc


def compile_exclude_spec(patterns: Iterable[str]) -> GitIgnoreSpec:
    """Compile gitignore-style exclusion patterns."""
    return GitIgnoreSpec.from_lines(list(patterns))


class ExcludeFilter:
    """Filter entries by one or more gitignore-style specs.

    Paths are matched relative to the traversal root, with a trailing
    slash for directories so that ``build/`` style patterns apply.
    """

    def __init__(self, specs: Iterable[GitIgnoreSpec] | None = None) -> None:
        """Initialize exclude filter.

        Args:
            specs: Optional compiled specs. An entry is excluded when
                any of them matches.
        """
        self._specs: list[GitIgnoreSpec] = list(specs) if specs else []

    def __bool__(self) -> bool:
        return bool(self._specs)

    def should_exclude(self, relative_path: PurePath, is_dir: bool) -> bool:
        """Return whether an entry should be excluded.

        Args:
            relative_path: Entry path relative to the traversal root.
            is_dir: Whether the entry is a directory.

        Returns:
            bool: ``True`` when any configured spec matches.
        """
        if not self._specs:
            return False
        candidate = relative_path.as_posix()
        if is_dir:
            candidate += "/"
        return any(spec.match_file(candidate) for spec in self._specs)


def build_exclude_filter(
    root: Path,
    exclude: GitIgnoreSpec | None = None,
    use_gitignore: bool = False,
) -> ExcludeFilter:
    """Assemble the exclusion filter for a traversal rooted at ``root``.

    The root's ``.gitignore`` is read here, once traversal has started,
    so configuring ``with_gitignore`` never touches the filesystem. Its
    patterns are anchored at ``root`` like the explicit ``exclude``
    spec. Nested ``.gitignore`` files are ordinary entries.

    Args:
        root: Traversal root.
        exclude: Spec compiled from ``with_exclude`` patterns.
        use_gitignore: Whether to add ``root/.gitignore``. A missing,
            unreadable or undecodable file adds nothing.

    Returns:
        ExcludeFilter: Filter combining every applicable spec.
    """
    specs: list[GitIgnoreSpec] = []
    if exclude is not None:
        specs.append(exclude)
    if use_gitignore:
        gitignore_path = root / ".gitignore"
        try:
            lines = gitignore_path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError):
            logger.debug("Skipping unreadable .gitignore: %s", gitignore_path)
        else:
            specs.append(GitIgnoreSpec.from_lines(lines))
    return ExcludeFilter(specs)
