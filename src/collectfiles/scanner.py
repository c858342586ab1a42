"""Parallel directory traversal over a bounded thread pool."""

from __future__ import annotations

import logging
import os
import re
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from pathspec import GitIgnoreSpec

from collectfiles import RootReadError
from collectfiles.filter import ExcludeFilter, build_exclude_filter
from collectfiles.processor import EntryProcessor, Hook, RecoveryFn, raise_entry_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TraversalConfig:
    """Immutable execution plan for one traversal.

    Attributes:
        root_path: Directory to traverse. Only checked once traversal
            starts.
        max_depth: Deepest directory level descended into. ``None``
            means unlimited; ``0`` lists the root's entries only.
        pattern: Inclusion regex searched in each full path string.
        hook: Transformation applied to every admitted path.
        on_error: Recovery function for per-entry I/O errors.
        exclude: Gitignore-style spec of paths to skip entirely.
        use_gitignore: Whether to also honour ``root_path/.gitignore``.
        max_workers: Thread pool size. ``None`` means ``os.cpu_count()``.
    """

    root_path: Path
    max_depth: int | None = None
    pattern: re.Pattern[str] | None = None
    hook: Hook | None = None
    on_error: RecoveryFn = raise_entry_error
    exclude: GitIgnoreSpec | None = None
    use_gitignore: bool = False
    max_workers: int | None = None


DirKey = tuple[int, int]


@dataclass(slots=True)
class _PartialResult:
    """Output of one unit of work: admitted paths and directories to descend.

    ``ancestors`` holds the identity of the scanned directory and of every
    directory above it on the path from the root.
    """

    admitted: list[Path]
    subdirs: list[tuple[Path, DirKey]]
    depth: int
    ancestors: frozenset[DirKey]


def _list_directory(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        return list(it)


def _dir_key(st: os.stat_result) -> DirKey:
    return (st.st_dev, st.st_ino)


class _Walker:
    """Fan out directory reads over a pool and merge their partial results.

    Workers only read the filesystem and build private lists; all merging
    and scheduling happens on the coordinating thread in ``run``.
    Symlinked directories are descended into unless they lead back to a
    directory on their own branch.
    """

    def __init__(
        self,
        root: Path,
        max_depth: int | None,
        processor: EntryProcessor,
        exclude_filter: ExcludeFilter,
        max_workers: int,
    ) -> None:
        self._root = root
        self._max_depth = max_depth
        self._processor = processor
        self._exclude = exclude_filter
        self._max_workers = max_workers

    def run(self, root_entries: list[os.DirEntry[str]], root_key: DirKey) -> list[Path]:
        results: list[Path] = []
        scanned = 1

        with ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="collectfiles"
        ) as pool:
            pending: set[Future[_PartialResult]] = {
                pool.submit(self._process_entries, root_entries, 0, frozenset([root_key]))
            }
            try:
                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        partial = future.result()
                        results.extend(partial.admitted)
                        for subdir, key in partial.subdirs:
                            if key in partial.ancestors:
                                logger.debug("Skipping directory cycle: %s", subdir)
                                continue
                            pending.add(
                                pool.submit(
                                    self._scan_directory,
                                    subdir,
                                    partial.depth + 1,
                                    partial.ancestors | {key},
                                )
                            )
                            scanned += 1
            except BaseException:
                pool.shutdown(wait=True, cancel_futures=True)
                raise

        logger.debug("Collected %d paths from %d directories", len(results), scanned)
        return sorted(results)

    def _descends(self, depth: int) -> bool:
        return self._max_depth is None or depth < self._max_depth

    def _scan_directory(
        self, directory: Path, depth: int, ancestors: frozenset[DirKey]
    ) -> _PartialResult:
        try:
            entries = _list_directory(directory)
        except OSError as exc:
            logger.debug("Cannot read directory: %s", directory)
            return _PartialResult(
                admitted=[self._processor.recover(exc)],
                subdirs=[],
                depth=depth,
                ancestors=ancestors,
            )
        return self._process_entries(entries, depth, ancestors)

    def _process_entries(
        self,
        entries: list[os.DirEntry[str]],
        depth: int,
        ancestors: frozenset[DirKey],
    ) -> _PartialResult:
        admitted: list[Path] = []
        subdirs: list[tuple[Path, DirKey]] = []

        for dir_entry in entries:
            path = Path(dir_entry.path)
            try:
                # follows symlinks; dangling links report False
                is_dir = dir_entry.is_dir()
            except OSError as exc:
                admitted.append(self._processor.recover(exc))
                continue

            if self._exclude and self._exclude.should_exclude(
                path.relative_to(self._root), is_dir
            ):
                continue

            if is_dir and self._descends(depth):
                try:
                    key = _dir_key(dir_entry.stat())
                except OSError as exc:
                    admitted.append(self._processor.recover(exc))
                    continue
                subdirs.append((path, key))
                continue

            result = self._processor.process(dir_entry, depth)
            if result is not None:
                admitted.append(result)

        return _PartialResult(admitted=admitted, subdirs=subdirs, depth=depth, ancestors=ancestors)


def collect(config: TraversalConfig) -> list[Path]:
    """Traverse ``config.root_path`` and return every admitted path.

    Blocks until every scheduled directory has been processed. The
    result is sorted so repeated runs over an unchanged tree compare
    equal; callers should rely on membership only.

    Args:
        config: Execution plan built by ``CollectFiles``.

    Returns:
        list[Path]: Admitted paths, hooked and recovered where configured.

    Raises:
        RootReadError: If the root directory cannot be listed.
        EntryReadError: If an entry is unreadable and the default
            recovery function is in use.
    """
    root = config.root_path
    try:
        root_entries = _list_directory(root)
        root_key = _dir_key(os.stat(root))
    except OSError as exc:
        raise RootReadError(root, exc.strerror or str(exc)) from exc

    max_workers = config.max_workers or os.cpu_count() or 1
    logger.debug(
        "Collecting from %s (max_depth=%s, workers=%d)", root, config.max_depth, max_workers
    )

    walker = _Walker(
        root=root,
        max_depth=config.max_depth,
        processor=EntryProcessor(config.pattern, config.hook, config.on_error),
        exclude_filter=build_exclude_filter(root, config.exclude, config.use_gitignore),
        max_workers=max_workers,
    )
    return walker.run(root_entries, root_key)
