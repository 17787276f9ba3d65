"""Visitors driven by :func:`pyfs_utils.walk.walk_tree`.

A visitor is a strategy object with four hooks. Each hook returns a
:class:`VisitResult` telling the walker how to proceed:

- ``on_directory_enter(path, attrs, depth)`` before a directory's entries
  are listed. ``depth`` is 0 for the walk root.
- ``on_file(path, attrs, depth)`` for every non-directory entry.
- ``on_directory_exit(path, exc)`` after a directory has been listed.
  ``exc`` is the listing error, if any.
- ``on_error(path, exc)`` when listing a directory or reading an entry's
  attributes fails.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pyfs_utils.counters import PathCounters
from pyfs_utils.filters import PathFilter, true_filter

logger = logging.getLogger(__name__)

ErrorHook = Callable[[Path, OSError], "VisitResult | None"]


class VisitResult(enum.Enum):
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"
    SKIP_SIBLINGS = "skip_siblings"
    TERMINATE = "terminate"


class PathVisitor(Protocol):
    def on_directory_enter(self, path: Path, attrs: os.stat_result, depth: int) -> VisitResult: ...

    def on_file(self, path: Path, attrs: os.stat_result, depth: int) -> VisitResult: ...

    def on_directory_exit(self, path: Path, exc: OSError | None) -> VisitResult: ...

    def on_error(self, path: Path, exc: OSError) -> VisitResult: ...


@dataclass(frozen=True)
class WalkResult:
    """Outcome of one accumulating walk.

    ``files`` and ``directories`` are in visit order. The root is counted in
    ``directory_count`` but never listed in ``directories``.
    """

    root: Path
    files: tuple[Path, ...]
    directories: tuple[Path, ...]
    file_count: int
    directory_count: int
    byte_count: int
    error_count: int

    def relativize_files(
        self,
        parent: str | os.PathLike[str] | None = None,
        *,
        sort: bool = True,
        key: Callable[[Path], object] | None = None,
    ) -> list[Path]:
        """Return ``files`` relative to ``parent`` (default: the walk root)."""
        return relativize(self.files, self.root if parent is None else parent, sort=sort, key=key)

    def relativize_directories(
        self,
        parent: str | os.PathLike[str] | None = None,
        *,
        sort: bool = True,
        key: Callable[[Path], object] | None = None,
    ) -> list[Path]:
        """Return ``directories`` relative to ``parent`` (default: the walk root)."""
        return relativize(self.directories, self.root if parent is None else parent, sort=sort, key=key)


def relativize(
    paths: Sequence[Path],
    parent: str | os.PathLike[str],
    *,
    sort: bool = True,
    key: Callable[[Path], object] | None = None,
) -> list[Path]:
    base = Path(parent)
    relative = [p.relative_to(base) for p in paths]
    if sort:
        relative.sort(key=key)  # type: ignore[arg-type]
    return relative


class CountingVisitor:
    """Counts the files, directories and bytes accepted by its filters.

    ``dir_filter`` is never consulted for the walk root; rejecting a
    descendant directory prunes its whole subtree. A visitor is good for a
    single walk.
    """

    def __init__(
        self,
        counters: PathCounters | None = None,
        file_filter: PathFilter | None = None,
        dir_filter: PathFilter | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        self.counters = counters if counters is not None else PathCounters()
        self.file_filter = file_filter or true_filter
        self.dir_filter = dir_filter or true_filter
        self.error_hook = on_error
        self.error_count = 0
        self.root: Path | None = None

    def on_directory_enter(self, path: Path, attrs: os.stat_result, depth: int) -> VisitResult:
        if depth == 0:
            if self.root is not None:
                raise RuntimeError(f"{type(self).__name__} already walked {self.root}; create a new one")
            self.root = path
            self.counters.directory_counter.increment()
            return VisitResult.CONTINUE
        if not self.dir_filter(path, attrs):
            return VisitResult.SKIP_SUBTREE
        self.counters.directory_counter.increment()
        self.accept_directory(path, attrs, depth)
        return VisitResult.CONTINUE

    def on_file(self, path: Path, attrs: os.stat_result, depth: int) -> VisitResult:
        if self.file_filter(path, attrs):
            self.counters.file_counter.increment()
            self.counters.byte_counter.add(attrs.st_size)
            self.accept_file(path, attrs, depth)
        return VisitResult.CONTINUE

    def on_directory_exit(self, path: Path, exc: OSError | None) -> VisitResult:
        return VisitResult.CONTINUE

    def on_error(self, path: Path, exc: OSError) -> VisitResult:
        self.error_count += 1
        if self.error_hook is not None:
            decision = self.error_hook(path, exc)
            if decision is not None:
                return decision
        else:
            logger.warning("Skipping %s: %s", path, exc)
        return VisitResult.SKIP_SUBTREE

    def accept_directory(self, path: Path, attrs: os.stat_result, depth: int) -> None:
        pass

    def accept_file(self, path: Path, attrs: os.stat_result, depth: int) -> None:
        pass


class AccumulatorVisitor(CountingVisitor):
    """Counting visitor that also records every accepted path."""

    def __init__(
        self,
        counters: PathCounters | None = None,
        file_filter: PathFilter | None = None,
        dir_filter: PathFilter | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        super().__init__(counters, file_filter, dir_filter, on_error)
        self.file_list: list[Path] = []
        self.dir_list: list[Path] = []

    def accept_directory(self, path: Path, attrs: os.stat_result, depth: int) -> None:
        self.dir_list.append(path)

    def accept_file(self, path: Path, attrs: os.stat_result, depth: int) -> None:
        self.file_list.append(path)

    def result(self) -> WalkResult:
        if self.root is None:
            raise RuntimeError("AccumulatorVisitor has not walked a tree yet")
        return WalkResult(
            root=self.root,
            files=tuple(self.file_list),
            directories=tuple(self.dir_list),
            file_count=self.counters.file_counter.get(),
            directory_count=self.counters.directory_counter.get(),
            byte_count=self.counters.byte_counter.get(),
            error_count=self.error_count,
        )
