"""Depth-first directory walking with pluggable filters.

:func:`walk_tree` is the engine: it drives any :class:`PathVisitor` over a
tree using ``os.scandir``, one open directory iterator per level. The other
functions here are built on it:

- :func:`accumulate` returns a :class:`WalkResult` with the matched paths and
  the counters.
- :func:`walk` returns a restartable lazy iterator of :class:`WalkEntry`.
- :func:`list_files`, :func:`list_files_and_dirs`, :func:`iterate_files` and
  :func:`stream_files` are the listing shortcuts.
"""

from __future__ import annotations

import os
import stat
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from pyfs_utils._errors import IOFailureError, NotADirError, NotFoundError
from pyfs_utils.counters import PathCounters, noop_path_counters
from pyfs_utils.filters import PathFilter, and_, extension_filter, is_regular_file
from pyfs_utils.visitor import (
    AccumulatorVisitor,
    CountingVisitor,
    ErrorHook,
    PathVisitor,
    VisitResult,
    WalkResult,
)

# ──── Entries ────


@dataclass(frozen=True)
class WalkEntry:
    """A single entry yielded by :func:`walk` or returned by :func:`walk_collect`."""

    path: Path
    is_dir: bool
    is_file: bool
    is_symlink: bool
    depth: int
    file_size: int

    def __repr__(self) -> str:
        kind = "dir" if self.is_dir else "file" if self.is_file else "other"
        return f"WalkEntry(path={str(self.path)!r}, kind={kind}, depth={self.depth}, size={self.file_size})"


# ──── Engine ────


def _check_root(root: Path) -> os.stat_result:
    try:
        attrs = os.stat(root)
    except FileNotFoundError as e:
        raise NotFoundError(f"Walk root does not exist: '{root}'") from e
    if not stat.S_ISDIR(attrs.st_mode):
        raise NotADirError(f"Walk root is not a directory: '{root}'")
    return attrs


def _entry_attrs(entry: os.DirEntry[str], follow_symlinks: bool) -> os.stat_result:
    if follow_symlinks:
        try:
            return entry.stat(follow_symlinks=True)
        except FileNotFoundError:
            # Dangling link: report the link itself.
            if not entry.is_symlink():
                raise
    return entry.stat(follow_symlinks=False)


def _traverse(
    root: Path,
    visitor: PathVisitor,
    follow_symlinks: bool,
    max_depth: int | None,
) -> Iterator[None]:
    """Drive ``visitor`` over ``root``, yielding once after every callback.

    The yields let :func:`walk` surface entries lazily; :func:`walk_tree`
    simply exhausts the generator.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    root_attrs = _check_root(root)
    decision = visitor.on_directory_enter(root, root_attrs, 0)
    yield
    if decision is not VisitResult.CONTINUE or max_depth == 0:
        if decision is VisitResult.CONTINUE:
            visitor.on_directory_exit(root, None)
        return

    # Each frame: (directory path, depth of its children, scandir iterator, ancestry key).
    stack: list[tuple[Path, int, Iterator[os.DirEntry[str]], tuple[int, int]]] = []
    ancestors: set[tuple[int, int]] = set()

    def _open(path: Path, child_depth: int, attrs: os.stat_result) -> VisitResult:
        try:
            it = os.scandir(path)
        except OSError as e:
            result = visitor.on_error(path, e)
            if result is VisitResult.TERMINATE:
                return result
            return visitor.on_directory_exit(path, e)
        key = (attrs.st_dev, attrs.st_ino)
        stack.append((path, child_depth, it, key))
        ancestors.add(key)
        return VisitResult.CONTINUE

    def _close_top(exc: OSError | None) -> VisitResult:
        path, _, it, key = stack.pop()
        it.close()  # type: ignore[attr-defined]
        ancestors.discard(key)
        return visitor.on_directory_exit(path, exc)

    try:
        if _open(root, 1, root_attrs) is VisitResult.TERMINATE:
            return
        while stack:
            path, depth, it, _ = stack[-1]
            try:
                entry = next(it, None)
            except OSError as e:
                result = visitor.on_error(path, e)
                if result is VisitResult.TERMINATE:
                    return
                if _close_top(e) is VisitResult.TERMINATE:
                    return
                continue
            if entry is None:
                if _close_top(None) is VisitResult.TERMINATE:
                    return
                continue

            child = path / entry.name
            try:
                attrs = _entry_attrs(entry, follow_symlinks)
            except OSError as e:
                result = visitor.on_error(child, e)
                yield
                if result is VisitResult.TERMINATE:
                    return
                continue

            if stat.S_ISDIR(attrs.st_mode):
                if max_depth is not None and depth >= max_depth:
                    continue
                if follow_symlinks and (attrs.st_dev, attrs.st_ino) in ancestors:
                    result = visitor.on_error(child, IOFailureError(f"Directory cycle detected at '{child}'"))
                    yield
                    if result is VisitResult.TERMINATE:
                        return
                    continue
                result = visitor.on_directory_enter(child, attrs, depth)
                yield
                if result is VisitResult.CONTINUE:
                    result = _open(child, depth + 1, attrs)
            else:
                result = visitor.on_file(child, attrs, depth)
                yield

            if result is VisitResult.TERMINATE:
                return
            if result is VisitResult.SKIP_SIBLINGS:
                if _close_top(None) is VisitResult.TERMINATE:
                    return
    finally:
        for _, _, it, _ in stack:
            it.close()  # type: ignore[attr-defined]


def walk_tree(
    root: str | PathLike[str],
    visitor: PathVisitor,
    *,
    follow_symlinks: bool = False,
    max_depth: int | None = None,
) -> PathVisitor:
    """Walk ``root`` depth-first, reporting every entry to ``visitor``.

    The root is always entered. Directories at ``max_depth`` are neither
    entered nor reported, so ``max_depth=1`` sees only the root's files.

    Raises:
        NotFoundError: If ``root`` does not exist.
        NotADirError: If ``root`` is not a directory.
    """
    for _ in _traverse(Path(root), visitor, follow_symlinks, max_depth):
        pass
    return visitor


def accumulate(
    root: str | PathLike[str],
    *,
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    follow_symlinks: bool = False,
    max_depth: int | None = None,
    counters: PathCounters | None = None,
    on_error: ErrorHook | None = None,
) -> WalkResult:
    """Walk ``root`` and collect matching files and directories.

    Args:
        root: Directory to walk.
        file_filter: Predicate a file must satisfy to be recorded and counted.
        dir_filter: Predicate a descendant directory must satisfy to be
            recorded and descended into. Never applied to ``root``.
        follow_symlinks: Whether to follow symbolic links.
        max_depth: ``None`` for unlimited, ``1`` for the root's files only.
        counters: Counters to accumulate into (default: fixed-width entry
            counts with an unbounded byte total).
        on_error: Called with ``(path, exc)`` when a directory cannot be listed
            or an entry cannot be stat'ed. Return a :class:`VisitResult` to
            steer the walk, or raise to abort it.

    Returns:
        A :class:`WalkResult`.

    Example::

        result = accumulate("data", file_filter=suffix_filter(".csv"))
        print(result.file_count, byte_count_to_display_size(result.byte_count))
    """
    visitor = AccumulatorVisitor(counters, file_filter, dir_filter, on_error)
    walk_tree(root, visitor, follow_symlinks=follow_symlinks, max_depth=max_depth)
    return visitor.result()


def count(
    root: str | PathLike[str],
    *,
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    follow_symlinks: bool = False,
    max_depth: int | None = None,
    counters: PathCounters | None = None,
    on_error: ErrorHook | None = None,
) -> PathCounters:
    """Like :func:`accumulate` but keep only the counters."""
    visitor = CountingVisitor(counters, file_filter, dir_filter, on_error)
    walk_tree(root, visitor, follow_symlinks=follow_symlinks, max_depth=max_depth)
    return visitor.counters


# ──── Lazy walk ────


class _EntryVisitor(CountingVisitor):
    def __init__(
        self,
        file_filter: PathFilter | None,
        dir_filter: PathFilter | None,
        on_error: ErrorHook | None,
    ) -> None:
        super().__init__(noop_path_counters(), file_filter, dir_filter, on_error)
        self.pending: deque[WalkEntry] = deque()

    def accept_directory(self, path: Path, attrs: os.stat_result, depth: int) -> None:
        self.pending.append(
            WalkEntry(path, True, False, os.path.islink(path), depth, 0),
        )

    def accept_file(self, path: Path, attrs: os.stat_result, depth: int) -> None:
        self.pending.append(
            WalkEntry(
                path,
                False,
                stat.S_ISREG(attrs.st_mode),
                stat.S_ISLNK(attrs.st_mode) or os.path.islink(path),
                depth,
                attrs.st_size,
            ),
        )


class WalkIter:
    """Restartable lazy walk.

    Every ``iter()`` starts a fresh traversal, so the same object can be
    consumed more than once.
    """

    def __init__(
        self,
        root: Path,
        file_filter: PathFilter | None,
        dir_filter: PathFilter | None,
        follow_symlinks: bool,
        max_depth: int | None,
        on_error: ErrorHook | None,
    ) -> None:
        self.root = root
        self._file_filter = file_filter
        self._dir_filter = dir_filter
        self._follow_symlinks = follow_symlinks
        self._max_depth = max_depth
        self._on_error = on_error

    def __iter__(self) -> Iterator[WalkEntry]:
        visitor = _EntryVisitor(self._file_filter, self._dir_filter, self._on_error)
        for _ in _traverse(self.root, visitor, self._follow_symlinks, self._max_depth):
            while visitor.pending:
                yield visitor.pending.popleft()

    def __repr__(self) -> str:
        return f"WalkIter(root={str(self.root)!r}, max_depth={self._max_depth})"


def walk(
    path: str | PathLike[str],
    *,
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    follow_symlinks: bool = False,
    max_depth: int | None = None,
    on_error: ErrorHook | None = None,
) -> WalkIter:
    """Lazily walk a tree, yielding matching directories and files.

    Yields the same paths :func:`accumulate` would record, in the same order,
    one :class:`WalkEntry` at a time. The root is checked immediately.

    Raises:
        NotFoundError: If ``path`` does not exist.
        NotADirError: If ``path`` is not a directory.

    Example::

        for entry in walk("/data", file_filter=glob_filter("*.py")):
            print(entry.path, entry.file_size)
    """
    root = Path(path)
    _check_root(root)
    return WalkIter(root, file_filter, dir_filter, follow_symlinks, max_depth, on_error)


def walk_collect(
    path: str | PathLike[str],
    *,
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    follow_symlinks: bool = False,
    max_depth: int | None = None,
    on_error: ErrorHook | None = None,
) -> list[WalkEntry]:
    """Walk a tree and return every matching entry at once."""
    return list(
        walk(
            path,
            file_filter=file_filter,
            dir_filter=dir_filter,
            follow_symlinks=follow_symlinks,
            max_depth=max_depth,
            on_error=on_error,
        )
    )


# ──── Listing shortcuts ────


def _depth(recursive: bool) -> int | None:
    return None if recursive else 1


def list_files(
    directory: str | PathLike[str],
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    *,
    recursive: bool = True,
) -> list[Path]:
    """List regular files under ``directory`` accepted by ``file_filter``.

    Symbolic links are followed.
    """
    visitor = AccumulatorVisitor(noop_path_counters(), and_(is_regular_file, file_filter), dir_filter)
    walk_tree(directory, visitor, follow_symlinks=True, max_depth=_depth(recursive))
    return visitor.file_list


def list_files_and_dirs(
    directory: str | PathLike[str],
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    *,
    recursive: bool = True,
) -> list[Path]:
    """List matching files followed by matching directories.

    ``directory`` itself is the first directory in the list.
    """
    visitor = AccumulatorVisitor(noop_path_counters(), file_filter, dir_filter)
    walk_tree(directory, visitor, follow_symlinks=True, max_depth=_depth(recursive))
    return [*visitor.file_list, Path(directory), *visitor.dir_list]


def iterate_files(
    directory: str | PathLike[str],
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
    *,
    recursive: bool = True,
) -> Iterator[Path]:
    """Lazy counterpart of :func:`list_files`."""
    entries = walk(
        directory,
        file_filter=and_(is_regular_file, file_filter),
        dir_filter=dir_filter,
        follow_symlinks=True,
        max_depth=_depth(recursive),
    )
    return (entry.path for entry in entries if not entry.is_dir)


def stream_files(
    directory: str | PathLike[str],
    *,
    recursive: bool = True,
    extensions: list[str] | tuple[str, ...] | None = None,
) -> Iterator[Path]:
    """Lazily yield regular files, optionally restricted to ``extensions``.

    Extensions may be given with or without the leading dot.
    """
    file_filter = extension_filter(*extensions) if extensions else None
    return iterate_files(directory, file_filter, recursive=recursive)
