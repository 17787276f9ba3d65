"""Deleting files and directory trees."""

from __future__ import annotations

import enum
import logging
import os
import stat
from os import PathLike
from pathlib import Path

from pyfs_utils._errors import IOFailureError, NotFoundError, require_directory, require_exists
from pyfs_utils.counters import PathCounters
from pyfs_utils.visitor import CountingVisitor, VisitResult
from pyfs_utils.walk import walk_tree

logger = logging.getLogger(__name__)


class DeleteOption(enum.Enum):
    OVERRIDE_READ_ONLY = "override_read_only"


def _make_writable(path: Path, attrs: os.stat_result | None = None) -> None:
    mode = (attrs or os.lstat(path)).st_mode
    if stat.S_ISLNK(mode) or mode & stat.S_IWUSR:
        return
    os.chmod(path, stat.S_IMODE(mode) | stat.S_IWUSR)


class _DeletingVisitor(CountingVisitor):
    """Removes files as they are visited and directories on the way out."""

    def __init__(self, override_read_only: bool) -> None:
        super().__init__(PathCounters())
        self.override_read_only = override_read_only

    def on_directory_enter(self, path: Path, attrs: os.stat_result, depth: int) -> VisitResult:
        if depth == 0:
            if self.root is not None:
                raise RuntimeError("_DeletingVisitor is single-use")
            self.root = path
        if self.override_read_only:
            # Entries can only be unlinked from a writable directory.
            _make_writable(path, attrs)
        return VisitResult.CONTINUE

    def on_file(self, path: Path, attrs: os.stat_result, depth: int) -> VisitResult:
        if self.override_read_only:
            _make_writable(path, attrs)
        os.unlink(path)
        self.counters.file_counter.increment()
        self.counters.byte_counter.add(attrs.st_size)
        return VisitResult.CONTINUE

    def on_directory_exit(self, path: Path, exc: OSError | None) -> VisitResult:
        if exc is not None:
            raise exc
        os.rmdir(path)
        self.counters.directory_counter.increment()
        return VisitResult.CONTINUE

    def on_error(self, path: Path, exc: OSError) -> VisitResult:
        raise exc


def force_delete(path: str | PathLike[str], *options: DeleteOption) -> PathCounters:
    """Delete a file or a whole directory tree.

    Symbolic links are removed, never followed. With
    ``DeleteOption.OVERRIDE_READ_ONLY`` read-only entries are made writable
    before removal.

    Returns:
        Counts of the files, directories and bytes removed.

    Raises:
        NotFoundError: If nothing exists at ``path``.
        IOFailureError: If an entry cannot be removed.
    """
    target = Path(path)
    override = DeleteOption.OVERRIDE_READ_ONLY in options
    if not os.path.lexists(target):
        raise NotFoundError(f"File does not exist: '{target}'")
    try:
        if target.is_dir() and not target.is_symlink():
            visitor = _DeletingVisitor(override)
            walk_tree(target, visitor, follow_symlinks=False)
            counters = visitor.counters
        else:
            attrs = os.lstat(target)
            if override:
                _make_writable(target, attrs)
            os.unlink(target)
            counters = PathCounters()
            counters.file_counter.increment()
            counters.byte_counter.add(attrs.st_size)
    except OSError as e:
        raise IOFailureError(f"Cannot delete file: '{target}'") from e
    logger.debug("Deleted %s (%r)", target, counters)
    return counters


def delete(path: str | PathLike[str]) -> Path:
    """Delete a single file, symbolic link or empty directory."""
    target = Path(path)
    require_exists(target, "path")
    if target.is_dir() and not target.is_symlink():
        os.rmdir(target)
    else:
        os.unlink(target)
    return target


def clean_directory(directory: str | PathLike[str]) -> None:
    """Delete everything inside ``directory`` but keep the directory."""
    require_directory(directory, "directory")
    with os.scandir(directory) as it:
        children = [Path(entry.path) for entry in it]
    for child in children:
        force_delete(child, DeleteOption.OVERRIDE_READ_ONLY)


def delete_directory(directory: str | PathLike[str]) -> None:
    """Delete a directory recursively; do nothing if it does not exist.

    A symbolic link is unlinked without touching what it points to.
    """
    target = Path(directory)
    if not os.path.lexists(target):
        return
    if target.is_symlink():
        os.unlink(target)
        return
    require_directory(target, "directory")
    force_delete(target, DeleteOption.OVERRIDE_READ_ONLY)


def delete_quietly(path: str | PathLike[str] | None) -> bool:
    """Delete a file or directory tree without raising.

    Returns:
        Whether ``path`` was removed.
    """
    if path is None:
        return False
    try:
        force_delete(path, DeleteOption.OVERRIDE_READ_ONLY)
    except OSError as e:
        logger.debug("delete_quietly(%s) failed: %s", path, e)
        return False
    return True
