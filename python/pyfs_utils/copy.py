"""Copying and moving files and directory trees."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import stat
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import BinaryIO

from pyfs_utils._errors import (
    CopyError,
    NotADirError,
    NotFoundError,
    require_absent,
    require_directory,
    require_directory_if_exists,
    require_exists,
    require_file,
    require_file_if_exists,
    require_writable,
)
from pyfs_utils.delete import delete_directory, delete_quietly
from pyfs_utils.files import StrPath, open_output_stream
from pyfs_utils.filters import PathFilter
from pyfs_utils.hash import DEFAULT_CHUNK_SIZE
from pyfs_utils.visitor import VisitResult
from pyfs_utils.walk import accumulate

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_INTERVAL_MS = 100


def _same_file(a: StrPath, b: StrPath) -> bool:
    return os.path.realpath(a) == os.path.realpath(b)


# ──── Single file ────


def copy_file(
    src: StrPath,
    dst: StrPath,
    *,
    preserve_metadata: bool = True,
    overwrite: bool = True,
) -> Path:
    """Copy a regular file to ``dst``, creating parent directories.

    Args:
        src: File to copy.
        dst: Destination file path (not a directory).
        preserve_metadata: Copy timestamps and permission bits too.
        overwrite: Replace an existing ``dst``.

    Returns:
        The destination path.

    Raises:
        NotFoundError: If ``src`` does not exist.
        NotAFileError: If ``src`` or an existing ``dst`` is not a regular file.
        PermissionDeniedError: If an existing ``dst`` is not writable.
        CopyError: If both paths are the same file, ``dst`` exists and
            ``overwrite`` is false, or the copy came out short.
    """
    require_file(src, "src")
    if _same_file(src, dst):
        raise CopyError(f"Source and destination are the same file: '{src}'")
    target = Path(dst)
    target.parent.mkdir(parents=True, exist_ok=True)
    require_file_if_exists(target, "dst")
    if target.exists():
        if not overwrite:
            raise CopyError(f"Destination '{target}' already exists (pass overwrite=True to replace it)")
        require_writable(target, "dst")

    if preserve_metadata:
        shutil.copy2(src, target)
    else:
        shutil.copyfile(src, target)

    src_len = os.path.getsize(src)
    dst_len = os.path.getsize(target)
    if src_len != dst_len:
        raise CopyError(
            f"Failed to copy full contents from '{src}' to '{target}' Expected length: {src_len} Actual: {dst_len}"
        )
    logger.debug("Copied %s -> %s", src, target)
    return target


def copy_file_to_directory(src: StrPath, dest_dir: StrPath, *, preserve_metadata: bool = True) -> Path:
    """Copy ``src`` into ``dest_dir`` under the same name."""
    require_directory_if_exists(dest_dir, "dest_dir")
    return copy_file(src, Path(dest_dir) / Path(src).name, preserve_metadata=preserve_metadata)


def copy_stream_to_file(stream: BinaryIO, dst: StrPath) -> Path:
    """Write everything readable from a binary ``stream`` to ``dst``."""
    with open_output_stream(dst) as out:
        shutil.copyfileobj(stream, out, DEFAULT_CHUNK_SIZE)
    return Path(dst)


# ──── Directories ────


def _copy_tree(
    src_dir: Path,
    dest_dir: Path,
    file_filter: PathFilter | None,
    exclusions: frozenset[str],
    preserve_metadata: bool,
    copied: list[Path],
) -> None:
    with os.scandir(src_dir) as it:
        entries = list(it)
    require_directory_if_exists(dest_dir, "dest_dir")
    dest_dir.mkdir(parents=True, exist_ok=True)
    require_writable(dest_dir, "dest_dir")
    for entry in entries:
        child = Path(entry.path)
        if file_filter is not None and not file_filter(child, entry.stat()):
            continue
        if os.path.realpath(child) in exclusions:
            continue
        target = dest_dir / entry.name
        if entry.is_dir():
            _copy_tree(child, target, file_filter, exclusions, preserve_metadata, copied)
        else:
            copied.append(copy_file(child, target, preserve_metadata=preserve_metadata))
    if preserve_metadata:
        shutil.copystat(src_dir, dest_dir)


def copy_directory(
    src_dir: StrPath,
    dest_dir: StrPath,
    *,
    file_filter: PathFilter | None = None,
    preserve_metadata: bool = True,
) -> list[Path]:
    """Copy the contents of ``src_dir`` into ``dest_dir``, merging if it exists.

    ``file_filter`` is applied to every entry, directories included; a
    rejected directory is not copied at all. When ``dest_dir`` lies inside
    ``src_dir`` the copy never recurses into its own output.

    Returns:
        Destination paths of the copied files.

    Raises:
        NotFoundError: If ``src_dir`` does not exist.
        NotADirError: If ``src_dir`` or an existing ``dest_dir`` is not a directory.
        CopyError: If both paths are the same directory.
    """
    require_directory(src_dir, "src_dir")
    if _same_file(src_dir, dest_dir):
        raise CopyError(f"Source and destination are the same directory: '{src_dir}'")

    src_real = os.path.realpath(src_dir)
    dest_real = os.path.realpath(dest_dir)
    exclusions: frozenset[str] = frozenset()
    if os.path.commonpath([src_real, dest_real]) == src_real:
        with os.scandir(src_dir) as it:
            names = [
                entry.name
                for entry in it
                if file_filter is None or file_filter(Path(entry.path), entry.stat())
            ]
        exclusions = frozenset(os.path.join(dest_real, name) for name in names)

    copied: list[Path] = []
    _copy_tree(Path(src_dir), Path(dest_dir), file_filter, exclusions, preserve_metadata, copied)
    logger.debug("Copied directory %s -> %s (%d files)", src_dir, dest_dir, len(copied))
    return copied


def copy_directory_to_directory(src_dir: StrPath, dest_dir: StrPath) -> list[Path]:
    """Copy ``src_dir`` itself into ``dest_dir`` (``dest_dir/<name>``)."""
    require_directory_if_exists(src_dir, "src_dir")
    require_directory_if_exists(dest_dir, "dest_dir")
    return copy_directory(src_dir, Path(dest_dir) / Path(src_dir).name)


def copy_to_directory(src: StrPath | Iterable[StrPath], dest_dir: StrPath) -> list[Path]:
    """Copy a file, a directory, or an iterable of files into ``dest_dir``."""
    if not isinstance(src, (str, PathLike)):
        return [copy_file_to_directory(s, dest_dir) for s in src]
    if os.path.isfile(src):
        return [copy_file_to_directory(src, dest_dir)]
    if os.path.isdir(src):
        return copy_directory_to_directory(src, dest_dir)
    raise NotFoundError(f"The source '{src}' does not exist")


# ──── Batch copy / move with progress ────


@dataclass(frozen=True)
class CopyProgress:
    """Snapshot of progress during :func:`copy_files` or :func:`move_files`."""

    src: str
    dst: str
    bytes_copied: int
    total_bytes: int
    files_completed: int
    total_files: int
    current_file: str


class _ProgressTracker:
    def __init__(
        self,
        src: str,
        dst: str,
        total_files: int,
        total_bytes: int,
        callback: Callable[[CopyProgress], None] | None,
        interval_ms: int,
    ) -> None:
        self.src = src
        self.dst = dst
        self.total_files = total_files
        self.total_bytes = total_bytes
        self.callback = callback
        self.interval = interval_ms / 1000
        self.bytes_copied = 0
        self.files_completed = 0
        self.current_file = ""
        self._last_emit = 0.0

    def emit(self, force: bool = False) -> None:
        if self.callback is None:
            return
        now = time.monotonic()
        if not force and now - self._last_emit < self.interval:
            return
        self._last_emit = now
        self.callback(
            CopyProgress(
                src=self.src,
                dst=self.dst,
                bytes_copied=self.bytes_copied,
                total_bytes=self.total_bytes,
                files_completed=self.files_completed,
                total_files=self.total_files,
                current_file=self.current_file,
            )
        )


def _chunked_copy(src: Path, dst: Path, preserve_metadata: bool, tracker: _ProgressTracker) -> None:
    tracker.current_file = str(src)
    dst.parent.mkdir(parents=True, exist_ok=True)
    with open(src, "rb") as fin, open(dst, "wb") as fout:
        while chunk := fin.read(DEFAULT_CHUNK_SIZE):
            fout.write(chunk)
            tracker.bytes_copied += len(chunk)
            tracker.emit()
    if preserve_metadata:
        shutil.copystat(src, dst)
    tracker.files_completed += 1
    tracker.emit()


@dataclass(frozen=True)
class _CopyPlan:
    """Source to destination mapping for a batch copy or move.

    ``directories`` is in walk order, so every parent precedes its children.
    """

    directories: list[tuple[Path, Path]]
    files: list[tuple[Path, Path]]

    def under(self, root: Path) -> _CopyPlan:
        """The part of the plan that lies at or below ``root``."""

        def inside(path: Path) -> bool:
            return path == root or root in path.parents

        return _CopyPlan(
            [pair for pair in self.directories if inside(pair[0])],
            [pair for pair in self.files if inside(pair[0])],
        )


def _refuse_unreadable(path: Path, exc: OSError) -> VisitResult:
    raise CopyError(f"Cannot read '{path}' while planning the copy: {exc}") from exc


def _require_regular(path: Path) -> None:
    try:
        attrs = os.stat(path)
    except OSError as e:
        raise CopyError(f"Cannot read source '{path}': {e}") from e
    if not stat.S_ISREG(attrs.st_mode):
        raise CopyError(f"Source '{path}' is not a regular file or directory")


def _plan(
    sources: Sequence[StrPath],
    destination: StrPath,
    overwrite: bool,
) -> _CopyPlan:
    """Map every source directory and file to its destination, validating up front."""
    dest = Path(destination)
    into_dir = dest.is_dir()
    if not into_dir and len(sources) != 1:
        raise CopyError(f"Destination '{dest}' must be an existing directory when copying several sources")

    directories: list[tuple[Path, Path]] = []
    files: list[tuple[Path, Path]] = []
    for source in sources:
        src = Path(source)
        if not src.exists():
            raise CopyError(f"Source path does not exist: '{src}'")
        target = dest / src.name if into_dir else dest
        if _same_file(src, target):
            raise CopyError(f"Source and destination are the same: '{src}'")
        if src.is_dir():
            result = accumulate(src, follow_symlinks=True, on_error=_refuse_unreadable)
            directories.append((src, target))
            directories.extend((d, target / d.relative_to(src)) for d in result.directories)
            files.extend((f, target / f.relative_to(src)) for f in result.files)
        else:
            files.append((src, target))

    # Opening a FIFO or device for reading can block forever.
    for file, _ in files:
        _require_regular(file)

    if not overwrite:
        for _, target in files:
            if target.exists():
                raise CopyError(f"Destination '{target}' already exists (pass overwrite=True to replace it)")
    return _CopyPlan(directories, files)


def _execute(plan: _CopyPlan, preserve_metadata: bool, tracker: _ProgressTracker) -> None:
    for _, target_dir in plan.directories:
        target_dir.mkdir(parents=True, exist_ok=True)
    for src, target in plan.files:
        _chunked_copy(src, target, preserve_metadata, tracker)
    if preserve_metadata:
        # Children first: writing into a directory resets its mtime.
        for src_dir, target_dir in reversed(plan.directories):
            shutil.copystat(src_dir, target_dir)


def copy_files(
    sources: Sequence[StrPath],
    destination: StrPath,
    *,
    overwrite: bool = False,
    preserve_metadata: bool = True,
    progress_callback: Callable[[CopyProgress], None] | None = None,
    callback_interval_ms: int = DEFAULT_CALLBACK_INTERVAL_MS,
) -> list[str]:
    """Copy files and directories to a destination.

    ``destination`` is a directory to copy into. With a single file source it
    may also be the target file path. Directories are copied recursively,
    empty ones included. Every source is read and every destination checked
    before the first byte is written.

    Args:
        sources: Paths of files or directories to copy.
        destination: Target directory (or file path for a single file).
        overwrite: Whether to overwrite existing files at the destination.
        preserve_metadata: Whether to preserve timestamps and permissions of
            files and directories.
        progress_callback: Called with a ``CopyProgress`` snapshot at most
            every ``callback_interval_ms`` and once at the end.
        callback_interval_ms: Minimum milliseconds between progress callbacks.

    Returns:
        Destination paths of the copied files.

    Raises:
        CopyError: If a source is missing, unreadable or not a regular file or
            directory, a destination exists without ``overwrite``, or the
            copy fails.

    Example::

        def on_progress(p):
            print(f"{p.files_completed}/{p.total_files} - {p.current_file}")

        copy_files(["data/a.bin", "data/b.bin"], "/backup", progress_callback=on_progress)
    """
    plan = _plan(sources, destination, overwrite)
    tracker = _ProgressTracker(
        src=", ".join(str(s) for s in sources),
        dst=str(destination),
        total_files=len(plan.files),
        total_bytes=sum(src.stat().st_size for src, _ in plan.files),
        callback=progress_callback,
        interval_ms=callback_interval_ms,
    )
    try:
        _execute(plan, preserve_metadata, tracker)
    except OSError as e:
        raise CopyError(f"Copy failed at '{tracker.current_file}': {e}") from e
    tracker.emit(force=True)
    logger.debug("Copied %d files (%d bytes) to %s", tracker.files_completed, tracker.bytes_copied, destination)
    return [str(target) for _, target in plan.files]


def move_files(
    sources: Sequence[StrPath],
    destination: StrPath,
    *,
    overwrite: bool = False,
    progress_callback: Callable[[CopyProgress], None] | None = None,
    callback_interval_ms: int = DEFAULT_CALLBACK_INTERVAL_MS,
) -> list[str]:
    """Move files and directories to a destination.

    Each source is renamed when possible and copied then deleted when the
    destination is on another filesystem. Progress is only reported for the
    copied part.

    Returns:
        Destination paths of the moved files.

    Raises:
        CopyError: If a source is missing, unreadable or not a regular file or
            directory, a destination exists without ``overwrite``, or the
            move fails.
    """
    plan = _plan(sources, destination, overwrite)
    dest = Path(destination)
    into_dir = dest.is_dir()
    tracker = _ProgressTracker(
        src=", ".join(str(s) for s in sources),
        dst=str(destination),
        total_files=len(plan.files),
        total_bytes=sum(src.stat().st_size for src, _ in plan.files),
        callback=progress_callback,
        interval_ms=callback_interval_ms,
    )
    try:
        for source in sources:
            src = Path(source)
            target = dest / src.name if into_dir else dest
            if src.is_dir() and target.is_dir():
                # Rename cannot merge into a populated directory.
                _copy_then_delete(src, plan.under(src), tracker)
                continue
            try:
                os.replace(src, target)
                tracker.files_completed += len(plan.under(src).files)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                _copy_then_delete(src, plan.under(src), tracker)
    except OSError as e:
        raise CopyError(f"Move failed: {e}") from e
    tracker.emit(force=True)
    return [str(target) for _, target in plan.files]


def _copy_then_delete(src: Path, plan: _CopyPlan, tracker: _ProgressTracker) -> None:
    _execute(plan, True, tracker)
    if src.is_dir():
        delete_directory(src)
    else:
        os.unlink(src)


# ──── Move ────


def move_file(src: StrPath, dst: StrPath) -> Path:
    """Move a regular file to ``dst``, which must not exist.

    Raises:
        NotFoundError: If ``src`` does not exist.
        NotAFileError: If ``src`` is not a regular file.
        AlreadyExistsError: If ``dst`` exists.
        CopyError: If the source cannot be removed after a cross-device copy.
    """
    require_file(src, "src")
    require_absent(dst, "dst")
    try:
        os.rename(src, dst)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        copy_file(src, dst)
        try:
            os.unlink(src)
        except OSError as unlink_error:
            delete_quietly(dst)
            raise CopyError(f"Failed to delete original file '{src}' after copy to '{dst}'") from unlink_error
    logger.debug("Moved %s -> %s", src, dst)
    return Path(dst)


def move_directory(src_dir: StrPath, dst_dir: StrPath) -> Path:
    """Move a directory to ``dst_dir``, which must not exist.

    Raises:
        NotFoundError: If ``src_dir`` does not exist.
        NotADirError: If ``src_dir`` is not a directory.
        AlreadyExistsError: If ``dst_dir`` exists.
        CopyError: If ``dst_dir`` lies inside ``src_dir`` or the source
            survives a cross-device copy.
    """
    require_directory(src_dir, "src_dir")
    require_absent(dst_dir, "dst_dir")
    src_real = os.path.realpath(src_dir)
    if os.path.realpath(dst_dir).startswith(src_real + os.sep):
        raise CopyError(f"Cannot move directory: '{src_dir}' to a subdirectory of itself: '{dst_dir}'")
    try:
        os.rename(src_dir, dst_dir)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        copy_directory(src_dir, dst_dir)
        delete_directory(src_dir)
        if os.path.exists(src_dir):
            raise CopyError(f"Failed to delete original directory '{src_dir}' after copy to '{dst_dir}'") from e
    logger.debug("Moved directory %s -> %s", src_dir, dst_dir)
    return Path(dst_dir)


def _prepare_dest_dir(dest_dir: StrPath, create_dest_dir: bool) -> None:
    if os.path.isdir(dest_dir):
        return
    if os.path.exists(dest_dir):
        raise NotADirError(f"Destination '{dest_dir}' is not a directory")
    if not create_dest_dir:
        raise NotFoundError(f"Destination directory '{dest_dir}' does not exist [create_dest_dir=False]")
    os.makedirs(dest_dir, exist_ok=True)


def move_file_to_directory(src: StrPath, dest_dir: StrPath, *, create_dest_dir: bool = True) -> Path:
    require_exists(src, "src")
    _prepare_dest_dir(dest_dir, create_dest_dir)
    return move_file(src, Path(dest_dir) / Path(src).name)


def move_directory_to_directory(src_dir: StrPath, dest_dir: StrPath, *, create_dest_dir: bool = True) -> Path:
    require_exists(src_dir, "src_dir")
    _prepare_dest_dir(dest_dir, create_dest_dir)
    return move_directory(src_dir, Path(dest_dir) / Path(src_dir).name)


def move_to_directory(src: StrPath, dest_dir: StrPath, *, create_dest_dir: bool = True) -> Path:
    """Move a file or directory into ``dest_dir``, keeping its name."""
    require_exists(src, "src")
    if os.path.isdir(src):
        return move_directory_to_directory(src, dest_dir, create_dest_dir=create_dest_dir)
    return move_file_to_directory(src, dest_dir, create_dest_dir=create_dest_dir)
