"""Text writer guarded by an advisory lock file.

The lock is a ``<name>.lck`` file created with ``O_CREAT | O_EXCL`` in a
lock directory (the system temp directory by default). Any process that
honors the same convention refuses to open the file while the lock exists.
There is no retry and no timeout.

Example::

    with LockableFileWriter("report.txt", lock_dir="/var/lock/myapp") as w:
        w.write("hello\\n")
"""

from __future__ import annotations

import atexit
import logging
import os
import tempfile
from os import PathLike
from pathlib import Path
from typing import TextIO

from pyfs_utils._errors import LockError, NotAFileError

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lck"

_held_locks: set[Path] = set()


@atexit.register
def _release_abandoned_locks() -> None:
    for lock_file in list(_held_locks):
        try:
            lock_file.unlink()
        except FileNotFoundError:
            pass
        _held_locks.discard(lock_file)


class LockableFileWriter:
    """Write text to a file while holding its lock file.

    Args:
        path: File to write.
        encoding: Text encoding (``None`` for the locale default).
        append: Append instead of truncating.
        lock_dir: Directory for the lock file; created if missing.

    Raises:
        NotAFileError: If ``path`` is a directory.
        LockError: If the lock directory is not writable or the lock is
            already held.
    """

    def __init__(
        self,
        path: str | PathLike[str],
        *,
        encoding: str | None = None,
        append: bool = False,
        lock_dir: str | PathLike[str] | None = None,
    ) -> None:
        self.path = Path(path).absolute()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.is_dir():
            raise NotAFileError(f"File specified is a directory: '{self.path}'")

        lock_root = Path(lock_dir if lock_dir is not None else tempfile.gettempdir())
        lock_root.mkdir(parents=True, exist_ok=True)
        if not os.access(lock_root, os.W_OK):
            raise LockError(f"Could not write to lock_dir: '{lock_root.absolute()}'")
        self.lock_file = lock_root.absolute() / (self.path.name + LOCK_SUFFIX)

        self._acquire()
        self._out = self._open(encoding, append)

    def _acquire(self) -> None:
        try:
            fd = os.open(self.lock_file, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as e:
            raise LockError(f"Can't write file, lock '{self.lock_file}' exists") from e
        os.close(fd)
        _held_locks.add(self.lock_file)
        logger.debug("Acquired lock %s", self.lock_file)

    def _release(self) -> None:
        try:
            self.lock_file.unlink()
        except FileNotFoundError:
            logger.warning("Lock %s vanished before release", self.lock_file)
        _held_locks.discard(self.lock_file)
        logger.debug("Released lock %s", self.lock_file)

    def _open(self, encoding: str | None, append: bool) -> TextIO:
        existed = self.path.exists()
        try:
            return open(self.path, "a" if append else "w", encoding=encoding)
        except BaseException:
            self._release()
            if not existed and self.path.exists():
                self.path.unlink()
            raise

    @property
    def closed(self) -> bool:
        return self._out.closed

    def write(self, text: str) -> int:
        return self._out.write(text)

    def writelines(self, lines: list[str]) -> None:
        self._out.writelines(lines)

    def flush(self) -> None:
        self._out.flush()

    def close(self) -> None:
        """Close the stream and release the lock, even if closing fails."""
        if self._out.closed:
            return
        try:
            self._out.close()
        finally:
            self._release()

    def __enter__(self) -> LockableFileWriter:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"LockableFileWriter(path={str(self.path)!r}, lock={str(self.lock_file)!r}, {state})"
