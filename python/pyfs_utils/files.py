"""Reading, writing and small path helpers."""

from __future__ import annotations

import locale
import os
import tempfile
import time
from collections.abc import Iterable, Iterator
from datetime import datetime
from os import PathLike
from pathlib import Path
from typing import BinaryIO

from pyfs_utils._errors import (
    NotADirError,
    require_directory,
    require_exists,
    require_file,
    require_writable,
)

StrPath = str | PathLike[str]


# ──── Directories ────


def force_mkdir(directory: StrPath) -> Path:
    """Create ``directory`` and any missing parents.

    Raises:
        NotADirError: If something other than a directory is in the way.
    """
    path = Path(directory)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as e:
        raise NotADirError(f"Cannot create directory '{path}': a file is in the way") from e
    return path


def force_mkdir_parent(file: StrPath) -> Path:
    return force_mkdir(Path(file).parent)


def create_parent_directories(file: StrPath) -> Path:
    """Create the parent directories of ``file`` and return the parent."""
    return force_mkdir_parent(file)


def is_empty_directory(directory: StrPath) -> bool:
    require_directory(directory, "directory")
    with os.scandir(directory) as it:
        return next(it, None) is None


def get_file(*names: StrPath) -> Path:
    """Join path components into a single path."""
    if not names:
        raise ValueError("get_file() needs at least one name")
    return Path(*names)


def temp_directory() -> Path:
    return Path(tempfile.gettempdir())


def user_directory() -> Path:
    return Path.home()


def current() -> Path:
    return Path.cwd()


def touch(file: StrPath) -> Path:
    """Create an empty file or update its modification time."""
    path = Path(file)
    create_parent_directories(path)
    path.touch(exist_ok=True)
    os.utime(path)
    return path


# ──── Timestamps ────


def last_modified(file: StrPath) -> float:
    """Modification time of ``file`` as epoch seconds."""
    require_exists(file, "file")
    return os.path.getmtime(file)


def _reference_time(reference: StrPath | datetime | float | int) -> float:
    if isinstance(reference, datetime):
        return reference.timestamp()
    if isinstance(reference, (int, float)):
        return float(reference)
    require_exists(reference, "reference")
    return os.path.getmtime(reference)


def is_file_newer(file: StrPath, reference: StrPath | datetime | float | int) -> bool:
    """Whether ``file`` was modified after ``reference``.

    ``reference`` is another path, a ``datetime`` (naive means local time)
    or epoch seconds. A missing ``file`` is never newer.
    """
    if not os.path.exists(file):
        return False
    return os.path.getmtime(file) > _reference_time(reference)


def is_file_older(file: StrPath, reference: StrPath | datetime | float | int) -> bool:
    """Whether ``file`` was modified before ``reference``."""
    if not os.path.exists(file):
        return False
    return os.path.getmtime(file) < _reference_time(reference)


# ──── Reading ────


def read_file_to_bytes(file: StrPath) -> bytes:
    require_file(file, "file")
    return Path(file).read_bytes()


def read_file_to_string(file: StrPath, encoding: str | None = None) -> str:
    """Read a whole text file. ``encoding=None`` uses the locale default."""
    require_file(file, "file")
    with open(file, encoding=encoding) as f:
        return f.read()


def read_lines(file: StrPath, encoding: str | None = None) -> list[str]:
    """Read a text file into lines without their terminators."""
    require_file(file, "file")
    with open(file, encoding=encoding) as f:
        return f.read().splitlines()


def line_iterator(file: StrPath, encoding: str | None = None) -> Iterator[str]:
    """Lazily yield the lines of a text file without their terminators.

    The file stays open until the iterator is exhausted or closed.
    """
    require_file(file, "file")

    def _lines() -> Iterator[str]:
        with open(file, encoding=encoding) as f:
            for line in f:
                yield line.rstrip("\r\n")

    return _lines()


# ──── Writing ────


def open_output_stream(file: StrPath, append: bool = False) -> BinaryIO:
    """Open ``file`` for binary writing, creating parent directories.

    Raises:
        NotAFileError: If ``file`` exists but is not a regular file.
        PermissionDeniedError: If ``file`` exists but is not writable.
    """
    path = Path(file)
    if path.exists():
        require_file(path, "file")
        require_writable(path, "file")
    else:
        create_parent_directories(path)
    return open(path, "ab" if append else "wb")


def write_bytes_to_file(
    file: StrPath,
    data: bytes,
    *,
    offset: int = 0,
    length: int | None = None,
    append: bool = False,
) -> None:
    """Write ``data[offset:offset + length]`` to ``file``."""
    end = len(data) if length is None else offset + length
    if offset < 0 or end > len(data) or end < offset:
        raise ValueError(f"offset/length out of range for {len(data)} bytes: offset={offset}, length={length}")
    with open_output_stream(file, append) as out:
        out.write(memoryview(data)[offset:end])


def write_string_to_file(
    file: StrPath,
    data: str,
    encoding: str | None = None,
    *,
    append: bool = False,
) -> None:
    write_bytes_to_file(file, data.encode(encoding or _default_encoding()), append=append)


def write_lines(
    file: StrPath,
    lines: Iterable[object],
    encoding: str | None = None,
    *,
    line_ending: str = os.linesep,
    append: bool = False,
) -> None:
    """Write each item's ``str()`` followed by ``line_ending``.

    ``None`` items are written as empty lines.
    """
    codec = encoding or _default_encoding()
    with open_output_stream(file, append) as out:
        for line in lines:
            text = "" if line is None else str(line)
            out.write((text + line_ending).encode(codec))


def _default_encoding() -> str:
    return locale.getpreferredencoding(False)


def wait_for(file: StrPath, seconds: float, *, poll_interval: float = 0.1) -> bool:
    """Poll until ``file`` exists or ``seconds`` elapse."""
    deadline = time.monotonic() + seconds
    while not os.path.exists(file):
        if time.monotonic() >= deadline:
            return False
        time.sleep(poll_interval)
    return True
