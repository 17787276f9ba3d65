"""Byte-size constants, display formatting and size totals."""

from __future__ import annotations

import os
from os import PathLike

from pyfs_utils._errors import require_directory, require_exists
from pyfs_utils.counters import big_int_path_counters, long_path_counters
from pyfs_utils.walk import count

ONE_KB = 1024
ONE_MB = ONE_KB * ONE_KB
ONE_GB = ONE_KB * ONE_MB
ONE_TB = ONE_KB * ONE_GB
ONE_PB = ONE_KB * ONE_TB
ONE_EB = ONE_KB * ONE_PB
ONE_ZB = ONE_KB * ONE_EB
ONE_YB = ONE_KB * ONE_ZB

_DISPLAY_UNITS = (
    (ONE_EB, "EB"),
    (ONE_PB, "PB"),
    (ONE_TB, "TB"),
    (ONE_GB, "GB"),
    (ONE_MB, "MB"),
    (ONE_KB, "KB"),
)


def byte_count_to_display_size(size: int) -> str:
    """Format a byte count using the largest whole binary unit.

    The quotient is truncated, not rounded: ``1_999_999`` becomes ``"1 MB"``.
    Anything below one kilobyte is reported as ``"<n> bytes"``.
    """
    size = int(size)
    for unit, label in _DISPLAY_UNITS:
        if size // unit > 0:
            return f"{size // unit} {label}"
    return f"{size} bytes"


def size_of_directory(directory: str | PathLike[str], *, big: bool = False) -> int:
    """Total size in bytes of every file under ``directory``.

    Symbolic links are not followed. With ``big=False`` the totals use
    fixed-width counters and raise ``OverflowError`` past 2**63 - 1.

    Raises:
        NotFoundError: If ``directory`` does not exist.
        NotADirError: If ``directory`` is not a directory.
    """
    require_directory(directory, "directory")
    counters = big_int_path_counters() if big else long_path_counters()
    return count(directory, counters=counters).byte_counter.get()


def size_of(path: str | PathLike[str], *, big: bool = False) -> int:
    """Size of a file, or the recursive size of a directory."""
    require_exists(path, "path")
    if os.path.isdir(path):
        return size_of_directory(path, big=big)
    return os.path.getsize(path)
