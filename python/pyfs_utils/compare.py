"""Content comparison between files."""

from __future__ import annotations

import os
from itertools import zip_longest
from os import PathLike

from pyfs_utils._errors import require_directory, require_file

_CHUNK_SIZE = 65536


def _precheck(file1: str | PathLike[str] | None, file2: str | PathLike[str] | None) -> bool | None:
    """Settle the comparison without reading content, or return ``None``."""
    if file1 is None and file2 is None:
        return True
    if file1 is None or file2 is None:
        return False
    exists1 = os.path.exists(file1)
    if exists1 != os.path.exists(file2):
        return False
    if not exists1:
        return True
    require_file(file1, "file1")
    require_file(file2, "file2")
    return None


def content_equals(file1: str | PathLike[str] | None, file2: str | PathLike[str] | None) -> bool:
    """Whether two files have byte-identical content.

    Two missing files are equal; a missing and an existing file are not.

    Raises:
        NotAFileError: If either path exists but is not a regular file.
    """
    settled = _precheck(file1, file2)
    if settled is not None:
        return settled
    if os.path.getsize(file1) != os.path.getsize(file2):
        return False
    if os.path.realpath(file1) == os.path.realpath(file2):
        return True
    with open(file1, "rb") as f1, open(file2, "rb") as f2:
        while True:
            b1 = f1.read(_CHUNK_SIZE)
            b2 = f2.read(_CHUNK_SIZE)
            if b1 != b2:
                return False
            if not b1:
                return True


def content_equals_ignore_eol(
    file1: str | PathLike[str] | None,
    file2: str | PathLike[str] | None,
    encoding: str = "utf-8",
) -> bool:
    """Whether two text files match line by line, ignoring line terminators.

    ``\\n``, ``\\r\\n`` and ``\\r`` are treated as the same terminator.
    """
    settled = _precheck(file1, file2)
    if settled is not None:
        return settled
    if os.path.realpath(file1) == os.path.realpath(file2):
        return True
    # Universal newlines mode strips the terminator differences for us.
    with open(file1, encoding=encoding) as f1, open(file2, encoding=encoding) as f2:
        for line1, line2 in zip_longest(f1, f2):
            if line1 is None or line2 is None:
                return False
            if line1.rstrip("\n") != line2.rstrip("\n"):
                return False
    return True


def directory_contains(directory: str | PathLike[str], child: str | PathLike[str] | None) -> bool:
    """Whether ``child`` lies strictly inside ``directory``.

    Paths are resolved first, so symbolic links and ``..`` segments are
    taken into account. A missing child is never contained.

    Raises:
        NotFoundError: If ``directory`` does not exist.
        NotADirError: If ``directory`` is not a directory.
    """
    require_directory(directory, "directory")
    if child is None or not os.path.exists(child):
        return False
    parent = os.path.realpath(directory)
    target = os.path.realpath(child)
    if parent == target:
        return False
    return os.path.commonpath([parent, target]) == parent
