"""Exception hierarchy shared by every pyfs_utils module."""

from __future__ import annotations

import os
from os import PathLike

# ──── Base ────


class FsUtilsError(Exception):
    """Base exception for all pyfs_utils errors."""


# ──── Path preconditions ────


class NotFoundError(FsUtilsError, FileNotFoundError):
    """Raised when a root or a required path argument does not exist."""


class NotADirError(FsUtilsError, NotADirectoryError):
    """Raised when an operation requires a directory and gets something else."""


class NotAFileError(FsUtilsError, OSError):
    """Raised when an operation requires a regular file and gets something else."""


class PermissionDeniedError(FsUtilsError, PermissionError):
    """Raised when a write or delete targets a non-writable path."""


class AlreadyExistsError(FsUtilsError, FileExistsError):
    """Raised when a destination that must be absent already exists."""


# ──── Operation failures ────


class IOFailureError(FsUtilsError, OSError):
    """Raised when enumerating or reading attributes of an entry fails."""


class CopyError(FsUtilsError, OSError):
    """Raised when a copy or move operation fails."""


class HashError(FsUtilsError):
    """Raised when a file hashing operation fails."""


class LockError(FsUtilsError, OSError):
    """Raised when a lock file cannot be acquired."""


def require_exists(path: str | PathLike[str], name: str) -> None:
    if not os.path.lexists(path):
        raise NotFoundError(f"File system element for parameter '{name}' does not exist: '{path}'")


def require_directory(path: str | PathLike[str], name: str) -> None:
    require_exists(path, name)
    if not os.path.isdir(path):
        raise NotADirError(f"Parameter '{name}' is not a directory: '{path}'")


def require_directory_if_exists(path: str | PathLike[str], name: str) -> None:
    if os.path.exists(path) and not os.path.isdir(path):
        raise NotADirError(f"Parameter '{name}' is not a directory: '{path}'")


def require_file(path: str | PathLike[str], name: str) -> None:
    require_exists(path, name)
    if not os.path.isfile(path):
        raise NotAFileError(f"Parameter '{name}' is not a file: '{path}'")


def require_file_if_exists(path: str | PathLike[str], name: str) -> None:
    if os.path.exists(path) and not os.path.isfile(path):
        raise NotAFileError(f"Parameter '{name}' is not a file: '{path}'")


def require_absent(path: str | PathLike[str], name: str) -> None:
    if os.path.lexists(path):
        raise AlreadyExistsError(f"File element in parameter '{name}' already exists: '{path}'")


def require_writable(path: str | PathLike[str], name: str) -> None:
    if not os.access(path, os.W_OK):
        raise PermissionDeniedError(f"File parameter '{name}' is not writable: '{path}'")
