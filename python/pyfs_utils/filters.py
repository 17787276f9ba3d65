"""Path predicates and combinators for filtered walks.

A filter is any callable ``(path, attrs) -> bool`` where ``attrs`` is the
``os.stat_result`` the walker already holds for the entry. Filters compose
with :func:`and_`, :func:`or_` and :func:`not_`.

Example::

    py_sources = and_(suffix_filter(".py"), not_(hidden_filter()))
    result = accumulate("src", file_filter=py_sources, dir_filter=not_(name_filter("build")))
"""

from __future__ import annotations

import fnmatch
import os
import stat
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

PathFilter = Callable[[Path, os.stat_result], bool]


def true_filter(path: Path, attrs: os.stat_result) -> bool:
    return True


def false_filter(path: Path, attrs: os.stat_result) -> bool:
    return False


def is_regular_file(path: Path, attrs: os.stat_result) -> bool:
    return stat.S_ISREG(attrs.st_mode)


def is_directory(path: Path, attrs: os.stat_result) -> bool:
    return stat.S_ISDIR(attrs.st_mode)


# ──── Combinators ────


def and_(*filters: PathFilter | None) -> PathFilter:
    """Accept a path only when every given filter accepts it.

    ``None`` entries are ignored, so ``and_(is_regular_file, user_filter)``
    works whether or not the caller supplied a filter.
    """
    active = tuple(f for f in filters if f is not None)
    if not active:
        return true_filter
    if len(active) == 1:
        return active[0]

    def _and(path: Path, attrs: os.stat_result) -> bool:
        return all(f(path, attrs) for f in active)

    return _and


def or_(*filters: PathFilter | None) -> PathFilter:
    """Accept a path when any given filter accepts it."""
    active = tuple(f for f in filters if f is not None)
    if not active:
        return false_filter
    if len(active) == 1:
        return active[0]

    def _or(path: Path, attrs: os.stat_result) -> bool:
        return any(f(path, attrs) for f in active)

    return _or


def not_(inner: PathFilter) -> PathFilter:
    def _not(path: Path, attrs: os.stat_result) -> bool:
        return not inner(path, attrs)

    return _not


# ──── Factories ────


def name_filter(*names: str, case_sensitive: bool = True) -> PathFilter:
    """Match entries whose final path component is one of ``names``."""
    if case_sensitive:
        wanted = frozenset(names)

        def _name(path: Path, attrs: os.stat_result) -> bool:
            return path.name in wanted

    else:
        wanted = frozenset(n.casefold() for n in names)

        def _name(path: Path, attrs: os.stat_result) -> bool:
            return path.name.casefold() in wanted

    return _name


def suffix_filter(*suffixes: str, case_sensitive: bool = True) -> PathFilter:
    """Match entries whose name ends with one of ``suffixes``.

    Suffixes are compared as plain string endings, so both ``".txt"`` and
    ``"tar.gz"`` work.
    """
    if case_sensitive:
        endings = tuple(suffixes)

        def _suffix(path: Path, attrs: os.stat_result) -> bool:
            return path.name.endswith(endings)

    else:
        endings = tuple(s.casefold() for s in suffixes)

        def _suffix(path: Path, attrs: os.stat_result) -> bool:
            return path.name.casefold().endswith(endings)

    return _suffix


def extension_filter(*extensions: str) -> PathFilter:
    """Match entries by extension, given with or without the leading dot."""
    return suffix_filter(*(ext if ext.startswith(".") else f".{ext}" for ext in extensions))


def glob_filter(pattern: str) -> PathFilter:
    """Match entries whose name matches a shell-style glob (e.g. ``"*.py"``)."""

    def _glob(path: Path, attrs: os.stat_result) -> bool:
        return fnmatch.fnmatchcase(path.name, pattern)

    return _glob


def hidden_filter() -> PathFilter:
    """Match entries whose name starts with a dot."""

    def _hidden(path: Path, attrs: os.stat_result) -> bool:
        return path.name.startswith(".")

    return _hidden


def size_filter(min_size: int = 0, max_size: int | None = None) -> PathFilter:
    """Match entries whose size lies in ``[min_size, max_size]``."""

    def _size(path: Path, attrs: os.stat_result) -> bool:
        if attrs.st_size < min_size:
            return False
        return max_size is None or attrs.st_size <= max_size

    return _size


def _to_timestamp(when: datetime | float | int) -> float:
    if isinstance(when, datetime):
        return when.timestamp()
    return float(when)


def newer_filter(when: datetime | float | int) -> PathFilter:
    """Match entries modified strictly after ``when``."""
    cutoff = _to_timestamp(when)

    def _newer(path: Path, attrs: os.stat_result) -> bool:
        return attrs.st_mtime > cutoff

    return _newer


def older_filter(when: datetime | float | int) -> PathFilter:
    """Match entries modified strictly before ``when``."""
    cutoff = _to_timestamp(when)

    def _older(path: Path, attrs: os.stat_result) -> bool:
        return attrs.st_mtime < cutoff

    return _older


def age_filter(max_age_seconds: float) -> PathFilter:
    """Match entries modified within the last ``max_age_seconds``."""
    return newer_filter(time.time() - max_age_seconds)


def path_equals_filter(target: str | os.PathLike[str]) -> PathFilter:
    """Match exactly one path, compared after normalization."""
    wanted = os.path.normpath(os.path.abspath(target))

    def _equals(path: Path, attrs: os.stat_result) -> bool:
        return os.path.normpath(os.path.abspath(path)) == wanted

    return _equals
