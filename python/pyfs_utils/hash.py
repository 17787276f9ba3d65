"""File hashing and checksums."""

from __future__ import annotations

import hashlib
import logging
import zlib
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from os import PathLike
from typing import Literal

import blake3

from pyfs_utils._errors import HashError, require_file

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1_048_576
DEFAULT_ALGORITHM = "blake3"
ALGORITHMS = ("blake3", "sha256")

Algorithm = Literal["sha256", "blake3"]


@dataclass(frozen=True)
class HashResult:
    """Result of hashing a single file.

    Equality and hashing use the digest and algorithm only, so results for
    identical content compare equal regardless of path.
    """

    path: str
    hash_hex: str
    algorithm: str
    file_size: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashResult):
            return NotImplemented
        return (self.hash_hex, self.algorithm) == (other.hash_hex, other.algorithm)

    def __hash__(self) -> int:
        return hash((self.hash_hex, self.algorithm))


def _new_hasher(algorithm: str):
    if algorithm == "blake3":
        return blake3.blake3()
    if algorithm == "sha256":
        return hashlib.sha256()
    raise HashError(f"Unsupported hash algorithm {algorithm!r}; expected one of {', '.join(ALGORITHMS)}")


def hash_file(
    path: str | PathLike[str],
    *,
    algorithm: Algorithm = DEFAULT_ALGORITHM,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> HashResult:
    """Hash a single file.

    Args:
        path: Path to the file to hash.
        algorithm: ``"blake3"`` (default) or ``"sha256"``.
        chunk_size: Read buffer size in bytes.

    Returns:
        A ``HashResult`` with the hex digest and file size.

    Raises:
        HashError: If the algorithm is not supported.
        NotFoundError: If the file does not exist.
        NotAFileError: If the path is not a regular file.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    hasher = _new_hasher(algorithm)
    require_file(path, "path")
    size = 0
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
            size += len(chunk)
    return HashResult(str(path), hasher.hexdigest(), algorithm, size)


def hash_files(
    paths: Sequence[str | PathLike[str]],
    *,
    algorithm: Algorithm = DEFAULT_ALGORITHM,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_workers: int | None = None,
    callback: Callable[[HashResult], None] | None = None,
) -> list[HashResult]:
    """Hash multiple files on a thread pool.

    Results come back in completion order, which may differ from ``paths``.
    ``callback`` runs on the calling thread as each result arrives. The first
    failing file aborts the batch with its exception.
    """
    _new_hasher(algorithm)
    results: list[HashResult] = []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(hash_file, p, algorithm=algorithm, chunk_size=chunk_size) for p in paths]
        for future in as_completed(futures):
            result = future.result()
            results.append(result)
            if callback is not None:
                callback(result)
    logger.debug("Hashed %d files with %s", len(results), algorithm)
    return results


def checksum_crc32(path: str | PathLike[str], *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Return the CRC-32 checksum of a file's contents as an unsigned int."""
    require_file(path, "path")
    crc = 0
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            crc = zlib.crc32(chunk, crc)
    return crc & 0xFFFFFFFF

