"""Benchmark: pyfs_utils.hash_files vs sequential hashlib"""

import hashlib
import os
import sys
import tempfile
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))
import pyfs_utils


def create_test_files(directory: str, count: int, size: int) -> list[str]:
    paths = []
    for i in range(count):
        path = os.path.join(directory, f"file_{i}.bin")
        with open(path, "wb") as f:
            f.write(os.urandom(size))
        paths.append(path)
    return paths


def bench_hashlib(paths: list[str]):
    start = time.perf_counter()
    for path in paths:
        h = hashlib.sha256()
        with open(path, "rb") as f:
            while chunk := f.read(pyfs_utils.ONE_MB):
                h.update(chunk)
        h.hexdigest()
    return time.perf_counter() - start


def bench_hash_files(paths: list[str], algorithm: str):
    start = time.perf_counter()
    pyfs_utils.hash_files(paths, algorithm=algorithm)
    return time.perf_counter() - start


def bench_crc32(paths: list[str]):
    start = time.perf_counter()
    for path in paths:
        pyfs_utils.checksum_crc32(path)
    return time.perf_counter() - start


if __name__ == "__main__":
    count = 50
    size = 10 * pyfs_utils.ONE_MB

    with tempfile.TemporaryDirectory() as tmpdir:
        print(f"Creating {count} files of {pyfs_utils.byte_count_to_display_size(size)} each...\n")
        paths = create_test_files(tmpdir, count, size)
        total_mb = count * size / pyfs_utils.ONE_MB

        time_hashlib = bench_hashlib(paths)
        print(f"hashlib (SHA256, sequential):     {time_hashlib:.3f}s ({total_mb / time_hashlib:.0f} MB/s)")

        time_sha256 = bench_hash_files(paths, "sha256")
        print(f"hash_files (SHA256, threaded):    {time_sha256:.3f}s ({total_mb / time_sha256:.0f} MB/s)")

        time_blake3 = bench_hash_files(paths, "blake3")
        print(f"hash_files (BLAKE3, threaded):    {time_blake3:.3f}s ({total_mb / time_blake3:.0f} MB/s)")

        time_crc = bench_crc32(paths)
        print(f"checksum_crc32 (sequential):      {time_crc:.3f}s ({total_mb / time_crc:.0f} MB/s)")

        print(f"\nSpeedup SHA256 (threaded vs seq): {time_hashlib / time_sha256:.1f}x")
        print(f"Speedup BLAKE3 vs hashlib SHA256: {time_hashlib / time_blake3:.1f}x")
