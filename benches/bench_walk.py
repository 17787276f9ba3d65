"""Benchmark: pyfs_utils.accumulate / walk / count vs os.walk"""

import os
import sys
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))
import pyfs_utils

TARGET = sys.argv[1] if len(sys.argv) > 1 else "/usr"


def bench_os_walk():
    start = time.perf_counter()
    total = sum(len(files) for _, _, files in os.walk(TARGET))
    elapsed = time.perf_counter() - start
    return total, elapsed


def bench_accumulate():
    start = time.perf_counter()
    result = pyfs_utils.accumulate(TARGET, on_error=lambda path, exc: None)
    elapsed = time.perf_counter() - start
    return result.file_count, elapsed


def bench_count():
    start = time.perf_counter()
    counters = pyfs_utils.count(TARGET, on_error=lambda path, exc: None)
    elapsed = time.perf_counter() - start
    return counters.file_counter.get(), elapsed


def bench_walk_iter():
    start = time.perf_counter()
    total = sum(1 for e in pyfs_utils.walk(TARGET, on_error=lambda path, exc: None) if not e.is_dir)
    elapsed = time.perf_counter() - start
    return total, elapsed


if __name__ == "__main__":
    print(f"Benchmarking recursive walk of {TARGET}\n")

    count_os, time_os = bench_os_walk()
    print(f"os.walk:               {count_os:>8,} entries in {time_os:.3f}s")

    count_acc, time_acc = bench_accumulate()
    print(f"pyfs_utils.accumulate: {count_acc:>8,} entries in {time_acc:.3f}s")

    count_cnt, time_cnt = bench_count()
    print(f"pyfs_utils.count:      {count_cnt:>8,} entries in {time_cnt:.3f}s")

    count_iter, time_iter = bench_walk_iter()
    print(f"pyfs_utils.walk:       {count_iter:>8,} entries in {time_iter:.3f}s")

    print(f"\nRatio (accumulate): {time_os / time_acc:.2f}x")
    print(f"Ratio (count):      {time_os / time_cnt:.2f}x")
    print(f"Ratio (walk iter):  {time_os / time_iter:.2f}x")
