"""Benchmark: pyfs_utils copy helpers vs shutil"""

import os
import shutil
import sys
import tempfile
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))
import pyfs_utils


def create_tree(directory: str, dirs: int, files_per_dir: int, size: int) -> None:
    for d in range(dirs):
        sub = os.path.join(directory, f"dir_{d}")
        os.makedirs(sub)
        for i in range(files_per_dir):
            with open(os.path.join(sub, f"file_{i}.bin"), "wb") as f:
                f.write(os.urandom(size))


def timed(fn, *args, **kwargs) -> float:
    start = time.perf_counter()
    fn(*args, **kwargs)
    return time.perf_counter() - start


if __name__ == "__main__":
    dirs = 20
    files_per_dir = 25
    size = 256 * 1024

    with tempfile.TemporaryDirectory() as tmpdir:
        src = os.path.join(tmpdir, "src")
        os.makedirs(src)
        print(f"Creating {dirs * files_per_dir} files of {pyfs_utils.byte_count_to_display_size(size)} each...\n")
        create_tree(src, dirs, files_per_dir, size)
        total_mb = pyfs_utils.size_of_directory(src) / pyfs_utils.ONE_MB

        time_shutil = timed(shutil.copytree, src, os.path.join(tmpdir, "dst_shutil"))
        print(f"shutil.copytree:            {time_shutil:.3f}s ({total_mb / time_shutil:.0f} MB/s)")

        time_dir = timed(pyfs_utils.copy_directory, src, os.path.join(tmpdir, "dst_copy_directory"))
        print(f"pyfs_utils.copy_directory:  {time_dir:.3f}s ({total_mb / time_dir:.0f} MB/s)")

        dst = os.path.join(tmpdir, "dst_copy_files")
        os.makedirs(dst)
        time_files = timed(pyfs_utils.copy_files, [src], dst)
        print(f"pyfs_utils.copy_files:      {time_files:.3f}s ({total_mb / time_files:.0f} MB/s)")

        print(f"\nRatio (copy_directory): {time_shutil / time_dir:.2f}x")
        print(f"Ratio (copy_files):     {time_shutil / time_files:.2f}x")
