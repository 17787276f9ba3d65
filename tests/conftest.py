from pathlib import Path

import pytest


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a realistic directory tree for testing."""
    for depth in range(4):
        d = tmp_path / "/".join(f"level{i}" for i in range(depth + 1))
        d.mkdir(parents=True, exist_ok=True)
        for j in range(5):
            (d / f"file_{j}.txt").write_text(f"content at depth {depth}, file {j}")
    return tmp_path


@pytest.fixture
def small_tree(tmp_path: Path) -> Path:
    """root/{a.txt (5 bytes), sub/{b.txt (3 bytes)}}"""
    root = tmp_path / "root"
    sub = root / "sub"
    sub.mkdir(parents=True)
    (root / "a.txt").write_bytes(b"aaaaa")
    (sub / "b.txt").write_bytes(b"bbb")
    return root


@pytest.fixture
def copy_source(tmp_path: Path) -> Path:
    """Create a source tree for copy/move tests."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "file1.txt").write_text("hello")
    (src / "file2.txt").write_text("world")
    sub = src / "subdir"
    sub.mkdir()
    (sub / "nested.txt").write_text("nested content")
    return src
