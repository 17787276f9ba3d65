import errno
import io
import os
from pathlib import Path

import pyfs_utils
import pytest

# ──── copy_files / move_files ────


def test_copy_single_file(tmp_path):
    src = tmp_path / "source.txt"
    src.write_text("hello")
    dst_dir = tmp_path / "dest"
    dst_dir.mkdir()

    result = pyfs_utils.copy_files([str(src)], str(dst_dir))
    assert len(result) == 1
    assert Path(result[0]).read_text() == "hello"


def test_copy_multiple_files(tmp_path):
    src1 = tmp_path / "a.txt"
    src2 = tmp_path / "b.txt"
    src1.write_text("aaa")
    src2.write_text("bbb")
    dst = tmp_path / "dest"
    dst.mkdir()

    result = pyfs_utils.copy_files([str(src1), str(src2)], str(dst))
    assert len(result) == 2
    assert (dst / "a.txt").read_text() == "aaa"
    assert (dst / "b.txt").read_text() == "bbb"


def test_copy_directory_tree(copy_source, tmp_path):
    dst = tmp_path / "dest"
    dst.mkdir()

    result = pyfs_utils.copy_files([str(copy_source)], str(dst))
    assert len(result) == 3
    # Check nested file was copied
    assert (dst / "src" / "subdir" / "nested.txt").read_text() == "nested content"


def test_copy_several_sources_need_directory(tmp_path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("a")
    b.write_text("b")
    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.copy_files([a, b], tmp_path / "missing-dir")


def test_copy_overwrite_false(tmp_path):
    src = tmp_path / "src.txt"
    src.write_text("new")
    dst = tmp_path / "dst.txt"
    dst.write_text("existing")

    with pytest.raises(pyfs_utils.CopyError, match="overwrite"):
        pyfs_utils.copy_files([str(src)], str(dst))
    assert dst.read_text() == "existing"


def test_copy_overwrite_true(tmp_path):
    src = tmp_path / "src.txt"
    src.write_text("new content")
    dst = tmp_path / "dst.txt"
    dst.write_text("old content")

    pyfs_utils.copy_files([str(src)], str(dst), overwrite=True)
    assert dst.read_text() == "new content"


def test_copy_nonexistent_source(tmp_path):
    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.copy_files(["/nonexistent/file.txt"], str(tmp_path))


def test_copy_with_progress(tmp_path):
    src = tmp_path / "big.bin"
    src.write_bytes(b"x" * 100_000)
    dst = tmp_path / "dest"
    dst.mkdir()

    progress_updates = []
    pyfs_utils.copy_files(
        [str(src)],
        str(dst),
        progress_callback=lambda p: progress_updates.append(p),
    )
    # Should get at least a final callback
    assert len(progress_updates) >= 1
    last = progress_updates[-1]
    assert last.total_files == 1
    assert last.files_completed == 1
    assert last.bytes_copied == last.total_bytes == 100_000


def test_move_file(tmp_path):
    src = tmp_path / "source.txt"
    src.write_text("moveme")
    dst = tmp_path / "dest"
    dst.mkdir()

    result = pyfs_utils.move_files([str(src)], str(dst))
    assert len(result) == 1
    assert not src.exists()
    assert Path(result[0]).read_text() == "moveme"


def test_move_directory_into_directory(copy_source, tmp_path):
    dst = tmp_path / "dest"
    dst.mkdir()

    result = pyfs_utils.move_files([copy_source], dst)
    assert len(result) == 3
    assert not copy_source.exists()
    assert (dst / "src" / "subdir" / "nested.txt").read_text() == "nested content"


def test_move_files_cross_device_falls_back_to_copy(tmp_path, monkeypatch):
    src = tmp_path / "source.txt"
    src.write_text("moveme")
    dst = tmp_path / "dest"
    dst.mkdir()

    def no_rename(a, b):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(os, "replace", no_rename)
    pyfs_utils.move_files([src], dst)
    assert not src.exists()
    assert (dst / "source.txt").read_text() == "moveme"


def test_move_nonexistent_source(tmp_path):
    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.move_files(["/nonexistent/file.txt"], str(tmp_path))


def _cross_device_replace(a, b):
    raise OSError(errno.EXDEV, "Invalid cross-device link")


def test_copy_files_keeps_empty_directories(copy_source, tmp_path):
    (copy_source / "empty").mkdir()
    (copy_source / "subdir" / "deeper").mkdir()
    dst = tmp_path / "dest"
    dst.mkdir()

    pyfs_utils.copy_files([copy_source], dst)
    assert (dst / "src" / "empty").is_dir()
    assert (dst / "src" / "subdir" / "deeper").is_dir()


def test_copy_files_empty_source_directory(tmp_path):
    src = tmp_path / "bare"
    src.mkdir()
    dst = tmp_path / "dest"
    dst.mkdir()

    assert pyfs_utils.copy_files([src], dst) == []
    assert (dst / "bare").is_dir()


def test_move_files_cross_device_keeps_empty_directories(copy_source, tmp_path, monkeypatch):
    (copy_source / "empty").mkdir()
    dst = tmp_path / "dest"
    dst.mkdir()

    monkeypatch.setattr(os, "replace", _cross_device_replace)
    pyfs_utils.move_files([copy_source], dst)
    assert not copy_source.exists()
    assert (dst / "src" / "empty").is_dir()
    assert (dst / "src" / "subdir" / "nested.txt").read_text() == "nested content"


def test_move_files_merge_keeps_empty_directories(copy_source, tmp_path):
    (copy_source / "empty").mkdir()
    dst = tmp_path / "dest"
    (dst / "src").mkdir(parents=True)

    pyfs_utils.move_files([copy_source], dst)
    assert not copy_source.exists()
    assert (dst / "src" / "empty").is_dir()


def _deny_scandir(monkeypatch, name):
    real_scandir = os.scandir

    def fake_scandir(path):
        if Path(path).name == name:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)


def test_copy_files_unreadable_subdirectory(copy_source, tmp_path, monkeypatch):
    dst = tmp_path / "dest"
    dst.mkdir()
    _deny_scandir(monkeypatch, "subdir")

    with pytest.raises(pyfs_utils.CopyError, match="subdir"):
        pyfs_utils.copy_files([copy_source], dst)
    # nothing is written when planning fails
    assert not (dst / "src").exists()


def test_move_files_unreadable_subdirectory_keeps_source(copy_source, tmp_path, monkeypatch):
    dst = tmp_path / "dest"
    dst.mkdir()
    _deny_scandir(monkeypatch, "subdir")
    monkeypatch.setattr(os, "replace", _cross_device_replace)

    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.move_files([copy_source], dst)
    assert (copy_source / "file1.txt").exists()


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs unsupported")
def test_copy_files_rejects_fifo_in_tree(copy_source, tmp_path):
    os.mkfifo(copy_source / "pipe")
    dst = tmp_path / "dest"
    dst.mkdir()

    with pytest.raises(pyfs_utils.CopyError, match="regular file"):
        pyfs_utils.copy_files([copy_source], dst)
    assert not (dst / "src").exists()


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs unsupported")
def test_copy_files_rejects_fifo_source(tmp_path):
    pipe = tmp_path / "pipe"
    os.mkfifo(pipe)
    dst = tmp_path / "dest"
    dst.mkdir()

    with pytest.raises(pyfs_utils.CopyError, match="regular file"):
        pyfs_utils.copy_files([pipe], dst)


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs unsupported")
def test_move_files_with_fifo_keeps_source(copy_source, tmp_path, monkeypatch):
    os.mkfifo(copy_source / "pipe")
    dst = tmp_path / "dest"
    dst.mkdir()
    monkeypatch.setattr(os, "replace", _cross_device_replace)

    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.move_files([copy_source], dst)
    assert (copy_source / "pipe").exists()


def test_copy_files_preserves_directory_mtime(copy_source, tmp_path):
    os.utime(copy_source / "subdir", (1_000_000_000, 1_000_000_000))
    os.utime(copy_source, (1_100_000_000, 1_100_000_000))
    dst = tmp_path / "dest"
    dst.mkdir()

    pyfs_utils.copy_files([copy_source], dst)
    assert int((dst / "src" / "subdir").stat().st_mtime) == 1_000_000_000
    assert int((dst / "src").stat().st_mtime) == 1_100_000_000

    plain = tmp_path / "plain"
    plain.mkdir()
    pyfs_utils.copy_files([copy_source], plain, preserve_metadata=False)
    assert int((plain / "src" / "subdir").stat().st_mtime) != 1_000_000_000


# ──── copy_file ────


def test_copy_file_creates_parents(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("payload")
    dst = tmp_path / "deep" / "er" / "b.txt"
    assert pyfs_utils.copy_file(src, dst) == dst
    assert dst.read_text() == "payload"


def test_copy_file_preserves_mtime(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("payload")
    os.utime(src, (1_000_000_000, 1_000_000_000))
    dst = pyfs_utils.copy_file(src, tmp_path / "b.txt")
    assert int(dst.stat().st_mtime) == 1_000_000_000

    plain = pyfs_utils.copy_file(src, tmp_path / "c.txt", preserve_metadata=False)
    assert int(plain.stat().st_mtime) != 1_000_000_000


def test_copy_file_missing_source(tmp_path):
    with pytest.raises(pyfs_utils.NotFoundError):
        pyfs_utils.copy_file(tmp_path / "missing.txt", tmp_path / "b.txt")


def test_copy_file_source_is_directory(tmp_path):
    with pytest.raises(pyfs_utils.NotAFileError):
        pyfs_utils.copy_file(tmp_path, tmp_path / "b.txt")


def test_copy_file_same_file(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("x")
    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.copy_file(src, tmp_path / "." / "a.txt")


def test_copy_file_destination_is_directory(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("x")
    (tmp_path / "dir").mkdir()
    with pytest.raises(pyfs_utils.NotAFileError):
        pyfs_utils.copy_file(src, tmp_path / "dir")


def test_copy_file_no_overwrite(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("new")
    dst = tmp_path / "b.txt"
    dst.write_text("old")
    with pytest.raises(pyfs_utils.CopyError, match="overwrite"):
        pyfs_utils.copy_file(src, dst, overwrite=False)
    assert dst.read_text() == "old"


@pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root bypasses permission bits")
def test_copy_file_read_only_destination(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("new")
    dst = tmp_path / "b.txt"
    dst.write_text("old")
    dst.chmod(0o444)
    with pytest.raises(pyfs_utils.PermissionDeniedError):
        pyfs_utils.copy_file(src, dst)


def test_copy_file_to_directory(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("x")
    target = pyfs_utils.copy_file_to_directory(src, tmp_path / "out")
    assert target == tmp_path / "out" / "a.txt"
    assert target.read_text() == "x"


def test_copy_stream_to_file(tmp_path):
    dst = tmp_path / "nested" / "stream.bin"
    pyfs_utils.copy_stream_to_file(io.BytesIO(b"streamed bytes"), dst)
    assert dst.read_bytes() == b"streamed bytes"


# ──── copy_directory ────


def test_copy_directory_merges(copy_source, tmp_path):
    dst = tmp_path / "dest"
    dst.mkdir()
    (dst / "keep.txt").write_text("keep")

    copied = pyfs_utils.copy_directory(copy_source, dst)
    assert len(copied) == 3
    assert (dst / "keep.txt").read_text() == "keep"
    assert (dst / "file1.txt").read_text() == "hello"
    assert (dst / "subdir" / "nested.txt").read_text() == "nested content"


def test_copy_directory_with_filter(copy_source, tmp_path):
    dst = tmp_path / "dest"
    copied = pyfs_utils.copy_directory(
        copy_source,
        dst,
        file_filter=pyfs_utils.not_(pyfs_utils.name_filter("subdir")),
    )
    assert sorted(p.name for p in copied) == ["file1.txt", "file2.txt"]
    assert not (dst / "subdir").exists()


def test_copy_directory_into_itself(copy_source):
    inner = copy_source / "backup"
    pyfs_utils.copy_directory(copy_source, inner)
    assert (inner / "file1.txt").read_text() == "hello"
    assert (inner / "subdir" / "nested.txt").exists()
    assert not (inner / "backup").exists()


def test_copy_directory_same_directory(copy_source):
    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.copy_directory(copy_source, copy_source)


def test_copy_directory_missing_source(tmp_path):
    with pytest.raises(pyfs_utils.NotFoundError):
        pyfs_utils.copy_directory(tmp_path / "missing", tmp_path / "dest")


def test_copy_directory_source_is_file(tmp_path):
    f = tmp_path / "a.txt"
    f.write_text("x")
    with pytest.raises(pyfs_utils.NotADirError):
        pyfs_utils.copy_directory(f, tmp_path / "dest")


def test_copy_directory_to_directory(copy_source, tmp_path):
    dst = tmp_path / "dest"
    pyfs_utils.copy_directory_to_directory(copy_source, dst)
    assert (dst / "src" / "file2.txt").read_text() == "world"


def test_copy_to_directory_accepts_iterables(copy_source, tmp_path):
    dst = tmp_path / "dest"
    copied = pyfs_utils.copy_to_directory([copy_source / "file1.txt", copy_source / "file2.txt"], dst)
    assert [p.name for p in copied] == ["file1.txt", "file2.txt"]

    copied = pyfs_utils.copy_to_directory(copy_source, dst)
    assert (dst / "src" / "subdir" / "nested.txt").exists()

    with pytest.raises(pyfs_utils.NotFoundError):
        pyfs_utils.copy_to_directory(copy_source / "nope", dst)


# ──── move_file / move_directory ────


def test_move_file_renames(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("x")
    dst = pyfs_utils.move_file(src, tmp_path / "b.txt")
    assert not src.exists()
    assert dst.read_text() == "x"


def test_move_file_destination_exists(tmp_path):
    src = tmp_path / "a.txt"
    dst = tmp_path / "b.txt"
    src.write_text("x")
    dst.write_text("y")
    with pytest.raises(pyfs_utils.AlreadyExistsError):
        pyfs_utils.move_file(src, dst)
    with pytest.raises(FileExistsError):
        pyfs_utils.move_file(src, dst)


def test_move_file_missing_source(tmp_path):
    with pytest.raises(pyfs_utils.NotFoundError):
        pyfs_utils.move_file(tmp_path / "a.txt", tmp_path / "b.txt")


def test_move_file_cross_device(tmp_path, monkeypatch):
    src = tmp_path / "a.txt"
    src.write_text("x")

    def no_rename(a, b):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(os, "rename", no_rename)
    pyfs_utils.move_file(src, tmp_path / "b.txt")
    assert not src.exists()
    assert (tmp_path / "b.txt").read_text() == "x"


def test_move_directory(copy_source, tmp_path):
    dst = pyfs_utils.move_directory(copy_source, tmp_path / "moved")
    assert not copy_source.exists()
    assert (dst / "subdir" / "nested.txt").read_text() == "nested content"


def test_move_directory_into_itself(copy_source):
    with pytest.raises(pyfs_utils.CopyError):
        pyfs_utils.move_directory(copy_source, copy_source / "inner")


def test_move_directory_destination_exists(copy_source, tmp_path):
    (tmp_path / "taken").mkdir()
    with pytest.raises(pyfs_utils.AlreadyExistsError):
        pyfs_utils.move_directory(copy_source, tmp_path / "taken")


def test_move_to_directory(copy_source, tmp_path):
    dst = tmp_path / "dest"
    moved = pyfs_utils.move_to_directory(copy_source / "file1.txt", dst)
    assert moved == dst / "file1.txt"
    moved = pyfs_utils.move_to_directory(copy_source / "subdir", dst)
    assert (moved / "nested.txt").exists()


def test_move_to_directory_without_create(copy_source, tmp_path):
    with pytest.raises(pyfs_utils.NotFoundError):
        pyfs_utils.move_to_directory(copy_source / "file1.txt", tmp_path / "dest", create_dest_dir=False)
    assert (copy_source / "file1.txt").exists()


def test_move_to_directory_destination_is_file(copy_source):
    with pytest.raises(pyfs_utils.NotADirError):
        pyfs_utils.move_file_to_directory(copy_source / "file1.txt", copy_source / "file2.txt")
