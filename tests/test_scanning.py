import os
import pytest
from pathlib import Path
from media_optimizer.scanning.filesystem import DiskScanner
from media_optimizer.exceptions import NotFoundError
from media_optimizer.models import Category, FileRecord

def test_lists_every_regular_file(media_tree):
    records = DiskScanner().list_files(media_tree)

    paths = [r.path for r in records]
    assert set(paths) == {
        media_tree / "x.png",
        media_tree / "y.mp4",
        media_tree / "z.txt",
        media_tree / "b" / "w.jpg",
    }
    assert len(paths) == len(set(paths)), "No duplicates"
    assert all(p.is_absolute() for p in paths)
    assert not any(p.is_dir() for p in paths)

def test_records_start_unclassified(media_tree):
    records = DiskScanner().list_files(media_tree)
    rec = records[0]
    assert isinstance(rec, FileRecord)
    assert rec.category is Category.OTHER
    assert rec.mime_type is None
    assert rec.converted is False

def test_order_is_deterministic(media_tree):
    first = [r.path for r in DiskScanner().list_files(media_tree)]
    second = [r.path for r in DiskScanner().list_files(media_tree)]
    assert first == second
    # Depth-first: files of a directory come before its subdirectories
    assert first[-1] == media_tree / "b" / "w.jpg"

def test_empty_directories_are_skipped(tmp_path):
    (tmp_path / "empty" / "deeper").mkdir(parents=True)
    (tmp_path / "only.gif").write_bytes(b"gif")

    records = DiskScanner().list_files(tmp_path)
    assert [r.path.name for r in records] == ["only.gif"]

def test_missing_root_raises(tmp_path):
    with pytest.raises(NotFoundError):
        DiskScanner().list_files(tmp_path / "nope")

def test_file_root_raises(tmp_path):
    f = tmp_path / "file.png"
    f.write_bytes(b"x")
    with pytest.raises(NotFoundError):
        DiskScanner().list_files(f)

def test_skip_dirs(media_tree):
    out = media_tree / "converted"
    out.mkdir()
    (out / "x.png.webp").write_bytes(b"webp")

    records = DiskScanner().list_files(media_tree, skip_dirs={out})
    assert (out / "x.png.webp") not in [r.path for r in records]
    assert len(records) == 4

def test_unreadable_subdir_keeps_partial_results(media_tree, monkeypatch):
    bad = media_tree / "b"
    real_scandir = os.scandir

    def flaky_scandir(path):
        if Path(path) == bad:
            raise PermissionError("denied")
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", flaky_scandir)

    records = DiskScanner().list_files(media_tree)
    names = {r.path.name for r in records}
    assert names == {"x.png", "y.mp4", "z.txt"}

def test_symlinked_dir_not_followed(media_tree):
    os.symlink(media_tree / "b", media_tree / "link", target_is_directory=True)

    paths = [r.path for r in DiskScanner().list_files(media_tree)]
    assert paths.count(media_tree / "b" / "w.jpg") == 1
    assert not any("link" in p.parts for p in paths)

def test_symlinked_file_listed(media_tree):
    os.symlink(media_tree / "x.png", media_tree / "alias.png")

    names = [r.path.name for r in DiskScanner().list_files(media_tree)]
    assert "alias.png" in names
    assert "x.png" in names

def test_broken_symlink_excluded(media_tree):
    os.symlink(media_tree / "gone.png", media_tree / "dangling.png")

    names = {r.path.name for r in DiskScanner().list_files(media_tree)}
    assert names == {"x.png", "y.mp4", "z.txt", "w.jpg"}
