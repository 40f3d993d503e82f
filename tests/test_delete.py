import os

import pytest

from tersetools.delete import (
    default_trash_dir,
    directory_stats,
    run,
    trash_path,
)


@pytest.fixture
def trash(tmp_path):
    return str(tmp_path / "Trash")


def test_trash_file(tmp_path, trash):
    target = tmp_path / "note.txt"
    target.write_bytes(b"hello world")
    result = trash_path(str(target), trash)
    assert result.type == "file"
    assert result.size == len(b"hello world")
    assert result.original_path == str(target)
    assert result.trash_path == os.path.join(trash, "note.txt")
    assert not target.exists()
    with open(result.trash_path, "rb") as handle:
        assert handle.read() == b"hello world"
    assert "items" not in result.to_dict()


def test_trash_directory_counts_items(tmp_path, trash):
    folder = tmp_path / "folder"
    folder.mkdir()
    (folder / "a").write_text("a")
    (folder / "b").write_text("bb")
    size_before, items_before = directory_stats(str(folder))
    result = trash_path(str(folder), trash)
    assert result.type == "directory"
    assert result.items == items_before == 3
    assert result.size == size_before
    assert result.to_dict()["items"] == result.items
    assert os.path.isdir(result.trash_path)


def test_trash_symlink(tmp_path, trash):
    real = tmp_path / "real.txt"
    real.write_text("x")
    link = tmp_path / "link.txt"
    link.symlink_to(real)
    result = trash_path(str(link), trash)
    assert result.type == "symlink"
    assert os.path.islink(result.trash_path)
    assert real.exists()


def test_name_collision_gets_new_name(tmp_path, trash):
    first = tmp_path / "a" / "dup.log"
    second = tmp_path / "b" / "dup.log"
    for f in (first, second):
        f.parent.mkdir()
        f.write_text("data")
    r1 = trash_path(str(first), trash)
    r2 = trash_path(str(second), trash)
    assert r1.trash_path != r2.trash_path
    name = os.path.basename(r2.trash_path)
    assert name.startswith("dup_")
    assert name.endswith(".log")
    assert os.path.exists(r1.trash_path) and os.path.exists(r2.trash_path)


def test_system_path_refused(trash):
    with pytest.raises(ValueError, match="refusing to trash system path"):
        trash_path("/usr/bin/env", trash)


def test_trash_itself_refused(trash):
    with pytest.raises(ValueError, match="Trash directory itself"):
        trash_path(trash, trash)


def test_missing_path(tmp_path, trash):
    with pytest.raises(FileNotFoundError, match="path does not exist"):
        trash_path(str(tmp_path / "ghost"), trash)


def test_default_trash_dir_uses_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_trash_dir() == os.path.join(str(tmp_path), ".Trash")


def test_run_moves_into_home_trash(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    target = tmp_path / "gone.txt"
    target.write_text("bye")
    data = run({"path": str(target)})
    assert data["trash_path"] == os.path.join(str(tmp_path), ".Trash", "gone.txt")
    assert not target.exists()


def test_run_requires_path():
    with pytest.raises(ValueError, match="path is required"):
        run({})