import os

import pytest
import yaml

from app.domain.errors import LevelFormatError, LevelNotFoundError, LevelWriteError
from app.domain.transform import Transform, Vec3
from app.services.level_store import LevelRecord, LevelStore, level_basename


def test_level_basename_strips_directories_and_suffix():
    assert level_basename("lesson") == "lesson"
    assert level_basename("../../etc/lesson") == "lesson"
    assert level_basename("dir\\lesson.yaml") == "lesson"
    assert level_basename("  spaced  ") == "spaced"


def test_path_stays_inside_levels_dir(tmp_path):
    store = LevelStore(tmp_path)
    assert store.path_for("../escape") == tmp_path / "escape.yaml"


def test_write_then_read(tmp_path):
    store = LevelStore(tmp_path / "levels")
    records = [
        LevelRecord("中", Transform(position=Vec3(1, 2, 3), scale=Vec3.uniform(0.0008))),
        LevelRecord("国", Transform()),
    ]
    path = store.write("first", records)
    assert path == tmp_path / "levels" / "first.yaml"
    assert store.exists("first")
    assert store.names() == ["first"]

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data[0]["character"] == "中"
    assert set(data[0]["transform"]) == {"position", "rotation", "scale"}

    assert store.read("first") == records


def test_write_leaves_no_temp_file(tmp_path):
    store = LevelStore(tmp_path)
    store.write("a", [])
    assert sorted(os.listdir(tmp_path)) == ["a.yaml"]
    assert store.read("a") == []


def test_read_missing_raises(tmp_path):
    with pytest.raises(LevelNotFoundError):
        LevelStore(tmp_path).read("ghost")


@pytest.mark.parametrize(
    "content",
    [
        "just text",
        "- 42",
        "- {transform: {}}",
        "- {character: 中, transform: {position: {x: abc}}}",
        "[unclosed",
    ],
)
def test_read_malformed_raises_format_error(tmp_path, content):
    (tmp_path / "bad.yaml").write_text(content, encoding="utf-8")
    with pytest.raises(LevelFormatError):
        LevelStore(tmp_path).read("bad")


def test_failed_write_keeps_previous_level(tmp_path, monkeypatch):
    store = LevelStore(tmp_path)
    store.write("keep", [LevelRecord("中", Transform())])

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(LevelWriteError):
        store.write("keep", [])
    monkeypatch.undo()

    assert [r.character for r in store.read("keep")] == ["中"]
    assert sorted(os.listdir(tmp_path)) == ["keep.yaml"]
