"""Tests for storage.py — shared markdown and JSON I/O."""

from dataclasses import dataclass

from pump_alerts.storage import (
    _slugify,
    read_json,
    read_md_dir,
    remove_md,
    write_json,
    write_md,
)


@dataclass(frozen=True, slots=True)
class MdItem:
    id: str
    name: str
    tag: str = ""


def test_slugify_basic():
    assert _slugify("Hello World") == "hello-world"


def test_slugify_strips_non_alphanum():
    assert _slugify("Push day & core!") == "push-day-core"


def test_slugify_collapses_runs():
    assert _slugify("a---b   c") == "a-b-c"


def test_slugify_truncates():
    result = _slugify("a" * 100, max_len=50)

    assert len(result) <= 50


def test_slugify_empty_falls_back():
    assert _slugify("!!!") == "item"


def test_read_md_dir_missing_dir(tmp_path):
    assert read_md_dir(tmp_path / "nonexistent", MdItem) == []


def test_read_md_dir_filters_extra_fields(tmp_path):
    d = tmp_path / "items"
    d.mkdir()
    (d / "test.md").write_text('---\nid: "a"\ntag: "x"\nextra: "ignored"\n---\nhello\n')

    result = read_md_dir(d, MdItem)

    assert result == [MdItem(id="a", name="hello", tag="x")]


def test_read_md_dir_coerces_numeric_ids(tmp_path):
    d = tmp_path / "items"
    d.mkdir()
    (d / "test.md").write_text("---\nid: 1234\n---\nhello\n")

    assert read_md_dir(d, MdItem)[0].id == "1234"


def test_read_md_dir_skips_corrupt_files(tmp_path):
    d = tmp_path / "items"
    d.mkdir()
    (d / "good.md").write_text('---\nid: "a"\n---\ngood\n')
    (d / "bad.md").write_text("not yaml at all {{{")

    result = read_md_dir(d, MdItem)

    assert [r.id for r in result] == ["a"]


def test_write_md_creates_dir_and_file(tmp_path):
    d = tmp_path / "items"

    path = write_md(d, MdItem(id="abc", name="Morning Stretch"))

    assert path.name == "morning-stretch.md"
    assert read_md_dir(d, MdItem) == [MdItem(id="abc", name="Morning Stretch")]


def test_write_md_omits_defaults(tmp_path):
    d = tmp_path / "items"

    path = write_md(d, MdItem(id="abc", name="x"))

    assert "tag" not in path.read_text()


def test_write_md_slug_collision(tmp_path):
    d = tmp_path / "items"

    write_md(d, MdItem(id="aaa", name="same"))
    write_md(d, MdItem(id="bbb", name="same"))

    assert sorted(p.name for p in d.glob("*.md")) == ["same-2.md", "same.md"]


def test_write_md_same_id_overwrites(tmp_path):
    d = tmp_path / "items"

    write_md(d, MdItem(id="aaa", name="same"))
    write_md(d, MdItem(id="aaa", name="same", tag="new"))

    assert read_md_dir(d, MdItem) == [MdItem(id="aaa", name="same", tag="new")]


def test_write_md_rename_drops_old_file(tmp_path):
    d = tmp_path / "items"

    write_md(d, MdItem(id="aaa", name="old name"))
    write_md(d, MdItem(id="aaa", name="new name"))

    assert [p.name for p in d.glob("*.md")] == ["new-name.md"]


def test_remove_md(tmp_path):
    d = tmp_path / "items"
    write_md(d, MdItem(id="aaa", name="keep"))
    write_md(d, MdItem(id="bbb", name="drop"))

    assert remove_md(d, "bbb") is True
    assert remove_md(d, "bbb") is False
    assert [i.id for i in read_md_dir(d, MdItem)] == ["aaa"]


def test_remove_md_missing_dir(tmp_path):
    assert remove_md(tmp_path / "nope", "a") is False


def test_json_roundtrip_and_missing(tmp_path):
    path = tmp_path / "state" / "x.json"

    assert read_json(path) is None
    write_json(path, {"a": 1})
    assert read_json(path) == {"a": 1}


def test_read_json_corrupt(tmp_path):
    path = tmp_path / "x.json"
    path.write_text("{not json")

    assert read_json(path) is None
