from pathlib import Path

import pytest

from rasterizer.cache import CacheStore
from rasterizer.inputs import FileType, classify, resolve_inputs
from tests.conftest import write_file


@pytest.mark.parametrize(
    "name,expected",
    [
        ("a.svg", FileType.SVG),
        ("a.SVG", FileType.SVG),
        ("a.png", FileType.PNG),
        ("a.jpg", FileType.JPEG),
        ("a.JPG", FileType.JPEG),
        ("a.jpeg", None),
        ("a.gif", FileType.GIF),
        ("a.txt", None),
        ("README", None),
    ],
)
def test_classify(name, expected):
    assert classify(Path(name)) == expected


def test_patterns_are_flattened_and_deduplicated(workspace):
    a = write_file(workspace / "assets" / "a.svg")
    b = write_file(workspace / "assets" / "b.png")
    c = write_file(workspace / "assets" / "nested" / "c.jpg")

    resolved = resolve_inputs(["assets/*.png", "assets/**/*"], workspace)

    assert resolved == [b.resolve(), a.resolve(), c.resolve()]


def test_directories_are_excluded(workspace):
    write_file(workspace / "assets" / "nested" / "c.jpg")
    resolved = resolve_inputs(["assets/*"], workspace)
    assert resolved == []


def test_absolute_patterns(workspace):
    a = write_file(workspace / "assets" / "a.svg")
    resolved = resolve_inputs([str(workspace / "assets" / "*.svg")], workspace)
    assert resolved == [a.resolve()]


def test_unmatched_pattern_yields_nothing(workspace):
    assert resolve_inputs(["nope/*.svg"], workspace) == []


def test_cache_drops_unmodified_files(workspace):
    write_file(workspace / "assets" / "a.svg")
    write_file(workspace / "assets" / "b.png")
    cache = CacheStore.load(workspace / "cache", "abc")

    first = resolve_inputs(["assets/*"], workspace, cache)
    second = resolve_inputs(["assets/*"], workspace, cache)

    assert len(first) == 2
    assert second == []


def test_non_image_files_still_resolve(workspace):
    txt = write_file(workspace / "assets" / "notes.txt")
    assert resolve_inputs(["assets/*"], workspace) == [txt.resolve()]
