import os
from pathlib import Path

import pytest

from image_optimizer import discovery
from image_optimizer.discovery import discover
from image_optimizer.errors import DiscoveryError

from conftest import make_image


def test_finds_only_images(source_tree: Path):
    images = discover(str(source_tree))
    assert len(images) == 5
    assert {ref.filename for ref in images} == {"a.jpg", "b.PNG", "c.webp", "d.jpeg", "e.svg"}


def test_relative_directory_is_containing_dir(source_tree: Path):
    by_name = {ref.filename: ref for ref in discover(str(source_tree))}
    assert by_name["a.jpg"].relative_directory == ""
    assert by_name["c.webp"].relative_directory == "nested"
    assert by_name["e.svg"].relative_directory == os.path.join("nested", "deeper")
    assert os.path.isabs(by_name["e.svg"].absolute_path)
    assert by_name["d.jpeg"].original_format == "jpg"
    assert by_name["d.jpeg"].stem == "d"


def test_depth_first_order(tmp_path: Path):
    make_image(tmp_path / "a.png")
    make_image(tmp_path / "b" / "inner.png")
    make_image(tmp_path / "c.png")
    names = [ref.filename for ref in discover(str(tmp_path))]
    assert names == ["a.png", "inner.png", "c.png"]


def test_deep_nesting(tmp_path: Path):
    deep = tmp_path
    for i in range(40):
        deep = deep / f"level{i}"
    make_image(deep / "bottom.jpg")
    make_image(tmp_path / "top.jpg")
    assert len(discover(str(tmp_path))) == 2


def test_empty_directory(tmp_path: Path):
    assert discover(str(tmp_path)) == []


def test_excluded_directory_is_skipped(source_tree: Path):
    out = source_tree / "optimized_images"
    make_image(out / "a.jpg")
    images = discover(str(source_tree), exclude=[str(out)])
    assert len(images) == 5


def test_missing_root_raises(tmp_path: Path):
    with pytest.raises(DiscoveryError):
        discover(str(tmp_path / "missing"))


def test_unreadable_subdirectory_raises(source_tree: Path, monkeypatch):
    real_scandir = os.scandir

    def fake_scandir(path):
        if os.path.basename(path) == "deeper":
            raise PermissionError(13, "Permission denied")
        return real_scandir(path)

    monkeypatch.setattr(discovery.os, "scandir", fake_scandir)
    with pytest.raises(DiscoveryError, match="Permission denied"):
        discover(str(source_tree))
