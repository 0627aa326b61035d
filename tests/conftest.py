from pathlib import Path

import pytest
from PIL import Image

SVG_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<!-- drawn by hand -->
<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <metadata>some editor data</metadata>
  <g>
    <rect   x="10.000000" y="10.000000" width="80.000000" height="80.000000" fill="#ff0000"/>
  </g>
</svg>
"""


def make_image(path: Path, size=(64, 48), color=(200, 40, 40), mode="RGB") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


def make_noisy_image(path: Path, size=(64, 48)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.effect_noise(size, 64).convert("RGB")
    img.save(path)
    return path


def make_svg(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SVG_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """A small nested tree: 5 images, 2 non-images."""
    root = tmp_path / "src"
    make_image(root / "a.jpg")
    make_image(root / "b.PNG")
    make_image(root / "nested" / "c.webp")
    make_image(root / "nested" / "deeper" / "d.jpeg")
    make_svg(root / "nested" / "deeper" / "e.svg")
    (root / "notes.txt").write_text("not an image")
    (root / "nested" / "data.json").write_text("{}")
    return root
