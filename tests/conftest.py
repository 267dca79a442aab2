"""Shared fixtures: tiny synthetic thumbnail libraries and targets."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

PRIMARIES = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
}


def write_solid(path: Path, color: tuple[int, int, int], size: tuple[int, int] = (40, 40)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


@pytest.fixture
def thumb_dir(tmp_path: Path) -> Path:
    """Folder with one solid PNG per primary colour."""
    folder = tmp_path / "thumbs"
    for name, color in PRIMARIES.items():
        write_solid(folder / f"{name}.png", color)
    return folder


@pytest.fixture
def thumb_paths(thumb_dir: Path) -> list[str]:
    return sorted(str(p) for p in thumb_dir.glob("*.png"))


@pytest.fixture
def target_100(tmp_path: Path) -> Path:
    """100x100 random target image."""
    rng = np.random.default_rng(7)
    arr = rng.integers(0, 256, size=(100, 100, 3), dtype=np.uint8)
    p = tmp_path / "target.png"
    Image.fromarray(arr).save(p)
    return p
