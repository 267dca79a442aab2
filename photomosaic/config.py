"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from photomosaic.color_utils import Metric


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        thumbs:      Glob pattern (recursive ``**`` allowed) for candidate thumbnails.
        thumbsize:   Side of one grid chunk in target-image pixels.
        sample_res:  Signature resolution; each image is reduced to res x res samples.
        dpr:         Output resolution multiplier applied to every chunk.
        metric:      Distance metric - ``lab`` (perceptual) or ``rgb`` (quantized).
        workers:     Match-task pool size (None = executor default).
        cache_path:  Signature cache file.
        output_dir:  Folder the output image is written to.
    """

    # Candidates
    thumbs: str = "./thumbnails/**/*.jpg"

    # Grid
    thumbsize: int = 32
    sample_res: int = 4
    dpr: int = 1  # warning: multiplies output resolution

    # Matching
    metric: Metric = Metric.LAB
    workers: int | None = None

    # Paths
    cache_path: Path = field(default_factory=lambda: Path("thumbdata"))
    output_dir: Path = field(default_factory=lambda: Path("."))

    # Minimum usable records required before matching may start
    MIN_THUMBNAILS: int = 2
