"""End-to-end run: sync the signature cache, match every chunk, compose."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from photomosaic.compositor import Compositor
from photomosaic.config import MosaicConfig
from photomosaic.database import require_usable, sync_database
from photomosaic.errors import ConfigurationError, TargetImageError
from photomosaic.image_io import collect_thumbnails, load_image, output_path_for, save_image
from photomosaic.matcher import DatabaseSnapshot
from photomosaic.scheduler import crop_to_grid, grid_shape, run_matching

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class MosaicSummary:
    output_path: Path
    crop_size: tuple[int, int]
    canvas_size: tuple[int, int]
    chunks: int
    thumbnails: int
    unique_tiles: int
    elapsed: float


def validate_config(cfg: MosaicConfig) -> None:
    for name in ("thumbsize", "sample_res", "dpr"):
        value = getattr(cfg, name)
        if value < 1:
            raise ConfigurationError(f"{name} must be a positive integer, got {value}")
    if cfg.workers is not None and cfg.workers < 1:
        raise ConfigurationError(f"workers must be positive, got {cfg.workers}")


def build_mosaic(
    image_path: str | Path,
    cfg: MosaicConfig,
    progress: ProgressCallback | None = None,
) -> MosaicSummary:
    """Run the whole mosaic pipeline for one target image.

    Args:
        image_path: Target image.
        cfg:        Run configuration.
        progress:   Optional ``(done, total)`` callback, called after each chunk.

    Returns:
        Summary of the written mosaic.
    """
    validate_config(cfg)
    t0 = time.perf_counter()

    candidates = collect_thumbnails(cfg.thumbs)
    logger.debug("Found %d candidate files for %s", len(candidates), cfg.thumbs)
    db = sync_database(cfg.cache_path, candidates, cfg.sample_res)
    usable = require_usable(db, cfg.sample_res, cfg.MIN_THUMBNAILS, cfg.thumbs)

    logger.info("Targeting %s", image_path)
    target = load_image(image_path, read_error=TargetImageError)
    output_path = output_path_for(image_path, cfg.output_dir)
    if output_path.suffix.lower() not in Image.registered_extensions():
        raise ConfigurationError(f"Cannot write output with suffix '{output_path.suffix}'")

    cropped = crop_to_grid(target, cfg.thumbsize)
    x_chunks, y_chunks = grid_shape(cropped, cfg.thumbsize)
    total = x_chunks * y_chunks
    logger.info(
        "Cropped %dx%d -> %dx%d  (%dx%d = %d chunks)",
        target.width, target.height, cropped.width, cropped.height,
        x_chunks, y_chunks, total,
    )

    snapshot = DatabaseSnapshot(usable, cfg.sample_res, cfg.metric)
    compositor = Compositor(cropped.size, cfg.thumbsize, cfg.dpr)
    for result in run_matching(cropped, snapshot, cfg.thumbsize, cfg.workers):
        compositor.add(result)
        if progress is not None:
            progress(compositor.placed, total)

    save_image(compositor.canvas, output_path)
    logger.info("Saved image to %s", output_path)

    return MosaicSummary(
        output_path=output_path,
        crop_size=cropped.size,
        canvas_size=compositor.canvas.size,
        chunks=compositor.placed,
        thumbnails=len(usable),
        unique_tiles=len(compositor.cached_paths),
        elapsed=time.perf_counter() - t0,
    )
