"""Grid partitioning and concurrent per-chunk matching."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np
from PIL import Image

from photomosaic.errors import ConfigurationError
from photomosaic.matcher import DatabaseSnapshot, MatchResult, MosaicChunk, match_chunk

logger = logging.getLogger(__name__)


def compute_crop(width: int, height: int, thumbsize: int) -> tuple[int, int, int, int]:
    """Centre crop reducing ``width x height`` to whole multiples of *thumbsize*.

    Returns:
        ``(left, top, crop_width, crop_height)``.

    Raises:
        ConfigurationError: *thumbsize* is larger than either side.
    """
    if thumbsize < 1:
        raise ConfigurationError(f"Thumb size must be positive, got {thumbsize}")

    crop_width = width - width % thumbsize
    crop_height = height - height % thumbsize
    if crop_width == 0 or crop_height == 0:
        raise ConfigurationError(
            f"Thumb size {thumbsize} is larger than the {width}x{height} image",
        )
    return (width - crop_width) // 2, (height - crop_height) // 2, crop_width, crop_height


def crop_to_grid(img: Image.Image, thumbsize: int) -> Image.Image:
    left, top, w, h = compute_crop(img.width, img.height, thumbsize)
    return img.crop((left, top, left + w, top + h))


def grid_shape(img: Image.Image, thumbsize: int) -> tuple[int, int]:
    """Number of chunks along x and y of an already-cropped image."""
    return img.width // thumbsize, img.height // thumbsize


def iter_chunks(img: Image.Image, thumbsize: int) -> Iterator[MosaicChunk]:
    """Yield every grid cell of a cropped image; each chunk owns its pixels."""
    pixels = np.asarray(img.convert("RGB"), dtype=np.uint8)
    x_chunks, y_chunks = grid_shape(img, thumbsize)
    for gx in range(x_chunks):
        for gy in range(y_chunks):
            y0, x0 = gy * thumbsize, gx * thumbsize
            cell = pixels[y0:y0 + thumbsize, x0:x0 + thumbsize].copy()
            yield MosaicChunk(gx, gy, cell)


def run_matching(
    img: Image.Image,
    snapshot: DatabaseSnapshot,
    thumbsize: int,
    workers: int | None = None,
) -> Iterator[MatchResult]:
    """Match every chunk of *img* concurrently.

    One task per chunk is submitted to a bounded thread pool; results are
    yielded in completion order. The first failing task re-raises here and
    fails the whole run. If the run stops early, queued tasks are cancelled
    and only the running ones are waited for.
    """
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [
            executor.submit(match_chunk, chunk, snapshot)
            for chunk in iter_chunks(img, thumbsize)
        ]
        logger.debug("Submitted %d match tasks", len(futures))
        for future in as_completed(futures):
            yield future.result()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
