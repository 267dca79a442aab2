"""Sequential assembly of match results into the output canvas."""

from __future__ import annotations

import logging

from PIL import Image

from photomosaic.image_io import load_image, resize_exact
from photomosaic.matcher import MatchResult

logger = logging.getLogger(__name__)


class Compositor:
    """Owns the output canvas and the resized-thumbnail cache.

    Not thread-safe; only the single consumer of match results may call
    :meth:`add`. Every chunk writes a disjoint square, so the finished
    canvas does not depend on the order results arrive in.
    """

    def __init__(self, crop_size: tuple[int, int], thumbsize: int, dpr: int = 1) -> None:
        self.thumbsize = thumbsize
        self.dpr = dpr
        self.tile_px = thumbsize * dpr
        width, height = crop_size
        self.canvas = Image.new("RGB", (width * dpr, height * dpr))
        self._cache: dict[str, Image.Image] = {}
        self.placed = 0

    @property
    def cached_paths(self) -> frozenset[str]:
        return frozenset(self._cache)

    def tile_for(self, path: str) -> Image.Image:
        """Winner image resized to the output tile size, loaded on first use."""
        tile = self._cache.get(path)
        if tile is None:
            tile = resize_exact(load_image(path), self.tile_px, self.tile_px)
            self._cache[path] = tile
            logger.debug("Cached tile %s", path)
        return tile

    def add(self, result: MatchResult) -> None:
        """Paste the winning thumbnail opaquely over its chunk."""
        tile = self.tile_for(result.winner.path)
        offset = (result.grid_x * self.tile_px, result.grid_y * self.tile_px)
        self.canvas.paste(tile, offset)
        self.placed += 1
