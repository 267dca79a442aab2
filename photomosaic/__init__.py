"""
Photomosaic
===========

Rebuild a target image out of a library of thumbnail pictures. Every
grid chunk of the target is matched independently against a cached set of
colour signatures, using one of two metrics:

- **rgb** - squared distance on raw 8-bit channels (fast)
- **lab** - squared distance in CIELAB (perceptual)
"""

__version__ = "1.0.0"

from photomosaic.color_utils import Metric, perceptual_distance, quantized_distance
from photomosaic.compositor import Compositor
from photomosaic.config import MosaicConfig
from photomosaic.database import (
    ThumbnailDatabase,
    ThumbnailRecord,
    import_thumbnails,
    sync_database,
)
from photomosaic.matcher import DatabaseSnapshot, MatchResult, match_chunk, match_signature
from photomosaic.pipeline import build_mosaic
from photomosaic.scheduler import compute_crop, crop_to_grid, run_matching
from photomosaic.signature import extract_signature

__all__ = [
    "Compositor",
    "DatabaseSnapshot",
    "MatchResult",
    "Metric",
    "MosaicConfig",
    "ThumbnailDatabase",
    "ThumbnailRecord",
    "build_mosaic",
    "compute_crop",
    "crop_to_grid",
    "extract_signature",
    "import_thumbnails",
    "match_chunk",
    "match_signature",
    "perceptual_distance",
    "quantized_distance",
    "run_matching",
    "sync_database",
]
