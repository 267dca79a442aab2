"""Signature extraction: reduce any image to res x res colour samples."""

from __future__ import annotations

import numpy as np
from PIL import Image

from photomosaic.image_io import resize_exact


def extract_signature(img: Image.Image, res: int) -> np.ndarray:
    """Resize *img* to ``res x res`` and read its pixels row-major.

    Returns:
        (res * res, 3) uint8 array.
    """
    if res < 1:
        msg = f"Signature resolution must be positive, got {res}"
        raise ValueError(msg)
    small = resize_exact(img.convert("RGB"), res, res)
    return np.asarray(small, dtype=np.uint8).reshape(-1, 3)
