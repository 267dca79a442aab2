"""Colour-space conversion and the two signature distance metrics."""

from __future__ import annotations

from enum import Enum

import numpy as np
from skimage.color import rgb2lab

# Returned for signatures of different lengths; never selected by the matcher.
QUANTIZED_SENTINEL = int(np.iinfo(np.int64).max)
PERCEPTUAL_SENTINEL = float(np.finfo(np.float64).max)


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert flat (N, 3) uint8 RGB → (N, 3) float64 CIELAB."""
    rgb = np.asarray(rgb)
    if rgb.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return rgb2lab(rgb.astype(np.float64).reshape(1, -1, 3) / 255.0).reshape(-1, 3)


def _as_samples(signature: np.ndarray) -> np.ndarray:
    return np.asarray(signature, dtype=np.uint8).reshape(-1, 3)


def quantized_distance(a: np.ndarray, b: np.ndarray) -> int:
    """Sum of squared per-channel differences on 8-bit channels.

    Accumulates in int64 so no realistic signature can overflow.
    """
    a, b = _as_samples(a), _as_samples(b)
    if len(a) != len(b):
        return QUANTIZED_SENTINEL
    diff = a.astype(np.int64) - b.astype(np.int64)
    return int(np.sum(diff ** 2))


def perceptual_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Sum of squared CIELAB differences over every sample pair."""
    a, b = _as_samples(a), _as_samples(b)
    if len(a) != len(b):
        return PERCEPTUAL_SENTINEL
    diff = rgb_to_lab(a) - rgb_to_lab(b)
    return float(np.sum(diff ** 2))


class Metric(str, Enum):
    """Distance metric used for a whole run.

    ``rgb`` compares raw 8-bit channels (fast); ``lab`` compares in the
    perceptual CIELAB space (slower, more accurate).
    """

    RGB = "rgb"
    LAB = "lab"

    @property
    def sentinel(self) -> int | float:
        return QUANTIZED_SENTINEL if self is Metric.RGB else PERCEPTUAL_SENTINEL

    def distance(self, a: np.ndarray, b: np.ndarray) -> int | float:
        if self is Metric.RGB:
            return quantized_distance(a, b)
        return perceptual_distance(a, b)

    def prepare(self, signatures: np.ndarray) -> np.ndarray:
        """Convert uint8 signatures of shape (..., S, 3) to this metric's samples.

        ``rgb`` widens to int64, ``lab`` maps every sample to float64 CIELAB.
        The shape is preserved.
        """
        arr = np.asarray(signatures, dtype=np.uint8)
        if self is Metric.RGB:
            return arr.astype(np.int64)
        return rgb_to_lab(arr.reshape(-1, 3)).reshape(arr.shape)

    def scores(self, query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        """Score one prepared (S, 3) query against prepared (N, S, 3) candidates.

        Returns:
            (N,) array of distances, lower is closer.
        """
        diff = candidates - query[np.newaxis, :, :]
        return np.sum(diff ** 2, axis=(1, 2))
