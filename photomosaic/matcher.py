"""Best-thumbnail search for a single chunk."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from PIL import Image

from photomosaic.color_utils import Metric
from photomosaic.database import ThumbnailRecord
from photomosaic.signature import extract_signature


@dataclass(frozen=True)
class MosaicChunk:
    """One ``thumbsize x thumbsize`` cell of the cropped target (H, W, 3 uint8)."""

    grid_x: int
    grid_y: int
    pixels: np.ndarray = field(repr=False)


@dataclass(frozen=True)
class MatchResult:
    grid_x: int
    grid_y: int
    winner: ThumbnailRecord
    score: float


class DatabaseSnapshot:
    """Read-only view of the records usable in one run.

    Signatures are converted to the metric's representation once, so match
    tasks share nothing mutable and only read from here.
    """

    def __init__(
        self,
        records: Sequence[ThumbnailRecord],
        res: int,
        metric: Metric,
    ) -> None:
        if not records:
            msg = "Cannot match against an empty database"
            raise ValueError(msg)
        if any(r.res != res for r in records):
            msg = f"All snapshot records must be sampled at res={res}"
            raise ValueError(msg)

        self.records: tuple[ThumbnailRecord, ...] = tuple(records)
        self.res = res
        self.metric = metric

        prepared = metric.prepare(np.stack([r.colors for r in self.records]))
        prepared.setflags(write=False)
        self.prepared = prepared

    def __len__(self) -> int:
        return len(self.records)


def match_signature(
    signature: np.ndarray,
    snapshot: DatabaseSnapshot,
) -> tuple[ThumbnailRecord, float]:
    """Linear scan for the closest record.

    Ties keep the first record in database order.
    """
    signature = np.asarray(signature, dtype=np.uint8).reshape(-1, 3)
    if signature.shape != snapshot.prepared.shape[1:]:
        msg = (
            f"Signature of {len(signature)} samples is not comparable with "
            f"res={snapshot.res} records"
        )
        raise ValueError(msg)

    metric = snapshot.metric
    scores = metric.scores(metric.prepare(signature), snapshot.prepared)
    # argmin returns the first minimum
    best = int(np.argmin(scores))
    return snapshot.records[best], scores[best].item()


def match_chunk(chunk: MosaicChunk, snapshot: DatabaseSnapshot) -> MatchResult:
    """Extract the chunk's signature and find its best thumbnail."""
    signature = extract_signature(Image.fromarray(chunk.pixels), snapshot.res)
    winner, score = match_signature(signature, snapshot)
    return MatchResult(chunk.grid_x, chunk.grid_y, winner, score)
