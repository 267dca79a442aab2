"""Persistent, resolution-scoped cache of thumbnail colour signatures.

The database is a growable memo keyed by ``(path, res)``: changing the
sample resolution never invalidates old entries, it only requires new ones.
It is persisted as JSON text in insertion order and rewritten only when a
run actually appended something.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from photomosaic.errors import CorruptCacheError, InsufficientThumbnailsError, MosaicIOError
from photomosaic.image_io import load_image
from photomosaic.signature import extract_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ThumbnailRecord:
    """One candidate thumbnail sampled at one resolution.

    Attributes:
        path:   Source file as discovered by the glob.
        res:    Sample resolution the signature was taken at.
        colors: (res * res, 3) uint8 signature, read-only.
    """

    path: str
    res: int
    colors: np.ndarray

    def __post_init__(self) -> None:
        colors = np.array(self.colors, dtype=np.uint8).reshape(-1, 3)
        colors.setflags(write=False)
        object.__setattr__(self, "colors", colors)

    @property
    def key(self) -> tuple[str, int]:
        return (self.path, self.res)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ThumbnailRecord):
            return NotImplemented
        return self.key == other.key and np.array_equal(self.colors, other.colors)

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"ThumbnailRecord(path={self.path!r}, res={self.res})"


class ThumbnailDatabase:
    """Ordered, append-only set of :class:`ThumbnailRecord` unique by key."""

    def __init__(self, records: Iterable[ThumbnailRecord] = ()) -> None:
        self._records: list[ThumbnailRecord] = []
        self._keys: set[tuple[str, int]] = set()
        for record in records:
            self.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ThumbnailRecord]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ThumbnailDatabase):
            return NotImplemented
        return self._records == other._records

    def contains(self, path: str, res: int) -> bool:
        return (path, res) in self._keys

    def append(self, record: ThumbnailRecord) -> None:
        if record.key in self._keys:
            msg = f"Duplicate thumbnail record {record.key}"
            raise ValueError(msg)
        self._records.append(record)
        self._keys.add(record.key)

    def records_at(self, res: int) -> list[ThumbnailRecord]:
        """Records usable at sample resolution *res*, in database order."""
        return [r for r in self._records if r.res == res]

    # -- serialisation ---------------------------------------------------

    def dumps(self) -> str:
        return json.dumps({
            "thumbs": [
                {"path": r.path, "res": r.res, "colors": r.colors.tolist()}
                for r in self._records
            ],
        })

    @classmethod
    def loads(cls, text: str | bytes) -> ThumbnailDatabase:
        """Deserialise a cache; any defect rejects the whole cache."""
        try:
            data = json.loads(text)
        except (ValueError, UnicodeDecodeError, RecursionError) as exc:
            raise CorruptCacheError(f"Signature cache is not valid JSON: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("thumbs"), list):
            raise CorruptCacheError("Signature cache has no 'thumbs' list")

        db = cls()
        for i, entry in enumerate(data["thumbs"]):
            record = _record_from_json(i, entry)
            if db.contains(record.path, record.res):
                raise CorruptCacheError(f"Duplicate cache entry {record.key}")
            db.append(record)
        return db

    @classmethod
    def load(cls, path: str | Path) -> ThumbnailDatabase:
        path = Path(path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise MosaicIOError(f"Cannot read signature cache '{path}': {exc}") from exc
        return cls.loads(raw)

    def persist(self, path: str | Path) -> None:
        """Write the cache via a sibling temp file so the old one survives a failed write."""
        path = Path(path)
        data = self.dumps().encode("utf-8")
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise MosaicIOError(f"Cannot write signature cache '{path}': {exc}") from exc


def _record_from_json(index: int, entry: object) -> ThumbnailRecord:
    if not isinstance(entry, dict):
        raise CorruptCacheError(f"Cache entry {index} is not an object")

    path, res, colors = entry.get("path"), entry.get("res"), entry.get("colors")
    if not isinstance(path, str):
        raise CorruptCacheError(f"Cache entry {index} has no string 'path'")
    if not isinstance(res, int) or isinstance(res, bool) or res < 1:
        raise CorruptCacheError(f"Cache entry {index} has an invalid 'res'")

    try:
        arr = np.asarray(colors)
    except ValueError as exc:
        raise CorruptCacheError(f"Cache entry {index} has ragged 'colors'") from exc
    if arr.shape != (res * res, 3) or arr.dtype.kind not in "iu":
        raise CorruptCacheError(
            f"Cache entry {index} expected {res * res} RGB samples, got shape {arr.shape}",
        )
    if arr.min() < 0 or arr.max() > 255:
        raise CorruptCacheError(f"Cache entry {index} has channels outside 0-255")
    return ThumbnailRecord(path=path, res=res, colors=arr)


# -- import ------------------------------------------------------------

def import_thumbnails(
    db: ThumbnailDatabase,
    paths: Iterable[str],
    res: int,
) -> int:
    """Append a record for every path not yet sampled at *res*.

    Sequential; a single unreadable candidate aborts the whole import.

    Returns:
        Number of records appended.
    """
    added = 0
    for path in paths:
        path = str(path)
        if db.contains(path, res):
            continue
        logger.debug("Processing new thumb %s", path)
        colors = extract_signature(load_image(path), res)
        db.append(ThumbnailRecord(path=path, res=res, colors=colors))
        added += 1
    return added


def sync_database(
    cache_path: str | Path,
    paths: Iterable[str],
    res: int,
) -> ThumbnailDatabase:
    """Load the cache (or start empty), import missing thumbnails, persist if dirty."""
    cache_path = Path(cache_path)
    db = ThumbnailDatabase.load(cache_path) if cache_path.exists() else ThumbnailDatabase()
    logger.info("Loaded data for %d thumbs from %s", len(db), cache_path)

    added = import_thumbnails(db, paths, res)
    if added > 0:
        db.persist(cache_path)
        logger.info("Processed %d new thumbs", added)
    return db


def require_usable(
    db: ThumbnailDatabase,
    res: int,
    minimum: int = 2,
    source: str = "",
) -> list[ThumbnailRecord]:
    """Return the records usable at *res*, or fail if there are too few."""
    usable = db.records_at(res)
    if len(usable) < minimum:
        where = f" in {source}" if source else ""
        msg = (
            f"Not enough thumbnails found{where}: {len(usable)} usable at "
            f"sample resolution {res}, need at least {minimum}"
        )
        raise InsufficientThumbnailsError(msg)
    return usable
