"""Image loading, resizing, saving, and candidate discovery."""

from __future__ import annotations

import glob
import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from photomosaic.errors import ImageDecodeError, ImageReadError, OutputWriteError

logger = logging.getLogger(__name__)

# Catmull-Rom cubic; shared by signatures, query chunks and composited tiles.
RESAMPLE = Image.BICUBIC


def load_image(
    path: str | Path,
    read_error: type[ImageReadError] = ImageReadError,
) -> Image.Image:
    """Read and decode an image file into RGB.

    Args:
        path: File to load.
        read_error: Exception raised when the file cannot be read at all,
            so callers can tell the target image apart from candidates.

    Raises:
        ImageReadError: (or *read_error*) the file is missing or unreadable.
        ImageDecodeError: the bytes are not a supported image.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise read_error(f"Error loading image '{path}': {exc}") from exc

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (
        UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError,
    ) as exc:
        raise ImageDecodeError(f"Cannot decode image '{path}': {exc}") from exc
    return img.convert("RGB")


def resize_exact(img: Image.Image, width: int, height: int) -> Image.Image:
    """Resize to exactly ``width x height`` (no aspect preservation, no crop)."""
    if img.size == (width, height):
        return img.copy()
    return img.resize((width, height), RESAMPLE)


def collect_thumbnails(pattern: str) -> list[str]:
    """Expand a (recursive) glob pattern into a sorted list of file paths."""
    return sorted(
        p for p in glob.glob(pattern, recursive=True) if Path(p).is_file()
    )


def output_path_for(image_path: str | Path, output_dir: str | Path) -> Path:
    """Pick a non-existing output path for *image_path*.

    ``photo.jpg`` becomes ``photo.output.jpg``, then ``photo.output-1.jpg``,
    ``photo.output-2.jpg`` ... while earlier names are taken.
    """
    image_path = Path(image_path)
    output_dir = Path(output_dir)
    name = image_path.name
    dot = name.find(".", 1)
    prefix = name[:dot] if dot > 0 else name
    ext = image_path.suffix

    candidate = output_dir / f"{prefix}.output{ext}"
    dup_num = 1
    while candidate.exists():
        candidate = output_dir / f"{prefix}.output-{dup_num}{ext}"
        dup_num += 1
    return candidate


def save_image(img: Image.Image, path: str | Path) -> None:
    """Encode *img* in the format implied by the suffix and write it.

    The image is fully encoded in memory first so a failed encode never
    leaves a partial file behind.
    """
    path = Path(path)
    fmt = Image.registered_extensions().get(path.suffix.lower())
    if fmt is None:
        raise OutputWriteError(f"Unsupported output format '{path.suffix}' for {path}")

    buf = io.BytesIO()
    try:
        img.save(buf, format=fmt)
    except (OSError, ValueError, KeyError) as exc:
        raise OutputWriteError(f"Cannot encode {path.name} as {fmt}: {exc}") from exc

    try:
        path.write_bytes(buf.getvalue())
    except OSError as exc:
        raise OutputWriteError(f"Cannot write output image '{path}': {exc}") from exc
    logger.debug("Wrote %d bytes to %s", buf.tell(), path)
