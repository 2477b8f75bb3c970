"""Fixed-size thumbnail generation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeError, SizeError, StorageError
from .storage import discard_file

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTH: Final[int] = 100
THUMBNAIL_HEIGHT: Final[int] = 100

# Pillow's bicubic kernel is Catmull-Rom (a = -0.5).
_resample = Image.Resampling.BICUBIC


def _output_format(destination: Path, source_format: str | None) -> str | None:
    """Pick the format implied by the destination suffix, else keep the source format."""
    registered = Image.registered_extensions()
    return registered.get(destination.suffix.lower(), source_format)


def _prepare_for_save(image: Image.Image, output_format: str | None) -> Image.Image:
    if output_format == "JPEG" and image.mode != "RGB":
        return image.convert("RGB")
    return image


def generate_thumbnail(
    source_path: str | Path,
    destination_path: str | Path,
    width: int,
    height: int,
) -> None:
    """
    Write a ``width`` x ``height`` crop-and-fit copy of the source image.

    The source format is detected from file content. The destination is
    overwritten if it already exists.
    """
    if width < 1 or height < 1:
        raise SizeError(f"thumbnail size error: {width}x{height}")

    source = Path(source_path)
    destination = Path(destination_path)

    try:
        opened = Image.open(source)
    except Image.DecompressionBombError as exc:
        raise DecodeError("image", f"{source} exceeds the pixel limit") from exc
    except UnidentifiedImageError as exc:
        raise DecodeError("image", f"unrecognised content in {source}") from exc
    except OSError as exc:
        raise StorageError(f"cannot read image {source}: {exc}") from exc

    with opened:
        try:
            opened.load()
        except (Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise DecodeError(opened.format or "image", f"corrupt content in {source}") from exc

        source_format = opened.format
        image = opened if opened.mode in ("RGB", "RGBA", "L") else opened.convert("RGBA")
        thumb = ImageOps.fit(image, (width, height), method=_resample)

    output_format = _output_format(destination, source_format)
    thumb = _prepare_for_save(thumb, output_format)

    try:
        thumb.save(destination, format=output_format)
    except (OSError, ValueError) as exc:
        discard_file(destination)
        raise StorageError(f"cannot write thumbnail {destination}: {exc}") from exc

    logger.info(
        "Stored thumbnail",
        extra={"path": str(destination), "size": f"{width}x{height}"},
    )
