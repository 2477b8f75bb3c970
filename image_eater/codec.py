"""Declared-format image decoding and encoding."""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, FormatError

SUPPORTED_FORMATS_LABEL = "image(png/jpg/gif)"


class ImageFormat(str, Enum):
    """Closed set of image encodings accepted at ingestion time."""

    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"

    @property
    def pillow_format(self) -> str:
        return self.value.upper()


_format_tokens = {
    "png": ImageFormat.PNG,
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "gif": ImageFormat.GIF,
}


@dataclass
class DecodedImage:
    """An in-memory image together with the format it was declared as."""

    image: Image.Image
    format: ImageFormat


def parse_format(token: str) -> ImageFormat:
    """Map a MIME subtype or data-URI token such as ``jpg`` to an ImageFormat."""
    image_format = _format_tokens.get(token.strip().lower())
    if image_format is None:
        raise FormatError(SUPPORTED_FORMATS_LABEL, token)
    return image_format


def decode_image(data: bytes, declared: ImageFormat | str) -> DecodedImage:
    """
    Decode ``data`` using only the decoder of the declared format.

    The payload is never sniffed: a PNG declared as GIF fails here instead of
    being silently accepted under the wrong name.
    """
    image_format = declared if isinstance(declared, ImageFormat) else parse_format(declared)

    try:
        image = Image.open(io.BytesIO(data), formats=[image_format.pillow_format])
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(image_format.value, "undecodable data") from exc

    return DecodedImage(image=image, format=image_format)


def encode_image(decoded: DecodedImage) -> bytes:
    """Encode the image with the format recorded on it."""
    image = decoded.image
    if decoded.format is ImageFormat.JPEG and image.mode not in ("RGB", "L", "CMYK"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format=decoded.format.pillow_format)
    return buffer.getvalue()
