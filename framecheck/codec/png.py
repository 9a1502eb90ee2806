"""PNG codec — converts between encoded image bytes and PixelBuffers using Pillow."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from framecheck.errors import CorruptData, UnsupportedFormat
from framecheck.models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def from_image(image: Image.Image) -> PixelBuffer:
    """Convert any Pillow image to an RGBA PixelBuffer."""
    rgba = image.convert("RGBA")
    try:
        return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())
    except ValidationError as e:
        raise CorruptData(f"Image has unusable geometry {rgba.width}x{rgba.height}: {e}") from e


def to_image(buffer: PixelBuffer) -> Image.Image:
    return Image.frombytes("RGBA", buffer.size, buffer.data)


def decode(data: bytes) -> PixelBuffer:
    """Decode encoded image bytes (PNG or any format Pillow reads) into a PixelBuffer."""
    try:
        image = Image.open(io.BytesIO(data))
    except UnidentifiedImageError as e:
        raise UnsupportedFormat(f"Unrecognized image data ({len(data)} bytes)") from e
    except Image.DecompressionBombError as e:
        raise CorruptData(f"Image header declares implausible dimensions: {e}") from e
    try:
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise CorruptData(f"Image data could not be decoded: {e}") from e
    logger.debug("Decoded %s image %dx%d (%s)", image.format, image.width, image.height, image.mode)
    return from_image(image)


def encode(buffer: PixelBuffer) -> bytes:
    """Encode a PixelBuffer as PNG bytes."""
    out = io.BytesIO()
    to_image(buffer).save(out, format="PNG")
    return out.getvalue()
