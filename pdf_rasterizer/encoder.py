"""JPEG encoding of converted page buffers."""

from __future__ import annotations

import io
import logging

from PIL import Image

from .exceptions import EncodeError
from .options import JPEG_QUALITY
from .types import EncodedPage

_LOGGER = logging.getLogger("pdf_rasterizer.encoder")


def encode_jpeg(rgb: bytes, width: int, height: int, quality: int = JPEG_QUALITY) -> bytes:
    """Compress a packed RGB buffer into JPEG bytes."""

    try:
        image = Image.frombytes("RGB", (width, height), rgb)
        output = io.BytesIO()
        image.save(output, format="JPEG", quality=quality)
    except Exception as exc:
        raise EncodeError(f"JPEG encoding failed for {width}x{height} image: {exc}") from exc
    return output.getvalue()


class PageEncoder:
    """Turn converted RGB buffers into :class:`EncodedPage` records."""

    def __init__(self, quality: int = JPEG_QUALITY) -> None:
        self.quality = quality

    def encode(self, index: int, rgb: bytes, width: int, height: int) -> EncodedPage:
        data = encode_jpeg(rgb, width, height, self.quality)
        _LOGGER.debug("Encoded page %d: %d bytes at quality %d", index + 1, len(data), self.quality)
        return EncodedPage(index=index, width=width, height=height, data=data)
