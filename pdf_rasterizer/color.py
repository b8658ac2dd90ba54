"""Alpha un-premultiplication.

Rendered bitmaps store colour channels scaled by alpha. Before JPEG
encoding the true colour is restored and alpha is dropped:

* ``a > 0``: ``min(255, round(c * 255 / a))``, rounding half up
* ``a == 0``: ``(0, 0, 0)``; fully transparent pixels lose their colour
"""

from __future__ import annotations

import numpy as np

from .types import RenderedPage


def unpremultiply_rgba(pixels: bytes, width: int, height: int) -> bytes:
    """Convert a premultiplied RGBA buffer into a packed RGB buffer."""

    expected = width * height * 4
    if len(pixels) != expected:
        raise ValueError(
            f"RGBA buffer has {len(pixels)} bytes, expected {expected} for {width}x{height}"
        )

    rgba = np.frombuffer(pixels, dtype=np.uint8).reshape(-1, 4).astype(np.uint32)
    rgb = rgba[:, :3]
    alpha = rgba[:, 3:4]

    # Integer form of round-half-up(c * 255 / a); the divisor is clamped so
    # that transparent pixels never divide by zero and are zeroed below.
    divisor = np.maximum(alpha, 1)
    restored = np.minimum((rgb * 255 + divisor // 2) // divisor, 255)
    restored = np.where(alpha > 0, restored, 0)
    return restored.astype(np.uint8).tobytes()


def unpremultiply_pixel(r: int, g: int, b: int, a: int) -> tuple[int, int, int]:
    """Scalar form of :func:`unpremultiply_rgba` for a single pixel."""

    if a == 0:
        return (0, 0, 0)
    return tuple(min(255, (c * 255 + a // 2) // a) for c in (r, g, b))  # type: ignore[return-value]


def to_rgb(page: RenderedPage) -> bytes:
    """Return the un-premultiplied RGB buffer of *page*."""

    return unpremultiply_rgba(page.pixels, page.width, page.height)
