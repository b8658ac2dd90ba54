"""Scale and physical size math.

72 DPI is the reference unit: one PDF point per pixel, scale 1.0. Output
page sizes are derived only from the rendered pixel size and the DPI, never
from the source page box.
"""

from __future__ import annotations

import math
from enum import Enum

from .types import PageLayout

POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4


class Unit(str, Enum):
    """Physical units an output page size can be expressed in."""

    POINT = "pt"
    MILLIMETER = "mm"

    @property
    def per_inch(self) -> float:
        return POINTS_PER_INCH if self is Unit.POINT else MM_PER_INCH


def scale_for_dpi(dpi: int) -> float:
    """Return the render scale for *dpi* (``dpi / 72``)."""

    if dpi <= 0:
        raise ValueError("dpi must be a positive integer")
    return dpi / POINTS_PER_INCH


def pixels_to_units(pixels: int, dpi: int, unit: Unit = Unit.POINT) -> float:
    """Convert a pixel length rendered at *dpi* to a physical length."""

    if dpi <= 0:
        raise ValueError("dpi must be a positive integer")
    return pixels / dpi * unit.per_inch


def expected_pixels(points: float, dpi: int) -> int:
    """Predict the rendered pixel length of *points* at *dpi*.

    Mirrors the renderer: the scaled length is rounded up, after rounding
    away float noise so that exact products (612pt at 150 DPI) stay exact.
    """

    return max(1, math.ceil(round(points * scale_for_dpi(dpi), 6)))


def page_layout(
    index: int,
    width_px: int,
    height_px: int,
    dpi: int,
    unit: Unit = Unit.POINT,
) -> PageLayout:
    """Build the :class:`PageLayout` of an output page."""

    return PageLayout(
        index=index,
        width_px=width_px,
        height_px=height_px,
        width=pixels_to_units(width_px, dpi, unit),
        height=pixels_to_units(height_px, dpi, unit),
        unit=unit.value,
    )


def format_number(value: float) -> str:
    """Format *value* compactly for a PDF content stream."""

    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text or "0"
