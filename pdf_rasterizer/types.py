"""
Type definitions and dataclasses for PDF Rasterizer.

This module defines the data structures passed between the pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import RasterizerError


@dataclass(slots=True)
class RenderedPage:
    """
    Raw output of the rendering backend for one page.

    Attributes:
        index: Zero-based position of the page in the source document
        width: Bitmap width in pixels
        height: Bitmap height in pixels
        pixels: Packed RGBA buffer with alpha-premultiplied channel values
    """
    index: int
    width: int
    height: int
    pixels: bytes


@dataclass(frozen=True, slots=True)
class EncodedPage:
    """
    A page image compressed by the codec, ready for assembly.

    Attributes:
        index: Zero-based position of the page in the source document
        width: Image width in pixels
        height: Image height in pixels
        data: Compressed JPEG payload
    """
    index: int
    width: int
    height: int
    data: bytes


@dataclass(frozen=True, slots=True)
class PageLayout:
    """Physical layout of one output page, derived from pixels and DPI."""

    index: int
    width_px: int
    height_px: int
    width: float
    height: float
    unit: str

    def __str__(self) -> str:
        return (
            f"page {self.index + 1}: {self.width_px}x{self.height_px} px "
            f"-> {self.width:.2f}x{self.height:.2f} {self.unit}"
        )


@dataclass(frozen=True, slots=True)
class AssembledDocument:
    """Serialized output PDF plus the layout of each of its pages."""

    data: bytes
    layouts: tuple[PageLayout, ...]

    @property
    def page_count(self) -> int:
        return len(self.layouts)


@dataclass
class RasterizeResult:
    """
    Tagged outcome of a conversion.

    Attributes:
        success: Whether the conversion completed
        output: Bytes of the rasterized PDF (``None`` on failure)
        page_count: Number of pages written
        dpi: Resolution used for rendering
        layouts: Physical size of every output page
        error: The terminal error if the conversion failed
    """
    success: bool
    output: Optional[bytes] = None
    page_count: int = 0
    dpi: int = 0
    layouts: List[PageLayout] = field(default_factory=list)
    error: Optional[RasterizerError] = None

    @property
    def stage(self) -> Optional[str]:
        return self.error.stage if self.error is not None else None

    @property
    def message(self) -> str:
        return self.error.describe() if self.error is not None else ""

    def unwrap(self) -> bytes:
        """Return the output bytes or raise the recorded error."""
        if self.error is not None:
            raise self.error
        if self.output is None:
            raise RasterizerError("Conversion produced no output.")
        return self.output

    def __str__(self) -> str:
        """String representation of the result."""
        if self.success:
            return f"RasterizeResult(success=True, pages={self.page_count}, dpi={self.dpi})"
        else:
            return f"RasterizeResult(success=False, error='{self.message}')"
