"""Backend protocol for parsing and rendering source PDFs."""

from __future__ import annotations

from typing import Protocol

from ..types import RenderedPage


class SourceDocument(Protocol):
    """An opened source document exposing an ordered sequence of pages."""

    @property
    def page_count(self) -> int:
        """Number of pages in the document."""

    def page_size(self, index: int) -> tuple[float, float]:
        """Return the page size in PDF points."""

    def render_page(self, index: int, scale_x: float, scale_y: float) -> RenderedPage:
        """Rasterize page *index* into a premultiplied RGBA buffer."""

    def close(self) -> None:
        """Release backend resources."""


class RasterBackend(Protocol):
    """Protocol defining the parse/render service used by the pipeline.

    ``thread_safe`` tells the batch driver whether pages of one document may
    be rendered from several threads; backends that are not thread safe are
    driven from a process pool instead.
    """

    thread_safe: bool

    def open(self, source: bytes) -> SourceDocument:
        """Parse *source* and return an opened document.

        Raises :class:`~pdf_rasterizer.exceptions.ParseError` on malformed input.
        """
