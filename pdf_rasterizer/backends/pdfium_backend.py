"""pypdfium2 backend implementation for PDF Rasterizer."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field

import pypdfium2 as pdfium
import pypdfium2.raw as pdfium_c
from pypdf import PdfReader

from ..exceptions import EmptyDocumentError, ParseError, RenderError
from ..types import RenderedPage
from .base import RasterBackend

_LOGGER = logging.getLogger("pdf_rasterizer.backends.pdfium")

# Opaque white; pages are flattened onto paper colour.
_BACKGROUND = (255, 255, 255, 255)

# pypdfium2 sizes bitmaps as ceil(points * scale). dpi / 72 is inexact in
# binary, so exact products (792pt at 150 DPI) would gain a pixel row.
_SCALE_SHAVE = 1e-9


@dataclass
class PdfiumDocument:
    document: pdfium.PdfDocument
    _closed: bool = field(default=False, init=False)

    @property
    def page_count(self) -> int:
        return len(self.document)

    def page_size(self, index: int) -> tuple[float, float]:
        page = self.document[index]
        try:
            width, height = page.get_size()
        finally:
            page.close()
        return float(width), float(height)

    def render_page(self, index: int, scale_x: float, scale_y: float) -> RenderedPage:
        if abs(scale_x - scale_y) > 1e-9:
            raise RenderError(
                f"pdfium renders with a uniform scale; got x={scale_x} y={scale_y}"
            )

        page = self.document[index]
        try:
            bitmap = page.render(
                scale=scale_x * (1 - _SCALE_SHAVE),
                fill_color=_BACKGROUND,
                force_bitmap_format=pdfium_c.FPDFBitmap_BGRA,
                rev_byteorder=True,
            )
            try:
                array = bitmap.to_numpy()
                height, width = int(array.shape[0]), int(array.shape[1])
                pixels = array.tobytes()
            finally:
                bitmap.close()
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"pdfium failed to render page {index + 1}: {exc}") from exc
        finally:
            page.close()

        _LOGGER.debug("Rendered page %d at scale %.4f -> %dx%d px", index + 1, scale_x, width, height)
        return RenderedPage(index=index, width=width, height=height, pixels=pixels)

    def close(self) -> None:
        if not self._closed:
            self.document.close()
            self._closed = True


def _has_no_pages(source: bytes) -> bool:
    """Tell a well-formed page-less PDF apart from a corrupt one.

    Newer pdfium builds refuse to load documents without pages at all.
    """

    try:
        return len(PdfReader(io.BytesIO(source)).pages) == 0
    except Exception:
        return False


class PdfiumBackend(RasterBackend):
    """Backend implementation that uses `pypdfium2` under the hood."""

    # pdfium keeps global state and must not be entered from several threads.
    thread_safe = False

    def open(self, source: bytes) -> PdfiumDocument:
        if not source:
            raise ParseError("Input is empty; expected PDF bytes.")

        try:
            document = pdfium.PdfDocument(bytes(source))
        except pdfium.PdfiumError as exc:
            if _has_no_pages(source):
                raise EmptyDocumentError() from exc
            raise ParseError(f"Corrupted or invalid PDF file. Error: {exc}") from exc
        except Exception as exc:
            raise ParseError(f"Unexpected error reading PDF. Error: {exc}") from exc

        if len(document) == 0:
            document.close()
            raise EmptyDocumentError()

        _LOGGER.debug("Opened PDF with %d page(s) via pdfium", len(document))
        return PdfiumDocument(document=document)
