"""Page rendering at a DPI-derived scale."""

from __future__ import annotations

import logging

from .backends.base import SourceDocument
from .exceptions import RenderError
from .geometry import scale_for_dpi
from .types import RenderedPage

_LOGGER = logging.getLogger("pdf_rasterizer.renderer")


class PageRenderer:
    """Render pages of an opened document at ``dpi / 72`` scale."""

    def __init__(self, document: SourceDocument, dpi: int) -> None:
        self.document = document
        self.dpi = dpi
        self.scale = scale_for_dpi(dpi)

    def render(self, index: int) -> RenderedPage:
        try:
            rendered = self.document.render_page(index, self.scale, self.scale)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Failed to render page {index + 1}: {exc}") from exc

        expected = rendered.width * rendered.height * 4
        if rendered.index != index or len(rendered.pixels) != expected:
            raise RenderError(
                f"Renderer returned an inconsistent bitmap for page {index + 1}: "
                f"index={rendered.index}, {rendered.width}x{rendered.height}, "
                f"{len(rendered.pixels)} bytes"
            )
        _LOGGER.debug("Page %d rendered at %d DPI (%dx%d px)", index + 1, self.dpi, rendered.width, rendered.height)
        return rendered
