"""Per-page conversion: render, un-premultiply, encode."""

from __future__ import annotations

from .backends.base import SourceDocument
from .color import to_rgb
from .encoder import PageEncoder
from .exceptions import EncodeError
from .renderer import PageRenderer
from .types import EncodedPage


def process_page(
    document: SourceDocument,
    index: int,
    dpi: int,
    encoder: PageEncoder | None = None,
) -> EncodedPage:
    """Convert page *index* of *document* into an :class:`EncodedPage`.

    Side-effect free apart from the backend call, so pages may be processed
    concurrently when the backend allows it.
    """

    rendered = PageRenderer(document, dpi).render(index)
    try:
        rgb = to_rgb(rendered)
    except ValueError as exc:
        raise EncodeError(f"Cannot convert pixels of page {index + 1}: {exc}") from exc
    return (encoder or PageEncoder()).encode(index, rgb, rendered.width, rendered.height)
