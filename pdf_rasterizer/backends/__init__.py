"""Backend abstractions for PDF Rasterizer."""

from .base import RasterBackend, SourceDocument
from .pdfium_backend import PdfiumBackend, PdfiumDocument

__all__ = [
    "RasterBackend",
    "SourceDocument",
    "PdfiumBackend",
    "PdfiumDocument",
]
