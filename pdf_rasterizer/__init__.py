"""
PDF Rasterizer - flatten PDF files into image-only PDFs.

Every page is rendered at a chosen DPI, re-encoded as JPEG and placed on a
page of a brand-new PDF, dropping vector content, fonts and interactivity.

Quick Start:
    >>> from pdf_rasterizer import convert
    >>> result = convert(open('input.pdf', 'rb').read(), dpi=150)
    >>> if result.success:
    ...     open('flat.pdf', 'wb').write(result.output)

Entry Points:
    - convert: Tagged-result conversion (batch or cooperative driver)
    - convert_async: Cooperative conversion with explicit checkpoints
    - rasterize_pdf: Conversion raising on failure
    - rasterize_file: Path-based conversion that never leaves partial output
    - inspect_pdf: Predict output page sizes without rendering

Exceptions:
    - RasterizerError: Base exception
    - ParseError / EmptyDocumentError: Invalid or page-less input
    - RenderError, EncodeError, AssemblyError, IoError

For CLI usage, use the 'pdf-rasterizer' command after installation.
"""

# Entry points
from pdf_rasterizer.converter import (
    convert,
    convert_async,
    inspect_pdf,
    rasterize_file,
    rasterize_pdf,
)

# Building blocks
from pdf_rasterizer.assembler import DocumentAssembler, assemble_document
from pdf_rasterizer.backends import PdfiumBackend, RasterBackend, SourceDocument
from pdf_rasterizer.geometry import Unit
from pdf_rasterizer.options import RasterizeOptions
from pdf_rasterizer.progress import ProgressReporter

# Data types
from pdf_rasterizer.types import (
    AssembledDocument,
    EncodedPage,
    PageLayout,
    RasterizeResult,
    RenderedPage,
)

# Exceptions
from pdf_rasterizer.exceptions import (
    AssemblyError,
    EmptyDocumentError,
    EncodeError,
    IoError,
    ParseError,
    RasterizerError,
    RenderError,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Entry points
    "convert",
    "convert_async",
    "inspect_pdf",
    "rasterize_file",
    "rasterize_pdf",
    # Building blocks
    "DocumentAssembler",
    "assemble_document",
    "PdfiumBackend",
    "RasterBackend",
    "SourceDocument",
    "Unit",
    "RasterizeOptions",
    "ProgressReporter",
    # Data types
    "AssembledDocument",
    "EncodedPage",
    "PageLayout",
    "RasterizeResult",
    "RenderedPage",
    # Exceptions
    "AssemblyError",
    "EmptyDocumentError",
    "EncodeError",
    "IoError",
    "ParseError",
    "RasterizerError",
    "RenderError",
    # Version info
    "__version__",
]
