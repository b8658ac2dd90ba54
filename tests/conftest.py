from __future__ import annotations

import io
import threading
import time
from pathlib import Path
from typing import Callable, Sequence
import sys

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdf_rasterizer.exceptions import EmptyDocumentError, ParseError, RenderError  # noqa: E402
from pdf_rasterizer.geometry import expected_pixels  # noqa: E402
from pdf_rasterizer.types import RenderedPage  # noqa: E402

CORRUPT_PDF = b"%PDF-1.4\nthis is not really a pdf\n"


def build_pdf(sizes: Sequence[tuple[float, float]]) -> bytes:
    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    writer.add_metadata({"/Producer": "pdf-rasterizer-tests"})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakeDocument:
    """In-memory document producing solid premultiplied bitmaps."""

    def __init__(self, backend: "FakeBackend") -> None:
        self.backend = backend
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.backend.sizes)

    def page_size(self, index: int) -> tuple[float, float]:
        return self.backend.sizes[index]

    def render_page(self, index: int, scale_x: float, scale_y: float) -> RenderedPage:
        delay = self.backend.delays.get(index)
        if delay:
            time.sleep(delay)
        if index in self.backend.fail_on:
            raise RenderError(f"simulated failure on page {index + 1}")
        with self.backend.lock:
            self.backend.rendered.append(index)

        width_pt, height_pt = self.backend.sizes[index]
        dpi = round(scale_x * 72)
        width = expected_pixels(width_pt, dpi)
        height = expected_pixels(height_pt, dpi)
        pixel = self.backend.pixel_for(index)
        return RenderedPage(index=index, width=width, height=height, pixels=pixel * (width * height))

    def close(self) -> None:
        self.closed = True
        self.backend.closed_documents += 1


class FakeBackend:
    """Thread-safe backend whose source bytes are ignored."""

    thread_safe = True

    def __init__(
        self,
        sizes: Sequence[tuple[float, float]] = ((72, 72),),
        *,
        fail_on: Sequence[int] = (),
        delays: dict[int, float] | None = None,
        pixel: bytes | None = None,
    ) -> None:
        self.sizes = list(sizes)
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.pixel = pixel
        self.rendered: list[int] = []
        self.closed_documents = 0
        self.lock = threading.Lock()

    def pixel_for(self, index: int) -> bytes:
        if self.pixel is not None:
            return self.pixel
        # Opaque and distinct per page so page order is visible in the output.
        return bytes(((index * 40) % 256, 128, 255 - (index * 40) % 256, 255))

    def open(self, source: bytes) -> FakeDocument:
        if source == CORRUPT_PDF:
            raise ParseError("simulated corrupt input")
        if not self.sizes:
            raise EmptyDocumentError()
        return FakeDocument(self)


@pytest.fixture()
def fake_backend_factory() -> Callable[..., FakeBackend]:
    return FakeBackend


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    return build_pdf([(200, 200), (300, 100), (100, 300)])


@pytest.fixture()
def letter_pdf_bytes() -> bytes:
    return build_pdf([(612, 792)])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    writer = PdfWriter()
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def corrupt_pdf_bytes() -> bytes:
    return CORRUPT_PDF


@pytest.fixture()
def sample_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(sample_pdf_bytes)
    return pdf_path


@pytest.fixture()
def corrupt_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "corrupt.pdf"
    pdf_path.write_bytes(CORRUPT_PDF)
    return pdf_path
