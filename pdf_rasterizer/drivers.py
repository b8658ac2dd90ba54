"""Scheduling drivers turning source bytes into a rasterized PDF.

Both drivers run the same stages and differ only in how page conversions
are scheduled:

* :func:`run_batch` fans pages out to a worker pool and sorts the results
  back into index order before assembly.
* :func:`run_cooperative` converts pages one by one on the calling thread
  and awaits a checkpoint after every page and every few assembled pages,
  giving the host event loop a chance to run.

Assembly always happens on the calling thread with a single
:class:`~pdf_rasterizer.assembler.DocumentAssembler`.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from concurrent.futures.process import BrokenProcessPool
from typing import Optional, Sequence

from .assembler import DocumentAssembler
from .backends.base import RasterBackend, SourceDocument
from .encoder import PageEncoder
from .exceptions import EmptyDocumentError, ParseError, RenderError
from .options import ASSEMBLY_BATCH
from .pipeline import process_page
from .progress import Checkpoint, ProgressReporter, yield_to_loop
from .sequencer import sequence_pages
from .types import AssembledDocument, EncodedPage

_LOGGER = logging.getLogger("pdf_rasterizer.drivers")

# Per-process document opened by the pool initializer.
_WORKER_DOCUMENT: Optional[SourceDocument] = None


def _init_worker(backend: RasterBackend, source: bytes) -> None:
    global _WORKER_DOCUMENT
    _WORKER_DOCUMENT = backend.open(source)


def _process_in_worker(index: int, dpi: int) -> EncodedPage:
    if _WORKER_DOCUMENT is None:  # pragma: no cover - initializer always runs first
        raise RenderError("Worker process has no open document")
    return process_page(_WORKER_DOCUMENT, index, dpi)


def open_source(backend: RasterBackend, source: bytes) -> SourceDocument:
    """Open *source* with *backend*, reporting any failure as a ParseError."""

    try:
        return backend.open(source)
    except ParseError:
        raise
    except Exception as exc:
        raise ParseError(f"Unable to parse PDF: {exc}") from exc


def resolve_workers(workers: Optional[int], page_count: int) -> int:
    """Return the pool size for *page_count* pages."""

    requested = workers if workers is not None else (os.cpu_count() or 1)
    return max(1, min(requested, page_count))


def _collect(
    executor: Executor,
    futures: Sequence[Future],
    page_count: int,
    reporter: ProgressReporter,
) -> list[EncodedPage]:
    results: list[EncodedPage] = []
    try:
        for completed, future in enumerate(as_completed(futures), start=1):
            results.append(future.result())
            reporter.rendering(completed, page_count)
    except BrokenProcessPool as exc:
        raise RenderError(f"A rendering worker died unexpectedly: {exc}") from exc
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
    return results


def _render_pages(
    backend: RasterBackend,
    document: SourceDocument,
    source: bytes,
    dpi: int,
    workers: int,
    reporter: ProgressReporter,
) -> list[EncodedPage]:
    page_count = document.page_count

    if workers == 1:
        encoder = PageEncoder()
        results = []
        for index in range(page_count):
            results.append(process_page(document, index, dpi, encoder))
            reporter.rendering(index + 1, page_count)
        return results

    if backend.thread_safe:
        _LOGGER.debug("Rendering %d page(s) on %d threads", page_count, workers)
        thread_pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rasterize")
        futures = [thread_pool.submit(process_page, document, index, dpi) for index in range(page_count)]
        return _collect(thread_pool, futures, page_count, reporter)

    _LOGGER.debug("Rendering %d page(s) in %d processes", page_count, workers)
    process_pool = ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_worker,
        initargs=(backend, source),
    )
    futures = [process_pool.submit(_process_in_worker, index, dpi) for index in range(page_count)]
    return _collect(process_pool, futures, page_count, reporter)


def run_batch(
    source: bytes,
    dpi: int,
    *,
    backend: RasterBackend,
    reporter: Optional[ProgressReporter] = None,
    workers: Optional[int] = None,
    verify: bool = True,
    assembly_batch: int = ASSEMBLY_BATCH,
) -> AssembledDocument:
    """Convert *source* with pages rendered in parallel."""

    reporter = reporter or ProgressReporter()
    document = open_source(backend, source)
    try:
        page_count = document.page_count
        if page_count == 0:
            raise EmptyDocumentError()
        reporter.loaded(page_count)
        pool_size = resolve_workers(workers, page_count)
        _LOGGER.info("Rasterizing %d page(s) at %d DPI with %d worker(s)", page_count, dpi, pool_size)
        encoded = _render_pages(backend, document, source, dpi, pool_size, reporter)
    finally:
        document.close()

    ordered = sequence_pages(encoded, page_count)
    assembler = DocumentAssembler(dpi, verify=verify)
    for position, page in enumerate(ordered):
        if position % assembly_batch == 0:
            reporter.building(position + 1, page_count)
        assembler.add_page(page)

    reporter.saving()
    data = assembler.finish()
    reporter.done()
    return AssembledDocument(data=data, layouts=tuple(assembler.layouts))


async def run_cooperative(
    source: bytes,
    dpi: int,
    *,
    backend: RasterBackend,
    reporter: Optional[ProgressReporter] = None,
    checkpoint: Optional[Checkpoint] = None,
    verify: bool = True,
    assembly_batch: int = ASSEMBLY_BATCH,
) -> AssembledDocument:
    """Convert *source* page by page, awaiting *checkpoint* between steps."""

    reporter = reporter or ProgressReporter()
    checkpoint = checkpoint or yield_to_loop

    document = open_source(backend, source)
    try:
        page_count = document.page_count
        if page_count == 0:
            raise EmptyDocumentError()
        reporter.loaded(page_count)
        _LOGGER.info("Rasterizing %d page(s) at %d DPI cooperatively", page_count, dpi)
        await checkpoint()

        encoder = PageEncoder()
        encoded: list[EncodedPage] = []
        for index in range(page_count):
            reporter.rendering(index + 1, page_count)
            encoded.append(process_page(document, index, dpi, encoder))
            await checkpoint()
    finally:
        document.close()

    ordered = sequence_pages(encoded, page_count)
    assembler = DocumentAssembler(dpi, verify=verify)
    for position, page in enumerate(ordered):
        if position % assembly_batch == 0:
            reporter.building(position + 1, page_count)
            await checkpoint()
        assembler.add_page(page)

    reporter.saving()
    await checkpoint()
    data = assembler.finish()
    reporter.done()
    return AssembledDocument(data=data, layouts=tuple(assembler.layouts))
