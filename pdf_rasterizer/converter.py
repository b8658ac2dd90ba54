"""Conversion entry points for :mod:`pdf_rasterizer`."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

from .backends import PdfiumBackend
from .backends.base import RasterBackend
from .drivers import open_source, run_batch, run_cooperative
from .exceptions import IoError, RasterizerError
from .geometry import Unit, expected_pixels, page_layout
from .options import DEFAULT_DPI, RasterizeOptions
from .progress import Checkpoint, ProgressReporter, ProgressSink
from .types import AssembledDocument, PageLayout, RasterizeResult
from .utils import ensure_parent_dir, resolve_path

_LOGGER = logging.getLogger("pdf_rasterizer")


def _resolve_options(dpi: int | None, options: Optional[RasterizeOptions]) -> RasterizeOptions:
    if options is None:
        return RasterizeOptions(dpi=DEFAULT_DPI if dpi is None else dpi)
    if dpi is not None and dpi != options.dpi:
        return options.with_dpi(dpi)
    return options


def _failure(error: Exception, dpi: int) -> RasterizeResult:
    if not isinstance(error, RasterizerError):
        wrapped = RasterizerError(f"Unexpected error: {error}")
        wrapped.__cause__ = error
        error = wrapped
    _LOGGER.warning("Rasterization failed at %s", error.describe())
    return RasterizeResult(success=False, dpi=dpi, error=error)


def _success(document: AssembledDocument, dpi: int) -> RasterizeResult:
    return RasterizeResult(
        success=True,
        output=document.data,
        page_count=document.page_count,
        dpi=dpi,
        layouts=list(document.layouts),
    )


def convert(
    source_bytes: bytes,
    dpi: int | None = None,
    progress_sink: Optional[ProgressSink] = None,
    *,
    options: Optional[RasterizeOptions] = None,
    backend: Optional[RasterBackend] = None,
) -> RasterizeResult:
    """Rasterize *source_bytes* and return a tagged :class:`RasterizeResult`.

    Conversion errors never propagate; they are reported through
    ``result.error``. ``options.mode`` selects the batch (parallel) or the
    cooperative driver. The cooperative driver runs on a private event loop;
    called from inside a running loop it reports a failure, use
    :func:`convert_async` there.
    """

    config = _resolve_options(dpi, options)
    if config.mode == "cooperative":
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(
                convert_async(source_bytes, config.dpi, progress_sink, options=config, backend=backend)
            )
        return _failure(
            RasterizerError(
                "convert() cannot run the cooperative driver inside a running event loop; "
                "await convert_async() instead"
            ),
            config.dpi,
        )

    reporter = ProgressReporter(progress_sink)
    try:
        document = run_batch(
            source_bytes,
            config.dpi,
            backend=backend or PdfiumBackend(),
            reporter=reporter,
            workers=config.workers,
            verify=config.verify_output,
            assembly_batch=config.assembly_batch,
        )
    except Exception as exc:
        return _failure(exc, config.dpi)
    return _success(document, config.dpi)


async def convert_async(
    source_bytes: bytes,
    dpi: int | None = None,
    progress_sink: Optional[ProgressSink] = None,
    *,
    checkpoint: Optional[Checkpoint] = None,
    options: Optional[RasterizeOptions] = None,
    backend: Optional[RasterBackend] = None,
) -> RasterizeResult:
    """Cooperative variant of :func:`convert` yielding at every checkpoint."""

    config = _resolve_options(dpi, options)
    reporter = ProgressReporter(progress_sink)
    try:
        document = await run_cooperative(
            source_bytes,
            config.dpi,
            backend=backend or PdfiumBackend(),
            reporter=reporter,
            checkpoint=checkpoint,
            verify=config.verify_output,
            assembly_batch=config.assembly_batch,
        )
    except Exception as exc:
        return _failure(exc, config.dpi)
    return _success(document, config.dpi)


def rasterize_pdf(
    source_bytes: bytes,
    dpi: int | None = None,
    progress_sink: Optional[ProgressSink] = None,
    *,
    options: Optional[RasterizeOptions] = None,
    backend: Optional[RasterBackend] = None,
) -> bytes:
    """Rasterize *source_bytes*, raising :class:`RasterizerError` on failure."""

    return convert(source_bytes, dpi, progress_sink, options=options, backend=backend).unwrap()


def read_source(input_path: str | os.PathLike[str]) -> bytes:
    """Read the source PDF, reporting failures as :class:`IoError`."""

    source = resolve_path(input_path)
    try:
        return source.read_bytes()
    except OSError as exc:
        raise IoError(f"Unable to read PDF file: {source}. Error: {exc}") from exc


def _output_mode(destination: Path) -> int:
    """Mode for a new output file: keep an existing file's mode, else honour the umask."""

    try:
        return stat.S_IMODE(destination.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_output(output_path: str | os.PathLike[str], data: bytes) -> Path:
    """Write *data* to *output_path* through a temporary file in the same directory."""

    destination = resolve_path(output_path)
    try:
        ensure_parent_dir(destination)
        handle, temp_name = tempfile.mkstemp(prefix=".pdf-rasterizer-", suffix=".pdf", dir=destination.parent)
        try:
            with os.fdopen(handle, "wb") as target:
                target.write(data)
            os.chmod(temp_name, _output_mode(destination))
            os.replace(temp_name, destination)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise IoError(f"Unable to write PDF file: {destination}. Error: {exc}") from exc
    return destination


def rasterize_file(
    input_path: str | os.PathLike[str],
    output_path: str | os.PathLike[str],
    dpi: int | None = None,
    progress_sink: Optional[ProgressSink] = None,
    *,
    options: Optional[RasterizeOptions] = None,
    backend: Optional[RasterBackend] = None,
) -> RasterizeResult:
    """Rasterize the PDF at *input_path* into *output_path*.

    Nothing is written unless the whole conversion succeeds.
    """

    config = _resolve_options(dpi, options)
    try:
        source_bytes = read_source(input_path)
    except IoError as exc:
        return _failure(exc, config.dpi)

    result = convert(source_bytes, config.dpi, progress_sink, options=config, backend=backend)
    if not result.success:
        return result

    try:
        destination = write_output(output_path, result.unwrap())
    except IoError as exc:
        return _failure(exc, config.dpi)
    _LOGGER.info("Wrote %d page(s) to %s", result.page_count, destination)
    return result


def inspect_pdf(
    source_bytes: bytes,
    dpi: int = DEFAULT_DPI,
    *,
    unit: Unit = Unit.POINT,
    backend: Optional[RasterBackend] = None,
) -> list[PageLayout]:
    """Predict pixel and output sizes of every page without rendering."""

    document = open_source(backend or PdfiumBackend(), source_bytes)
    try:
        layouts = []
        for index in range(document.page_count):
            width_pt, height_pt = document.page_size(index)
            layouts.append(
                page_layout(
                    index,
                    expected_pixels(width_pt, dpi),
                    expected_pixels(height_pt, dpi),
                    dpi,
                    unit,
                )
            )
    finally:
        document.close()
    return layouts
