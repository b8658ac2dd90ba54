"""
Command-line interface for PDF rasterizer.
"""

import logging
import os
import re
import sys

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from pdf_rasterizer import __version__
from pdf_rasterizer.converter import inspect_pdf, rasterize_file, read_source
from pdf_rasterizer.exceptions import RasterizerError
from pdf_rasterizer.geometry import Unit, pixels_to_units
from pdf_rasterizer.options import DEFAULT_DPI, RasterizeOptions
from pdf_rasterizer.utils import format_file_size, get_logger

console = Console()

_LOADED = re.compile(r"^loaded (\d+) pages$")
_RENDERING = re.compile(r"^rendering page (\d+)/(\d+)$")


def _configure_logging(verbose: bool) -> None:
    get_logger("pdf_rasterizer", level=logging.DEBUG if verbose else logging.ERROR)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    PDF Rasterizer CLI - Flatten PDF files into image-only PDFs.
    """
    pass


@cli.command(name="rasterize")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.argument('output_pdf', type=click.Path(dir_okay=False))
@click.option(
    '--dpi', '-d',
    default=DEFAULT_DPI,
    show_default=True,
    help='Rendering resolution in dots per inch',
    type=click.IntRange(min=1)
)
@click.option(
    '--mode', '-m',
    default='batch',
    show_default=True,
    type=click.Choice(['batch', 'cooperative'], case_sensitive=False),
    help='Render pages in parallel (batch) or one at a time (cooperative)'
)
@click.option(
    '--workers', '-w',
    default=None,
    help='Number of parallel workers for batch mode (default: CPU count)',
    type=click.IntRange(min=1)
)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def rasterize(input_pdf, output_pdf, dpi, mode, workers, verbose):
    """
    Rasterize every page of a PDF into a new image-only PDF.

    Examples:

        pdf-rasterizer rasterize input.pdf flat.pdf

        pdf-rasterizer rasterize input.pdf flat.pdf --dpi 150

        pdf-rasterizer rasterize input.pdf flat.pdf -d 300 -m cooperative
    """
    _configure_logging(verbose)

    console.print("\n[bold cyan]Rasterizing PDF...[/bold cyan]")
    console.print(f"[dim]Input:  {os.path.abspath(input_pdf)}[/dim]")
    console.print(f"[dim]Output: {os.path.abspath(output_pdf)}[/dim]")
    console.print(f"[dim]DPI:    {dpi}[/dim]\n")

    options = RasterizeOptions(dpi=dpi, mode=mode.lower(), workers=workers)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        task = progress.add_task("Loading PDF", total=None)

        def update_progress(stage):
            loaded = _LOADED.match(stage)
            if loaded:
                progress.update(task, total=int(loaded.group(1)), completed=0)
            rendering = _RENDERING.match(stage)
            if rendering:
                progress.update(task, completed=int(rendering.group(1)))
            progress.update(task, description=stage)

        result = rasterize_file(input_pdf, output_pdf, progress_sink=update_progress, options=options)

    if not result.success:
        console.print(f"\n[bold red]✗ Error:[/bold red] {result.message}")
        sys.exit(1)

    summary = Table(title="Rasterization Summary", show_header=False)
    summary.add_column("Property", style="cyan")
    summary.add_column("Value", style="green")
    summary.add_row("Pages", str(result.page_count))
    summary.add_row("DPI", str(result.dpi))
    summary.add_row("Input Size", format_file_size(os.path.getsize(input_pdf)))
    summary.add_row("Output Size", format_file_size(len(result.output or b"")))

    console.print()
    console.print(summary)
    console.print(f"\n[bold green]✓ Successfully created:[/bold green] {os.path.abspath(output_pdf)}")
    console.print()


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--dpi', '-d',
    default=DEFAULT_DPI,
    show_default=True,
    help='Resolution to predict rendered sizes for',
    type=click.IntRange(min=1)
)
def show_info(input_pdf, dpi):
    """
    Show the pixel size and output page size of every page at a DPI.

    Example:

        pdf-rasterizer info input.pdf --dpi 150
    """
    try:
        source = read_source(input_pdf)
        layouts = inspect_pdf(source, dpi, unit=Unit.POINT)
    except RasterizerError as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e.describe()}")
        sys.exit(1)

    table = Table(title=f"PDF Pages at {dpi} DPI: {os.path.basename(input_pdf)}")
    table.add_column("Page", style="cyan", no_wrap=True)
    table.add_column("Pixels", style="green")
    table.add_column("Size (pt)", style="green")
    table.add_column("Size (mm)", style="green")

    for layout in layouts:
        width_mm = pixels_to_units(layout.width_px, dpi, Unit.MILLIMETER)
        height_mm = pixels_to_units(layout.height_px, dpi, Unit.MILLIMETER)
        table.add_row(
            str(layout.index + 1),
            f"{layout.width_px} x {layout.height_px}",
            f"{layout.width:.2f} x {layout.height:.2f}",
            f"{width_mm:.1f} x {height_mm:.1f}",
        )

    console.print()
    console.print(table)
    console.print(f"[dim]File size: {format_file_size(len(source))}, pages: {len(layouts)}[/dim]")
    console.print()


if __name__ == '__main__':
    cli()
