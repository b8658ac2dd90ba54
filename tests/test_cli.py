"""
Tests for the pdf-rasterizer command line.
"""

from pathlib import Path

from click.testing import CliRunner
from pypdf import PdfReader

from pdf_rasterizer import __version__
from pdf_rasterizer.cli import cli


def test_rasterize_command(sample_pdf: Path, tmp_path: Path):
    output = tmp_path / "flat.pdf"
    result = CliRunner().invoke(cli, ["rasterize", str(sample_pdf), str(output), "--dpi", "100"])

    assert result.exit_code == 0, result.output
    assert "Successfully created" in result.output
    assert "Rasterization Summary" in result.output
    assert len(PdfReader(output).pages) == 3


def test_rasterize_cooperative_mode(sample_pdf: Path, tmp_path: Path):
    output = tmp_path / "flat.pdf"
    result = CliRunner().invoke(
        cli, ["rasterize", str(sample_pdf), str(output), "-m", "cooperative", "-d", "50"]
    )

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_rasterize_corrupt_input(corrupt_pdf: Path, tmp_path: Path):
    output = tmp_path / "flat.pdf"
    result = CliRunner().invoke(cli, ["rasterize", str(corrupt_pdf), str(output)])

    assert result.exit_code == 1
    assert "Error" in result.output
    assert "parse" in result.output
    assert not output.exists()


def test_rasterize_rejects_invalid_dpi(sample_pdf: Path, tmp_path: Path):
    result = CliRunner().invoke(cli, ["rasterize", str(sample_pdf), str(tmp_path / "o.pdf"), "--dpi", "0"])
    assert result.exit_code == 2


def test_rasterize_missing_input(tmp_path: Path):
    result = CliRunner().invoke(cli, ["rasterize", str(tmp_path / "nope.pdf"), str(tmp_path / "o.pdf")])
    assert result.exit_code == 2


def test_info_command(tmp_path: Path, letter_pdf_bytes: bytes):
    source = tmp_path / "letter.pdf"
    source.write_bytes(letter_pdf_bytes)

    result = CliRunner().invoke(cli, ["info", str(source), "--dpi", "150"])

    assert result.exit_code == 0, result.output
    assert "1275 x 1650" in result.output
    assert "612.00 x 792.00" in result.output
    assert "215.9 x 279.4" in result.output


def test_info_corrupt_input(corrupt_pdf: Path):
    result = CliRunner().invoke(cli, ["info", str(corrupt_pdf)])

    assert result.exit_code == 1
    assert "parse:" in result.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_info_parses_the_document_once(tmp_path: Path, letter_pdf_bytes: bytes, monkeypatch):
    import pdf_rasterizer.cli as cli_module

    source = tmp_path / "letter.pdf"
    source.write_bytes(letter_pdf_bytes)
    calls = []
    original = cli_module.inspect_pdf

    def counting_inspect(*args, **kwargs):
        calls.append(args)
        return original(*args, **kwargs)

    monkeypatch.setattr(cli_module, "inspect_pdf", counting_inspect)
    result = CliRunner().invoke(cli, ["info", str(source), "--dpi", "150"])

    assert result.exit_code == 0, result.output
    assert len(calls) == 1
    assert "215.9 x 279.4" in result.output
