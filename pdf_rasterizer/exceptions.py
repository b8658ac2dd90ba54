"""
Custom exceptions for PDF Rasterizer.

Every error raised during a conversion is terminal for the whole run. Each
exception carries the pipeline ``stage`` it belongs to so callers can
produce a single human-readable message.
"""


class RasterizerError(Exception):
    """Base exception for all PDF Rasterizer errors."""

    stage = "convert"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF rasterizer error occurred."

    def describe(self) -> str:
        """Return ``"<stage>: <message>"`` including the chained cause, if any."""
        text = f"{self.stage}: {self.message}"
        cause = self.__cause__
        if cause is not None and str(cause) and str(cause) not in self.message:
            text = f"{text} ({cause})"
        return text


class ParseError(RasterizerError):
    """Raised when the input is not a well-formed PDF document."""

    stage = "parse"

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF file."


class EmptyDocumentError(ParseError):
    """Raised when the input PDF parses but contains no pages."""

    @property
    def default_message(self) -> str:
        return "PDF has no pages to rasterize."


class RenderError(RasterizerError):
    """Raised when a page cannot be rasterized by the rendering backend."""

    stage = "render"

    @property
    def default_message(self) -> str:
        return "Failed to render PDF page."


class EncodeError(RasterizerError):
    """Raised when a pixel buffer cannot be compressed."""

    stage = "encode"

    @property
    def default_message(self) -> str:
        return "Failed to encode page image."


class AssemblyError(RasterizerError):
    """Raised when building or serializing the output document fails."""

    stage = "assemble"

    @property
    def default_message(self) -> str:
        return "Failed to assemble output PDF."


class IoError(RasterizerError):
    """Raised when reading the input or writing the output file fails."""

    stage = "io"

    @property
    def default_message(self) -> str:
        return "File input/output failed."
