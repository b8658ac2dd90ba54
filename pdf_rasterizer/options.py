"""Configuration for rasterization runs."""

from __future__ import annotations

import dataclasses
from typing import Literal

DriverMode = Literal["batch", "cooperative"]

# Fixed JPEG quality; not exposed to callers.
JPEG_QUALITY = 85
PDF_VERSION = "1.5"
DEFAULT_DPI = 72
ASSEMBLY_BATCH = 5

_MODES: tuple[DriverMode, ...] = ("batch", "cooperative")


@dataclasses.dataclass(slots=True)
class RasterizeOptions:
    """Behavioural toggles for a conversion."""

    dpi: int = DEFAULT_DPI
    mode: DriverMode = "batch"
    workers: int | None = None
    verify_output: bool = True
    assembly_batch: int = ASSEMBLY_BATCH

    def __post_init__(self) -> None:
        if isinstance(self.dpi, bool) or not isinstance(self.dpi, int):
            raise TypeError("dpi must be an integer")
        if self.dpi <= 0:
            raise ValueError("dpi must be a positive integer")
        if self.mode not in _MODES:
            raise ValueError(f"Unknown driver mode: {self.mode}")
        if self.workers is not None and self.workers <= 0:
            raise ValueError("workers must be a positive integer")
        if self.assembly_batch <= 0:
            raise ValueError("assembly_batch must be a positive integer")

    def with_dpi(self, dpi: int) -> "RasterizeOptions":
        return dataclasses.replace(self, dpi=dpi)
