"""Progress reporting for conversions.

Progress events are advisory text delivered to a caller-supplied sink. The
sink is fire-and-forget: whatever it raises is logged and ignored so that a
faulty observer can never fail a conversion.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

ProgressSink = Callable[[str], None]
Checkpoint = Callable[[], Awaitable[None]]

_LOGGER = logging.getLogger("pdf_rasterizer.progress")


async def yield_to_loop() -> None:
    """Default cooperative checkpoint: hand control back to the event loop once."""

    await asyncio.sleep(0)


class ProgressReporter:
    """Emit stage-labelled events to an optional sink."""

    def __init__(self, sink: Optional[ProgressSink] = None) -> None:
        self.sink = sink

    def emit(self, stage: str) -> None:
        _LOGGER.debug("progress: %s", stage)
        if self.sink is None:
            return
        try:
            self.sink(stage)
        except Exception as exc:
            _LOGGER.warning("Progress sink raised %s; ignoring", exc)

    def loaded(self, page_count: int) -> None:
        self.emit(f"loaded {page_count} pages")

    def rendering(self, position: int, total: int) -> None:
        self.emit(f"rendering page {position}/{total}")

    def building(self, position: int, total: int) -> None:
        self.emit(f"building document ({position}/{total})")

    def saving(self) -> None:
        self.emit("saving")

    def done(self) -> None:
        self.emit("done")
