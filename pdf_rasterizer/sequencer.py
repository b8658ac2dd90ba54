"""Restore source page order for results that may complete out of order."""

from __future__ import annotations

from typing import Iterable

from .exceptions import AssemblyError
from .types import EncodedPage


def sequence_pages(pages: Iterable[EncodedPage], page_count: int) -> list[EncodedPage]:
    """Sort *pages* by index and check they cover ``0..page_count-1`` exactly once."""

    ordered = sorted(pages, key=lambda page: page.index)
    indexes = [page.index for page in ordered]
    if indexes != list(range(page_count)):
        seen = set(indexes)
        missing = sorted(set(range(page_count)) - seen)
        duplicates = sorted({i for i in indexes if indexes.count(i) > 1})
        unexpected = sorted(i for i in seen if i < 0 or i >= page_count)
        raise AssemblyError(
            f"Page results do not match a {page_count}-page document "
            f"(missing={missing}, duplicates={duplicates}, unexpected={unexpected})"
        )
    return ordered
