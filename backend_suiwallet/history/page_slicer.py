"""Map a 1-based page number onto the globally sorted aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageSlice(Generic[T]):
    items: list[T]
    has_next_page: bool


def slice_page(
    sorted_items: Sequence[T],
    page: int,
    page_size: int,
    *,
    streams_active: bool = False,
) -> PageSlice[T]:
    """
    Return items [(page-1)*size, page*size) clipped to the sequence.

    has_next_page is conservative: True when the aggregate extends past this
    page OR a direction stream stopped before exhaustion (the in-memory
    aggregate may be incomplete). A page past the available data (page > 1)
    is empty with has_next_page False.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    start = (page - 1) * page_size
    end = start + page_size
    if page > 1 and start >= len(sorted_items):
        return PageSlice(items=[], has_next_page=False)
    items = list(sorted_items[start:end])
    return PageSlice(items=items, has_next_page=end < len(sorted_items) or streams_active)
