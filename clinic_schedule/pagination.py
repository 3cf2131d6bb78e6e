"""Threshold-gated paging over any ordered sequence."""
from __future__ import annotations

import math
from typing import Sequence, TypeVar

from . import config
from .models import Page

T = TypeVar("T")


def should_paginate(total_items: int, pagination_threshold: int) -> bool:
    return total_items > pagination_threshold


def paginate(
    items: Sequence[T],
    items_per_page: int | None = None,
    pagination_threshold: int | None = None,
    page: int = 1,
) -> Page[T]:
    """Slice ``items`` into page ``page`` (1-based).

    Below the threshold the whole sequence comes back as a single page no matter
    what ``items_per_page`` says. Out-of-range pages are clamped.
    """
    if items_per_page is None:
        items_per_page = config.PAGE_SIZE
    if pagination_threshold is None:
        pagination_threshold = config.PAGINATION_THRESHOLD
    items = list(items)
    total = len(items)

    if items_per_page <= 0 or not should_paginate(total, pagination_threshold):
        return Page(items=items, page=1, total_pages=1, total_items=total, should_paginate=False)

    total_pages = math.ceil(total / items_per_page)
    page = min(max(page, 1), total_pages)
    offset = (page - 1) * items_per_page
    return Page(
        items=items[offset:offset + items_per_page],
        page=page,
        total_pages=total_pages,
        total_items=total,
        should_paginate=True,
    )


class Paginator:
    """Page cursor owned by one list view.

    The cursor is not tied to the items it pages; callers call ``reset()`` when
    the filtered set changes (a new search term, another status filter).
    """

    def __init__(self, items_per_page: int | None = None, pagination_threshold: int | None = None):
        self.items_per_page = config.PAGE_SIZE if items_per_page is None else items_per_page
        self.pagination_threshold = (
            config.PAGINATION_THRESHOLD if pagination_threshold is None else pagination_threshold
        )
        self.current_page = 1

    def window(self, items: Sequence[T]) -> Page[T]:
        result = paginate(items, self.items_per_page, self.pagination_threshold, self.current_page)
        self.current_page = result.page
        return result

    def go_to(self, page: int) -> None:
        self.current_page = max(page, 1)

    def next(self) -> None:
        self.current_page += 1

    def previous(self) -> None:
        self.current_page = max(self.current_page - 1, 1)

    def reset(self) -> None:
        self.current_page = 1
