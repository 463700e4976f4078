"""
Pagination helpers shared by the book and review services.

Pages are 1-indexed for clients; the database OFFSET is 0-based:
    Page 1 -> skip 0 items
    Page 2 -> skip page_size items
"""

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


@dataclass
class Page(Generic[T]):
    """One page of results plus what the client needs to navigate."""

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total > 0 else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
