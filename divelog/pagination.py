"""Page arithmetic for list views."""

from __future__ import annotations

import math
from dataclasses import dataclass

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Pager:
    page: int
    page_size: int

    @classmethod
    def create(cls, page: int, page_size: int, default_page_size: int) -> Pager:
        """Clamp user supplied paging parameters.

        A page outside 1..10,000,000 becomes 1; a page size outside 1..100
        becomes the default.
        """
        if page < 1 or page > MAX_PAGE:
            page = 1
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            page_size = default_page_size
        return cls(page=page, page_size=page_size)

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class PageData:
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    @classmethod
    def from_total(cls, total: int, pager: Pager) -> PageData:
        if total == 0:
            return cls()
        return cls(
            current_page=pager.page,
            page_size=pager.page_size,
            first_page=1,
            last_page=math.ceil(total / pager.page_size),
            total_records=total,
        )


def build_page_data(total: int, pager: Pager) -> PageData:
    return PageData.from_total(total, pager)
