import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def clamp_pagination(page: int | None, limit: int | None, default_limit: int, max_limit: int = 100) -> PageRequest:
    page = max(1, page or 1)
    limit = max(1, min(limit or default_limit, max_limit))
    return PageRequest(page=page, limit=limit)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def page_links(page: int, pages: int) -> tuple[int | None, int | None]:
    """(prev_page, next_page) for a 1-based page inside `pages` pages."""
    prev_page = page - 1 if page > 1 else None
    next_page = page + 1 if page < pages else None
    return prev_page, next_page
