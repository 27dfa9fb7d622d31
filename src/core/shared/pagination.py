"""
Pagination primitives shared by every list use case.

PageRequest carries the requested window; Page carries the result
plus the metadata the API exposes under "pagination".
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .exceptions import ValidationError

T = TypeVar("T")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageRequest:
    """Requested page (1-indexed) and page size."""

    page: int = 1
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(
        cls,
        page: Optional[Any] = None,
        limit: Optional[Any] = None,
        default_limit: int = DEFAULT_LIMIT,
    ) -> "PageRequest":
        """
        Build a request from raw query-string values.

        Args:
            page: Raw page number (None/"" means 1)
            limit: Raw page size (None/"" means default_limit)
            default_limit: Page size used when none is given

        Returns:
            PageRequest with limit bounded to 1..MAX_LIMIT

        Raises:
            ValidationError: If a value is not an integer or page < 1
        """
        try:
            page_number = int(page) if page not in (None, "") else 1
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid page: {page}", field="page")
        try:
            page_size = int(limit) if limit not in (None, "") else default_limit
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid limit: {limit}", field="limit")

        if page_number < 1:
            raise ValidationError("Page must be at least 1", field="page")

        page_size = max(1, min(page_size, MAX_LIMIT))
        return cls(page=page_number, limit=page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """A page of results."""

    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    def pagination(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
            "has_next_page": self.has_next_page,
            "has_prev_page": self.has_prev_page,
        }

    def map(self, fn: Callable[[T], Any]) -> "Page":
        """New page with fn applied to every item."""
        return Page(
            items=[fn(item) for item in self.items],
            total=self.total,
            page=self.page,
            limit=self.limit,
        )

    @classmethod
    def slice(cls, items: List[T], request: PageRequest) -> "Page[T]":
        """Paginate an already filtered, ordered list in memory."""
        start = request.offset
        return cls(
            items=items[start:start + request.limit],
            total=len(items),
            page=request.page,
            limit=request.limit,
        )
