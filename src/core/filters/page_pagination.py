"""
Page-based pagination utilities.
"""

from typing import TypeVar

from core.models.pagination import PaginationInfo
from core.utils.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
)

T = TypeVar("T")


class PagePagination:
    """
    Page-based pagination helper.

    This class encapsulates all logic related to slicing a list of items
    into 1-based pages of a fixed size.

    Typical usage:
    1. Validate page and page_size parameters
    2. Apply pagination to a list of items
    3. Return the page along with metadata
    """

    def __init__(self, max_page_size: int = MAX_PAGE_SIZE) -> None:
        self._max_page_size = max_page_size

    @staticmethod
    def paginate(
        items: list[T],
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[T], int]:
        """
        Return one page of ``items``.

        Args:
            items: Full, already filtered and sorted list
            page: 1-based page number
            page_size: Maximum number of items per page

        Returns:
            A tuple containing:
            - page_items: Items on the requested page
            - total_count: Total number of items before pagination

        Example:
            paginate([1, 2, 3, 4, 5], page=2, page_size=2)

            → ([3, 4], 5)
        """
        start = (page - 1) * page_size
        return items[start : start + page_size], len(items)

    def validate(self, page: int, page_size: int) -> tuple[bool, str]:
        """
        Validate pagination parameters.

        Validation rules:
        - page_size must be within [MIN_PAGE_SIZE, max_page_size]
        - page must be 1 or greater

        Returns:
            A tuple of:
            - is_valid: Whether parameters are valid
            - error_message: Human-readable error message if invalid
        """
        if page_size < MIN_PAGE_SIZE:
            return False, f"Page size must be at least {MIN_PAGE_SIZE}"

        if page_size > self._max_page_size:
            return False, f"Page size must not exceed {self._max_page_size}"

        if page < 1:
            return False, "Page must be a positive integer"

        return True, ""

    @staticmethod
    def get_page_info(page: int, page_size: int, total_count: int) -> PaginationInfo:
        """
        Build pagination metadata for API responses.

        Notes:
            - Page numbering starts at 1
            - total_pages is rounded up
        """
        total_pages = (total_count + page_size - 1) // page_size
        has_more = page * page_size < total_count

        return PaginationInfo(
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_more=has_more,
            next_page=page + 1 if has_more else None,
        )
