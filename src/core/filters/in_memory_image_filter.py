"""
Image filtering for list operations.

Provides a coordination layer that applies filtering, ordering and
pagination strategies to in-memory image record collections. It does
not perform data access and operates on pre-fetched records.
"""

from aws_lambda_powertools import Logger

from core.filters.page_pagination import PagePagination
from core.filters.text_search_filter import TagFilter, TextSearchFilter
from core.models.errors import FilterError
from core.models.image import ImageQuery, ImageRecord
from core.models.pagination import PaginationInfo
from core.utils.constants import MAX_PAGE_SIZE
from core.utils.time import parse_iso

logger = Logger(UTC=True)


class InMemoryImageFilter:
    """
    Filters, orders and paginates image records.

    Steps are applied in a fixed order:
    1. Text search over original name and description
    2. Any-tag match
    3. Newest first by ``created_at``
    4. Page slicing
    """

    def __init__(self, max_page_size: int = MAX_PAGE_SIZE) -> None:
        """Initialize filter components used for orchestration."""
        self._text_filter = TextSearchFilter()
        self._tag_filter = TagFilter()
        self._pagination = PagePagination(max_page_size)

    def validate(self, query: ImageQuery) -> None:
        """
        Reject invalid pagination parameters.

        Raises:
            FilterError: If page or page_size is out of range
        """
        is_valid, error_message = self._pagination.validate(query.page, query.page_size)
        if not is_valid:
            logger.error(
                "Invalid pagination parameters",
                extra={
                    "page": query.page,
                    "page_size": query.page_size,
                    "error": error_message,
                },
            )
            raise FilterError(
                message=error_message,
                details={"page": query.page, "page_size": query.page_size},
            )

    def apply(
        self,
        items: list[ImageRecord],
        query: ImageQuery,
    ) -> tuple[list[ImageRecord], int]:
        """
        Run the full filter pipeline.

        Returns:
            A tuple of (page_items, total_count) where total_count is the
            number of matches before pagination
        """
        self.validate(query)

        matched = self._text_filter.apply(items, query.search)
        matched = self._tag_filter.apply(matched, query.tags)
        matched = sorted(matched, key=lambda item: parse_iso(item.created_at), reverse=True)

        return self._pagination.paginate(matched, query.page, query.page_size)

    def page_info(self, query: ImageQuery, total_count: int) -> PaginationInfo:
        return self._pagination.get_page_info(query.page, query.page_size, total_count)
