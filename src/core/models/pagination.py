"""Pagination model."""

from pydantic import BaseModel, Field, StrictBool, StrictInt


class PaginationInfo(BaseModel):
    """Pagination metadata for list responses."""

    page: StrictInt = Field(..., description="Current 1-based page number")
    page_size: StrictInt = Field(..., description="Maximum number of items requested")
    total_pages: StrictInt = Field(..., description="Number of pages for the current filters")
    has_more: StrictBool = Field(..., description="Whether more items are available after this page")
    next_page: StrictInt | None = Field(
        None,
        description="Page to request next, if available",
    )
