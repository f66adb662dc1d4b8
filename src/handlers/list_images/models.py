"""
Pydantic models for list images request and response.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.models.image import ImageRecord
from core.models.pagination import PaginationInfo
from core.utils.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PAGE_SIZE


class ListImagesRequest(BaseModel):
    """
    Validation model for list images API.

    Supports two filters, both applied in memory:
    - search → substring of original name or description
    - tags   → any-of match
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    search: str | None = Field(None, description="Case-insensitive substring match")
    tags: list[str] = Field(default_factory=list, description="Comma-separated tags, any may match")

    page: int = Field(default=DEFAULT_PAGE, ge=1, description="1-based page number")
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=MIN_PAGE_SIZE,
        le=MAX_PAGE_SIZE,
        description=f"Results per page ({MIN_PAGE_SIZE}-{MAX_PAGE_SIZE})",
    )

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        return value or []


class ListImagesResponse(BaseModel):
    """Response model for a page of images."""

    images: list[ImageRecord]
    total_count: int
    returned_count: int
    pagination: PaginationInfo
