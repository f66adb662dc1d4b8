"""Explicit configuration for the image store."""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from core.utils.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_BASE_URL,
    DEFAULT_STORAGE_ROOT,
    ENV_BASE_URL,
    ENV_STORAGE_ROOT,
    MAX_FILE_SIZE,
    MAX_PAGE_SIZE,
    PREVIEW_MAX_HEIGHT,
    PREVIEW_MAX_WIDTH,
    PREVIEW_QUALITY,
    QUOTA_PERIOD_DAYS,
)


class StoreConfig(BaseModel):
    """Settings handed to the image service at construction time.

    Nothing in the core reads the environment at call time; handlers build
    this once through :meth:`from_env`.
    """

    model_config = ConfigDict(frozen=True)

    storage_root: Path = Field(..., description="Directory holding artifacts, records and ledger")
    base_url: str = Field(DEFAULT_BASE_URL, description="Public origin used to compose URLs")
    max_file_size: PositiveInt = MAX_FILE_SIZE
    allowed_mime_types: frozenset[str] = ALLOWED_MIME_TYPES
    preview_max_size: tuple[PositiveInt, PositiveInt] = (PREVIEW_MAX_WIDTH, PREVIEW_MAX_HEIGHT)
    preview_quality: int = Field(PREVIEW_QUALITY, ge=1, le=95)
    quota_period_days: PositiveInt = QUOTA_PERIOD_DAYS
    list_max_page_size: PositiveInt = MAX_PAGE_SIZE

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Build configuration from process environment variables."""
        return cls(
            storage_root=Path(os.getenv(ENV_STORAGE_ROOT, DEFAULT_STORAGE_ROOT)),
            base_url=os.getenv(ENV_BASE_URL) or DEFAULT_BASE_URL,
        )
