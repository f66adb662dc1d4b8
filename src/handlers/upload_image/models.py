"""Pydantic models for image upload request/response."""

import base64
import binascii
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.utils.constants import (
    DESCRIPTION_MAX_LENGTH,
    MAX_FILE_SIZE,
    ORIGINAL_NAME_MAX_LENGTH,
    get_max_file_size_mb,
)
from core.utils.validators import normalize_tags

logger = Logger(UTC=True)


class ImageUploadRequest(BaseModel):
    """Validation model for image upload request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    file: str = Field(..., description="Base64 encoded image file")
    file_name: str = Field(
        ...,
        min_length=1,
        max_length=ORIGINAL_NAME_MAX_LENGTH,
        description="Original file name",
    )
    mime_type: str | None = Field(
        None,
        description="Declared MIME type, detected from the content when omitted",
    )
    description: str = Field("", max_length=DESCRIPTION_MAX_LENGTH, description="Image description")
    tags: list[str] = Field(default_factory=list, description="List of tags (max 10)")

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, value: Any) -> list[str]:
        """Accept a comma-separated string or a list of strings."""
        return normalize_tags(value)

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str) -> str:
        """
        Validate base64 file:
        - must not be empty
        - must decode correctly
        - must not exceed MAX_FILE_SIZE
        """
        if not value:
            raise ValueError("file must not be empty")

        try:
            file_data = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            logger.warning("File validation error: invalid base64")
            raise ValueError("Invalid base64 encoded file") from exc

        if not file_data:
            raise ValueError("Decoded file is empty")

        if len(file_data) > MAX_FILE_SIZE:
            logger.warning("File validation error: file size exceeds limit")
            raise ValueError(f"File size exceeds {get_max_file_size_mb()}MB limit")

        return value

    def decoded_file(self) -> bytes:
        return base64.b64decode(self.file)


class ImageUploadResponse(BaseModel):
    """Response model for successful image upload."""

    image_id: str = Field(..., description="Unique image ID")
    owner_id: str | None = Field(None, description="Owner the image is attributed to")
    original_name: str = Field(..., description="Original file name")
    stored_name: str = Field(..., description="Public file name")
    mime_type: str = Field(..., description="MIME type of the original")
    file_size: int = Field(..., description="Size of the original in bytes")
    width: int | None = Field(None, description="Pixel width")
    height: int | None = Field(None, description="Pixel height")
    short_code: str = Field(..., description="Short link code")
    tags: list[str] = Field(default_factory=list, description="Image tags")
    description: str = Field("", description="Image description")
    created_at: str = Field(..., description="Creation timestamp")
    direct_url: str = Field(..., description="Absolute URL of the original")
    short_url: str = Field(..., description="Absolute short redirect URL")
    preview_url: str = Field(..., description="Absolute URL of the preview")
    message: str = Field(..., description="Success message")
