"""Pydantic models for image update request/response."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.utils.constants import DESCRIPTION_MAX_LENGTH, IDENTIFIER_PATTERN
from core.utils.validators import normalize_tags


class UpdateImageRequest(BaseModel):
    """Validation model for image update request.

    At least one of ``tags`` / ``description`` must be present. Omitted
    fields are left unchanged; an empty list clears the tags.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    image_id: str = Field(..., min_length=1, pattern=IDENTIFIER_PATTERN)
    tags: list[str] | None = None
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("tags") is not None:
            data = {**data, "tags": normalize_tags(data["tags"])}
        return data

    @model_validator(mode="after")
    def require_change(self) -> "UpdateImageRequest":
        if self.tags is None and self.description is None:
            raise ValueError("At least one of tags or description must be provided")
        return self


class UpdateImageResponse(BaseModel):
    image_id: str
    tags: list[str]
    description: str
    message: str
