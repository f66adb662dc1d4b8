from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.utils.constants import IDENTIFIER_PATTERN


class GetImageRequest(BaseModel):
    """Validation model for get image request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    image_id: StrictStr = Field(
        ...,
        min_length=1,
        pattern=IDENTIFIER_PATTERN,
        description="Image ID to retrieve",
    )


class ImageDetailResponse(BaseModel):
    """Stored record plus the public URLs of its artifacts."""

    image_id: str
    owner_id: str | None = None
    original_name: str
    stored_name: str
    mime_type: str
    file_size: int
    width: int | None = None
    height: int | None = None
    short_code: str
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    created_at: str
    direct_url: str
    short_url: str
    preview_url: str
