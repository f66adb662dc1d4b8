"""Shared image models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from core.models.pagination import PaginationInfo
from core.utils.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE


class ArtifactKind(str, Enum):
    """Binary artifacts stored per image."""

    ORIGINAL = "original"
    PREVIEW = "preview"


class ImageRecord(BaseModel):
    """Descriptive record persisted for every stored image."""

    model_config = ConfigDict(validate_assignment=True)

    image_id: StrictStr = Field(..., description="Unique image identifier")
    owner_id: StrictStr | None = Field(
        None,
        description="Owner identifier, None for administrative seeding",
    )
    original_name: StrictStr = Field(..., description="File name supplied by the uploader")
    stored_name: StrictStr = Field(..., description="Public file name ({image_id}.{ext})")
    mime_type: StrictStr = Field(..., description="MIME type of the original (e.g. image/jpeg)")
    file_size: StrictInt = Field(..., ge=0, description="Original size in bytes")

    width: StrictInt | None = Field(None, description="Pixel width of the original")
    height: StrictInt | None = Field(None, description="Pixel height of the original")

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    short_code: StrictStr = Field(..., description="Short code used for redirect links")

    tags: list[StrictStr] = Field(default_factory=list, description="Ordered image tags")
    description: StrictStr = Field("", description="Free-form image description")


class DerivedArtifacts(BaseModel):
    """Output of the artifact pipeline for a single upload."""

    width: int
    height: int
    preview: bytes


class StoredFile(BaseModel):
    """Raw artifact bytes together with the MIME type to serve them with."""

    content: bytes
    mime_type: str


class UploadResult(BaseModel):
    """Successful upload: the stored record plus public URLs."""

    image: ImageRecord
    direct_url: str
    short_url: str
    preview_url: str


class DeleteResult(BaseModel):
    """Outcome of an idempotent delete."""

    image_id: str
    found: bool = Field(..., description="Whether a record existed before the call")
    deleted_at: str


class ImageQuery(BaseModel):
    """Catalog listing parameters."""

    search: str | None = Field(None, description="Substring matched against name and description")
    tags: list[str] = Field(default_factory=list, description="Match images carrying any of these tags")
    page: int = Field(DEFAULT_PAGE, description="1-based page number")
    page_size: int = Field(DEFAULT_PAGE_SIZE, description="Maximum records per page")


class ImagePage(BaseModel):
    """Paginated listing result."""

    images: list[ImageRecord] = Field(..., description="Records on the requested page")
    total_count: StrictInt = Field(..., description="Number of records matching the filters")
    pagination: PaginationInfo = Field(..., description="Pagination metadata")
