"""Pydantic models for artifact download requests."""

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.models.image import ArtifactKind


class GetImageFileRequest(BaseModel):
    """Validation model for serving an original or preview."""

    model_config = ConfigDict(str_strip_whitespace=True)

    stored_name: StrictStr = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_-]+(\.[A-Za-z0-9]+)?$",
        description="Image ID or public file name ({image_id}.{ext})",
    )
    kind: ArtifactKind = Field(
        ArtifactKind.ORIGINAL,
        description="Which artifact to serve",
    )
    download: bool = Field(
        False,
        description="Serve as an attachment instead of inline",
    )
