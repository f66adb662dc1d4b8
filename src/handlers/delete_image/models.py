from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.models.image import DeleteResult
from core.utils.constants import IDENTIFIER_PATTERN


class DeleteImageRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    image_id: StrictStr = Field(..., min_length=1, pattern=IDENTIFIER_PATTERN)


class DeleteImageResponse(BaseModel):
    """Acknowledgement returned once an image and its artifacts are gone."""

    image_id: str
    message: str = "Image deleted successfully"
    deleted_at: str

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteImageResponse":
        return cls(image_id=result.image_id, deleted_at=result.deleted_at)
