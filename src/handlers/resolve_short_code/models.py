from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.utils.constants import IDENTIFIER_PATTERN, SHORT_CODE_LENGTH


class ResolveShortCodeRequest(BaseModel):
    """Validation model for short link resolution."""

    model_config = ConfigDict(str_strip_whitespace=True)

    short_code: StrictStr = Field(
        ...,
        min_length=1,
        max_length=SHORT_CODE_LENGTH * 4,
        pattern=IDENTIFIER_PATTERN,
    )
