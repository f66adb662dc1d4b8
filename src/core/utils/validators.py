"""Request and descriptive-field validation utilities."""

from typing import Any, TypeVar

from pydantic import BaseModel

from core.models.errors import ValidationError
from core.utils.constants import (
    DESCRIPTION_MAX_LENGTH,
    MAX_TAGS,
    ORIGINAL_NAME_MAX_LENGTH,
    TAG_MAX_LENGTH,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for API responses.

    Removes sensitive/internal fields like:
    - url
    - ctx
    - input
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "body"
        msg = err.get("msg", "Invalid value").replace("Value error,", "").strip()

        msg_lower = msg.lower()
        if "base64" in msg_lower:
            msg = "File must be a valid Base64-encoded string"
        elif "field required" in msg_lower:
            msg = "This field is required"

        sanitized.append({"field": field, "message": msg})

    return sanitized


def validate_request(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate request data against a Pydantic model.

    Raises:
        pydantic.ValidationError: If ``data`` does not satisfy ``model``
    """
    return model.model_validate(data)


def normalize_tags(value: Any) -> list[str]:
    """
    Normalize tags into an ordered, de-duplicated list.

    Accepts:
    - None
    - comma-separated string
    - list of strings

    Raises:
        ValueError: On wrong types or too many / too long tags
    """
    if value is None:
        return []

    if isinstance(value, str):
        raw_tags = [t.strip() for t in value.split(",")]
    elif isinstance(value, (list, tuple)):
        if not all(isinstance(t, str) for t in value):
            raise ValueError("tags must be a string or list of strings")
        raw_tags = [t.strip() for t in value]
    else:
        raise ValueError("tags must be a string or list of strings")

    tags = list(dict.fromkeys(t for t in raw_tags if t))

    if len(tags) > MAX_TAGS:
        raise ValueError(f"Maximum {MAX_TAGS} tags allowed")

    for tag in tags:
        if len(tag) > TAG_MAX_LENGTH:
            raise ValueError(f"Tags must be at most {TAG_MAX_LENGTH} characters")

    return tags


def validate_descriptive_fields(
    *,
    original_name: str | None = None,
    description: str | None = None,
    tags: Any = None,
) -> list[str]:
    """Check caller-supplied descriptive fields and return normalized tags.

    Raises:
        ValidationError: If any field is out of bounds
    """
    if original_name is not None:
        if not original_name.strip():
            raise ValidationError(message="File name must not be empty")
        if len(original_name) > ORIGINAL_NAME_MAX_LENGTH:
            raise ValidationError(
                message=f"File name must be at most {ORIGINAL_NAME_MAX_LENGTH} characters",
            )

    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            message=f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
        )

    try:
        return normalize_tags(tags)
    except ValueError as exc:
        raise ValidationError(message=str(exc), details={"field": "tags"}) from exc
