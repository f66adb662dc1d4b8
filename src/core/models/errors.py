"""Custom exception classes for the image store.

Every error carries a stable ``error_code`` tag and a human-readable message.
Internal detail (paths, stack traces) never goes into ``message``; it belongs
in ``details``, which is logged but not returned to clients.

Subclasses only pick a default code. A caller may still pass a more specific
one (``IMAGE_NOT_FOUND`` for a ``NotFoundError``, for instance).
"""

from typing import Any, ClassVar

from core.utils.constants import (
    ERROR_CODE_ACCOUNTING_FAILED,
    ERROR_CODE_DUPLICATE_IDENTIFIER,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_IMAGE_DECODE_FAILED,
    ERROR_CODE_INTERNAL_ERROR,
    ERROR_CODE_INVALID_FILTER,
    ERROR_CODE_METADATA_OPERATION_FAILED,
    ERROR_CODE_PERSISTENCE_FAILED,
    ERROR_CODE_QUOTA_EXCEEDED,
    ERROR_CODE_QUOTA_LEDGER_FAILED,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE,
    ERROR_CODE_UNSUPPORTED_MIME_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
)


class ImageServiceError(Exception):
    """
    Base exception for all image store errors.

    Construction is keyword-only:

        raise NotFoundError(message="Image not found", details={"image_id": image_id})
    """

    default_code: ClassVar[str] = ERROR_CODE_INTERNAL_ERROR

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view used by API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
        }


# -- rejected input ---------------------------------------------------------


class ValidationError(ImageServiceError):
    """The request or upload was rejected before anything was stored."""

    default_code = ERROR_CODE_VALIDATION_FAILED


class MIMETypeError(ValidationError):
    default_code = ERROR_CODE_UNSUPPORTED_MIME_TYPE


class FileSizeError(ValidationError):
    default_code = ERROR_CODE_FILE_SIZE_EXCEEDED


class ImageDecodeError(ValidationError):
    """The bytes could not be decoded as an image."""

    default_code = ERROR_CODE_IMAGE_DECODE_FAILED


class FilterError(ValidationError):
    """Listing parameters are out of range."""

    default_code = ERROR_CODE_INVALID_FILTER


# -- policy and lookup -------------------------------------------------------


class QuotaExceededError(ImageServiceError):
    """The owner's plan does not allow another upload right now."""

    default_code = ERROR_CODE_QUOTA_EXCEEDED


class NotFoundError(ImageServiceError):
    default_code = ERROR_CODE_RESOURCE_NOT_FOUND


class DuplicateImageError(ImageServiceError):
    """An image id or short code is already taken."""

    default_code = ERROR_CODE_DUPLICATE_IDENTIFIER


# -- durable state -----------------------------------------------------------


class PersistenceError(ImageServiceError):
    """A durable write or read failed."""

    default_code = ERROR_CODE_PERSISTENCE_FAILED


class StorageError(PersistenceError):
    """An artifact (original or preview) operation failed."""

    default_code = ERROR_CODE_STORAGE


class MetadataOperationFailedError(PersistenceError):
    default_code = ERROR_CODE_METADATA_OPERATION_FAILED


class QuotaLedgerError(PersistenceError):
    """A quota entry could not be read or written."""

    default_code = ERROR_CODE_QUOTA_LEDGER_FAILED


class AccountingError(ImageServiceError):
    """Usage could not be recorded after the image was stored."""

    default_code = ERROR_CODE_ACCOUNTING_FAILED
