"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_FILTER = "INVALID_FILTER"
ERROR_CODE_UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_EMPTY_FILE = "EMPTY_FILE"
ERROR_CODE_IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
ERROR_CODE_INVALID_OWNER_ID = "INVALID_OWNER_ID"

# Quota Errors
ERROR_CODE_QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
ERROR_CODE_ACCOUNTING_FAILED = "ACCOUNTING_FAILED"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
ERROR_CODE_ARTIFACT_NOT_FOUND = "ARTIFACT_NOT_FOUND"
ERROR_CODE_SHORT_CODE_NOT_FOUND = "SHORT_CODE_NOT_FOUND"

# Persistence Errors
ERROR_CODE_PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_ARTIFACT_WRITE_FAILED = "ARTIFACT_WRITE_FAILED"
ERROR_CODE_ARTIFACT_READ_FAILED = "ARTIFACT_READ_FAILED"
ERROR_CODE_ARTIFACT_DELETE_FAILED = "ARTIFACT_DELETE_FAILED"
ERROR_CODE_DUPLICATE_IDENTIFIER = "DUPLICATE_IDENTIFIER"

# Metadata Errors
ERROR_CODE_METADATA_OPERATION_FAILED = "METADATA_OPERATION_FAILED"
ERROR_CODE_METADATA_CREATE_FAILED = "METADATA_CREATE_FAILED"
ERROR_CODE_METADATA_FETCH_FAILED = "METADATA_FETCH_FAILED"
ERROR_CODE_METADATA_UPDATE_FAILED = "METADATA_UPDATE_FAILED"
ERROR_CODE_METADATA_DELETE_FAILED = "METADATA_DELETE_FAILED"
ERROR_CODE_METADATA_LIST_FAILED = "METADATA_LIST_FAILED"

# Quota Ledger Errors
ERROR_CODE_QUOTA_LEDGER_FAILED = "QUOTA_LEDGER_FAILED"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes


MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
}

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(MIME_TYPE_EXTENSION_MAP.keys())

DEFAULT_EXTENSION = "bin"


# ============================================================================
# Preview Generation
# ============================================================================

PREVIEW_MAX_WIDTH = 300
PREVIEW_MAX_HEIGHT = 300
PREVIEW_QUALITY = 80
PREVIEW_FORMAT = "JPEG"
PREVIEW_MIME_TYPE = "image/jpeg"
PREVIEW_EXTENSION = "jpg"


# ============================================================================
# Identifiers
# ============================================================================

ID_ALPHABET: Final[str] = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-"
)
OBJECT_ID_LENGTH = 21
SHORT_CODE_LENGTH = 8
MAX_IDENTIFIER_ATTEMPTS = 3
IDENTIFIER_PATTERN = r"^[A-Za-z0-9_-]+$"


# ============================================================================
# Image Metadata Constraints
# ============================================================================

OWNER_ID_PATTERN = r"^[a-zA-Z0-9_-]+$"
MAX_TAGS = 10
TAG_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 1000
ORIGINAL_NAME_MAX_LENGTH = 255

# ============================================================================
# Pagination Constraints
# ============================================================================

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100

# ============================================================================
# Quota / Subscription
# ============================================================================

UNLIMITED = -1
QUOTA_PERIOD_DAYS = 30
PRIVILEGED_ROLES: Final[frozenset[str]] = frozenset({"admin", "manager"})

# ============================================================================
# Storage Layout
# ============================================================================

ORIGINALS_DIR = "originals"
PREVIEWS_DIR = "previews"
METADATA_DIR = "metadata"
QUOTA_DIR = "quota"
QUOTA_HISTORY_DIR = "history"
RECORD_SUFFIX = ".json"

# ============================================================================
# Public URLs
# ============================================================================

DEFAULT_BASE_URL = "http://localhost:8347"
OBJECT_URL_TEMPLATE = "{base_url}/objects/{image_id}"
PREVIEW_URL_TEMPLATE = "{base_url}/objects/{image_id}/preview"
SHORT_URL_TEMPLATE = "{base_url}/go/{short_code}"

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PATCH,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length,Location"
DEFAULT_CONTENT_TYPE = "application/json"
CACHE_CONTROL_IMMUTABLE = "public, max-age=31536000"

METRICS_NAMESPACE = "QuotaImageStore"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_STORAGE_ROOT = "IMAGE_STORE_ROOT"
ENV_BASE_URL = "IMAGE_STORE_BASE_URL"
DEFAULT_STORAGE_ROOT = "./data"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb() -> int:
    """Get maximum file size in megabytes."""
    return MAX_FILE_SIZE // (1024 * 1024)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
