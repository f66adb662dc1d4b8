"""
Centralized API response builder for AWS Lambda / API Gateway.

Domain errors are mapped to HTTP status codes here, in one table, so that
handlers never choose a status for a failure themselves.
"""

from __future__ import annotations

import base64
import json
from http import HTTPStatus
from typing import Any

from core.models.errors import (
    AccountingError,
    DuplicateImageError,
    ImageServiceError,
    NotFoundError,
    PersistenceError,
    QuotaExceededError,
    ValidationError,
)
from core.utils.constants import (
    CACHE_CONTROL_IMMUTABLE,
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGIN,
    DEFAULT_CONTENT_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
    EXPOSE_HEADERS,
)
from core.utils.time import utc_now_iso

JsonDict = dict[str, Any]

# Checked in order; the first matching class wins.
ERROR_STATUS_MAP: tuple[tuple[type[ImageServiceError], HTTPStatus], ...] = (
    (ValidationError, HTTPStatus.UNPROCESSABLE_ENTITY),
    (QuotaExceededError, HTTPStatus.FORBIDDEN),
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (DuplicateImageError, HTTPStatus.CONFLICT),
    (PersistenceError, HTTPStatus.INTERNAL_SERVER_ERROR),
    (AccountingError, HTTPStatus.INTERNAL_SERVER_ERROR),
)


def status_for(exc: ImageServiceError) -> HTTPStatus:
    """HTTP status for a domain error."""
    for error_type, status in ERROR_STATUS_MAP:
        if isinstance(exc, error_type):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


class ResponseBuilder:
    """
    Factory for API Gateway-compatible HTTP responses.

    Every builder accepts the keyword options ``request_id`` (echoed in JSON
    bodies) and ``cors_origin`` (overrides ``Access-Control-Allow-Origin``).
    """

    CORS: dict[str, str] = {
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Headers": CORS_HEADERS,
        "Access-Control-Allow-Methods": CORS_METHODS,
        "Access-Control-Expose-Headers": EXPOSE_HEADERS,
    }

    @classmethod
    def headers(cls, cors_origin: str | None = None, **extra: str) -> dict[str, str]:
        merged = {"Content-Type": DEFAULT_CONTENT_TYPE, **cls.CORS}
        if cors_origin:
            merged["Access-Control-Allow-Origin"] = cors_origin
        merged.update(extra)
        return merged

    @classmethod
    def json_response(
        cls,
        status: HTTPStatus,
        body: JsonDict | None = None,
        *,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = dict(body or {})
        if request_id:
            payload["request_id"] = request_id

        return {
            "statusCode": status.value,
            "headers": cls.headers(cors_origin),
            "body": json.dumps(payload),
        }

    # -- success ------------------------------------------------------------

    @classmethod
    def ok(cls, body: JsonDict, **options: Any) -> JsonDict:
        return cls.json_response(HTTPStatus.OK, body, **options)

    @classmethod
    def created(cls, body: JsonDict, **options: Any) -> JsonDict:
        return cls.json_response(HTTPStatus.CREATED, body, **options)

    @classmethod
    def no_content(cls, *, cors_origin: str | None = None) -> JsonDict:
        return {
            "statusCode": HTTPStatus.NO_CONTENT.value,
            "headers": cls.headers(cors_origin),
            "body": "",
        }

    @classmethod
    def redirect(cls, location: str, *, cors_origin: str | None = None) -> JsonDict:
        """302 Found pointing at ``location``."""
        return {
            "statusCode": HTTPStatus.FOUND.value,
            "headers": cls.headers(cors_origin, Location=location),
            "body": "",
        }

    @classmethod
    def binary_response(
        cls,
        content: bytes,
        *,
        content_type: str,
        headers: dict[str, str] | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        """Base64-encoded body, as API Gateway expects for binary media types."""
        response_headers = cls.headers(
            cors_origin,
            **{
                "Content-Type": content_type,
                "Content-Length": str(len(content)),
                "Cache-Control": CACHE_CONTROL_IMMUTABLE,
            },
        )
        response_headers.update(headers or {})

        return {
            "statusCode": HTTPStatus.OK.value,
            "headers": response_headers,
            "body": base64.b64encode(content).decode("utf-8"),
            "isBase64Encoded": True,
        }

    # -- errors -------------------------------------------------------------

    @classmethod
    def error(
        cls,
        *,
        status: HTTPStatus,
        message: str,
        error: str | None = None,
        details: JsonDict | None = None,
        **options: Any,
    ) -> JsonDict:
        payload: JsonDict = {
            "error": error or status.name,
            "message": message,
            "timestamp": utc_now_iso(),
        }
        if details:
            payload["details"] = details

        return cls.json_response(status, payload, **options)

    @classmethod
    def from_error(cls, exc: ImageServiceError, **options: Any) -> JsonDict:
        """Render a domain error. ``exc.details`` is never included."""
        return cls.error(status=status_for(exc), **exc.to_dict(), **options)

    @classmethod
    def bad_request(cls, message: str, **options: Any) -> JsonDict:
        return cls.error(status=HTTPStatus.BAD_REQUEST, message=message, **options)

    @classmethod
    def validation_error(cls, *, message: str, **options: Any) -> JsonDict:
        """422 with the pydantic field errors in ``details``."""
        return cls.error(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            error=ERROR_CODE_VALIDATION_FAILED,
            message=message,
            **options,
        )

    @classmethod
    def not_found(cls, message: str = "Resource not found", **options: Any) -> JsonDict:
        return cls.error(status=HTTPStatus.NOT_FOUND, message=message, **options)

    @classmethod
    def internal_error(cls, message: str = "Internal server error", **options: Any) -> JsonDict:
        return cls.error(status=HTTPStatus.INTERNAL_SERVER_ERROR, message=message, **options)
