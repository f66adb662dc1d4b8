"""
Decorators shared by the API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import ImageServiceError
from core.utils.constants import PRIVILEGED_ROLES
from core.utils.response import ResponseBuilder, status_for
from core.utils.validators import sanitize_validation_errors

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]

GENERIC_FAILURE_MESSAGE = (
    "We're experiencing technical difficulties. Please try again in a few moments."
)


def get_identity(event: dict[str, Any]) -> tuple[str | None, bool]:
    """
    Caller identity as placed on the event by the authorizer.

    Returns ``(user_id, privileged)``; ``privileged`` is true for the
    admin and manager roles. An event without an authorizer is anonymous.
    """
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}

    user_id = authorizer.get("user_id") or None
    role = str(authorizer.get("role") or "").lower()

    return user_id, role in PRIVILEGED_ROLES


def _failure_response(
    exc: Exception,
    *,
    handler_name: str,
    request_id: str | None,
    cors_origin: str | None,
) -> JsonDict:
    """Log ``exc`` and turn it into the matching HTTP response."""
    log_extra: dict[str, Any] = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }
    options = {"request_id": request_id, "cors_origin": cors_origin}

    if isinstance(exc, ImageServiceError):
        log_extra.update(error_code=exc.error_code, details=exc.details)
        if status_for(exc) >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.exception("Service error in handler", extra=log_extra)
        else:
            logger.warning(
                "Request rejected by service",
                extra={**log_extra, "traceback": traceback.format_exc()},
            )
        return ResponseBuilder.from_error(exc, **options)

    if isinstance(exc, PydanticValidationError):
        logger.warning("Request validation failed", extra=log_extra)
        return ResponseBuilder.validation_error(
            message="Invalid request payload",
            details={"errors": sanitize_validation_errors(exc.errors())},
            **options,
        )

    logger.exception("Unexpected error in handler", extra=log_extra)
    return ResponseBuilder.internal_error(GENERIC_FAILURE_MESSAGE, **options)


def api_gateway_handler(func: Callable[..., JsonDict]) -> Callable[..., JsonDict]:
    """
    Wrap an API Gateway handler.

    OPTIONS preflight requests are answered without calling ``func``. Any
    exception ``func`` raises is logged with the request id and rendered as
    an error response; domain errors keep their own status code, everything
    unexpected becomes a 500 with a generic message.

        @api_gateway_handler
        def handler(event, context):
            return ResponseBuilder.ok({...})
    """

    @wraps(func)
    def wrapper(event: Any, context: Any, *, cors_origin: str | None = None) -> JsonDict:
        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.no_content(cors_origin=cors_origin)

        try:
            return func(event, context)
        except Exception as exc:
            return _failure_response(
                exc,
                handler_name=func.__name__,
                request_id=getattr(context, "aws_request_id", None),
                cors_origin=cors_origin,
            )

    return wrapper
