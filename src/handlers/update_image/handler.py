"""
Lambda handler responsible for updating image tags and description.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.services.factory import get_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import UpdateImageRequest, UpdateImageResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image update requests (PATCH /images/{image_id}).

    Only tags and description are mutable; file, identifiers and
    timestamps never change.
    """
    logger.info(
        "Received image update request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError:
        logger.warning("Invalid JSON body received")
        return ResponseBuilder.bad_request(message="Invalid JSON body")

    if not isinstance(body, dict):
        return ResponseBuilder.bad_request(message="Request body must be a JSON object")

    path_params = event.get("pathParameters") or {}
    request = validate_request(
        UpdateImageRequest,
        {**body, "image_id": path_params.get("image_id")},
    )

    record = get_image_service().update_image(
        request.image_id,
        tags=request.tags,
        description=request.description,
    )

    response = UpdateImageResponse(
        image_id=record.image_id,
        tags=record.tags,
        description=record.description,
        message="Image updated successfully",
    )

    return ResponseBuilder.ok(response.model_dump())
