"""
Lambda handler responsible for image upload.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.errors import MIMETypeError, QuotaExceededError
from core.services.factory import get_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler, get_identity
from core.utils.mime import detect_mime_type
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import ImageUploadRequest, ImageUploadResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image upload requests.

    Expected API Gateway event structure:
    {
        "body": "{...}",           # JSON with file (base64), file_name, mime_type, ...
        "requestContext": {"authorizer": {"user_id": "...", "role": "..."}}
    }

    Uploads by authenticated, unprivileged callers count against their quota.

    Args:
        event: API Gateway Lambda proxy event containing the upload payload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response with the stored record and URLs
    """
    logger.info(
        "Received image upload request",
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

    request = validate_request(ImageUploadRequest, body)
    owner_id, privileged = get_identity(event)
    file_data = request.decoded_file()

    mime_type = request.mime_type
    if not mime_type:
        try:
            mime_type = detect_mime_type(file_data)
        except ValueError as exc:
            raise MIMETypeError(message="Unsupported image type") from exc

    try:
        result = get_image_service().upload_image(
            file_data=file_data,
            mime_type=mime_type,
            original_name=request.file_name,
            owner_id=owner_id,
            privileged=privileged,
            description=request.description,
            tags=request.tags,
        )
    except QuotaExceededError:
        metrics.add_metric(name="QuotaRejected", unit=MetricUnit.Count, value=1)
        raise

    metrics.add_metric(name="ImageUploaded", unit=MetricUnit.Count, value=1)

    response = ImageUploadResponse(
        **result.image.model_dump(),
        direct_url=result.direct_url,
        short_url=result.short_url,
        preview_url=result.preview_url,
        message="Image uploaded successfully",
    )

    return ResponseBuilder.created(response.model_dump())
