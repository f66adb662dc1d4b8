"""
Lambda handler responsible for deleting an image resource.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.services.factory import get_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import DeleteImageRequest, DeleteImageResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image deletion requests.

    Deletion itself is idempotent; the response is 404 when there was
    no record to delete, so clients can tell a repeat from a first delete.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    logger.info(
        "Received image delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    path_params = event.get("pathParameters") or {}
    request = validate_request(DeleteImageRequest, {"image_id": path_params.get("image_id")})

    result = get_image_service().delete_image(request.image_id)

    if not result.found:
        return ResponseBuilder.not_found(f"Image not found: {request.image_id}")

    metrics.add_metric(name="ImageDeleted", unit=MetricUnit.Count, value=1)

    response = DeleteImageResponse.from_result(result)

    return ResponseBuilder.ok(response.model_dump())
