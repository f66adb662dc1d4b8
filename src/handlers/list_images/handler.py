"""
Lambda handler responsible for listing images with optional filtering and pagination.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.image import ImageQuery
from core.services.factory import get_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import ListImagesRequest, ListImagesResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle requests to list images.

    Supports:
    - Text search over original name and description
    - Any-tag filtering
    - Newest-first ordering and page-based pagination

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    logger.info(
        "Received image list request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    params = event.get("queryStringParameters") or {}
    request = validate_request(ListImagesRequest, params)

    page = get_image_service().list_images(
        ImageQuery(
            search=request.search,
            tags=request.tags,
            page=request.page,
            page_size=request.page_size,
        )
    )

    response = ListImagesResponse(
        images=page.images,
        total_count=page.total_count,
        returned_count=len(page.images),
        pagination=page.pagination,
    )

    return ResponseBuilder.ok(response.model_dump())
