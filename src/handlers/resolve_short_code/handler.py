"""
Lambda handler redirecting a short link to the stored original.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.services.factory import get_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import ResolveShortCodeRequest

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Resolve GET /go/{short_code} with a 302 to the image's direct URL."""
    logger.info(
        "Received short link request",
        extra={
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    path_params = event.get("pathParameters") or {}
    request = validate_request(
        ResolveShortCodeRequest,
        {"short_code": path_params.get("short_code")},
    )

    service = get_image_service()
    record = service.resolve_short_code(request.short_code)

    return ResponseBuilder.redirect(service.links(record)["direct_url"])
