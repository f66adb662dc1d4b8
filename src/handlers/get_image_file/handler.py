"""
Lambda handler serving stored image bytes (original or preview).
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.image import ArtifactKind
from core.services.factory import get_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import validate_request

from .models import GetImageFileRequest

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Serve the bytes of an original or preview.

    Routes:
        GET /objects/{stored_name}            -> original
        GET /objects/{stored_name}/preview    -> preview (kind=preview)
        ?download=true                        -> Content-Disposition: attachment
    """
    logger.info(
        "Received image file request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    request = validate_request(
        GetImageFileRequest,
        {
            "stored_name": path_params.get("stored_name"),
            "kind": path_params.get("kind") or ArtifactKind.ORIGINAL.value,
            "download": str(query_params.get("download", "false")).lower() == "true",
        },
    )

    stored = get_image_service().get_file(request.stored_name, request.kind)

    disposition = "attachment" if request.download else "inline"

    return ResponseBuilder.binary_response(
        stored.content,
        content_type=stored.mime_type,
        headers={"Content-Disposition": f'{disposition}; filename="{request.stored_name}"'},
    )
