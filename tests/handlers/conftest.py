import base64
import json
from collections.abc import Callable, Iterator
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from core.services.factory import get_image_service
from core.services.image_service import ImageService

HANDLER_BASE_URL = "https://api.example.com"


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture(autouse=True)
def handler_store(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    """Point the process-wide service at a fresh store for every test."""
    root = tmp_path / "handler-store"
    monkeypatch.setenv("IMAGE_STORE_ROOT", str(root))
    monkeypatch.setenv("IMAGE_STORE_BASE_URL", HANDLER_BASE_URL)
    get_image_service.cache_clear()

    yield root

    get_image_service.cache_clear()


@pytest.fixture
def service() -> ImageService:
    return get_image_service()


@pytest.fixture
def stored_image(service: ImageService, jpeg_bytes: bytes):
    """An image uploaded by ``john`` with two tags."""
    return service.upload_image(
        file_data=jpeg_bytes,
        mime_type="image/jpeg",
        original_name="sunset.jpg",
        owner_id="john",
        description="Evening sky",
        tags=["sky", "evening"],
    ).image


@pytest.fixture
def auth() -> Callable[..., dict[str, Any]]:
    """
    Build the authorizer block of an API Gateway event.

    Usage:
        event = {"body": "...", **auth("john")}
    """

    def _auth(user_id: str | None = None, role: str = "user") -> dict[str, Any]:
        if user_id is None:
            return {}
        return {"requestContext": {"authorizer": {"user_id": user_id, "role": role}}}

    return _auth


@pytest.fixture
def upload_event(jpeg_bytes: bytes, auth: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    def _event(user_id: str | None = "john", role: str = "user", **body: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "file": base64.b64encode(jpeg_bytes).decode("utf-8"),
            "file_name": "photo.jpg",
            "mime_type": "image/jpeg",
            "description": "Test upload",
            "tags": "test,upload",
        }
        payload.update(body)
        return {
            "httpMethod": "POST",
            "path": "/images",
            "body": json.dumps(payload),
            **auth(user_id, role),
        }

    return _event
