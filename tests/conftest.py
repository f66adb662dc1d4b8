"""
Pytest configuration and fixtures for image store tests.
Provides a temporary store root, wired services and generated sample images.
"""

import io
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "image-store-tests")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "QuotaImageStore")

from core.filters.in_memory_image_filter import InMemoryImageFilter  # noqa: E402
from core.infrastructure.adapters.filesystem_adapter import FileSystemAdapter  # noqa: E402
from core.infrastructure.local.filesystem_storage import FileSystemImageStorage  # noqa: E402
from core.infrastructure.local.json_metadata import JsonFileMetadata  # noqa: E402
from core.infrastructure.local.json_quota_ledger import JsonFileQuotaRepository  # noqa: E402
from core.models.config import StoreConfig  # noqa: E402
from core.models.image import ImageRecord  # noqa: E402
from core.processing.artifact_pipeline import ArtifactPipeline  # noqa: E402
from core.quota.ledger import QuotaLedger  # noqa: E402
from core.services.image_service import ImageService  # noqa: E402

BASE_URL = "https://img.example.com"


def encode_image(
    fmt: str = "JPEG",
    size: tuple[int, int] = (640, 480),
    mode: str = "RGB",
    color: Any = (200, 30, 30),
) -> bytes:
    """Render a solid-color image in ``fmt``."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    return tmp_path / "store"


@pytest.fixture
def store_config(store_root: Path) -> StoreConfig:
    return StoreConfig(storage_root=store_root, base_url=BASE_URL + "/")


@pytest.fixture
def fs_adapter(store_root: Path) -> FileSystemAdapter:
    return FileSystemAdapter(store_root)


@pytest.fixture
def image_storage(fs_adapter: FileSystemAdapter) -> FileSystemImageStorage:
    return FileSystemImageStorage(fs_adapter)


@pytest.fixture
def metadata_store(fs_adapter: FileSystemAdapter) -> JsonFileMetadata:
    return JsonFileMetadata(fs_adapter, filters=InMemoryImageFilter())


@pytest.fixture
def quota_repository(fs_adapter: FileSystemAdapter) -> JsonFileQuotaRepository:
    return JsonFileQuotaRepository(fs_adapter)


@pytest.fixture
def ledger(quota_repository: JsonFileQuotaRepository) -> QuotaLedger:
    return QuotaLedger(quota_repository)


@pytest.fixture
def pipeline() -> ArtifactPipeline:
    return ArtifactPipeline()


@pytest.fixture
def image_service(
    store_config: StoreConfig,
    image_storage: FileSystemImageStorage,
    metadata_store: JsonFileMetadata,
    ledger: QuotaLedger,
    pipeline: ArtifactPipeline,
) -> ImageService:
    return ImageService(
        config=store_config,
        storage=image_storage,
        metadata=metadata_store,
        ledger=ledger,
        pipeline=pipeline,
    )


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    Render sample images on demand.

    Usage:
        data = make_image("PNG", (32, 32))
    """
    return encode_image


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image("JPEG", (640, 480))


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image("PNG", (120, 80), mode="RGBA", color=(0, 0, 255, 128))


@pytest.fixture
def make_record() -> Callable[..., ImageRecord]:
    """
    Build an ImageRecord with sensible defaults.

    Usage:
        record = make_record(image_id="img1", tags=["cat"])
    """

    def _make(**overrides: Any) -> ImageRecord:
        image_id = overrides.pop("image_id", "img1")
        fields: dict[str, Any] = {
            "image_id": image_id,
            "owner_id": "john",
            "original_name": "photo.jpg",
            "stored_name": f"{image_id}.jpg",
            "mime_type": "image/jpeg",
            "file_size": 100,
            "width": 10,
            "height": 10,
            "created_at": "2024-01-01T10:00:00+00:00",
            "short_code": f"sc{image_id}",
            "tags": [],
            "description": "",
        }
        fields.update(overrides)
        return ImageRecord(**fields)

    return _make
