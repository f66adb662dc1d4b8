"""Wiring of the image service from configuration."""

from functools import lru_cache

from core.filters.in_memory_image_filter import InMemoryImageFilter
from core.infrastructure.adapters.filesystem_adapter import FileSystemAdapter
from core.infrastructure.local.filesystem_storage import FileSystemImageStorage
from core.infrastructure.local.json_metadata import JsonFileMetadata
from core.infrastructure.local.json_quota_ledger import JsonFileQuotaRepository
from core.models.config import StoreConfig
from core.processing.artifact_pipeline import ArtifactPipeline
from core.quota.ledger import QuotaLedger
from core.services.image_service import ImageService


def build_image_service(config: StoreConfig) -> ImageService:
    """Build a service backed by the local filesystem under ``config.storage_root``."""
    adapter = FileSystemAdapter(config.storage_root)

    return ImageService(
        config=config,
        storage=FileSystemImageStorage(adapter),
        metadata=JsonFileMetadata(
            adapter,
            filters=InMemoryImageFilter(max_page_size=config.list_max_page_size),
        ),
        ledger=QuotaLedger(
            JsonFileQuotaRepository(adapter),
            period_days=config.quota_period_days,
        ),
        pipeline=ArtifactPipeline(
            max_size=config.preview_max_size,
            quality=config.preview_quality,
        ),
    )


@lru_cache(maxsize=1)
def get_image_service() -> ImageService:
    """Process-wide service built from the environment. Used by handlers."""
    return build_image_service(StoreConfig.from_env())
