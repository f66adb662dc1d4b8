"""Filesystem-backed implementation of ImageStorageRepository."""

from aws_lambda_powertools import Logger

from core.infrastructure.adapters.filesystem_adapter import FileSystemAdapterProtocol
from core.models.errors import NotFoundError, StorageError
from core.models.image import ArtifactKind
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    ERROR_CODE_ARTIFACT_DELETE_FAILED,
    ERROR_CODE_ARTIFACT_NOT_FOUND,
    ERROR_CODE_ARTIFACT_READ_FAILED,
    ERROR_CODE_ARTIFACT_WRITE_FAILED,
    ORIGINALS_DIR,
    PREVIEW_EXTENSION,
    PREVIEWS_DIR,
)

logger = Logger(UTC=True)


class FileSystemImageStorage(ImageStorageRepository):
    """Artifact storage with one file per (image, kind)."""

    def __init__(self, adapter: FileSystemAdapterProtocol) -> None:
        """Create storage on top of the provided filesystem adapter."""
        self._fs = adapter

    @staticmethod
    def artifact_key(image_id: str, kind: ArtifactKind) -> str:
        """Return the storage key for an artifact."""
        if kind is ArtifactKind.PREVIEW:
            return f"{PREVIEWS_DIR}/{image_id}.{PREVIEW_EXTENSION}"
        return f"{ORIGINALS_DIR}/{image_id}"

    def put_artifact(self, *, image_id: str, kind: ArtifactKind, data: bytes) -> None:
        """Write artifact bytes atomically."""
        key = self.artifact_key(image_id, kind)

        logger.debug(
            "Writing artifact",
            extra={"image_id": image_id, "kind": kind.value, "size": len(data)},
        )

        try:
            self._fs.write_bytes(key=key, data=data)
            logger.info(
                "Artifact stored",
                extra={"image_id": image_id, "kind": kind.value},
            )

        except (OSError, ValueError) as exc:
            logger.exception(
                "Artifact write failed",
                extra={"image_id": image_id, "kind": kind.value},
            )
            raise StorageError(
                message="Unable to store image at this time",
                error_code=ERROR_CODE_ARTIFACT_WRITE_FAILED,
                details={"image_id": image_id, "kind": kind.value},
            ) from exc

    def get_artifact(self, *, image_id: str, kind: ArtifactKind) -> bytes:
        """Read artifact bytes."""
        key = self.artifact_key(image_id, kind)

        logger.debug("Reading artifact", extra={"image_id": image_id, "kind": kind.value})

        try:
            return self._fs.read_bytes(key=key)

        except FileNotFoundError as exc:
            raise NotFoundError(
                message="Image file not found",
                error_code=ERROR_CODE_ARTIFACT_NOT_FOUND,
                details={"image_id": image_id, "kind": kind.value},
            ) from exc

        except (OSError, ValueError) as exc:
            logger.exception(
                "Artifact read failed",
                extra={"image_id": image_id, "kind": kind.value},
            )
            raise StorageError(
                message="Unable to read image at this time",
                error_code=ERROR_CODE_ARTIFACT_READ_FAILED,
                details={"image_id": image_id, "kind": kind.value},
            ) from exc

    def remove_artifact(self, *, image_id: str, kind: ArtifactKind) -> None:
        """Delete an artifact, ignoring one that is already gone."""
        key = self.artifact_key(image_id, kind)

        logger.debug("Deleting artifact", extra={"image_id": image_id, "kind": kind.value})

        try:
            self._fs.delete(key=key)
            logger.info(
                "Artifact deleted",
                extra={"image_id": image_id, "kind": kind.value},
            )

        except (OSError, ValueError) as exc:
            logger.exception(
                "Artifact deletion failed",
                extra={"image_id": image_id, "kind": kind.value},
            )
            raise StorageError(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_ARTIFACT_DELETE_FAILED,
                details={"image_id": image_id, "kind": kind.value},
            ) from exc

    def artifact_exists(self, *, image_id: str, kind: ArtifactKind) -> bool:
        try:
            return self._fs.exists(key=self.artifact_key(image_id, kind))
        except ValueError:
            return False
