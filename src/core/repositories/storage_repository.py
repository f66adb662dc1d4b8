"""Abstract contract for image artifact storage."""

from abc import ABC, abstractmethod

from core.models.image import ArtifactKind


class ImageStorageRepository(ABC):
    """Contract for storing and retrieving image artifacts.

    Every artifact is addressed by ``(image_id, kind)`` alone, so no
    auxiliary index is needed to find it again.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def put_artifact(self, *, image_id: str, kind: ArtifactKind, data: bytes) -> None:
        """Store an artifact as a single whole-buffer write.

        A failed write must leave no partial artifact behind.

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def get_artifact(self, *, image_id: str, kind: ArtifactKind) -> bytes:
        """Read an artifact.

        Raises:
            NotFoundError: If the artifact does not exist
            StorageError: If the read fails
        """

    @abstractmethod
    def remove_artifact(self, *, image_id: str, kind: ArtifactKind) -> None:
        """Delete an artifact. Deleting a missing artifact is not an error.

        Raises:
            StorageError: If deletion fails
        """

    @abstractmethod
    def artifact_exists(self, *, image_id: str, kind: ArtifactKind) -> bool:
        """Return whether the artifact is currently stored."""
