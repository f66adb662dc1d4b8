"""Abstract contract for image metadata persistence."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from core.models.image import ImageQuery, ImageRecord

RecordMutator = Callable[[ImageRecord], ImageRecord]


class ImageMetadataRepository(ABC):
    """Contract for storing and retrieving image records.

    One durable record per image, keyed by ``image_id``.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def create_metadata(self, *, record: ImageRecord) -> None:
        """Persist a new record.

        Raises:
            DuplicateImageError: If the image id or short code is already taken
            MetadataOperationFailedError: If creation fails for other reasons
        """

    @abstractmethod
    def fetch_metadata(self, *, image_id: str) -> ImageRecord | None:
        """Fetch a single record, or None if it does not exist.

        Raises:
            MetadataOperationFailedError: If the read fails
        """

    @abstractmethod
    def list_images(self, *, query: ImageQuery) -> tuple[list[ImageRecord], int]:
        """Filter, sort (newest first) and paginate the catalog.

        Returns:
            Tuple of (records on the requested page, total matching count)

        Raises:
            FilterError: If pagination parameters are invalid
            MetadataOperationFailedError: If the scan fails
        """

    @abstractmethod
    def update_metadata(self, *, image_id: str, mutator: RecordMutator) -> ImageRecord:
        """Apply ``mutator`` to the stored record and persist the result.

        Raises:
            NotFoundError: If the record does not exist
            MetadataOperationFailedError: If the write fails
        """

    @abstractmethod
    def remove_metadata(self, *, image_id: str) -> None:
        """Remove a record. Removing a missing record is not an error.

        Raises:
            MetadataOperationFailedError: If deletion fails
        """

    @abstractmethod
    def find_by_short_code(self, *, short_code: str) -> ImageRecord | None:
        """Resolve a short code to its record, or None if nothing matches.

        Raises:
            MetadataOperationFailedError: If the lookup fails
        """
