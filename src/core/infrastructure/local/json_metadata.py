"""JSON-file-backed implementation of ImageMetadataRepository."""

import threading

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from core.filters.in_memory_image_filter import InMemoryImageFilter
from core.infrastructure.adapters.filesystem_adapter import FileSystemAdapterProtocol
from core.models.errors import (
    DuplicateImageError,
    MetadataOperationFailedError,
    NotFoundError,
)
from core.models.image import ImageQuery, ImageRecord
from core.repositories.metadata_repository import ImageMetadataRepository, RecordMutator
from core.utils.constants import (
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_METADATA_CREATE_FAILED,
    ERROR_CODE_METADATA_DELETE_FAILED,
    ERROR_CODE_METADATA_FETCH_FAILED,
    ERROR_CODE_METADATA_LIST_FAILED,
    ERROR_CODE_METADATA_UPDATE_FAILED,
    METADATA_DIR,
    RECORD_SUFFIX,
)

logger = Logger(UTC=True)


class JsonFileMetadata(ImageMetadataRepository):
    """Metadata storage with one JSON document per image.

    There is no persistent secondary index. Listing scans every record.
    Short-code lookups go through an in-process index that is verified
    against the stored record and rebuilt by a full scan on a miss, so
    records written by other processes are still found.

    Writes within one instance are serialized; reads are lock-free.
    """

    def __init__(
        self,
        adapter: FileSystemAdapterProtocol,
        filters: InMemoryImageFilter | None = None,
    ) -> None:
        self._fs = adapter
        self._filters = filters or InMemoryImageFilter()
        self._write_lock = threading.RLock()
        self._short_codes: dict[str, str] = {}
        self._index_loaded = False

    @staticmethod
    def record_key(image_id: str) -> str:
        return f"{METADATA_DIR}/{image_id}{RECORD_SUFFIX}"

    def create_metadata(self, *, record: ImageRecord) -> None:
        """Persist a new record.

        Raises:
            DuplicateImageError: If the id or the short code is taken
            MetadataOperationFailedError: If the write fails
        """
        image_id = record.image_id

        logger.debug(
            "Creating metadata",
            extra={"image_id": image_id, "owner_id": record.owner_id},
        )

        with self._write_lock:
            if self._short_code_owner(record.short_code) is not None:
                logger.warning(
                    "Short code already in use",
                    extra={"image_id": image_id, "short_code": record.short_code},
                )
                raise DuplicateImageError(
                    message="Short code already in use",
                    details={"short_code": record.short_code},
                )

            try:
                self._fs.write_bytes(
                    key=self.record_key(image_id),
                    data=record.model_dump_json().encode("utf-8"),
                    exclusive=True,
                )

            except FileExistsError as exc:
                logger.warning("Image id already in use", extra={"image_id": image_id})
                raise DuplicateImageError(
                    message="This image already exists",
                    details={"image_id": image_id},
                ) from exc

            except (OSError, ValueError) as exc:
                logger.exception("Metadata write failed", extra={"image_id": image_id})
                raise MetadataOperationFailedError(
                    message="Unable to save image metadata at this time",
                    error_code=ERROR_CODE_METADATA_CREATE_FAILED,
                    details={"image_id": image_id},
                ) from exc

            self._short_codes[record.short_code] = image_id

        logger.info(
            "Metadata created",
            extra={"image_id": image_id, "owner_id": record.owner_id},
        )

    def fetch_metadata(self, *, image_id: str) -> ImageRecord | None:
        """Fetch metadata for a single image."""
        logger.debug("Fetching metadata", extra={"image_id": image_id})

        try:
            raw = self._fs.read_bytes(key=self.record_key(image_id))

        except (FileNotFoundError, ValueError):
            return None

        except OSError as exc:
            logger.exception("Metadata read failed", extra={"image_id": image_id})
            raise MetadataOperationFailedError(
                message="Unable to retrieve image metadata",
                error_code=ERROR_CODE_METADATA_FETCH_FAILED,
                details={"image_id": image_id},
            ) from exc

        try:
            return ImageRecord.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.error("Stored metadata is malformed", extra={"image_id": image_id})
            raise MetadataOperationFailedError(
                message="Invalid image metadata format",
                error_code=ERROR_CODE_METADATA_FETCH_FAILED,
                details={"image_id": image_id},
            ) from exc

    def list_images(self, *, query: ImageQuery) -> tuple[list[ImageRecord], int]:
        """Scan all records, then filter, sort and paginate in memory."""
        logger.debug(
            "Listing images",
            extra={
                "search": query.search,
                "tags": query.tags,
                "page": query.page,
                "page_size": query.page_size,
            },
        )

        self._filters.validate(query)

        records = self._scan()
        page_items, total_count = self._filters.apply(records, query)

        logger.info(
            "Images listed",
            extra={"scanned": len(records), "matched": total_count, "returned": len(page_items)},
        )

        return page_items, total_count

    def update_metadata(self, *, image_id: str, mutator: RecordMutator) -> ImageRecord:
        """Read-modify-write a record."""
        logger.debug("Updating metadata", extra={"image_id": image_id})

        with self._write_lock:
            current = self.fetch_metadata(image_id=image_id)
            if current is None:
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"image_id": image_id},
                )

            updated = mutator(current.model_copy(deep=True))

            try:
                self._fs.write_bytes(
                    key=self.record_key(image_id),
                    data=updated.model_dump_json().encode("utf-8"),
                )
            except (OSError, ValueError) as exc:
                logger.exception("Metadata update failed", extra={"image_id": image_id})
                raise MetadataOperationFailedError(
                    message="Unable to update image metadata",
                    error_code=ERROR_CODE_METADATA_UPDATE_FAILED,
                    details={"image_id": image_id},
                ) from exc

        logger.info("Metadata updated", extra={"image_id": image_id})
        return updated

    def remove_metadata(self, *, image_id: str) -> None:
        """Remove metadata for an image."""
        logger.debug("Removing metadata", extra={"image_id": image_id})

        with self._write_lock:
            try:
                self._fs.delete(key=self.record_key(image_id))
            except (OSError, ValueError) as exc:
                logger.exception("Metadata delete failed", extra={"image_id": image_id})
                raise MetadataOperationFailedError(
                    message="Unable to delete image metadata",
                    error_code=ERROR_CODE_METADATA_DELETE_FAILED,
                    details={"image_id": image_id},
                ) from exc

            for code, indexed_id in list(self._short_codes.items()):
                if indexed_id == image_id:
                    del self._short_codes[code]

        logger.info("Metadata removed", extra={"image_id": image_id})

    def find_by_short_code(self, *, short_code: str) -> ImageRecord | None:
        """Resolve a short code, trusting the index only after verification."""
        image_id = self._short_codes.get(short_code)
        if image_id is not None:
            record = self.fetch_metadata(image_id=image_id)
            if record is not None and record.short_code == short_code:
                return record

        logger.debug("Short code index miss, scanning", extra={"short_code": short_code})

        for record in self._scan():
            if record.short_code == short_code:
                return record

        return None

    def _short_code_owner(self, short_code: str) -> str | None:
        """Return the image id holding ``short_code``. Caller holds the write lock."""
        if not self._index_loaded:
            self._scan()

        image_id = self._short_codes.get(short_code)
        if image_id is None:
            return None

        record = self.fetch_metadata(image_id=image_id)
        if record is None or record.short_code != short_code:
            self._short_codes.pop(short_code, None)
            return None

        return image_id

    def _scan(self) -> list[ImageRecord]:
        """Load every readable record and refresh the short-code index."""
        try:
            keys = self._fs.list_keys(prefix=METADATA_DIR, suffix=RECORD_SUFFIX)
        except OSError as exc:
            logger.exception("Metadata scan failed")
            raise MetadataOperationFailedError(
                message="Unable to retrieve images",
                error_code=ERROR_CODE_METADATA_LIST_FAILED,
            ) from exc

        records: list[ImageRecord] = []
        index: dict[str, str] = {}

        for key in keys:
            image_id = key.rsplit("/", 1)[-1].removesuffix(RECORD_SUFFIX)
            try:
                record = self.fetch_metadata(image_id=image_id)
            except MetadataOperationFailedError:
                logger.warning("Skipping unreadable metadata record", extra={"image_id": image_id})
                continue

            # deleted between listing and reading
            if record is None:
                continue

            records.append(record)
            index[record.short_code] = record.image_id

        # merge, never replace: a concurrent create may have indexed a code this scan missed
        with self._write_lock:
            self._short_codes.update(index)
            self._index_loaded = True

        return records
