"""Business logic for the quota-governed image store.

This module coordinates validation, quota reservation, preview derivation,
artifact and metadata persistence and usage accounting for uploads, plus
the read, update and delete operations over stored images.
"""

import re
from collections.abc import Callable
from contextlib import ExitStack
from enum import Enum
from typing import Any

from aws_lambda_powertools import Logger

from core.filters.page_pagination import PagePagination
from core.models.config import StoreConfig
from core.models.errors import (
    AccountingError,
    DuplicateImageError,
    FileSizeError,
    ImageServiceError,
    MIMETypeError,
    NotFoundError,
    ValidationError,
)
from core.models.image import (
    ArtifactKind,
    DeleteResult,
    DerivedArtifacts,
    ImagePage,
    ImageQuery,
    ImageRecord,
    StoredFile,
    UploadResult,
)
from core.processing.artifact_pipeline import ArtifactPipeline
from core.quota.ledger import QuotaLedger, QuotaReservation
from core.repositories.metadata_repository import ImageMetadataRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    ERROR_CODE_EMPTY_FILE,
    ERROR_CODE_IMAGE_NOT_FOUND,
    ERROR_CODE_SHORT_CODE_NOT_FOUND,
    IDENTIFIER_PATTERN,
    MAX_IDENTIFIER_ATTEMPTS,
    OBJECT_URL_TEMPLATE,
    PREVIEW_MIME_TYPE,
    PREVIEW_URL_TEMPLATE,
    SHORT_URL_TEMPLATE,
    format_file_size,
)
from core.utils.ids import new_object_id, new_short_code
from core.utils.mime import extension_for
from core.utils.time import utc_now_iso
from core.utils.validators import validate_descriptive_fields

logger = Logger(UTC=True)

_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN)


class UploadStage(str, Enum):
    """Upload lifecycle stages, in order."""

    VALIDATING = "validating"
    QUOTA_CHECKING = "quota_checking"
    DERIVING = "deriving"
    PERSISTING = "persisting"
    ACCOUNTING = "accounting"
    DONE = "done"
    ABORTED = "aborted"


class ImageService:
    """Application service for the image store.

    This service orchestrates:
    - Upload validation and quota enforcement
    - Preview derivation
    - Persisting originals, previews and records with rollback
    - Usage accounting
    - Lookups, listing, updates and deletion
    """

    def __init__(
        self,
        config: StoreConfig,
        storage: ImageStorageRepository,
        metadata: ImageMetadataRepository,
        ledger: QuotaLedger,
        pipeline: ArtifactPipeline,
    ) -> None:
        self._config = config
        self._storage = storage
        self._metadata = metadata
        self._ledger = ledger
        self._pipeline = pipeline

    @property
    def ledger(self) -> QuotaLedger:
        return self._ledger

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload_image(
        self,
        *,
        file_data: bytes,
        mime_type: str,
        original_name: str,
        owner_id: str | None = None,
        privileged: bool = False,
        description: str = "",
        tags: list[str] | None = None,
    ) -> UploadResult:
        """Store a new image and its preview.

        The upload flow is:
        1. Validate size, MIME type and descriptive fields
        2. Reserve a quota slot (owned, unprivileged uploads only)
        3. Decode the image and derive its preview
        4. Persist original, preview and record, rolling back on failure
        5. Record usage against the owner's quota

        A failure in steps 1-4 leaves no trace: nothing stored, usage unchanged.
        A failure in step 5 is logged and the stored image is kept.

        Raises:
            ValidationError: If the input is rejected or cannot be decoded
            QuotaExceededError: If the owner has no remaining quota
            PersistenceError: If the image could not be stored
            DuplicateImageError: If unique identifiers could not be allocated
        """
        stage = UploadStage.VALIDATING
        self._log_stage(stage, owner_id=owner_id, size=len(file_data))

        normalized_tags = self._validate_upload(
            file_data=file_data,
            mime_type=mime_type,
            original_name=original_name,
            description=description,
            tags=tags,
        )

        charged = owner_id is not None and not privileged
        reservation: QuotaReservation | None = None

        try:
            if charged:
                stage = UploadStage.QUOTA_CHECKING
                self._log_stage(stage, owner_id=owner_id)
                reservation = self._ledger.reserve(owner_id)

            stage = UploadStage.DERIVING
            self._log_stage(stage, owner_id=owner_id)
            derived = self._pipeline.derive(file_data)

            stage = UploadStage.PERSISTING
            self._log_stage(stage, owner_id=owner_id)
            record = self._persist(
                file_data=file_data,
                derived=derived,
                mime_type=mime_type,
                original_name=original_name,
                owner_id=owner_id,
                description=description,
                tags=normalized_tags,
            )

        except BaseException as exc:
            if reservation is not None:
                reservation.release()

            if isinstance(exc, ImageServiceError):
                exc.details.setdefault("stage", stage.value)

            logger.warning(
                "Upload aborted",
                extra={
                    "stage": UploadStage.ABORTED.value,
                    "failed_stage": stage.value,
                    "owner_id": owner_id,
                    "error_type": type(exc).__name__,
                },
            )
            raise

        if reservation is not None:
            stage = UploadStage.ACCOUNTING
            self._log_stage(stage, owner_id=owner_id, image_id=record.image_id)
            try:
                reservation.commit()
            except AccountingError:
                logger.exception(
                    "Usage accounting failed, keeping stored image",
                    extra={"owner_id": owner_id, "image_id": record.image_id},
                )

        self._log_stage(UploadStage.DONE, owner_id=owner_id, image_id=record.image_id)

        return UploadResult(image=record, **self.links(record))

    def links(self, record: ImageRecord) -> dict[str, str]:
        """Absolute URLs for the original, the short redirect and the preview."""
        base_url = self._config.base_url
        return {
            "direct_url": OBJECT_URL_TEMPLATE.format(base_url=base_url, image_id=record.image_id),
            "short_url": SHORT_URL_TEMPLATE.format(base_url=base_url, short_code=record.short_code),
            "preview_url": PREVIEW_URL_TEMPLATE.format(base_url=base_url, image_id=record.image_id),
        }

    def _validate_upload(
        self,
        *,
        file_data: bytes,
        mime_type: str,
        original_name: str,
        description: str,
        tags: list[str] | None,
    ) -> list[str]:
        if not file_data:
            raise ValidationError(
                message="File must not be empty",
                error_code=ERROR_CODE_EMPTY_FILE,
            )

        if len(file_data) > self._config.max_file_size:
            logger.warning(
                "Upload too large",
                extra={"size": len(file_data), "max_size": self._config.max_file_size},
            )
            raise FileSizeError(
                message=f"File size exceeds {format_file_size(self._config.max_file_size)} limit",
                details={"size": len(file_data), "max_size": self._config.max_file_size},
            )

        if mime_type not in self._config.allowed_mime_types:
            logger.warning("Unsupported MIME type", extra={"mime_type": mime_type})
            raise MIMETypeError(
                message="Unsupported image type",
                details={
                    "mime_type": mime_type,
                    "allowed": sorted(self._config.allowed_mime_types),
                },
            )

        return validate_descriptive_fields(
            original_name=original_name,
            description=description,
            tags=tags,
        )

    def _persist(
        self,
        *,
        file_data: bytes,
        derived: DerivedArtifacts,
        mime_type: str,
        original_name: str,
        owner_id: str | None,
        description: str,
        tags: list[str],
    ) -> ImageRecord:
        """Write artifacts and record under fresh identifiers, retrying on collision."""
        for attempt in range(1, MAX_IDENTIFIER_ATTEMPTS + 1):
            image_id = new_object_id()

            if self._identifier_taken(image_id):
                logger.warning(
                    "Generated image id already in use, regenerating",
                    extra={"image_id": image_id, "attempt": attempt},
                )
                continue

            record = ImageRecord(
                image_id=image_id,
                owner_id=owner_id,
                original_name=original_name,
                stored_name=f"{image_id}.{extension_for(mime_type)}",
                mime_type=mime_type,
                file_size=len(file_data),
                width=derived.width,
                height=derived.height,
                created_at=utc_now_iso(),
                short_code=new_short_code(),
                tags=tags,
                description=description,
            )

            try:
                self._write_all(record=record, original=file_data, preview=derived.preview)
            except DuplicateImageError:
                logger.warning(
                    "Identifier collision on record create, retrying",
                    extra={"image_id": image_id, "attempt": attempt},
                )
                continue

            return record

        raise DuplicateImageError(
            message="Unable to allocate unique image identifiers",
            details={"attempts": MAX_IDENTIFIER_ATTEMPTS},
        )

    def _identifier_taken(self, image_id: str) -> bool:
        return (
            self._metadata.fetch_metadata(image_id=image_id) is not None
            or self._storage.artifact_exists(image_id=image_id, kind=ArtifactKind.ORIGINAL)
        )

    def _write_all(self, *, record: ImageRecord, original: bytes, preview: bytes) -> None:
        """Write original, preview and record; undo completed writes on any failure."""
        image_id = record.image_id

        with ExitStack() as compensations:
            self._storage.put_artifact(image_id=image_id, kind=ArtifactKind.ORIGINAL, data=original)
            compensations.callback(
                self._compensate,
                "remove original",
                image_id,
                lambda: self._storage.remove_artifact(image_id=image_id, kind=ArtifactKind.ORIGINAL),
            )

            self._storage.put_artifact(image_id=image_id, kind=ArtifactKind.PREVIEW, data=preview)
            compensations.callback(
                self._compensate,
                "remove preview",
                image_id,
                lambda: self._storage.remove_artifact(image_id=image_id, kind=ArtifactKind.PREVIEW),
            )

            self._metadata.create_metadata(record=record)

            compensations.pop_all()

        logger.info(
            "Image persisted",
            extra={"image_id": image_id, "owner_id": record.owner_id, "size": record.file_size},
        )

    @staticmethod
    def _compensate(action: str, image_id: str, undo: Callable[[], None]) -> None:
        # best effort: a failed undo leaves an orphan, never a visible record
        try:
            undo()
        except Exception:
            logger.exception(
                "Rollback step failed",
                extra={"action": action, "image_id": image_id},
            )
        else:
            logger.info("Rollback step completed", extra={"action": action, "image_id": image_id})

    @staticmethod
    def _log_stage(stage: UploadStage, **context: Any) -> None:
        logger.debug("Upload stage", extra={"stage": stage.value, **context})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_image(self, image_id: str) -> ImageRecord:
        """Return the record for ``image_id``.

        Raises:
            NotFoundError: If no such image exists or the id is malformed
        """
        record = None
        if _IDENTIFIER_RE.fullmatch(image_id):
            record = self._metadata.fetch_metadata(image_id=image_id)

        if record is None:
            raise self._image_not_found(image_id=image_id)
        return record

    def get_original(self, image_id: str) -> StoredFile:
        return self._read_artifact(self.get_image(image_id), ArtifactKind.ORIGINAL)

    def get_preview(self, image_id: str) -> StoredFile:
        return self._read_artifact(self.get_image(image_id), ArtifactKind.PREVIEW)

    def get_file(self, stored_name: str, kind: ArtifactKind = ArtifactKind.ORIGINAL) -> StoredFile:
        """Serve an artifact by image id or public file name (``{image_id}.{ext}``).

        A name with an extension must match the record's stored name exactly.

        Raises:
            NotFoundError: If the name is malformed or nothing is stored under it
        """
        image_id, dot, _ = stored_name.partition(".")

        if not _IDENTIFIER_RE.fullmatch(image_id):
            raise self._image_not_found(stored_name=stored_name)

        record = self.get_image(image_id)
        if dot and stored_name != record.stored_name:
            raise self._image_not_found(stored_name=stored_name)

        return self._read_artifact(record, kind)

    def _read_artifact(self, record: ImageRecord, kind: ArtifactKind) -> StoredFile:
        content = self._storage.get_artifact(image_id=record.image_id, kind=kind)
        mime_type = PREVIEW_MIME_TYPE if kind is ArtifactKind.PREVIEW else record.mime_type
        return StoredFile(content=content, mime_type=mime_type)

    @staticmethod
    def _image_not_found(**details: str) -> NotFoundError:
        return NotFoundError(
            message="Image not found",
            error_code=ERROR_CODE_IMAGE_NOT_FOUND,
            details=details,
        )

    def list_images(self, query: ImageQuery) -> ImagePage:
        """Filter, sort newest first and paginate the catalog.

        Raises:
            FilterError: If pagination parameters are out of range
        """
        images, total_count = self._metadata.list_images(query=query)

        return ImagePage(
            images=images,
            total_count=total_count,
            pagination=PagePagination.get_page_info(query.page, query.page_size, total_count),
        )

    def resolve_short_code(self, short_code: str) -> ImageRecord:
        """Return the record a short code points at.

        Raises:
            NotFoundError: If no image carries ``short_code``
        """
        record = None
        if _IDENTIFIER_RE.fullmatch(short_code):
            record = self._metadata.find_by_short_code(short_code=short_code)

        if record is None:
            raise NotFoundError(
                message="Short link not found",
                error_code=ERROR_CODE_SHORT_CODE_NOT_FOUND,
                details={"short_code": short_code},
            )
        return record

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update_image(
        self,
        image_id: str,
        *,
        tags: list[str] | None = None,
        description: str | None = None,
    ) -> ImageRecord:
        """Replace tags and/or description. Other fields are never touched.

        Raises:
            ValidationError: If the new values are out of bounds
            NotFoundError: If no such image exists
        """
        normalized_tags = validate_descriptive_fields(description=description, tags=tags)

        if not _IDENTIFIER_RE.fullmatch(image_id):
            raise self._image_not_found(image_id=image_id)

        def apply(record: ImageRecord) -> ImageRecord:
            if tags is not None:
                record.tags = normalized_tags
            if description is not None:
                record.description = description
            return record

        record = self._metadata.update_metadata(image_id=image_id, mutator=apply)

        logger.info(
            "Image updated",
            extra={
                "image_id": image_id,
                "tags_updated": tags is not None,
                "description_updated": description is not None,
            },
        )
        return record

    def delete_image(self, image_id: str) -> DeleteResult:
        """Remove an image's original, preview and record.

        Each step tolerates absence, so deleting twice succeeds. ``found``
        reports whether a record existed before this call.

        Raises:
            PersistenceError: If a removal fails for reasons other than absence
        """
        if not _IDENTIFIER_RE.fullmatch(image_id):
            logger.info("Nothing to delete for malformed image id", extra={"image_id": image_id})
            return DeleteResult(image_id=image_id, found=False, deleted_at=utc_now_iso())

        found = self._metadata.fetch_metadata(image_id=image_id) is not None

        self._storage.remove_artifact(image_id=image_id, kind=ArtifactKind.ORIGINAL)
        self._storage.remove_artifact(image_id=image_id, kind=ArtifactKind.PREVIEW)
        self._metadata.remove_metadata(image_id=image_id)

        logger.info("Image deleted", extra={"image_id": image_id, "found": found})

        return DeleteResult(image_id=image_id, found=found, deleted_at=utc_now_iso())
