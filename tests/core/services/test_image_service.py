import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from core.models.errors import (
    FileSizeError,
    ImageDecodeError,
    MIMETypeError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from core.models.image import ArtifactKind, ImageQuery
from core.services.image_service import ImageService

BASE_URL = "https://img.example.com"


def _upload(service: ImageService, data: bytes, **overrides):
    fields = {
        "file_data": data,
        "mime_type": "image/jpeg",
        "original_name": "photo.jpg",
        "owner_id": "john",
    }
    fields.update(overrides)
    return service.upload_image(**fields)


def _stored_files(root: Path) -> list[str]:
    """Artifact and record files, ignoring the quota ledger."""
    return sorted(
        path.relative_to(root).as_posix()
        for path in root.rglob("*")
        if path.is_file() and path.relative_to(root).parts[0] != "quota"
    )


class TestUpload:
    def test_happy_path(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        result = _upload(
            image_service,
            jpeg_bytes,
            description="A red square",
            tags=[" red ", "square", "red"],
        )

        image = result.image
        assert image.owner_id == "john"
        assert image.original_name == "photo.jpg"
        assert image.stored_name == f"{image.image_id}.jpg"
        assert image.mime_type == "image/jpeg"
        assert image.file_size == len(jpeg_bytes)
        assert (image.width, image.height) == (640, 480)
        assert image.tags == ["red", "square"]
        assert image.description == "A red square"
        assert len(image.image_id) == 21
        assert len(image.short_code) == 8

        assert result.direct_url == f"{BASE_URL}/objects/{image.image_id}"
        assert result.short_url == f"{BASE_URL}/go/{image.short_code}"
        assert result.preview_url == f"{BASE_URL}/objects/{image.image_id}/preview"

        assert image_service.get_image(image.image_id) == image
        assert image_service.get_original(image.image_id).content == jpeg_bytes
        assert image_service.ledger.get_entry("john").usage_count == 1

    def test_quota_boundary(self, image_service: ImageService, make_image: Callable[..., bytes]) -> None:
        data = make_image("PNG", (16, 16))
        for _ in range(9):
            _upload(image_service, data, mime_type="image/png")

        _upload(image_service, data, mime_type="image/png")
        assert image_service.ledger.get_entry("john").usage_count == 10

        with pytest.raises(QuotaExceededError) as exc_info:
            _upload(image_service, data, mime_type="image/png")

        assert exc_info.value.details["stage"] == "quota_checking"
        assert image_service.ledger.get_entry("john").usage_count == 10
        assert image_service.list_images(ImageQuery()).total_count == 10

    def test_quota_is_per_owner(self, image_service: ImageService, make_image: Callable[..., bytes]) -> None:
        image_service.ledger.admin_set_limit("john", 0)

        _upload(image_service, make_image("PNG", (8, 8)), mime_type="image/png", owner_id="jane")

        assert image_service.ledger.get_entry("jane").usage_count == 1

    def test_privileged_upload_bypasses_quota(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        image_service.ledger.admin_set_limit("john", 0)

        result = _upload(image_service, jpeg_bytes, privileged=True)

        assert result.image.owner_id == "john"
        assert image_service.ledger.get_entry("john").usage_count == 0

    def test_ownerless_upload_skips_ledger(
        self,
        image_service: ImageService,
        store_root: Path,
        jpeg_bytes: bytes,
    ) -> None:
        result = _upload(image_service, jpeg_bytes, owner_id=None)

        assert result.image.owner_id is None
        assert not (store_root / "quota").exists()

    def test_empty_file(self, image_service: ImageService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _upload(image_service, b"")

        assert exc_info.value.error_code == "EMPTY_FILE"

    def test_too_large(self, image_service: ImageService, store_root: Path, jpeg_bytes: bytes) -> None:
        oversized = jpeg_bytes + b"\0" * (10 * 1024 * 1024)

        with pytest.raises(FileSizeError):
            _upload(image_service, oversized)

        assert image_service.ledger.get_entry("john") is None
        assert _stored_files(store_root) == []

    def test_exactly_max_size_passes_size_check(
        self,
        image_service: ImageService,
        jpeg_bytes: bytes,
    ) -> None:
        padded = jpeg_bytes + b"\0" * (10 * 1024 * 1024 - len(jpeg_bytes))

        result = _upload(image_service, padded)

        assert result.image.file_size == 10 * 1024 * 1024

    def test_disallowed_mime(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        with pytest.raises(MIMETypeError):
            _upload(image_service, jpeg_bytes, mime_type="image/bmp")

        assert image_service.ledger.get_entry("john") is None

    def test_corrupt_image_leaves_no_trace(self, image_service: ImageService, store_root: Path) -> None:
        with pytest.raises(ImageDecodeError) as exc_info:
            _upload(image_service, b"\xff\xd8\xff" + b"garbage" * 50)

        assert exc_info.value.details["stage"] == "deriving"
        assert image_service.ledger.get_entry("john").usage_count == 0
        assert _stored_files(store_root) == []
        assert image_service.ledger.is_upload_allowed("john") is True

    def test_too_many_tags(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        with pytest.raises(ValidationError):
            _upload(image_service, jpeg_bytes, tags=[f"t{i}" for i in range(11)])

    def test_description_too_long(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        with pytest.raises(ValidationError):
            _upload(image_service, jpeg_bytes, description="x" * 1001)

    def test_invalid_owner(self, image_service: ImageService, store_root: Path, jpeg_bytes: bytes) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _upload(image_service, jpeg_bytes, owner_id="../etc")

        assert exc_info.value.error_code == "INVALID_OWNER_ID"
        assert _stored_files(store_root) == []

    def test_identifiers_are_unique(self, image_service: ImageService, make_image: Callable[..., bytes]) -> None:
        data = make_image("PNG", (4, 4))
        results = [
            _upload(image_service, data, mime_type="image/png", owner_id=None) for _ in range(5)
        ]

        assert len({r.image.image_id for r in results}) == 5
        assert len({r.image.short_code for r in results}) == 5


class TestReads:
    def test_get_missing(self, image_service: ImageService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            image_service.get_image("nope")

        assert exc_info.value.error_code == "IMAGE_NOT_FOUND"

    def test_preview(self, image_service: ImageService, png_bytes: bytes) -> None:
        result = _upload(image_service, png_bytes, mime_type="image/png", original_name="a.png")

        preview = image_service.get_preview(result.image.image_id)

        assert preview.mime_type == "image/jpeg"
        assert preview.content.startswith(b"\xff\xd8\xff")

    def test_get_file_by_stored_name(self, image_service: ImageService, png_bytes: bytes) -> None:
        image = _upload(image_service, png_bytes, mime_type="image/png").image

        original = image_service.get_file(image.stored_name)
        by_id = image_service.get_file(image.image_id)
        preview = image_service.get_file(image.stored_name, kind=ArtifactKind.PREVIEW)

        assert original.content == png_bytes
        assert original.mime_type == "image/png"
        assert by_id.content == png_bytes
        assert preview.mime_type == "image/jpeg"

    @pytest.mark.parametrize("stored_name", ["", "..", "../x.png", "a b.png"])
    def test_get_file_malformed_name(self, image_service: ImageService, stored_name: str) -> None:
        with pytest.raises(NotFoundError):
            image_service.get_file(stored_name)

    @pytest.mark.parametrize("suffix", [".gif", ".png", ".JPG"])
    def test_get_file_extension_must_match(
        self,
        image_service: ImageService,
        jpeg_bytes: bytes,
        suffix: str,
    ) -> None:
        image = _upload(image_service, jpeg_bytes).image

        for kind in (ArtifactKind.ORIGINAL, ArtifactKind.PREVIEW):
            with pytest.raises(NotFoundError) as exc_info:
                image_service.get_file(f"{image.image_id}{suffix}", kind=kind)
            assert exc_info.value.error_code == "IMAGE_NOT_FOUND"

    @pytest.mark.parametrize("image_id", ["../x", "a/../b", ""])
    def test_malformed_image_id_is_a_miss(self, image_service: ImageService, image_id: str) -> None:
        for read in (image_service.get_image, image_service.get_original, image_service.get_preview):
            with pytest.raises(NotFoundError) as exc_info:
                read(image_id)
            assert exc_info.value.error_code == "IMAGE_NOT_FOUND"

    def test_short_link_round_trip(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        image = _upload(image_service, jpeg_bytes).image

        assert image_service.resolve_short_code(image.short_code) == image

    @pytest.mark.parametrize("code", ["missing1", "../../x", ""])
    def test_unknown_short_code(self, image_service: ImageService, code: str) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            image_service.resolve_short_code(code)

        assert exc_info.value.error_code == "SHORT_CODE_NOT_FOUND"

    def test_list_with_filters(self, image_service: ImageService, make_image: Callable[..., bytes]) -> None:
        data = make_image("PNG", (4, 4))
        _upload(image_service, data, mime_type="image/png", original_name="cat.png", tags=["pet"])
        _upload(image_service, data, mime_type="image/png", original_name="dog.png", tags=["pet"])
        _upload(image_service, data, mime_type="image/png", original_name="car.png", tags=["auto"])

        page = image_service.list_images(ImageQuery(tags=["pet"], page_size=1))

        assert page.total_count == 2
        assert len(page.images) == 1
        assert page.images[0].original_name == "dog.png"
        assert page.pagination.has_more is True
        assert page.pagination.next_page == 2

        searched = image_service.list_images(ImageQuery(search="CA"))
        assert sorted(r.original_name for r in searched.images) == ["car.png", "cat.png"]


class TestUpdateAndDelete:
    def test_update_round_trip(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        image = _upload(image_service, jpeg_bytes, tags=["old"], description="before").image

        updated = image_service.update_image(image.image_id, tags=["new", "new", "more"])

        assert updated.tags == ["new", "more"]
        assert updated.description == "before"
        assert updated.short_code == image.short_code
        assert updated.created_at == image.created_at
        assert image_service.get_image(image.image_id) == updated

    def test_update_description_only(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        image = _upload(image_service, jpeg_bytes, tags=["keep"]).image

        updated = image_service.update_image(image.image_id, description="after")

        assert updated.tags == ["keep"]
        assert updated.description == "after"

    def test_update_missing(self, image_service: ImageService) -> None:
        with pytest.raises(NotFoundError):
            image_service.update_image("nope", tags=["a"])

    def test_update_validates(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        image = _upload(image_service, jpeg_bytes).image

        with pytest.raises(ValidationError):
            image_service.update_image(image.image_id, tags=["x" * 51])

    def test_delete_is_idempotent(self, image_service: ImageService, store_root: Path, jpeg_bytes: bytes) -> None:
        image = _upload(image_service, jpeg_bytes).image

        first = image_service.delete_image(image.image_id)
        second = image_service.delete_image(image.image_id)

        assert first.found is True
        assert second.found is False
        assert _stored_files(store_root) == []
        with pytest.raises(NotFoundError):
            image_service.get_image(image.image_id)
        with pytest.raises(NotFoundError):
            image_service.resolve_short_code(image.short_code)

    def test_delete_does_not_refund_quota(self, image_service: ImageService, jpeg_bytes: bytes) -> None:
        image = _upload(image_service, jpeg_bytes).image

        image_service.delete_image(image.image_id)

        assert image_service.ledger.get_entry("john").usage_count == 1

    @pytest.mark.parametrize("image_id", ["../x", "a/../b"])
    def test_update_malformed_id_is_a_miss(self, image_service: ImageService, image_id: str) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            image_service.update_image(image_id, description="x")

        assert exc_info.value.error_code == "IMAGE_NOT_FOUND"

    @pytest.mark.parametrize("image_id", ["../x", "a/../b", ""])
    def test_delete_malformed_id_finds_nothing(
        self,
        image_service: ImageService,
        store_root: Path,
        jpeg_bytes: bytes,
        image_id: str,
    ) -> None:
        _upload(image_service, jpeg_bytes)
        before = _stored_files(store_root)

        result = image_service.delete_image(image_id)

        assert result.found is False
        assert result.image_id == image_id
        assert _stored_files(store_root) == before


class TestConcurrentUploads:
    def test_last_slot_goes_to_one_upload(
        self,
        image_service: ImageService,
        store_root: Path,
        make_image: Callable[..., bytes],
    ) -> None:
        for _ in range(9):
            image_service.ledger.record_upload("john")

        data = make_image("PNG", (32, 32))
        barrier = threading.Barrier(8)
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()

        def attempt() -> None:
            barrier.wait()
            try:
                _upload(image_service, data, mime_type="image/png")
                result = "stored"
            except QuotaExceededError as exc:
                result = exc.details["stage"]
            with outcomes_lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("stored") == 1
        assert outcomes.count("quota_checking") == 7
        assert image_service.ledger.get_entry("john").usage_count == 10
        assert image_service.list_images(ImageQuery()).total_count == 1
        assert len(_stored_files(store_root)) == 3
