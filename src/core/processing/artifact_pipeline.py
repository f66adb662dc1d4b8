"""
Image decoding and preview derivation.

The pipeline is pure: it takes raw bytes and returns dimensions plus a
re-encoded preview. It performs no persistence and keeps no state, so a single
instance can be shared across threads.
"""

import io

from aws_lambda_powertools import Logger
from PIL import Image, UnidentifiedImageError

from core.models.errors import ImageDecodeError
from core.models.image import DerivedArtifacts
from core.utils.constants import (
    PREVIEW_FORMAT,
    PREVIEW_MAX_HEIGHT,
    PREVIEW_MAX_WIDTH,
    PREVIEW_QUALITY,
)

logger = Logger(UTC=True)

# Modes JPEG can encode directly; everything else is flattened to RGB.
_JPEG_MODES = frozenset({"RGB", "L", "CMYK"})


class ArtifactPipeline:
    """Derives pixel dimensions and a bounded-size JPEG preview."""

    def __init__(
        self,
        *,
        max_size: tuple[int, int] = (PREVIEW_MAX_WIDTH, PREVIEW_MAX_HEIGHT),
        quality: int = PREVIEW_QUALITY,
    ) -> None:
        self._max_size = max_size
        self._quality = quality

    def derive(self, buffer: bytes) -> DerivedArtifacts:
        """Decode ``buffer`` and build its preview.

        The preview fits inside the configured bounding box, keeps the
        original aspect ratio and is never upscaled.

        Raises:
            ImageDecodeError: If the bytes are not a decodable image
        """
        try:
            with Image.open(io.BytesIO(buffer)) as image:
                image.load()
                width, height = image.size
                preview = self._render_preview(image)

        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            logger.warning(
                "Image decoding failed",
                extra={"size": len(buffer), "error_type": type(exc).__name__},
            )
            raise ImageDecodeError(
                message="Image could not be decoded. The file may be corrupt or in an unsupported format",
                details={"size": len(buffer)},
            ) from exc

        logger.debug(
            "Artifacts derived",
            extra={"width": width, "height": height, "preview_size": len(preview)},
        )

        return DerivedArtifacts(width=width, height=height, preview=preview)

    def _render_preview(self, image: Image.Image) -> bytes:
        # thumbnail() resizes in place and only ever shrinks
        thumb = image.copy()
        thumb.thumbnail(self._max_size, Image.Resampling.LANCZOS)

        if thumb.mode not in _JPEG_MODES:
            thumb = thumb.convert("RGB")

        output = io.BytesIO()
        thumb.save(output, format=PREVIEW_FORMAT, quality=self._quality)
        return output.getvalue()
