from collections.abc import Mapping

from core.utils.constants import DEFAULT_EXTENSION, MIME_TYPE_EXTENSION_MAP

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
}


def detect_mime_type(file_data: bytes) -> str:
    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    # RIFF container is shared with WAV/AVI; WebP carries its own tag at offset 8
    if file_data[:4] == b"RIFF" and file_data[8:12] == b"WEBP":
        return "image/webp"

    raise ValueError("Unsupported or unknown file type")


def extension_for(mime_type: str) -> str:
    """Return the canonical file extension for a MIME type."""
    extensions = MIME_TYPE_EXTENSION_MAP.get(mime_type)
    return extensions[0] if extensions else DEFAULT_EXTENSION
