"""Thin adapter for whole-file operations under a storage root."""

import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Protocol


class FileSystemAdapterProtocol(Protocol):
    """Minimal filesystem adapter protocol (repository-facing)."""

    def write_bytes(self, *, key: str, data: bytes, exclusive: bool = False) -> None: ...

    def read_bytes(self, *, key: str) -> bytes: ...

    def delete(self, *, key: str) -> None: ...

    def exists(self, *, key: str) -> bool: ...

    def list_keys(self, *, prefix: str, suffix: str = "") -> list[str]: ...


class FileSystemAdapter:
    """Low-level file operations (mechanical, no error handling).

    This adapter:
    - Maps slash-separated keys to files below ``root``
    - Writes atomically (temp file in the target directory, then rename)
    - Does NOT translate errors (OSError bubbles up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, root: Path) -> None:
        """Create the adapter, making sure the root directory exists."""
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or any(part in ("", ".", "..") for part in parts) or key.startswith("/"):
            raise ValueError(f"Invalid storage key: {key!r}")

        return self._root.joinpath(*parts)

    def write_bytes(self, *, key: str, data: bytes, exclusive: bool = False) -> None:
        """Write ``data`` to ``key`` in one step.

        With ``exclusive`` the write fails with FileExistsError when the key
        already exists; the check and the publish are a single link() call.
        Raises OSError subclasses - caught by domain implementation.
        """
        target = self._path(key)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())

            if exclusive:
                os.link(tmp_name, target)
            else:
                os.replace(tmp_name, target)
        finally:
            # after replace() the temp name is gone; after link() it is a second name
            Path(tmp_name).unlink(missing_ok=True)

    def read_bytes(self, *, key: str) -> bytes:
        """Read the whole file.

        Raises FileNotFoundError when absent - caught by domain implementation.
        """
        return self._path(key).read_bytes()

    def delete(self, *, key: str) -> None:
        """Delete the file if present."""
        self._path(key).unlink(missing_ok=True)

    def exists(self, *, key: str) -> bool:
        return self._path(key).is_file()

    def list_keys(self, *, prefix: str, suffix: str = "") -> list[str]:
        """List keys directly under ``prefix`` ending with ``suffix``.

        Temporary files from in-flight writes are skipped.
        """
        directory = self._path(prefix)
        if not directory.is_dir():
            return []

        return sorted(
            f"{prefix}/{entry.name}"
            for entry in directory.iterdir()
            if entry.is_file()
            and not entry.name.startswith(".tmp-")
            and entry.name.endswith(suffix)
        )
