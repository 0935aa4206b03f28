"""Filesystem-backed object storage for uploaded images."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

from ...config import CROP_OUTPUT_SUFFIX
from ...crop.geometry import EncodedResult
from ...domain.storage import IFileStorage, StoredObject
from ...errors import StorageError

_LOGGER = logging.getLogger(__name__)

_SUFFIXES = {"image/jpeg": CROP_OUTPUT_SUFFIX, "image/png": ".png", "image/webp": ".webp"}


class LocalFileStorage(IFileStorage):
    """Store objects as files below ``root/bucket``.

    Keys are POSIX-style paths relative to the bucket.  When
    *public_base_url* is set the returned URL is ``<base>/<bucket>/<key>``,
    otherwise a ``file://`` URI of the stored file.
    """

    def __init__(self, root: Path, bucket: str, public_base_url: Optional[str] = None) -> None:
        self._root = Path(root)
        self._bucket = bucket
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None

    @property
    def bucket_dir(self) -> Path:
        return self._root / self._bucket

    def upload(self, result: EncodedResult, *, folder: str = "") -> StoredObject:
        if not result.data:
            raise StorageError("Refusing to store an empty object")
        suffix = _SUFFIXES.get(result.mime_type, ".bin")
        name = f"{uuid.uuid4().hex}{suffix}"
        prefix = folder.strip("/")
        key = f"{prefix}/{name}" if prefix else name
        target = self._path_for(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # ``x`` mode never overwrites an existing object.
            with target.open("xb") as handle:
                handle.write(result.data)
        except OSError as exc:
            raise StorageError(f"Could not store {key}: {exc}") from exc
        _LOGGER.info("Stored %s (%d bytes)", key, len(result.data))
        return StoredObject(key=key, url=self.public_url(key), size_bytes=len(result.data))

    def remove(self, key: str) -> None:
        target = self._path_for(key)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not remove {key}: {exc}") from exc

    def public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{self._bucket}/{key}"
        return self._path_for(key).resolve().as_uri()

    def _path_for(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts:
            raise StorageError(f"Invalid object key: {key}")
        return self.bucket_dir.joinpath(*relative.parts)


__all__ = ["LocalFileStorage"]
