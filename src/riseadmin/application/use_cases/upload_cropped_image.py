"""Persist a confirmed crop and attach its URL to a content row."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...config import NEWS_EVENTS_TABLE
from ...crop.geometry import EncodedResult
from ...domain.repositories import IRowStore
from ...domain.storage import IFileStorage
from ...errors import RecordNotFoundError, RiseAdminError, StorageError
from ...events import ContentChangedEvent, EventBus
from .base import UseCase, UseCaseRequest, UseCaseResponse

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadCroppedImageRequest(UseCaseRequest):
    row_id: str = ""
    result: Optional[EncodedResult] = None
    table: str = NEWS_EVENTS_TABLE
    column: str = "image_url"
    folder: str = ""


@dataclass(frozen=True)
class UploadCroppedImageResponse(UseCaseResponse):
    url: Optional[str] = None
    key: Optional[str] = None


class UploadCroppedImageUseCase(UseCase):
    """Upload the encoded crop, then write its URL into the row.

    The object is removed again when the row cannot be updated so a failed
    save does not leave an orphan behind.
    """

    def __init__(self, storage: IFileStorage, rows: IRowStore, events: Optional[EventBus] = None):
        self._storage = storage
        self._rows = rows
        self._events = events

    def execute(self, request: UploadCroppedImageRequest) -> UploadCroppedImageResponse:
        if request.result is None or not request.result.data:
            return UploadCroppedImageResponse.failure("No cropped image to upload")
        if not request.row_id:
            return UploadCroppedImageResponse.failure("No target row given")

        try:
            stored = self._storage.upload(request.result, folder=request.folder)
        except StorageError as exc:
            _LOGGER.error("Upload failed for %s/%s: %s", request.table, request.row_id, exc)
            return UploadCroppedImageResponse.failure(str(exc))

        try:
            updated = self._rows.update(
                request.table, {request.column: stored.url}, {"id": request.row_id}
            )
            if updated == 0:
                raise RecordNotFoundError(f"No {request.table} row with id {request.row_id}")
        except RiseAdminError as exc:
            _LOGGER.error("Could not attach %s to %s/%s: %s", stored.key, request.table, request.row_id, exc)
            try:
                self._storage.remove(stored.key)
            except StorageError:
                _LOGGER.exception("Could not roll back stored object %s", stored.key)
            return UploadCroppedImageResponse.failure(str(exc))

        if self._events is not None:
            self._events.publish(
                ContentChangedEvent(table=request.table, row_id=request.row_id, action="image")
            )
        return UploadCroppedImageResponse(success=True, url=stored.url, key=stored.key)
