"""Application-wide context wiring the admin services together."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from . import config
from .application.services.events_admin_service import EventsAdminService
from .application.use_cases.upload_cropped_image import UploadCroppedImageUseCase
from .errors.handler import ErrorHandler
from .events import EventBus
from .infrastructure.db.pool import ConnectionPool
from .infrastructure.db.schema import ensure_schema
from .infrastructure.repositories.sqlite_row_store import SQLiteRowStore
from .infrastructure.storage.local_storage import LocalFileStorage
from .notifications.contact import ContactNotifier
from .notifications.transport import IEmailTransport, RecordingTransport, ResendTransport
from .settings.manager import SettingsManager


def _create_settings_manager() -> SettingsManager:
    manager = SettingsManager()
    manager.load()
    return manager


@dataclass
class AppContext:
    """Container object shared by the CLI and the GUI entry points."""

    settings: SettingsManager = field(default_factory=_create_settings_manager)
    events: EventBus = field(default_factory=EventBus)
    _pool: Optional[ConnectionPool] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.error_handler = ErrorHandler(logging.getLogger("riseadmin"), self.events)

    @classmethod
    def from_settings_path(cls, path: Optional[Path]) -> "AppContext":
        manager = SettingsManager(path)
        manager.load()
        return cls(settings=manager)

    # ------------------------------------------------------------------
    # Infrastructure
    # ------------------------------------------------------------------
    @property
    def pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = ConnectionPool(
                self.settings.database_path(),
                pool_size=config.DB_POOL_SIZE,
                timeout=config.DB_POOL_TIMEOUT_SEC,
            )
            ensure_schema(self._pool)
        return self._pool

    def row_store(self) -> SQLiteRowStore:
        return SQLiteRowStore(self.pool)

    def file_storage(self) -> LocalFileStorage:
        return LocalFileStorage(
            self.settings.storage_root(),
            self.settings.get("storage.bucket", config.IMAGES_BUCKET),
            self.settings.get("storage.public_base_url"),
        )

    def email_transport(self, *, dry_run: bool = False) -> IEmailTransport:
        if dry_run:
            return RecordingTransport()
        return ResendTransport(
            os.environ.get(config.EMAIL_API_KEY_ENV, ""),
            base_url=self.settings.get("email.api_base_url", config.EMAIL_API_BASE_URL),
        )

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    def events_admin(self) -> EventsAdminService:
        return EventsAdminService(self.row_store(), self.events)

    def upload_cropped_image(self) -> UploadCroppedImageUseCase:
        return UploadCroppedImageUseCase(self.file_storage(), self.row_store(), self.events)

    def contact_notifier(self, *, dry_run: bool = False) -> ContactNotifier:
        return ContactNotifier(
            self.email_transport(dry_run=dry_run),
            sender=self.settings.get("email.sender", config.EMAIL_SENDER),
            admin_recipients=self.settings.get("email.admin_recipients"),
            contact_phone=self.settings.get("email.contact_phone", config.EMAIL_CONTACT_PHONE),
        )

    def jpeg_quality(self) -> int:
        return int(self.settings.get("crop.jpeg_quality", config.CROP_JPEG_QUALITY))

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close_all()
            self._pool = None
        self.events.shutdown()


__all__ = ["AppContext"]
