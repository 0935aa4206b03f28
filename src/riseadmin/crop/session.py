"""
Crop session owned by the call site.

A session borrows one source image, runs the selector while the user pans and
zooms, and performs exactly one successful extraction on confirmation.  All
state is dropped when the session ends.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from typing import Optional

from PySide6.QtCore import QObject, QThreadPool, Signal
from PySide6.QtGui import QImage

from ..config import CROP_ASPECT_RATIO, CROP_JPEG_QUALITY
from ..errors import CropError
from ..errors.handler import ErrorHandler, ErrorSeverity, user_message
from ..events import CropCancelledEvent, CropCompletedEvent, EventBus
from ..gui.tasks.crop_extract_worker import CropExtractWorker
from ..gui.tasks.image_load_worker import ImageLoadWorker
from ..utils.image_loader import SourceImage
from .geometry import CropOutcome, CropRegion, EncodedResult
from .model import CropSelectorModel

_LOGGER = logging.getLogger(__name__)


class CropState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EXTRACTING = "extracting"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


_TERMINAL = frozenset({CropState.COMPLETED, CropState.CANCELLED})


class CropSession(QObject):
    """Drive one crop from source load to a delivered :class:`EncodedResult`."""

    stateChanged = Signal(object)
    imageReady = Signal(QImage)
    regionChanged = Signal(object)
    cropCompleted = Signal(object)
    cropFailed = Signal(str)
    cancelled = Signal()

    def __init__(
        self,
        source: SourceImage,
        *,
        on_crop_complete: Optional[Callable[[EncodedResult], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        aspect_ratio: float = CROP_ASPECT_RATIO,
        quality: int = CROP_JPEG_QUALITY,
        thread_pool: Optional[QThreadPool] = None,
        error_handler: Optional[ErrorHandler] = None,
        event_bus: Optional[EventBus] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._source = source
        self._on_crop_complete = on_crop_complete
        self._on_cancel = on_cancel
        self._on_error = on_error
        self._aspect = aspect_ratio
        self._quality = quality
        self._pool = thread_pool
        self._error_handler = error_handler
        self._events = event_bus

        self._state = CropState.IDLE
        self._image: Optional[QImage] = None
        self._model: Optional[CropSelectorModel] = None
        self._viewport: tuple[float, float] | None = None
        self._last_error: Optional[CropError] = None
        self._request_id = 0
        # Workers are kept alive until their signals have been delivered.
        self._load_worker: Optional[ImageLoadWorker] = None
        self._extract_worker: Optional[CropExtractWorker] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> CropState:
        return self._state

    @property
    def model(self) -> Optional[CropSelectorModel]:
        return self._model

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    @property
    def last_error(self) -> Optional[CropError]:
        return self._last_error

    def is_busy(self) -> bool:
        return self._state in (CropState.LOADING, CropState.EXTRACTING)

    def can_confirm(self) -> bool:
        return self._model is not None and self._state in (CropState.READY, CropState.FAILED)

    def crop_region(self) -> Optional[CropRegion]:
        return self._model.crop_region() if self._model is not None else None

    def set_viewport_size(self, width: float, height: float) -> None:
        self._viewport = (width, height)
        if self._model is not None:
            self._model.set_viewport_size(width, height)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self, *, blocking: bool = False) -> None:
        """Decode the source; the session becomes READY or FAILED."""

        if self._state is not CropState.IDLE:
            return
        self._set_state(CropState.LOADING)
        worker = ImageLoadWorker(self._source)
        worker.signals.imageLoaded.connect(self._handle_image_loaded)
        worker.signals.loadFailed.connect(self._handle_load_failed)
        self._load_worker = worker
        if blocking:
            worker.run()
        else:
            self._thread_pool().start(worker)

    def confirm(self, *, blocking: bool = False) -> bool:
        """Start the one-shot extraction of the current region.

        Returns ``False`` when the session is not in a confirmable state, for
        example while a previous extraction is still running.
        """

        if not self.can_confirm() or self._image is None:
            return False
        region = self._model.crop_region()
        self._request_id += 1
        self._last_error = None
        self._set_state(CropState.EXTRACTING)
        worker = CropExtractWorker(
            self._image, region, request_id=self._request_id, quality=self._quality
        )
        worker.signals.finished.connect(self._handle_extract_finished)
        self._extract_worker = worker
        if blocking:
            worker.run()
        else:
            self._thread_pool().start(worker)
        return True

    def cancel(self) -> bool:
        """Abort the session; ``on_cancel`` fires at most once."""

        if self._state in _TERMINAL:
            return False
        self._set_state(CropState.CANCELLED)
        self._release()
        self.cancelled.emit()
        if self._on_cancel is not None:
            self._on_cancel()
        if self._events is not None:
            self._events.publish(CropCancelledEvent())
        return True

    def end(self) -> None:
        """Tear the session down, cancelling it if no result was delivered."""

        if self._state not in _TERMINAL:
            self.cancel()
        self._release()

    # ------------------------------------------------------------------
    # Worker callbacks
    # ------------------------------------------------------------------
    def _handle_image_loaded(self, image: QImage) -> None:
        self._load_worker = None
        if self._state is not CropState.LOADING:
            return
        self._image = image
        try:
            self._model = CropSelectorModel(
                (image.width(), image.height()),
                aspect_ratio=self._aspect,
                viewport_size=self._viewport,
                on_region_changed=self.regionChanged.emit,
            )
        except CropError as exc:
            self._image = None
            self._fail(exc, stage="load")
            return
        self._set_state(CropState.READY)
        self.imageReady.emit(image)
        self.regionChanged.emit(self._model.crop_region())

    def _handle_load_failed(self, error: CropError) -> None:
        self._load_worker = None
        if self._state is not CropState.LOADING:
            return
        self._fail(error, stage="load")

    def _handle_extract_finished(self, request_id: int, outcome: CropOutcome) -> None:
        self._extract_worker = None
        if request_id != self._request_id or self._state is not CropState.EXTRACTING:
            _LOGGER.debug("Discarding crop result %d for a %s session", request_id, self._state.value)
            return
        if not outcome.ok:
            self._fail(outcome.error or CropError("Crop produced no result"), stage="extract")
            return
        result = outcome.result
        self._set_state(CropState.COMPLETED)
        self._release()
        self.cropCompleted.emit(result)
        if self._on_crop_complete is not None:
            self._on_crop_complete(result)
        if self._events is not None:
            self._events.publish(
                CropCompletedEvent(width=result.width, height=result.height, size_bytes=len(result))
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fail(self, error: CropError, *, stage: str) -> None:
        self._last_error = error
        self._set_state(CropState.FAILED)
        if self._error_handler is not None:
            self._error_handler.handle(error, ErrorSeverity.ERROR, context={"stage": stage})
        else:
            _LOGGER.error("Crop %s failed: %s", stage, error)
        message = user_message(error)
        self.cropFailed.emit(message)
        if self._on_error is not None:
            self._on_error(message)

    def _set_state(self, state: CropState) -> None:
        if state is self._state:
            return
        self._state = state
        self.stateChanged.emit(state)

    def _release(self) -> None:
        self._image = None
        if self._model is not None:
            self._model.on_region_changed = None
        self._model = None

    def _thread_pool(self) -> QThreadPool:
        return self._pool or QThreadPool.globalInstance()


__all__ = ["CropSession", "CropState"]
