"""Worker running one crop extraction on the thread pool."""

from __future__ import annotations

from PySide6.QtCore import QObject, QRunnable, Signal
from PySide6.QtGui import QImage

from ...config import CROP_JPEG_QUALITY
from ...crop import extractor
from ...crop.geometry import CropRegion


class CropExtractWorkerSignals(QObject):
    """Signals exposed by :class:`CropExtractWorker`."""

    finished = Signal(int, object)
    """Emitted with the request id and the :class:`CropOutcome`."""


class CropExtractWorker(QRunnable):
    """Rasterise and encode *region* of an already decoded *image*."""

    def __init__(
        self,
        image: QImage,
        region: CropRegion,
        *,
        request_id: int = 0,
        quality: int = CROP_JPEG_QUALITY,
    ) -> None:
        super().__init__()
        # ``QImage`` is implicitly shared; the copy keeps the worker independent
        # of later changes on the GUI thread.
        self._image = QImage(image)
        self._region = region
        self._request_id = request_id
        self._quality = quality
        self.signals = CropExtractWorkerSignals()

    def run(self) -> None:  # type: ignore[override]
        outcome = extractor.try_extract(self._image, self._region, quality=self._quality)
        self.signals.finished.emit(self._request_id, outcome)


__all__ = ["CropExtractWorker", "CropExtractWorkerSignals"]
