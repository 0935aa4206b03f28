"""Worker that decodes the crop source off the UI thread."""

from __future__ import annotations

from PySide6.QtCore import QObject, QRunnable, Signal
from PySide6.QtGui import QImage

from ...errors import ImageLoadError
from ...utils import image_loader


class ImageLoadWorkerSignals(QObject):
    """Signals exposed by :class:`ImageLoadWorker`.

    The signal container is kept separate from the runnable so slots always
    execute on the GUI thread regardless of which pool thread ran the job.
    """

    imageLoaded = Signal(QImage)
    """Emitted once the :class:`QImage` for the requested source is ready."""

    loadFailed = Signal(object)
    """Emitted with an :class:`ImageLoadError` if decoding fails for any reason."""


class ImageLoadWorker(QRunnable):
    """Decode a crop source without blocking the UI."""

    def __init__(self, source: image_loader.SourceImage) -> None:
        super().__init__()
        self._source = source
        self.signals = ImageLoadWorkerSignals()

    @property
    def source(self) -> image_loader.SourceImage:
        return self._source

    def run(self) -> None:  # type: ignore[override]
        try:
            image = image_loader.load_source(self._source)
        except ImageLoadError as exc:
            self.signals.loadFailed.emit(exc)
            return
        except Exception as exc:
            error = ImageLoadError(f"Unexpected {type(exc).__name__} while loading image: {exc}")
            error.__cause__ = exc
            self.signals.loadFailed.emit(error)
            return
        self.signals.imageLoaded.emit(image)


__all__ = ["ImageLoadWorker", "ImageLoadWorkerSignals"]
