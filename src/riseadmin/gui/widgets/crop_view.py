"""Widget that renders a crop session and translates input into pan/zoom."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QMouseEvent, QPainter, QPainterPath, QPen, QWheelEvent
from PySide6.QtWidgets import QSizePolicy, QWidget

from ...config import CROP_MASK_OPACITY, CROP_VIEW_MIN_HEIGHT, CROP_WHEEL_ZOOM_STEP
from ...crop.session import CropSession


class CropView(QWidget):
    """Show the source behind a fixed-aspect frame; drag pans, the wheel zooms."""

    zoomChanged = Signal(float)

    def __init__(self, session: CropSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._session = session
        self._drag_origin: Optional[QPointF] = None
        self.setMinimumHeight(CROP_VIEW_MIN_HEIGHT)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMouseTracking(True)
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        session.imageReady.connect(self._handle_image_ready)
        session.regionChanged.connect(self._handle_region_changed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def zoom(self) -> float:
        model = self._session.model
        return model.zoom if model is not None else 1.0

    def set_zoom(self, factor: float) -> None:
        model = self._session.model
        if model is None:
            return
        model.set_zoom(factor)

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._session.set_viewport_size(float(self.width()), float(self.height()))

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.fillRect(self.rect(), Qt.GlobalColor.black)
        model = self._session.model
        image = self._session.image
        if model is None or image is None:
            painter.end()
            return
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.drawImage(QRectF(*model.image_rect()), image)

        frame = QRectF(*model.frame_rect())
        mask = QPainterPath()
        mask.addRect(QRectF(self.rect()))
        hole = QPainterPath()
        hole.addRect(frame)
        painter.fillPath(mask.subtracted(hole), QColor(0, 0, 0, int(255 * CROP_MASK_OPACITY)))

        painter.setPen(QPen(QColor(255, 255, 255, 110), 1.0))
        for step in (1, 2):
            x = frame.left() + frame.width() * step / 3.0
            y = frame.top() + frame.height() * step / 3.0
            painter.drawLine(QPointF(x, frame.top()), QPointF(x, frame.bottom()))
            painter.drawLine(QPointF(frame.left(), y), QPointF(frame.right(), y))
        painter.setPen(QPen(QColor(255, 255, 255), 2.0))
        painter.drawRect(frame)
        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton and self._session.model is not None:
            self._drag_origin = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        model = self._session.model
        if self._drag_origin is None or model is None:
            super().mouseMoveEvent(event)
            return
        position = event.position()
        delta = position - self._drag_origin
        self._drag_origin = position
        model.pan(delta.x(), delta.y())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton and self._drag_origin is not None:
            self._drag_origin = None
            self.setCursor(Qt.CursorShape.OpenHandCursor)
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:  # type: ignore[override]
        model = self._session.model
        if model is None:
            super().wheelEvent(event)
            return
        notches = event.angleDelta().y() / 120.0
        if notches == 0:
            event.ignore()
            return
        position = event.position()
        anchor = (position.x() - self.width() * 0.5, position.y() - self.height() * 0.5)
        model.zoom_by(notches * CROP_WHEEL_ZOOM_STEP, anchor=anchor)
        event.accept()

    # ------------------------------------------------------------------
    # Session callbacks
    # ------------------------------------------------------------------
    def _handle_image_ready(self, _image) -> None:
        self._session.set_viewport_size(float(self.width()), float(self.height()))
        self.update()

    def _handle_region_changed(self, _region) -> None:
        self.zoomChanged.emit(self.zoom())
        self.update()


__all__ = ["CropView"]
