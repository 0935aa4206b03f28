"""Modal dialog for cropping an image before it is uploaded."""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from ..config import CROP_ZOOM_MAX, CROP_ZOOM_MIN, CROP_ZOOM_STEP
from ..crop.geometry import EncodedResult
from ..crop.session import CropSession, CropState
from .widgets.crop_view import CropView

_SLIDER_SCALE = int(round(1.0 / CROP_ZOOM_STEP))


class ImageCropperDialog(QDialog):
    """Let the user frame a 4:3 region and hand back the encoded crop.

    ``on_crop_complete`` receives the :class:`EncodedResult` exactly once after
    a successful confirm; ``on_cancel`` fires when the user backs out.  When an
    extraction fails the dialog stays open, shows the reason and allows the
    user to try again.
    """

    def __init__(
        self,
        session: CropSession,
        *,
        on_crop_complete: Optional[Callable[[EncodedResult], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Crop Image")
        self.setModal(True)
        self.resize(720, 560)
        self._session = session
        self._on_crop_complete = on_crop_complete
        self._on_cancel = on_cancel

        self.view = CropView(session, self)

        self.zoom_label = QLabel("Zoom", self)
        self.zoom_label.setFixedWidth(48)
        self.zoom_slider = QSlider(Qt.Orientation.Horizontal, self)
        self.zoom_slider.setRange(
            int(round(CROP_ZOOM_MIN * _SLIDER_SCALE)), int(round(CROP_ZOOM_MAX * _SLIDER_SCALE))
        )
        self.zoom_slider.setSingleStep(1)
        self.zoom_slider.setValue(int(round(CROP_ZOOM_MIN * _SLIDER_SCALE)))

        self.error_label = QLabel(self)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #b91c1c;")
        self.error_label.hide()

        self.cancel_button = QPushButton("Cancel", self)
        self.save_button = QPushButton("Crop && Save", self)
        self.save_button.setDefault(True)

        zoom_row = QHBoxLayout()
        zoom_row.addWidget(self.zoom_label)
        zoom_row.addWidget(self.zoom_slider, 1)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self.cancel_button)
        buttons.addWidget(self.save_button)

        layout = QVBoxLayout(self)
        layout.addWidget(self.view, 1)
        layout.addLayout(zoom_row)
        layout.addWidget(self.error_label)
        layout.addLayout(buttons)

        self.zoom_slider.valueChanged.connect(self._handle_slider_changed)
        self.view.zoomChanged.connect(self._handle_view_zoom_changed)
        self.cancel_button.clicked.connect(self.reject)
        self.save_button.clicked.connect(self._handle_save)
        session.stateChanged.connect(self._handle_state_changed)
        session.cropCompleted.connect(self._handle_crop_completed)
        session.cropFailed.connect(self._handle_crop_failed)
        session.cancelled.connect(self._handle_session_cancelled)

        self._handle_state_changed(session.state)

    # ------------------------------------------------------------------
    # QDialog overrides
    # ------------------------------------------------------------------
    def reject(self) -> None:  # type: ignore[override]
        # Closing via Escape or the window frame counts as a cancel as well.
        self._session.cancel()
        super().reject()

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @Slot()
    def _handle_save(self) -> None:
        self.error_label.hide()
        self._session.confirm()

    @Slot(int)
    def _handle_slider_changed(self, value: int) -> None:
        self.view.set_zoom(float(value) / _SLIDER_SCALE)

    @Slot(float)
    def _handle_view_zoom_changed(self, factor: float) -> None:
        slider_value = max(
            self.zoom_slider.minimum(),
            min(self.zoom_slider.maximum(), int(round(factor * _SLIDER_SCALE))),
        )
        if slider_value == self.zoom_slider.value():
            return
        self.zoom_slider.blockSignals(True)
        self.zoom_slider.setValue(slider_value)
        self.zoom_slider.blockSignals(False)

    @Slot(object)
    def _handle_state_changed(self, state: CropState) -> None:
        self.save_button.setEnabled(self._session.can_confirm())
        self.zoom_slider.setEnabled(self._session.model is not None and state is not CropState.EXTRACTING)
        self.save_button.setText("Saving…" if state is CropState.EXTRACTING else "Crop && Save")

    @Slot(object)
    def _handle_crop_completed(self, result: EncodedResult) -> None:
        if self._on_crop_complete is not None:
            self._on_crop_complete(result)
        self.accept()

    @Slot(str)
    def _handle_crop_failed(self, message: str) -> None:
        self.error_label.setText(f"{message}. Please try again.")
        self.error_label.show()

    @Slot()
    def _handle_session_cancelled(self) -> None:
        if self._on_cancel is not None:
            self._on_cancel()


__all__ = ["ImageCropperDialog"]
