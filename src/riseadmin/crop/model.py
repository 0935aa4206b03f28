"""
Crop selector model.

Tracks pan and zoom of the source image behind a fixed-aspect crop frame and
derives the crop rectangle in source pixels, without any direct UI
interaction.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

from ..config import CROP_ASPECT_RATIO, CROP_ZOOM_MAX, CROP_ZOOM_MIN
from ..errors import InvalidCropRegionError
from .geometry import CropRegion, ViewState

Snapshot = tuple[float, float, float]


class CropSelectorModel:
    """Manages selector view state and the crop region derived from it.

    The frame is the largest ``aspect_ratio`` rectangle that fits inside the
    image when it is shown with "contain" fitting at zoom 1, centred in the
    viewport.  Zooming scales the image behind the frame; panning moves it.
    The offset is clamped after every change so the frame never leaves the
    image, which keeps the derived region inside the source bounds.
    """

    def __init__(
        self,
        image_size: tuple[int, int],
        *,
        aspect_ratio: float = CROP_ASPECT_RATIO,
        viewport_size: tuple[float, float] | None = None,
        on_region_changed: Optional[Callable[[CropRegion], None]] = None,
    ) -> None:
        image_w, image_h = image_size
        if image_w <= 0 or image_h <= 0:
            raise InvalidCropRegionError(f"Source image has no pixels: {image_size!r}")
        if aspect_ratio <= 0:
            raise InvalidCropRegionError(f"Aspect ratio must be positive, got {aspect_ratio!r}")
        self._image_w = float(image_w)
        self._image_h = float(image_h)
        self._aspect = float(aspect_ratio)
        self._view = ViewState()
        self._viewport = (self._image_w, self._image_h)
        self.on_region_changed = on_region_changed
        self._region: CropRegion
        if viewport_size is not None:
            self._viewport = self._sanitise_viewport(viewport_size)
        self._recompute(notify=False)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def aspect_ratio(self) -> float:
        return self._aspect

    @property
    def image_size(self) -> tuple[int, int]:
        return int(self._image_w), int(self._image_h)

    @property
    def viewport_size(self) -> tuple[float, float]:
        return self._viewport

    @property
    def view_state(self) -> ViewState:
        """Return a copy of the current pan/zoom state."""
        return ViewState(self._view.offset_x, self._view.offset_y, self._view.zoom)

    @property
    def zoom(self) -> float:
        return self._view.zoom

    def crop_region(self) -> CropRegion:
        """Return the latest crop region in source-pixel coordinates."""
        return self._region

    # ------------------------------------------------------------------
    # View-space geometry used by the widget
    # ------------------------------------------------------------------
    def base_scale(self) -> float:
        """Return the view/source scale that fits the image at zoom 1."""
        view_w, view_h = self._viewport
        return min(view_w / self._image_w, view_h / self._image_h)

    def effective_scale(self) -> float:
        return self.base_scale() * self._view.zoom

    def frame_size(self) -> tuple[float, float]:
        """Return the crop frame size in view pixels."""
        base = self.base_scale()
        shown_w = self._image_w * base
        shown_h = self._image_h * base
        if shown_w / shown_h > self._aspect:
            return shown_h * self._aspect, shown_h
        return shown_w, shown_w / self._aspect

    def frame_rect(self) -> tuple[float, float, float, float]:
        """Return ``(left, top, width, height)`` of the frame in view pixels."""
        view_w, view_h = self._viewport
        frame_w, frame_h = self.frame_size()
        return (view_w - frame_w) * 0.5, (view_h - frame_h) * 0.5, frame_w, frame_h

    def image_rect(self) -> tuple[float, float, float, float]:
        """Return ``(left, top, width, height)`` of the displayed image in view pixels."""
        view_w, view_h = self._viewport
        scale = self.effective_scale()
        shown_w = self._image_w * scale
        shown_h = self._image_h * scale
        left = view_w * 0.5 + self._view.offset_x - shown_w * 0.5
        top = view_h * 0.5 + self._view.offset_y - shown_h * 0.5
        return left, top, shown_w, shown_h

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------
    def set_viewport_size(self, width: float, height: float) -> None:
        new_viewport = self._sanitise_viewport((width, height))
        if new_viewport == self._viewport:
            return
        old_scale = self.effective_scale()
        self._viewport = new_viewport
        # Keep the same source point under the frame centre after a resize.
        ratio = self.effective_scale() / old_scale
        self._view.offset_x *= ratio
        self._view.offset_y *= ratio
        self._recompute()

    def set_zoom(self, zoom: float, anchor: tuple[float, float] | None = None) -> None:
        """Zoom to *zoom*, keeping the view point *anchor* fixed.

        *anchor* is expressed relative to the viewport centre; ``None`` zooms
        about the centre of the frame.
        """
        target = max(CROP_ZOOM_MIN, min(CROP_ZOOM_MAX, float(zoom)))
        current = self._view.zoom
        if abs(target - current) <= 1e-9:
            return
        anchor_x, anchor_y = anchor if anchor is not None else (0.0, 0.0)
        ratio = target / current
        self._view.offset_x = anchor_x - (anchor_x - self._view.offset_x) * ratio
        self._view.offset_y = anchor_y - (anchor_y - self._view.offset_y) * ratio
        self._view.zoom = target
        self._recompute()

    def zoom_by(self, step: float, anchor: tuple[float, float] | None = None) -> None:
        self.set_zoom(self._view.zoom + step, anchor=anchor)

    def pan(self, dx: float, dy: float) -> None:
        """Move the image by ``(dx, dy)`` view pixels behind the frame."""
        if dx == 0 and dy == 0:
            return
        snapshot = self.snapshot()
        self._view.offset_x += float(dx)
        self._view.offset_y += float(dy)
        self._clamp_offset()
        if self.has_changed(snapshot):
            self._recompute()

    def set_view_state(self, state: ViewState) -> None:
        self._view = ViewState(float(state.offset_x), float(state.offset_y), float(state.zoom))
        self._view.clamp_zoom()
        self._recompute()

    def reset(self) -> None:
        self.set_view_state(ViewState())

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def snapshot(self) -> Snapshot:
        return (self._view.offset_x, self._view.offset_y, self._view.zoom)

    def restore(self, snapshot: Snapshot) -> None:
        offset_x, offset_y, zoom = snapshot
        self.set_view_state(ViewState(offset_x, offset_y, zoom))

    def has_changed(self, snapshot: Snapshot) -> bool:
        return any(abs(a - b) > 1e-9 for a, b in zip(snapshot, self.snapshot(), strict=True))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _sanitise_viewport(self, size: tuple[float, float]) -> tuple[float, float]:
        width, height = (float(size[0]), float(size[1]))
        if width <= 0 or height <= 0:
            # Headless sessions have no widget yet; lay out at source scale.
            return self._image_w, self._image_h
        return width, height

    def _clamp_offset(self) -> None:
        scale = self.effective_scale()
        frame_w, frame_h = self.frame_size()
        limit_x = max(0.0, (self._image_w * scale - frame_w) * 0.5)
        limit_y = max(0.0, (self._image_h * scale - frame_h) * 0.5)
        self._view.offset_x = max(-limit_x, min(limit_x, self._view.offset_x))
        self._view.offset_y = max(-limit_y, min(limit_y, self._view.offset_y))

    def _recompute(self, notify: bool = True) -> None:
        self._clamp_offset()
        scale = self.effective_scale()
        frame_w, frame_h = self.frame_size()
        width = min(self._image_w, frame_w / scale)
        height = min(self._image_h, frame_h / scale)
        left = self._image_w * 0.5 - width * 0.5 - self._view.offset_x / scale
        top = self._image_h * 0.5 - height * 0.5 - self._view.offset_y / scale
        left = max(0.0, min(self._image_w - width, left))
        top = max(0.0, min(self._image_h - height, top))
        self._region = CropRegion(left, top, width, height)
        if notify and self.on_region_changed is not None:
            self.on_region_changed(self._region)


__all__ = ["CropSelectorModel", "Snapshot"]
