"""Value types shared by the crop selector and the raster extractor."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from ..config import CROP_OUTPUT_MIME, CROP_ZOOM_MAX, CROP_ZOOM_MIN
from ..errors import CropError, InvalidCropRegionError


@dataclass(frozen=True)
class CropRegion:
    """Crop rectangle in source-pixel coordinates."""

    offset_x: float
    offset_y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        values = (self.offset_x, self.offset_y, self.width, self.height)
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
            raise InvalidCropRegionError(f"Crop geometry must be finite numbers, got {values!r}")

    @classmethod
    def from_mapping(cls, values) -> "CropRegion":
        """Build a region from ``{x, y, width, height}`` style payloads."""
        try:
            return cls(
                float(values.get("offset_x", values.get("x"))),
                float(values.get("offset_y", values.get("y"))),
                float(values["width"]),
                float(values["height"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidCropRegionError(f"Malformed crop geometry: {values!r}") from exc

    @property
    def aspect_ratio(self) -> float:
        if self.height == 0:
            return math.inf
        return self.width / self.height

    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def pixel_box(self) -> tuple[int, int, int, int]:
        """Return ``(left, top, width, height)`` rounded to whole pixels."""
        return (
            int(round(self.offset_x)),
            int(round(self.offset_y)),
            int(round(self.width)),
            int(round(self.height)),
        )

    def as_mapping(self) -> dict[str, float]:
        return {
            "x": float(self.offset_x),
            "y": float(self.offset_y),
            "width": float(self.width),
            "height": float(self.height),
        }


@dataclass
class ViewState:
    """Pan offset (view pixels) and zoom factor of the selector."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom: float = CROP_ZOOM_MIN

    def clamp_zoom(self) -> None:
        self.zoom = max(CROP_ZOOM_MIN, min(CROP_ZOOM_MAX, float(self.zoom)))


@dataclass(frozen=True)
class EncodedResult:
    """Encoded bytes of one confirmed crop."""

    data: bytes = field(repr=False)
    width: int
    height: int
    mime_type: str = CROP_OUTPUT_MIME

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CropOutcome:
    """Either an :class:`EncodedResult` or the error that prevented it."""

    result: Optional[EncodedResult] = None
    error: Optional[CropError] = None

    @classmethod
    def success(cls, result: EncodedResult) -> "CropOutcome":
        return cls(result=result)

    @classmethod
    def failure(cls, error: CropError) -> "CropOutcome":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None

    def unwrap(self) -> EncodedResult:
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise CropError("Crop produced no result")
        return self.result


__all__ = ["CropOutcome", "CropRegion", "EncodedResult", "ViewState"]
