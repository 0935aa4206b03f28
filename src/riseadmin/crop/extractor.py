"""Rasterise a crop region of a source image and encode it as JPEG."""

from __future__ import annotations

import logging

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QRectF, Qt
from PySide6.QtGui import QImage, QPainter

from ..config import CROP_JPEG_QUALITY, CROP_OUTPUT_FORMAT, CROP_OUTPUT_MIME
from ..errors import CropError, EncodeFailedError, SurfaceUnavailableError
from ..utils.image_loader import SourceImage, load_source
from .geometry import CropOutcome, CropRegion, EncodedResult

_LOGGER = logging.getLogger(__name__)

# QImage dimensions are 32-bit signed ints.
_MAX_SURFACE_SIDE = 2**31 - 1


def extract(
    source: SourceImage,
    region: CropRegion,
    *,
    quality: int = CROP_JPEG_QUALITY,
) -> EncodedResult:
    """Return the pixels of *region* from *source* encoded as a JPEG.

    The destination surface is exactly ``region.width x region.height``
    (rounded to whole pixels).  Parts of the region that fall outside the
    source are left to the painter and come out black.

    Raises
    ------
    ImageLoadError
        *source* cannot be resolved or decoded.
    SurfaceUnavailableError
        The destination surface cannot be created or painted, including
        regions without area.
    EncodeFailedError
        The encoder reported failure or produced an empty payload.
    """

    image = load_source(source)
    payload = _encode(_render_surface(image, region), quality)
    if not payload:
        raise EncodeFailedError("Encoder produced an empty payload")
    _, _, width, height = region.pixel_box()
    _LOGGER.debug("Encoded %dx%d crop (%d bytes)", width, height, len(payload))
    return EncodedResult(data=payload, width=width, height=height, mime_type=CROP_OUTPUT_MIME)


def try_extract(
    source: SourceImage,
    region: CropRegion,
    *,
    quality: int = CROP_JPEG_QUALITY,
) -> CropOutcome:
    """Like :func:`extract` but report failures as a :class:`CropOutcome`."""

    try:
        return CropOutcome.success(extract(source, region, quality=quality))
    except CropError as exc:
        _LOGGER.warning("Crop extraction failed: %s", exc)
        return CropOutcome.failure(exc)
    except Exception as exc:
        _LOGGER.exception("Unexpected error while extracting crop")
        error = EncodeFailedError(f"Unexpected {type(exc).__name__}: {exc}")
        error.__cause__ = exc
        return CropOutcome.failure(error)


def _render_surface(image: QImage, region: CropRegion) -> QImage:
    _, _, width, height = region.pixel_box()
    if region.is_degenerate() or width <= 0 or height <= 0:
        raise SurfaceUnavailableError(
            f"Cannot allocate a {region.width!r}x{region.height!r} surface"
        )
    if width > _MAX_SURFACE_SIDE or height > _MAX_SURFACE_SIDE:
        raise SurfaceUnavailableError(f"A {width}x{height} surface exceeds the raster size limit")
    try:
        surface = QImage(width, height, QImage.Format.Format_RGB32)
    except (OverflowError, SystemError, MemoryError) as exc:
        raise SurfaceUnavailableError(f"Could not allocate a {width}x{height} surface") from exc
    if surface.isNull():
        raise SurfaceUnavailableError(f"Could not allocate a {width}x{height} surface")
    surface.fill(Qt.GlobalColor.black)

    painter = QPainter()
    if not painter.begin(surface):
        raise SurfaceUnavailableError("No drawing context available for the crop surface")
    try:
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.drawImage(
            QRectF(0.0, 0.0, float(width), float(height)),
            image,
            QRectF(region.offset_x, region.offset_y, region.width, region.height),
        )
    finally:
        painter.end()
    return surface


def _encode(surface: QImage, quality: int) -> bytes:
    data = QByteArray()
    buffer = QBuffer(data)
    if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
        raise EncodeFailedError("Could not open an in-memory buffer for encoding")
    try:
        saved = surface.save(buffer, CROP_OUTPUT_FORMAT, quality)
    finally:
        buffer.close()
    if not saved:
        raise EncodeFailedError(f"{CROP_OUTPUT_FORMAT} encoder rejected the crop surface")
    return bytes(data.data())


__all__ = ["extract", "try_extract"]
