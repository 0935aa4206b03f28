"""Helpers for loading Qt image primitives with Pillow fallbacks."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional, Union
from urllib.error import URLError
from urllib.parse import unquote, urlparse
from urllib.request import Request, urlopen
import logging

from PIL import Image, ImageOps, UnidentifiedImageError
from PIL.ImageQt import ImageQt
from PySide6.QtGui import QImage, QImageReader

from ..config import REMOTE_FETCH_TIMEOUT_SEC
from ..errors import ImageLoadError

_LOGGER = logging.getLogger(__name__)

SourceImage = Union[QImage, bytes, bytearray, Path, str]
"""Anything :func:`load_source` knows how to turn into a :class:`QImage`."""

_REMOTE_SCHEMES = {"http", "https"}


def load_qimage(source: Path) -> Optional[QImage]:
    """Return a :class:`QImage` for the file at *source*, or ``None``."""

    # ``QImageReader`` streams straight from the file and honours EXIF
    # orientation when auto-transform is on; Pillow only steps in when Qt has
    # no plugin for the format.
    reader = QImageReader(str(source))
    disable_cache = getattr(reader, "setCacheEnabled", None)
    if callable(disable_cache):
        disable_cache(False)
    reader.setAutoTransform(True)
    image = reader.read()
    if not image.isNull():
        return image
    _LOGGER.debug("QImageReader could not decode %s: %s", source, reader.errorString())
    return _load_with_pillow(source)


def qimage_from_bytes(data: bytes) -> Optional[QImage]:
    """Return a :class:`QImage` decoded from encoded *data*, or ``None``."""

    image = QImage()
    if image.loadFromData(data):
        return image
    return _load_with_pillow(BytesIO(data))


def fetch_remote(url: str, timeout: float = REMOTE_FETCH_TIMEOUT_SEC) -> bytes:
    """Download *url* anonymously and return the response body."""

    # No cookies or credentials are attached, the same way a browser loads a
    # cross-origin image in anonymous mode.
    request = Request(url, headers={"Accept": "image/*"})
    try:
        with urlopen(request, timeout=timeout) as response:
            return response.read()
    except (URLError, OSError, ValueError) as exc:
        raise ImageLoadError(f"Could not fetch {url}: {exc}") from exc


def load_source(source: SourceImage) -> QImage:
    """Materialise *source* into a pixel-addressable :class:`QImage`.

    Raises :class:`~riseadmin.errors.ImageLoadError` when the reference cannot
    be resolved or decoded.
    """

    if isinstance(source, QImage):
        if source.isNull():
            raise ImageLoadError("Source image is empty")
        return source
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise ImageLoadError("Source image payload is empty")
        image = qimage_from_bytes(bytes(source))
        label = "image bytes"
    else:
        path, remote = _resolve_reference(source)
        if remote is not None:
            image = qimage_from_bytes(fetch_remote(remote))
            label = remote
        else:
            if not path.is_file():
                raise ImageLoadError(f"Source image not found: {path}")
            image = load_qimage(path)
            label = str(path)
    if image is None or image.isNull():
        raise ImageLoadError(f"Could not decode {label}")
    return image


def _resolve_reference(source: Path | str) -> tuple[Path, str | None]:
    if isinstance(source, Path):
        return source, None
    parsed = urlparse(source)
    scheme = parsed.scheme.lower()
    if scheme in _REMOTE_SCHEMES:
        return Path(), source
    if scheme == "file":
        return Path(unquote(parsed.path)), None
    return Path(source), None


def _load_with_pillow(source: Path | BytesIO) -> Optional[QImage]:
    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except (UnidentifiedImageError, OSError, ValueError):
        _LOGGER.exception("Pillow failed to decode image from %s", source)
        return None
    # ``ImageQt`` borrows Pillow's buffer, so detach into an owned copy.
    return QImage(qt_image).copy()


__all__ = ["SourceImage", "fetch_remote", "load_qimage", "load_source", "qimage_from_bytes"]
