from dataclasses import dataclass

from .bus import Event


@dataclass(kw_only=True)
class CropCompletedEvent(Event):
    width: int = 0
    height: int = 0
    size_bytes: int = 0


@dataclass(kw_only=True)
class CropCancelledEvent(Event):
    pass


@dataclass(kw_only=True)
class ContentChangedEvent(Event):
    """Published after a row in the content store was written or removed."""

    table: str = ""
    row_id: str = ""
    action: str = ""
