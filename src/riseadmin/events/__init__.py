from .bus import Event, EventBus, Subscription
from .crop_events import ContentChangedEvent, CropCancelledEvent, CropCompletedEvent

__all__ = [
    "ContentChangedEvent",
    "CropCancelledEvent",
    "CropCompletedEvent",
    "Event",
    "EventBus",
    "Subscription",
]
