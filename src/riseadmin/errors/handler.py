import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Type

from ..events.bus import Event, EventBus
from . import (
    EmailDeliveryError,
    EncodeFailedError,
    ImageLoadError,
    InvalidCropRegionError,
    StorageError,
    SurfaceUnavailableError,
)


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)


# Headline shown before the technical detail in the UI.
_HEADLINES: Dict[Type[Exception], str] = {
    ImageLoadError: "The image could not be loaded",
    SurfaceUnavailableError: "There is no drawing surface for this crop",
    EncodeFailedError: "The cropped image could not be saved as JPEG",
    InvalidCropRegionError: "The crop area is not valid",
    StorageError: "The image could not be uploaded",
    EmailDeliveryError: "The email could not be sent",
}


def user_message(error: Exception) -> str:
    """Return the text shown to the user for *error*."""

    for klass in type(error).__mro__:
        headline = _HEADLINES.get(klass)
        if headline is not None:
            return f"{headline}: {error}" if str(error) else headline
    return str(error)


class ErrorHandler:
    """Log an error, publish it on the bus and forward user-facing ones to the UI."""

    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callback: Optional[Callable[[str, ErrorSeverity], None]] = None

    def register_ui_callback(self, callback: Optional[Callable[[str, ErrorSeverity], None]]):
        self._ui_callback = callback

    def handle(self, error: Exception, severity: ErrorSeverity = ErrorSeverity.ERROR, context: dict = None):
        context = context or {}
        log_method = getattr(self._logger, severity.value, self._logger.error)
        log_method("%s: %s", error.__class__.__name__, error, extra={"context": context})

        self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=context))

        if self._ui_callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._ui_callback(user_message(error), severity)
