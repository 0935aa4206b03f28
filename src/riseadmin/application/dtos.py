from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..config import UPCOMING_CATEGORY
from ..domain import event_time
from ..domain.models import NewsEvent
from ..errors import ValidationError


@dataclass
class EventForm:
    """Editable fields of the upcoming-event form."""

    title: str = ""
    event_date: str = ""
    include_time: bool = False
    event_time: str = ""
    is_published: bool = False

    @classmethod
    def from_event(cls, event: NewsEvent) -> "EventForm":
        return cls(
            title=event.title,
            event_date=event.event_date or "",
            include_time=bool(event.event_time),
            event_time=event.event_time or "",
            is_published=bool(event.is_published),
        )

    def validate(self) -> None:
        if not self.title.strip():
            raise ValidationError("Event title is required")
        if not self.event_date:
            raise ValidationError("Event date is required")
        event_time.parse_event_date(self.event_date)

    def to_payload(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Return the row values written for this form.

        Upcoming events carry only a title, date, optional time and the
        published flag; the long-form news columns are cleared.
        """
        self.validate()
        stamp = now or datetime.now(timezone.utc)
        return {
            "title": self.title.strip(),
            "excerpt": None,
            "content": None,
            "category": UPCOMING_CATEGORY,
            "image_url": None,
            "is_published": self.is_published,
            "published_at": stamp.isoformat() if self.is_published else None,
            "event_date": self.event_date or None,
            "event_time": (self.event_time or None) if self.include_time else None,
            "event_location": None,
        }


@dataclass
class AdminResult:
    success: bool
    title: str
    message: str
    items: List[NewsEvent] = field(default_factory=list)
