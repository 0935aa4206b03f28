from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass
class NewsEvent:
    """One row of the ``news_events`` table."""

    id: str
    title: str
    category: str
    excerpt: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    is_published: bool = False
    published_at: Optional[str] = None
    event_date: Optional[str] = None
    event_time: Optional[str] = None
    event_location: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "NewsEvent":
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in row.items() if key in known}
        values["is_published"] = bool(values.get("is_published") or False)
        return cls(**values)

    @property
    def status_label(self) -> str:
        return "Published" if self.is_published else "Draft"
