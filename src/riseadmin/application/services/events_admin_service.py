"""CRUD operations behind the "Upcoming Events" admin screen."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ...config import NEWS_EVENTS_TABLE, UPCOMING_CATEGORY
from ...domain.models import NewsEvent
from ...domain.query import RowQuery
from ...domain.repositories import IRowStore
from ...errors import RiseAdminError
from ...events import ContentChangedEvent, EventBus
from ..dtos import AdminResult, EventForm

_LOGGER = logging.getLogger(__name__)

_LIST_COLUMNS = (
    "id",
    "title",
    "excerpt",
    "content",
    "category",
    "image_url",
    "is_published",
    "published_at",
    "created_at",
    "updated_at",
    "event_date",
    "event_time",
    "event_location",
)


class EventsAdminService:
    """Manage rows of the upcoming-events category.

    Each mutating call returns an :class:`AdminResult` carrying the toast
    title and message the UI shows; failures are reported in the result
    rather than raised.
    """

    def __init__(self, rows: IRowStore, events: Optional[EventBus] = None, table: str = NEWS_EVENTS_TABLE):
        self._rows = rows
        self._events = events
        self._table = table

    def list_upcoming(self) -> List[NewsEvent]:
        query = (
            RowQuery()
            .select(*_LIST_COLUMNS)
            .eq("category", UPCOMING_CATEGORY)
            .order_by("event_date", ascending=True, nulls_first=False)
        )
        return [NewsEvent.from_row(row) for row in self._rows.select(self._table, query)]

    def fetch(self) -> AdminResult:
        try:
            items = self.list_upcoming()
        except RiseAdminError as exc:
            _LOGGER.error("Could not load events: %s", exc)
            return AdminResult(False, "Error", str(exc))
        return AdminResult(True, "Loaded", f"{len(items)} event(s)", items=items)

    def get(self, event_id: str) -> Optional[NewsEvent]:
        rows = self._rows.select(self._table, RowQuery().eq("id", event_id))
        return NewsEvent.from_row(rows[0]) if rows else None

    def create(self, form: EventForm, now: Optional[datetime] = None) -> AdminResult:
        try:
            row = self._rows.insert(self._table, form.to_payload(now))
        except RiseAdminError as exc:
            _LOGGER.error("Could not create event: %s", exc)
            return AdminResult(False, "Error", str(exc))
        self._publish(str(row.get("id", "")), "created")
        return AdminResult(True, "Success", "Event created!")

    def update(self, event_id: str, form: EventForm, now: Optional[datetime] = None) -> AdminResult:
        try:
            changed = self._rows.update(self._table, form.to_payload(now), {"id": event_id})
        except RiseAdminError as exc:
            _LOGGER.error("Could not update event %s: %s", event_id, exc)
            return AdminResult(False, "Error", str(exc))
        if changed == 0:
            return AdminResult(False, "Error", f"Event {event_id} no longer exists.")
        self._publish(event_id, "updated")
        return AdminResult(True, "Success", "Event updated!")

    def save(self, form: EventForm, editing_id: Optional[str] = None, now: Optional[datetime] = None) -> AdminResult:
        """Create a new event, or update *editing_id* when editing."""
        if editing_id:
            return self.update(editing_id, form, now)
        return self.create(form, now)

    def delete(self, event_id: str) -> AdminResult:
        try:
            removed = self._rows.delete(self._table, {"id": event_id})
        except RiseAdminError as exc:
            _LOGGER.error("Could not delete event %s: %s", event_id, exc)
            return AdminResult(False, "Error", str(exc))
        if removed == 0:
            return AdminResult(False, "Error", f"Event {event_id} no longer exists.")
        self._publish(event_id, "deleted")
        return AdminResult(True, "Deleted", "Event removed successfully.")

    def _publish(self, row_id: str, action: str) -> None:
        if self._events is not None:
            self._events.publish(ContentChangedEvent(table=self._table, row_id=row_id, action=action))


__all__ = ["EventsAdminService"]
