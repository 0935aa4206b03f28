from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from riseadmin.application.dtos import EventForm
from riseadmin.application.services.events_admin_service import EventsAdminService
from riseadmin.domain.repositories import IRowStore
from riseadmin.errors import DatabaseError
from riseadmin.events import ContentChangedEvent, EventBus
from riseadmin.infrastructure.db.pool import ConnectionPool
from riseadmin.infrastructure.db.schema import ensure_schema
from riseadmin.infrastructure.repositories.sqlite_row_store import SQLiteRowStore

NOW = datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def service(tmp_path, bus):
    pool = ConnectionPool(tmp_path / "content.db")
    ensure_schema(pool)
    yield EventsAdminService(SQLiteRowStore(pool), bus)
    pool.close_all()


def _form(title, date, **kwargs):
    return EventForm(title=title, event_date=date, **kwargs)


def test_create_and_list_orders_by_date(service):
    assert service.create(_form("Summer Fete", "2026-07-01"), NOW).message == "Event created!"
    service.create(_form("Spring Concert", "2026-04-12", include_time=True, event_time="6:30 PM"), NOW)

    result = service.fetch()

    assert result.success
    assert [item.title for item in result.items] == ["Spring Concert", "Summer Fete"]
    assert result.items[0].event_time == "6:30 PM"
    assert all(item.category == "upcoming" for item in result.items)


def test_listing_ignores_other_categories(service, tmp_path):
    service.create(_form("Open Day", "2026-03-01"), NOW)
    service._rows.insert("news_events", {"title": "Newsletter", "category": "news", "event_date": "2026-01-01"})

    titles = [item.title for item in service.list_upcoming()]

    assert titles == ["Open Day"]


def test_update_via_save(service):
    service.create(_form("Draft Event", "2026-05-05"), NOW)
    event_id = service.list_upcoming()[0].id

    result = service.save(_form("Final Event", "2026-05-06", is_published=True), editing_id=event_id, now=NOW)

    assert result.success
    assert result.message == "Event updated!"
    event = service.get(event_id)
    assert event.title == "Final Event"
    assert event.is_published is True
    assert event.published_at == NOW.isoformat()


def test_update_of_missing_event_fails(service):
    result = service.update("missing", _form("Ghost", "2026-01-01"), NOW)

    assert not result.success
    assert result.title == "Error"


def test_invalid_form_reports_error(service):
    result = service.create(_form("", "2026-01-01"), NOW)

    assert not result.success
    assert "title" in result.message
    assert service.list_upcoming() == []


def test_delete_publishes_change(service, bus):
    changes = []
    bus.subscribe(ContentChangedEvent, changes.append)
    service.create(_form("Sports Day", "2026-06-20"), NOW)
    event_id = service.list_upcoming()[0].id

    result = service.delete(event_id)

    assert (result.success, result.title, result.message) == (True, "Deleted", "Event removed successfully.")
    assert [change.action for change in changes] == ["created", "deleted"]
    assert service.get(event_id) is None
    assert not service.delete(event_id).success


def test_store_failures_become_error_results():
    rows = Mock(spec=IRowStore)
    rows.select.side_effect = DatabaseError("connection refused")
    service = EventsAdminService(rows)

    result = service.fetch()

    assert not result.success
    assert result.message == "connection refused"
