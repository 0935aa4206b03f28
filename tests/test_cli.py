import json
from pathlib import Path

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for CLI tests", exc_type=ImportError)

from PIL import Image
from PySide6.QtGui import QImage
from typer.testing import CliRunner

from riseadmin.appctx import AppContext
from riseadmin.application.dtos import EventForm
from riseadmin.cli import app
from riseadmin.domain.query import RowQuery

runner = CliRunner()
WIDE = {"COLUMNS": "200"}


@pytest.fixture
def photo(tmp_path: Path) -> Path:
    path = tmp_path / "photo.png"
    Image.new("RGB", (1600, 1200), color="green").save(path)
    return path


def _invoke(settings_path: Path, *args: str):
    return runner.invoke(app, ["--settings", str(settings_path), *args], env=WIDE)


def _decoded_size(path: Path) -> tuple[int, int]:
    image = QImage(str(path))
    return image.width(), image.height()


def test_crop_with_explicit_region(qapp, settings_path, photo, tmp_path):
    out = tmp_path / "out" / "crop.jpg"

    result = _invoke(
        settings_path, "crop", str(photo), "--out", str(out),
        "--x", "100", "--y", "100", "--width", "400", "--height", "300",
    )

    assert result.exit_code == 0, result.output
    assert out.read_bytes()[:2] == b"\xff\xd8"
    assert _decoded_size(out) == (400, 300)


def test_crop_with_zoom_uses_centred_frame(qapp, settings_path, photo, tmp_path):
    out = tmp_path / "zoomed.jpg"

    result = _invoke(settings_path, "crop", str(photo), "--out", str(out), "--zoom", "2")

    assert result.exit_code == 0, result.output
    assert _decoded_size(out) == (800, 600)


def test_crop_with_json_region(qapp, settings_path, photo, tmp_path):
    out = tmp_path / "json.jpg"

    result = _invoke(
        settings_path, "crop", str(photo), "--out", str(out),
        "--region", '{"x": 0, "y": 0, "width": 800, "height": 600}',
    )

    assert result.exit_code == 0, result.output
    assert _decoded_size(out) == (800, 600)


def test_crop_rejects_malformed_json_region(qapp, settings_path, photo, tmp_path):
    result = _invoke(
        settings_path, "crop", str(photo), "--out", str(tmp_path / "x.jpg"), "--region", '{"x": 0}'
    )

    assert result.exit_code == 1
    assert "Malformed crop geometry" in result.output


def test_crop_requires_a_destination(settings_path, photo):
    result = _invoke(settings_path, "crop", str(photo))

    assert result.exit_code == 2


def test_crop_rejects_partial_region(qapp, settings_path, photo, tmp_path):
    result = _invoke(settings_path, "crop", str(photo), "--out", str(tmp_path / "x.jpg"), "--x", "10")

    assert result.exit_code == 2


def test_crop_reports_unreadable_source(qapp, settings_path, tmp_path):
    result = _invoke(settings_path, "crop", str(tmp_path / "missing.png"), "--out", str(tmp_path / "x.jpg"))

    assert result.exit_code == 1
    assert "Source image not found" in result.output


def test_crop_attaches_to_event(qapp, settings_path, photo):
    ctx = AppContext.from_settings_path(settings_path)
    try:
        ctx.events_admin().create(EventForm(title="Open Day", event_date="2026-03-05"))
        event_id = ctx.events_admin().list_upcoming()[0].id
    finally:
        ctx.close()

    result = _invoke(settings_path, "crop", str(photo), "--event-id", event_id)

    assert result.exit_code == 0, result.output
    ctx = AppContext.from_settings_path(settings_path)
    try:
        row = ctx.row_store().select("news_events", RowQuery().eq("id", event_id))[0]
    finally:
        ctx.close()
    assert row["image_url"].startswith("https://cdn.example.org/news-images/")


def test_events_add_list_delete(settings_path):
    added = _invoke(
        settings_path, "events", "add", "Sports Day", "--date", "2026-06-20", "--time", "9:30 am", "--publish"
    )
    assert added.exit_code == 0, added.output
    assert "Event created!" in added.output

    listed = _invoke(settings_path, "events", "list")
    assert listed.exit_code == 0, listed.output
    assert "Sports Day" in listed.output
    assert "Jun 20, 2026 9:30 AM" in listed.output
    assert "Published" in listed.output

    ctx = AppContext.from_settings_path(settings_path)
    try:
        event_id = ctx.events_admin().list_upcoming()[0].id
    finally:
        ctx.close()
    deleted = _invoke(settings_path, "events", "delete", event_id, "--yes")
    assert deleted.exit_code == 0, deleted.output
    assert "Event removed successfully." in deleted.output

    empty = _invoke(settings_path, "events", "list")
    assert "No events found" in empty.output


def test_events_add_rejects_bad_time(settings_path):
    result = _invoke(settings_path, "events", "add", "Concert", "--date", "2026-06-20", "--time", "25:00")

    assert result.exit_code == 1
    assert "Event time" in result.output


def test_events_add_with_time_parts(settings_path):
    added = _invoke(
        settings_path, "events", "add", "Open Day", "--date", "2026-07-01",
        "--hour", "7", "--period", "pm",
    )
    assert added.exit_code == 0, added.output

    listed = _invoke(settings_path, "events", "list")
    assert "Jul 1, 2026 7:00 PM" in listed.output


def test_events_add_time_parts_override_time(settings_path):
    added = _invoke(
        settings_path, "events", "add", "Assembly", "--date", "2026-07-02",
        "--time", "9:30 AM", "--minute", "45",
    )
    assert added.exit_code == 0, added.output

    listed = _invoke(settings_path, "events", "list")
    assert "Jul 2, 2026 9:45 AM" in listed.output


def test_events_add_rejects_non_numeric_minute(settings_path):
    result = _invoke(settings_path, "events", "add", "Concert", "--date", "2026-06-20", "--minute", "ab")

    assert result.exit_code == 1
    assert "Minute must be a whole number" in result.output


def test_events_delete_can_be_aborted(settings_path):
    result = runner.invoke(
        app, ["--settings", str(settings_path), "events", "delete", "some-id"], input="n\n", env=WIDE
    )

    assert result.exit_code == 0


def test_contact_notify_dry_run(settings_path, tmp_path):
    payload = tmp_path / "submission.json"
    payload.write_text(json.dumps({"parent_name": "Daw Aye", "email": "aye@example.com"}), encoding="utf-8")

    result = _invoke(settings_path, "contact", "notify", str(payload), "--dry-run")

    assert result.exit_code == 0, result.output
    assert "dry-run-1" in result.output
    assert "dry-run-2" in result.output


def test_contact_notify_invalid_payload(settings_path, tmp_path):
    payload = tmp_path / "submission.json"
    payload.write_text(json.dumps({"parent_name": "Daw Aye"}), encoding="utf-8")

    result = _invoke(settings_path, "contact", "notify", str(payload), "--dry-run")

    assert result.exit_code == 1
    assert "valid email" in result.output
