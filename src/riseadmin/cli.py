"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from .appctx import AppContext
from .application.dtos import EventForm
from .application.use_cases.upload_cropped_image import UploadCroppedImageRequest
from .crop.geometry import CropRegion, EncodedResult
from .domain import event_time
from .errors import CropError, RiseAdminError, SettingsError, ValidationError
from .notifications.contact import handle_contact_request

app = typer.Typer(help="Content tools for the Rise Learning Provision website")
events_app = typer.Typer(help="Manage upcoming events")
contact_app = typer.Typer(help="Contact form notifications")
app.add_typer(events_app, name="events")
app.add_typer(contact_app, name="contact")

_LOGGER = logging.getLogger(__name__)

_STATE: dict[str, Optional[Path]] = {"settings": None}


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (CropError, SettingsError, ValidationError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except RiseAdminError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _parse_region(text: str) -> CropRegion:
    try:
        values = json.loads(text)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--region is not valid JSON: {exc}") from exc
    if not isinstance(values, dict):
        raise typer.BadParameter("--region must be a JSON object")
    return CropRegion.from_mapping(values)


def _context() -> AppContext:
    return AppContext.from_settings_path(_STATE["settings"])


def _ensure_qt_app():
    from PySide6.QtWidgets import QApplication

    app_instance = QApplication.instance()
    if app_instance is None:
        app_instance = QApplication(sys.argv[:1])
    return app_instance


def _deliver(ctx: AppContext, result: EncodedResult, out: Optional[Path], event_id: Optional[str]) -> None:
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(result.data)
        print(f"[green]Wrote {result.width}x{result.height} crop to {out}")
    if event_id:
        response = ctx.upload_cropped_image().execute(
            UploadCroppedImageRequest(row_id=event_id, result=result)
        )
        if not response.success:
            typer.echo(f"Error: {response.error}", err=True)
            raise typer.Exit(1)
        print(f"[green]Attached {response.url} to event {event_id}")


@app.callback()
def main(
    settings: Optional[Path] = typer.Option(None, "--settings", help="Path to settings.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _STATE["settings"] = settings


@app.command()
@_handle_errors
def crop(
    source: str = typer.Argument(..., help="Image path or URL"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Where to write the JPEG"),
    x: Optional[float] = typer.Option(None, help="Region left edge in source pixels"),
    y: Optional[float] = typer.Option(None, help="Region top edge in source pixels"),
    width: Optional[float] = typer.Option(None, help="Region width in source pixels"),
    height: Optional[float] = typer.Option(None, help="Region height in source pixels"),
    region_json: Optional[str] = typer.Option(
        None, "--region", help='Region as JSON, e.g. {"x": 0, "y": 0, "width": 400, "height": 300}'
    ),
    zoom: float = typer.Option(1.0, help="Selector zoom used when no region is given"),
    event_id: Optional[str] = typer.Option(None, "--event-id", help="Attach the crop to this event"),
) -> None:
    """Crop SOURCE to 4:3 and write or upload the JPEG."""

    from .crop.extractor import extract
    from .crop.model import CropSelectorModel
    from .utils.image_loader import load_source

    if out is None and not event_id:
        raise typer.BadParameter("Give --out, --event-id or both")
    ctx = _context()
    try:
        image = load_source(source)
        given = [value is not None for value in (x, y, width, height)]
        if region_json is not None:
            if any(given):
                raise typer.BadParameter("--region cannot be combined with --x, --y, --width or --height")
            region = _parse_region(region_json)
        elif all(given):
            region = CropRegion(x, y, width, height)
        elif any(given):
            raise typer.BadParameter("--x, --y, --width and --height go together")
        else:
            model = CropSelectorModel((image.width(), image.height()))
            model.set_zoom(zoom)
            region = model.crop_region()
        _LOGGER.info("Cropping %s to %s", source, region.as_mapping())
        result = extract(image, region, quality=ctx.jpeg_quality())
        _deliver(ctx, result, out, event_id)
    finally:
        ctx.close()


@app.command()
@_handle_errors
def gui(
    source: str = typer.Argument(..., help="Image path or URL"),
    out: Optional[Path] = typer.Option(None, "--out", "-o"),
    event_id: Optional[str] = typer.Option(None, "--event-id"),
) -> None:
    """Open the interactive cropper for SOURCE."""

    from .crop.session import CropSession
    from .gui.crop_dialog import ImageCropperDialog

    if out is None and not event_id:
        raise typer.BadParameter("Give --out, --event-id or both")
    qt_app = _ensure_qt_app()
    ctx = _context()
    delivered: list[EncodedResult] = []
    try:
        session = CropSession(
            source,
            quality=ctx.jpeg_quality(),
            error_handler=ctx.error_handler,
            event_bus=ctx.events,
        )
        dialog = ImageCropperDialog(session, on_crop_complete=delivered.append)
        session.load()
        dialog.show()
        dialog.finished.connect(qt_app.quit)
        qt_app.exec()
        session.end()
        if not delivered:
            print("[yellow]Cancelled")
            raise typer.Exit(1)
        _deliver(ctx, delivered[0], out, event_id)
    finally:
        ctx.close()


@events_app.command("list")
@_handle_errors
def events_list() -> None:
    """List upcoming events ordered by date."""

    ctx = _context()
    try:
        result = ctx.events_admin().fetch()
    finally:
        ctx.close()
    if not result.success:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(1)
    if not result.items:
        print("No events found. Add your first upcoming event.")
        return
    table = Table("ID", "Event", "Date & Time", "Status")
    for item in result.items:
        when = event_time.format_event_date(item.event_date)
        if item.event_time:
            when = f"{when} {item.event_time}"
        table.add_row(item.id, item.title, when, item.status_label)
    Console().print(table)


def _event_time(
    time: Optional[str], hour: Optional[str], minute: Optional[str], period: Optional[str]
) -> str:
    if time is None and hour is None and minute is None and period is None:
        return ""
    value = event_time.enable_time(event_time.normalise_time(time) if time is not None else "")
    if hour is not None:
        value = event_time.set_hour(value, hour)
    if minute is not None:
        value = event_time.set_minute(value, minute)
    if period is not None:
        value = event_time.set_period(value, period)
    return value


@events_app.command("add")
@_handle_errors
def events_add(
    title: str = typer.Argument(...),
    date: str = typer.Option(..., "--date", help="ISO date, e.g. 2026-03-05"),
    time: Optional[str] = typer.Option(None, "--time", help="12-hour time, e.g. '9:30 AM'"),
    hour: Optional[str] = typer.Option(None, "--hour", help="Hour 1-12, overrides --time"),
    minute: Optional[str] = typer.Option(None, "--minute", help="Minute 0-59, overrides --time"),
    period: Optional[str] = typer.Option(None, "--period", help="AM or PM, overrides --time"),
    publish: bool = typer.Option(False, "--publish/--draft"),
    event_id: Optional[str] = typer.Option(None, "--id", help="Update this event instead"),
) -> None:
    """Create an upcoming event, or update one with --id."""

    when = _event_time(time, hour, minute, period)
    form = EventForm(
        title=title,
        event_date=date,
        include_time=bool(when),
        event_time=when,
        is_published=publish,
    )
    ctx = _context()
    try:
        result = ctx.events_admin().save(form, editing_id=event_id)
    finally:
        ctx.close()
    if not result.success:
        typer.echo(f"{result.title}: {result.message}", err=True)
        raise typer.Exit(1)
    print(f"[green]{result.message}")


@events_app.command("delete")
@_handle_errors
def events_delete(
    event_id: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete an event."""

    if not yes and not typer.confirm("Are you sure you want to delete this event?"):
        raise typer.Exit(0)
    ctx = _context()
    try:
        result = ctx.events_admin().delete(event_id)
    finally:
        ctx.close()
    if not result.success:
        typer.echo(f"{result.title}: {result.message}", err=True)
        raise typer.Exit(1)
    print(f"[green]{result.message}")


@contact_app.command("notify")
@_handle_errors
def contact_notify(
    payload: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON form submission"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build the emails without sending"),
) -> None:
    """Send the contact-form emails for PAYLOAD."""

    ctx = _context()
    try:
        notifier = ctx.contact_notifier(dry_run=dry_run)
        response = handle_contact_request("POST", payload.read_bytes(), notifier)
    finally:
        ctx.close()
    body = response.json()
    if response.status != 200:
        typer.echo(f"Error: {body.get('error')}", err=True)
        raise typer.Exit(1)
    print(body)


if __name__ == "__main__":
    app()
