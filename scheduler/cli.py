"""Scheduler CLI - inspect week grids and try moves from the terminal."""

import asyncio
import json
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from .engine import (
    BusinessHours,
    CalendarAppointment,
    MoveError,
    MoveExecutor,
    TimeGrid,
    build_week_view,
    overlapping_pairs,
    visible,
    week_dates,
)

app = typer.Typer(
    name="scheduler",
    help="Salon calendar scheduling tools",
    no_args_is_help=True,
)
console = Console()


def _output_result(result: dict[str, Any]) -> None:
    console.print_json(json.dumps(result, default=str, indent=2))


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Could not read {path}: {e}[/red]")
        raise typer.Exit(1)


def _load_calendar(hours_file: Path, appointments_file: Path) -> tuple[BusinessHours, list[CalendarAppointment]]:
    hours = BusinessHours.from_dict(_load_json(hours_file))
    raw = _load_json(appointments_file)
    if isinstance(raw, dict):
        raw = raw.get("appointments", [])
    return hours, [CalendarAppointment.from_dict(item) for item in raw]


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid date {value!r}; expected YYYY-MM-DD[/red]")
        raise typer.Exit(1)


class _DryRunSink:
    """Accepts every write without storing it."""

    def __init__(self) -> None:
        self.writes: list[tuple[str, date, str]] = []

    async def update_appointment_schedule(self, appointment_id, day, time_12h, expected_version=None) -> bool:
        self.writes.append((appointment_id, day, time_12h))
        return True


@app.command("grid")
def grid(
    hours_file: Path = typer.Argument(..., help="Business hours JSON"),
    appointments_file: Path = typer.Argument(..., help="Appointments JSON"),
    week: str = typer.Option(None, "--week", "-w", help="Any date in the week (YYYY-MM-DD)"),
    staff: list[str] = typer.Option([], "--staff", "-s", help="Only show these staff (repeatable)"),
    location: str = typer.Option(None, "--location", "-l", help="Only show this location"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Render a week of the calendar."""
    from .config import settings

    hours, appointments = _load_calendar(hours_file, appointments_file)
    anchor = _parse_date(week) if week else date.today()
    time_grid = TimeGrid.from_hours(hours, **settings.grid_options)
    view = build_week_view(
        week_dates(anchor), time_grid, visible(appointments, set(staff), location), hours
    )

    if json_output:
        _output_result(view.to_dict())
        return

    table = Table(title=f"Week of {view.days[0].isoformat()}")
    table.add_column("Time", style="dim")
    for day in view.days:
        table.add_column(day.strftime("%a %d"), style="cyan")

    for slot, row in zip(view.slots, view.rows):
        cells = []
        for cell in row:
            if cell.placements:
                cells.append("\n".join(
                    f"{p.appointment.client_name or '?'} ({p.appointment.staff_name}, "
                    f"{p.appointment.effective_duration}m)"
                    for p in cell.placements
                ))
            else:
                cells.append("" if cell.open else "[dim]closed[/dim]")
        table.add_row(slot, *cells)

    console.print(table)


@app.command("check-move")
def check_move(
    hours_file: Path = typer.Argument(..., help="Business hours JSON"),
    appointments_file: Path = typer.Argument(..., help="Appointments JSON"),
    appointment_id: str = typer.Argument(..., help="Appointment to move"),
    new_date: str = typer.Argument(..., help="Target date (YYYY-MM-DD)"),
    new_time: str = typer.Argument(..., help="Target slot (HH:MM, 24-hour)"),
    location: str = typer.Option(None, "--location", "-l", help="Active location"),
):
    """Check whether a move would be accepted, without saving anything."""
    from .config import settings

    hours, appointments = _load_calendar(hours_file, appointments_file)
    executor = MoveExecutor(
        appointments,
        hours,
        _DryRunSink(),
        active_location_id=location,
        grid_options=settings.grid_options,
    )
    try:
        result = asyncio.run(executor.move(appointment_id, _parse_date(new_date), new_time))
    except MoveError as e:
        console.print(f"[red]Rejected:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Accepted:[/green] {appointment_id} -> {result.new_date} {result.new_time}")


@app.command("conflicts")
def conflicts(
    hours_file: Path = typer.Argument(..., help="Business hours JSON"),
    appointments_file: Path = typer.Argument(..., help="Appointments JSON"),
    buffers: bool = typer.Option(False, "--buffers", "-b", help="Also report buffer time running into the next booking"),
):
    """List existing double bookings."""
    from .config import settings

    hours, appointments = _load_calendar(hours_file, appointments_file)
    pairs = overlapping_pairs(
        appointments,
        TimeGrid.from_hours(hours, **settings.grid_options),
        include_buffers=buffers,
    )
    if not pairs:
        console.print("[green]No double bookings found.[/green]")
        return

    table = Table(title=f"Double bookings ({len(pairs)})")
    table.add_column("Staff", style="cyan")
    table.add_column("Date")
    table.add_column("First", style="yellow")
    table.add_column("Second", style="yellow")
    for a, b in pairs:
        table.add_row(
            a.staff_name,
            a.day.isoformat(),
            f"{a.id} {a.time} ({a.effective_duration}m)",
            f"{b.id} {b.time} ({b.effective_duration}m)",
        )
    console.print(table)
    raise typer.Exit(1)


@app.command("move")
def move(
    business_id: str = typer.Argument(..., help="Business ID"),
    appointment_id: str = typer.Argument(..., help="Appointment ID"),
    new_date: str = typer.Argument(..., help="Target date (YYYY-MM-DD)"),
    new_time: str = typer.Argument(..., help="Target slot (HH:MM, 24-hour)"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Active location ID"),
):
    """Move an appointment in the database."""
    from .database import async_session_factory
    from .services import calendar_svc

    async def _move():
        async with async_session_factory() as db:
            return await calendar_svc.move_appointment(
                db,
                uuid.UUID(business_id),
                uuid.UUID(appointment_id),
                _parse_date(new_date),
                new_time,
                location_id=uuid.UUID(location) if location else None,
            )

    try:
        result = asyncio.run(_move())
    except MoveError as e:
        console.print(f"[red]Rejected:[/red] {e}")
        raise typer.Exit(1)

    _output_result(result.to_dict())
    console.print("[green]Appointment moved![/green]")


if __name__ == "__main__":
    app()
