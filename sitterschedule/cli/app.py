"""
Main CLI application using Typer.
"""

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Annotated, Any, Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.memory_store import InMemoryStore
from ..adapters.supabase_store import SupabaseStore
from ..config import AppConfig, get_default_config_path
from ..domain.calendar import boarding_marks, unavailability_marks, weekly_marks
from ..domain.exceptions import SitterScheduleError
from ..domain.models import FullDay, PartialSlots
from ..services.schedule_service import ScheduleService, ScheduleSession, ScheduleStoreProtocol

app = typer.Typer(
    name="sitterschedule",
    help="Manage a pet sitter's availability, unavailability and boarding dates",
    add_completion=False,
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use the local JSON mock store instead of Supabase."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Edit the schedule stored for the configured sitter.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_store(config: AppConfig, config_path: Path, mock: bool) -> ScheduleStoreProtocol:
    if mock:
        data_path = config.resolve_mock_data_path(config_path)
        if data_path is None:
            return InMemoryStore()
        return InMemoryStore.from_json_file(data_path)

    if config.supabase is None:
        raise ValueError("No 'supabase' section in the config file. Use --mock or add one.")
    return SupabaseStore(config.supabase, timezone=config.timezone)


def _run(
    config_file: Optional[Path],
    mock: bool,
    action: Callable[[ScheduleService, ScheduleSession, AppConfig], Any],
    save: bool = True,
) -> tuple:
    """
    Load the session, apply ``action`` and save when requested.

    Returns (config, session, result of the action).
    """
    try:
        config_path = config_file or get_default_config_path()
        config = AppConfig.load_from_yaml(config_path)

        service = ScheduleService(
            store=_build_store(config, config_path, mock),
            mode=config.mode,
            operating_hours=config.operating_hours.to_domain(),
            today=config.today,
        )

        async def run():
            session = await service.load(config.sitter_id)
            result = action(service, session, config)
            if inspect.isawaitable(result):
                result = await result
            if save:
                await service.save(session)
            return session, result

        session, result = asyncio.run(run())
        return config, session, result

    except (FileNotFoundError, ValueError, SitterScheduleError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def show(config_file: ConfigOption = None, mock: MockOption = False):
    """
    Show weekly availability, unavailable dates and boarding dates.
    """
    config, session, _ = _run(config_file, mock, lambda service, session, config: None, save=False)

    table = Table(
        title=f"Weekly availability ({config.mode.value})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Time slots")
    table.add_column("IDs", style="dim")

    for day in session.weekly.days():
        table.add_row(
            day.day.capitalize(),
            ", ".join(slot.format_display() for slot in day.time_slots) or "-",
            ", ".join(slot.id for slot in day.time_slots),
        )

    console.print()
    console.print(table)

    unavailable = Table(title="Unavailable dates", show_header=True, header_style="bold cyan")
    unavailable.add_column("Date", style="bold yellow")
    unavailable.add_column("Unavailable")
    unavailable.add_column("IDs", style="dim")

    for key, entry in session.unavailability.to_mapping().items():
        if isinstance(entry, FullDay):
            unavailable.add_row(key, "All day", "")
        elif isinstance(entry, PartialSlots):
            unavailable.add_row(
                key,
                ", ".join(slot.format_display() for slot in entry.slots),
                ", ".join(slot.id for slot in entry.slots),
            )

    console.print()
    console.print(unavailable)

    boarding = session.boarding.to_list()
    console.print()
    console.print(f"[bold]Boarding dates ({len(boarding)}):[/bold] {', '.join(boarding) or '-'}")
    console.print()


@app.command()
def add_slot(
    day: Annotated[str, typer.Argument(help="Weekday name, e.g. monday")],
    start: Annotated[Optional[str], typer.Argument(help="Start time (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Argument(help="End time (HH:MM)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Add a weekly time slot.
    """
    def action(service: ScheduleService, session: ScheduleSession, config: AppConfig):
        return session.weekly.add_slot(
            day,
            start or config.default_slot.start,
            end or config.default_slot.end,
        )

    _, _, slot = _run(config_file, mock, action)
    console.print(f"[green]✓ Added {slot.format_display()} on {day.capitalize()}[/green] [dim]({slot.id})[/dim]")


@app.command()
def update_slot(
    day: Annotated[str, typer.Argument(help="Weekday name")],
    slot_id: Annotated[str, typer.Argument(help="ID of the slot to change")],
    start: Annotated[Optional[str], typer.Option("--start", help="New start time (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="New end time (HH:MM)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Change the start and/or end of a weekly time slot.
    """
    _, _, slot = _run(
        config_file,
        mock,
        lambda service, session, config: session.weekly.update_slot(day, slot_id, start=start, end=end),
    )
    console.print(f"[green]✓ Updated slot to {slot.format_display()}[/green]")


@app.command()
def remove_slot(
    day: Annotated[str, typer.Argument(help="Weekday name")],
    slot_id: Annotated[str, typer.Argument(help="ID of the slot to remove")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Remove a weekly time slot.
    """
    _, _, removed = _run(
        config_file, mock, lambda service, session, config: session.weekly.remove_slot(day, slot_id)
    )
    if removed:
        console.print("[green]✓ Slot removed[/green]")
    else:
        console.print(f"[yellow]No slot '{slot_id}' on {day.capitalize()}[/yellow]")


@app.command()
def toggle_unavailable(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Mark a whole date unavailable, or clear it again.
    """
    _, _, unavailable = _run(
        config_file, mock, lambda service, session, config: session.unavailability.toggle_date_unavailable(date)
    )
    if unavailable:
        console.print(f"[green]✓ {date} marked unavailable[/green]")
    else:
        console.print(f"[green]✓ {date} is available again[/green]")


@app.command()
def add_unavailable_slot(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[Optional[str], typer.Argument(help="Start time (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Argument(help="End time (HH:MM)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Mark a time range of a date as unavailable.
    """
    def action(service: ScheduleService, session: ScheduleSession, config: AppConfig):
        return session.unavailability.add_slot(
            date,
            start or config.default_slot.start,
            end or config.default_slot.end,
        )

    _, _, slot = _run(config_file, mock, action)
    console.print(f"[green]✓ {date} unavailable {slot.format_display()}[/green] [dim]({slot.id})[/dim]")


@app.command()
def remove_unavailable_slot(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    slot_id: Annotated[str, typer.Argument(help="ID of the range to remove")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Remove an unavailable time range from a date.
    """
    _, _, removed = _run(
        config_file, mock, lambda service, session, config: session.unavailability.remove_slot(date, slot_id)
    )
    if removed:
        console.print("[green]✓ Range removed[/green]")
    else:
        console.print(f"[yellow]No range '{slot_id}' on {date}[/yellow]")


@app.command()
def toggle_boarding(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Select or deselect a date for overnight boarding.
    """
    _, _, selected = _run(
        config_file, mock, lambda service, session, config: service.toggle_boarding_date(session, date)
    )
    if selected:
        console.print(f"[green]✓ {date} is available for boarding[/green]")
    else:
        console.print(f"[green]✓ {date} removed from boarding dates[/green]")


@app.command()
def bookable(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the bookable walking times on a date.
    """
    _, _, slots = _run(
        config_file, mock, lambda service, session, config: service.bookable_slots(session, date), save=False
    )
    if not slots:
        console.print(f"[yellow]⚠ No bookable time on {date}.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(slots)} bookable range(s) on {date}:[/bold green]")
    for slot in slots:
        console.print(f"  {slot.format_display()}")


@app.command()
def marks(
    kind: Annotated[str, typer.Option("--kind", "-k", help="unavailability, boarding or weekly")] = "unavailability",
    start: Annotated[Optional[str], typer.Option("--start", help="First date for weekly marks (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Last date for weekly marks (YYYY-MM-DD)")] = None,
    date: Annotated[
        Optional[str], typer.Option("--date", "-d", help="Date to highlight in unavailability marks (YYYY-MM-DD)")
    ] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Print the calendar markings as JSON.
    """
    if kind not in ("unavailability", "boarding", "weekly"):
        console.print(f"[bold red]Error:[/bold red] Unknown kind '{kind}'")
        raise typer.Exit(1)
    if kind == "weekly" and not (start and end):
        console.print("[bold red]Error:[/bold red] --start and --end are required for weekly marks")
        raise typer.Exit(1)

    def action(service: ScheduleService, session: ScheduleSession, config: AppConfig):
        if kind == "boarding":
            return boarding_marks(session.boarding)
        if kind == "weekly":
            return weekly_marks(session.weekly, start, end)
        return unavailability_marks(session.unavailability, selected_date=date)

    _, _, result = _run(config_file, mock, action, save=False)
    console.print_json(data={key: mark.to_dict() for key, mark in result.items()})


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]sitterschedule[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
