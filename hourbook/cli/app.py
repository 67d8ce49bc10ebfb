"""
Main CLI application using Typer.
"""

from datetime import date, time
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.sql_store import SqlCalendarStore
from ..config import AppConfig, configure_logging, load_config
from ..domain.exceptions import ConfigError, StoreUnavailableError
from ..domain.models import Invitee, Rejection
from ..services.booking_engine import BookingEngine

app = typer.Typer(
    name="hourbook",
    help="Publish availability and book hourly appointment slots",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


def _load(config_file: Optional[Path]) -> AppConfig:
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ConfigError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    configure_logging(config.log_level)
    return config


def _build_engine(config: AppConfig) -> BookingEngine:
    store = SqlCalendarStore(config.database_url)
    try:
        store.create_schema()
    except StoreUnavailableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    return BookingEngine(
        owners=store,
        availability=store,
        appointments=store,
        timezone=config.timezone,
    )


def _parse_time(value: str) -> time:
    try:
        parsed = pendulum.from_format(value, "HH:mm")
    except ValueError:
        console.print(f"[red]Could not parse time '{value}', expected HH:mm[/red]")
        raise typer.Exit(1)
    return time(parsed.hour, parsed.minute)


def _parse_date(value: str) -> date:
    try:
        parsed = pendulum.from_format(value, "YYYY-MM-DD")
    except ValueError:
        console.print(f"[red]Could not parse date '{value}', expected YYYY-MM-DD[/red]")
        raise typer.Exit(1)
    return date(parsed.year, parsed.month, parsed.day)


def _reject(rejection: Rejection) -> None:
    console.print(f"[bold red]Rejected ({rejection.value}):[/bold red] {rejection.message}")
    raise typer.Exit(1)


@app.command()
def init_db(config_file: ConfigOption = None):
    """
    Create the database tables.
    """
    config = _load(config_file)
    try:
        SqlCalendarStore(config.database_url).create_schema()
    except StoreUnavailableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Schema ready at {config.database_url}[/green]")


@app.command()
def seed(config_file: ConfigOption = None):
    """
    Register every owner listed in the config file.
    """
    config = _load(config_file)

    if not config.owners:
        console.print("[yellow]No owners defined in the config file.[/yellow]")
        return

    try:
        engine = _build_engine(config)
        for owner in config.owners:
            engine.register_owner(owner.username, owner.resolved_display_name())
            console.print(f"[green]✓[/green] {owner.username}")
    except StoreUnavailableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def add_owner(
    username: Annotated[str, typer.Argument(help="Unique username of the calendar owner")],
    display_name: Annotated[Optional[str], typer.Option("--display-name", help="Friendly name")] = None,
    config_file: ConfigOption = None,
):
    """
    Create a calendar owner unless one already exists.
    """
    config = _load(config_file)
    try:
        owner = _build_engine(config).register_owner(username, display_name)
    except StoreUnavailableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Owner {owner.username} ({owner.display_name}) exists[/green]")


@app.command()
def set_availability(
    username: Annotated[str, typer.Argument(help="Owner username")],
    start: Annotated[str, typer.Argument(help="Window start (HH:mm)")],
    end: Annotated[str, typer.Argument(help="Window end (HH:mm)")],
    config_file: ConfigOption = None,
):
    """
    Replace the owner's daily availability window.

    Examples:

        hourbook set-availability alice 10:00 17:00
    """
    config = _load(config_file)
    start_time = _parse_time(start)
    end_time = _parse_time(end)

    try:
        outcome = _build_engine(config).set_availability(username, start_time, end_time)
    except StoreUnavailableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not outcome.accepted:
        _reject(outcome.rejection)
    console.print(f"[green]✓ Availability for {username} set to {outcome.value}[/green]")


@app.command()
def search(
    username: Annotated[str, typer.Argument(help="Owner username")],
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to today")] = None,
    config_file: ConfigOption = None,
):
    """
    List the free slots of an owner on a date.
    """
    config = _load(config_file)
    if day:
        target = _parse_date(day)
    else:
        today = pendulum.today(config.timezone)
        target = date(today.year, today.month, today.day)

    slots = _build_engine(config).search(username, target)

    if not slots:
        console.print(f"[yellow]⚠ No free slots for {username} on {target.isoformat()}.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(slots)} free slot(s):[/bold green]\n")
    for slot in slots:
        console.print(f"  {slot.format_display()}")


@app.command()
def book(
    username: Annotated[str, typer.Argument(help="Owner username")],
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Slot start (HH:mm)")],
    name: Annotated[str, typer.Option("--name", "-n", help="Invitee name")],
    email: Annotated[Optional[str], typer.Option("--email", "-e", help="Invitee email")] = None,
    config_file: ConfigOption = None,
):
    """
    Book a one-hour slot.

    Examples:

        hourbook book alice 2024-11-26 10:00 --name "Bob" --email bob@example.com
    """
    config = _load(config_file)
    target = _parse_date(day)
    start_time = _parse_time(start)

    try:
        invitee = Invitee(name=name, email=email)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    try:
        outcome = _build_engine(config).book(username, target, start_time, invitee)
    except StoreUnavailableError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not outcome.accepted:
        _reject(outcome.rejection)
    console.print(f"[green]✓ Booked {outcome.value.format_display()}[/green]")


@app.command()
def upcoming(
    username: Annotated[str, typer.Argument(help="Owner username")],
    config_file: ConfigOption = None,
):
    """
    List upcoming appointments of an owner.
    """
    config = _load(config_file)
    appointments = _build_engine(config).list_upcoming(username)

    if not appointments:
        console.print(f"[yellow]No upcoming appointments for {username}.[/yellow]")
        return

    table = Table(
        title=f"Upcoming appointments for {username}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold yellow")
    table.add_column("Time")
    table.add_column("Invitee")
    table.add_column("E-Mail", style="dim")

    for appointment in appointments:
        table.add_row(
            appointment.date.isoformat(),
            f"{appointment.start.strftime('%H:%M')} - {appointment.end.strftime('%H:%M')}",
            appointment.invitee_name,
            appointment.invitee_email or "",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]hourbook[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
