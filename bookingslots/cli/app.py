"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, SlotSettings, get_default_config_path
from ..domain.exceptions import SlotError
from ..domain.models import SlotCandidate
from ..domain.slot_generator import SlotGenerator, select_interval
from ..adapters.file_availability import FileAvailabilityProvider
from ..services.slot_service import SlotService

app = typer.Typer(
    name="bookingslots",
    help="Generate bookable slot start times from availability windows",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """Load the given config file, or the default one if it exists."""
    if config_file:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()


def _determine_time_range(
    *,
    tz: str,
    now: pendulum.DateTime,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
    end_option: Optional[str]
):
    """
    Resolve the desired time window based on shortcut flags or explicit dates.
    Returns (start_date, end_date).
    """
    if this_week and next_week:
        raise typer.BadParameter("--this-week and --next-week cannot be combined.")

    local_now = now.in_timezone(tz)

    if this_week:
        return local_now, local_now.end_of("week")

    if next_week:
        next_monday = local_now.next(pendulum.WeekDay.MONDAY).start_of("day")
        return next_monday, next_monday.add(days=6).end_of("day")

    try:
        if start_option:
            start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
        else:
            start_date = local_now.start_of("day")

        if end_option:
            end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
        else:
            end_date = start_date.add(days=7).end_of("day")
    except ValueError as e:
        raise typer.BadParameter(f"Dates must use the YYYY-MM-DD format: {e}")

    return start_date, end_date


def _render_table(slots: List[SlotCandidate], tz: str) -> Table:
    table = Table(
        title=f"Available slots ({tz})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold yellow")
    table.add_column("Start")
    table.add_column("Away", style="dim")

    for slot in slots:
        away = ""
        if slot.away:
            away = " ".join(part for part in (slot.emoji, slot.reason) if part) or "yes"
            if slot.to_user:
                away += f" -> {slot.to_user.display_name or slot.to_user.username or slot.to_user.id}"
        table.add_row(
            slot.time.format("ddd, YYYY-MM-DD"),
            slot.time.format("HH:mm"),
            away
        )

    return table


@app.command()
def generate(
    availability_file: Annotated[Path, typer.Argument(help="YAML/JSON file with date ranges and out-of-office dates")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    timezone: Annotated[Optional[str], typer.Option("--timezone", "-t", help="Target timezone (IANA name)")] = None,
    frequency: Annotated[Optional[int], typer.Option("--frequency", "-f", help="Minutes between slot starts")] = None,
    length: Annotated[Optional[int], typer.Option("--length", "-l", help="Event length in minutes")] = None,
    notice: Annotated[Optional[int], typer.Option("--notice", "-n", help="Minimum booking notice in minutes")] = None,
    offset: Annotated[Optional[int], typer.Option("--offset", help="Extra minutes added to every step")] = None,
    interval: Annotated[Optional[int], typer.Option("--interval", help="Fallback start-time granularity in minutes")] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Let the generator check durations: zero clamps to one minute, negative is rejected")] = False,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    this_week: Annotated[bool, typer.Option("--this-week", help="Search from now until the end of this week.")] = False,
    next_week: Annotated[bool, typer.Option("--next-week", help="Search the coming week (Monday-Sunday).")] = False,
    now_option: Annotated[Optional[str], typer.Option("--now", help="Evaluate as of this ISO-8601 instant instead of the current time")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print slots as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """
    Generate bookable slots from an availability file.

    Examples:

        # Slots for the next 7 days with the configured defaults
        bookingslots generate availability.yaml

        # 45 minute meetings, 2 hours notice, in Berlin time
        bookingslots generate availability.yaml -f 45 -l 45 -n 120 -t Europe/Berlin

        # Machine readable output for a fixed date range
        bookingslots generate availability.yaml --start 2024-06-03 --end 2024-06-07 --json
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        overrides = {
            key: value for key, value in {
                "frequency_minutes": frequency,
                "event_length_minutes": length,
                "minimum_booking_notice_minutes": notice,
                "offset_start_minutes": offset,
                "default_interval_minutes": interval,
                "strict": strict or None,
            }.items() if value is not None
        }
        # Options and config file go through the same validation
        settings = SlotSettings.model_validate({**config.slots.model_dump(), **overrides})
        tz = timezone or config.timezone

        now = pendulum.parse(now_option, tz="UTC") if now_option else pendulum.now("UTC")
        if not isinstance(now, pendulum.DateTime):
            raise typer.BadParameter(f"--now must be a date and time, got {now_option!r}")

        start_date, end_date = _determine_time_range(
            tz=tz,
            now=now,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
            end_option=end
        )

        provider = FileAvailabilityProvider(availability_file, default_timezone=tz)
        generator = SlotGenerator(
            default_interval_minutes=settings.default_interval_minutes,
            strict=settings.strict,
        )
        service = SlotService(provider=provider, generator=generator)

        slots = asyncio.run(
            service.find_slots(
                start_date=start_date,
                end_date=end_date,
                timezone=tz,
                settings=settings,
                now=now,
            )
        )

    except (FileNotFoundError, SlotError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=[slot.to_dict() for slot in slots])
        return

    console.print()
    if not slots:
        console.print(
            "[yellow]⚠ No bookable slots found.[/yellow]\n"
            "Try a longer date range or a shorter minimum notice."
        )
    else:
        console.print(f"[bold green]✓ {len(slots)} bookable slot(s) found:[/bold green]\n")
        console.print(_render_table(slots, tz))
    console.print()


@app.command("interval")
def show_interval(
    frequency: Annotated[int, typer.Argument(help="Minutes between slot starts")],
    fallback: Annotated[int, typer.Option("--interval", help="Fallback start-time granularity in minutes")] = 1,
):
    """
    Show the start-time granularity chosen for a frequency.
    """
    chosen = select_interval(frequency, fallback)
    console.print(f"Frequency [bold]{frequency}[/bold] min -> start times every [bold]{chosen}[/bold] min")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
