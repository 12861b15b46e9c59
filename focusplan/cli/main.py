"""Main CLI entry point using Typer."""

import json
from datetime import date, datetime, timedelta
from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from focusplan import __version__
from focusplan.core.config import get_settings
from focusplan.core.log import configure_logging
from focusplan.core.models import Preferences, Priority, ScheduledSlot, Task
from focusplan.core.timeofday import naive_local

app = typer.Typer(
    name="focusplan",
    help="FocusPlan - deadline-driven pomodoro scheduling",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

_slots_adapter = TypeAdapter(list[ScheduledSlot])


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]FocusPlan[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show pipeline logs.",
    ),
) -> None:
    """
    FocusPlan - turn estimated work into a conflict-free schedule.
    """
    configure_logging(level="DEBUG" if verbose else "WARNING")


# =============================================================================
# HELPERS
# =============================================================================


def _load_slots(path: Path | None) -> list[ScheduledSlot]:
    if path is None:
        return []
    try:
        return _slots_adapter.validate_json(path.read_text())
    except (OSError, ValidationError) as e:
        console.print(f"[bold red]Cannot read slots from {path}:[/bold red] {e}")
        raise typer.Exit(code=2)


def _load_preferences(path: Path | None) -> Preferences:
    if path is None:
        return Preferences()
    try:
        return Preferences.merge(json.loads(path.read_text()))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Cannot read preferences from {path}:[/bold red] {e}")
        raise typer.Exit(code=2)


def _parse_moment(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    try:
        return naive_local(datetime.fromisoformat(value))
    except ValueError:
        console.print(f"[bold red]Invalid {option}:[/bold red] expected YYYY-MM-DD[THH:MM], got {value}")
        raise typer.Exit(code=2)


def _write_slots(path: Path, slots: list[ScheduledSlot]) -> None:
    path.write_text(_slots_adapter.dump_json(slots, indent=2).decode())
    console.print(f"[green]Saved {len(slots)} slot(s) to {path}[/green]")


def _slot_table(slots: list[ScheduledSlot], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Date", style="cyan")
    table.add_column("Time", style="bold")
    table.add_column("Units", justify="right")
    table.add_column("Task")
    table.add_column("Status")

    for slot in sorted(slots, key=lambda s: (s.date, s.start)):
        table.add_row(
            slot.date.isoformat(),
            str(slot.time_range),
            str(slot.unit_count),
            slot.subtask_id or slot.task_id,
            slot.status.value,
        )
    return table


# =============================================================================
# COMMANDS
# =============================================================================


@app.command()
def plan(
    text: str = typer.Argument(..., help="Task description"),
    units: int = typer.Option(..., "--units", "-u", min=1, help="Estimated pomodoro units"),
    priority: str = typer.Option(
        Priority.IMPORTANT_NOT_URGENT.value,
        "--priority",
        "-p",
        help="Priority (quadrant name or low/medium/high)",
    ),
    deadline: str | None = typer.Option(
        None,
        "--deadline",
        "-d",
        help="Deadline as YYYY-MM-DD[THH:MM] (defaults to the search window)",
    ),
    existing: Path | None = typer.Option(
        None,
        "--existing",
        "-e",
        help="JSON file with already scheduled slots",
    ),
    prefs: Path | None = typer.Option(
        None,
        "--prefs",
        help="JSON file with scheduling preferences",
    ),
    now: str | None = typer.Option(
        None,
        "--now",
        help="Reference time (defaults to the current time)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the new slots to this JSON file",
    ),
) -> None:
    """
    Schedule a task before its deadline.

    Example:
        focusplan plan "Write quarterly report" --units 6 --deadline 2026-10-30
    """
    from focusplan.core.scheduler import PomodoroScheduler

    task = Task(text=text, estimated_units=units, priority=Priority.from_legacy(priority))
    scheduler = PomodoroScheduler(_load_preferences(prefs))
    result = scheduler.schedule_task(
        task,
        deadline=_parse_moment(deadline, "deadline"),
        existing_slots=_load_slots(existing),
        now=_parse_moment(now, "--now"),
    )

    color = "green" if result.success else "red"
    console.print(
        Panel(
            f"{result.message}\n\n"
            f"[bold]Strategy:[/bold] {result.strategy.name}\n"
            f"[bold]Complexity:[/bold] {result.complexity.category.value} ({result.complexity.score:.2f})\n"
            f"[bold]Placed:[/bold] {result.placed_units}/{result.requested_units} units\n"
            f"[bold]Confidence:[/bold] {result.confidence:.0%}\n"
            f"[bold]Risk:[/bold] {result.risk_assessment.overall.value}",
            title=f"[bold {color}]Scheduling Result[/bold {color}]",
            border_style=color,
        )
    )

    if result.suggested_subtasks:
        table = Table(title="Suggested Subtasks")
        table.add_column("#", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Units", justify="right")
        for subtask in result.suggested_subtasks:
            table.add_row(str(subtask.order), subtask.name, str(subtask.estimated_units))
        console.print(table)

    if result.slots:
        console.print(_slot_table(result.slots, "Scheduled Slots"))
    for conflict in result.conflicts:
        console.print(f"[yellow]Unresolved {conflict.type}:[/yellow] {conflict.description}")
    for alternative in result.alternatives:
        console.print(f"[dim]Alternative - {alternative.description} ({alternative.confidence:.0%})[/dim]")

    if output:
        _write_slots(output, result.slots)

    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def check(
    slots_file: Path = typer.Argument(..., help="JSON file with scheduled slots"),
    prefs: Path | None = typer.Option(None, "--prefs", help="JSON file with scheduling preferences"),
    fix: bool = typer.Option(False, "--fix", help="Auto-resolve fixable conflicts"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the resolved slots to this JSON file (with --fix)",
    ),
) -> None:
    """
    Detect (and optionally fix) conflicts in a schedule.
    """
    from focusplan.core.scheduler import PomodoroScheduler

    scheduler = PomodoroScheduler(_load_preferences(prefs))
    slots = _load_slots(slots_file)
    report = scheduler.detect_conflicts(slots)

    severity_colors = {
        "critical": "bold red",
        "high": "red",
        "medium": "yellow",
        "low": "dim",
    }

    if report.is_clean:
        console.print("[bold green]No conflicts found[/bold green]")
        return

    table = Table(title=f"Conflicts ({report.total_conflicts})")
    table.add_column("Severity")
    table.add_column("Type", style="cyan")
    table.add_column("Description")
    table.add_column("Auto-fix")
    for conflict in report.ordered():
        color = severity_colors[conflict.severity.value]
        table.add_row(
            f"[{color}]{conflict.severity.value}[/{color}]",
            conflict.type,
            conflict.description,
            "yes" if conflict.auto_fixable else "no",
        )
    console.print(table)

    if not fix:
        raise typer.Exit(code=1)

    resolution = scheduler.resolve_conflicts(slots)
    console.print(_slot_table(resolution.slots, "Resolved Schedule"))
    if output:
        _write_slots(output, resolution.slots)

    if resolution.unresolved:
        console.print(f"[bold red]{len(resolution.unresolved)} conflict(s) need manual attention[/bold red]")
        for conflict in resolution.unresolved:
            console.print(f"  {conflict.id}: {conflict.suggested_resolution}")
        raise typer.Exit(code=1)
    console.print(f"[bold green]All conflicts resolved in {resolution.passes} pass(es)[/bold green]")


@app.command()
def capacity(
    week: str | None = typer.Option(
        None,
        "--week",
        "-w",
        help="Any date in the week to show (YYYY-MM-DD, defaults to this week)",
    ),
    existing: Path | None = typer.Option(
        None,
        "--existing",
        "-e",
        help="JSON file with already scheduled slots",
    ),
    prefs: Path | None = typer.Option(None, "--prefs", help="JSON file with scheduling preferences"),
) -> None:
    """
    Show weekly capacity and utilization health.
    """
    from focusplan.capacity.manager import CapacityManager

    moment = _parse_moment(week, "--week")
    anchor = moment.date() if moment else date.today()
    week_start = anchor - timedelta(days=anchor.weekday())

    manager = CapacityManager(_load_preferences(prefs), existing_slots=_load_slots(existing))
    weekly = manager.get_weekly_capacity(week_start)
    analysis = manager.analyze_utilization(weekly.week_start, weekly.week_end)

    table = Table(title=f"Capacity {weekly.week_start} - {weekly.week_end}")
    table.add_column("Date", style="cyan")
    table.add_column("Working")
    table.add_column("Used", justify="right")
    table.add_column("Available", justify="right")
    table.add_column("Utilization", justify="right")
    for day in weekly.daily:
        table.add_row(
            f"{day.date:%a %Y-%m-%d}",
            "yes" if day.is_working_day else "-",
            str(day.used_units),
            str(day.available_units),
            f"{day.utilization_rate:.0%}",
        )
    console.print(table)

    health = analysis.health
    console.print(
        f"Health: [bold]{health.overall_health.value}[/bold]  "
        f"balance={health.workload_balance:.2f} stress={health.stress_level:.2f} "
        f"burnout={health.burnout_risk:.2f}"
    )
    for flag in health.red_flags:
        console.print(f"  [red]! {flag.value}[/red]")
    for strength in health.strengths:
        console.print(f"  [green]+ {strength.value}[/green]")
    for rec in weekly.recommendations:
        console.print(f"  [dim]{rec.title}: {rec.description}[/dim]")


@app.command()
def config() -> None:
    """
    Show the effective configuration.
    """
    settings = get_settings()

    table = Table(title="FocusPlan Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="bold")
    for name, value in settings.model_dump().items():
        table.add_row(name.upper(), str(value))
    console.print(table)


if __name__ == "__main__":
    app()
