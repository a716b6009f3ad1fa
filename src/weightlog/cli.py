"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from weightlog.config import default_config_path, get_settings, reload_settings
from weightlog.config.settings import Settings
from weightlog.db import get_db
from weightlog.exceptions import WeightLogError
from weightlog.tracking.analytics import TrendAnalytics
from weightlog.tracking.diagnostics import (
    format_change,
    format_projection_report,
    format_stats_report,
    format_trend_report,
    format_weight,
)
from weightlog.tracking.models import DateRange, UserProfile, WeightUnit
from weightlog.tracking.queries import SqliteSampleStore, UserQueries, WeightQueries
from weightlog.tracking.serialization import (
    serialize_projection,
    serialize_sample,
    serialize_stats,
    serialize_trend_analysis,
    serialize_user,
)

app = typer.Typer(
    help="Personal body-weight tracking with trend and projection analytics",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

user_app = typer.Typer(help="Manage user profile and goal weight")
weight_app = typer.Typer(help="Log and edit weight entries")
config_app = typer.Typer(help="Show or create the config file")

app.add_typer(user_app, name="user")
app.add_typer(weight_app, name="weight")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(command: str, message: str, json_output: bool, suggestions: Optional[list[str]] = None) -> NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        response: dict = {"success": False, "command": command, "errors": [message]}
        if suggestions:
            response["suggestions"] = suggestions
        output_json(response)
    else:
        console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)
        for suggestion in suggestions or []:
            console.print(escape(suggestion), soft_wrap=True)
    raise typer.Exit(1)


def parse_weight(value: str, unit: WeightUnit) -> Decimal:
    """Parse a weight in the given unit and return kilograms."""
    try:
        weight = Decimal(value)
    except InvalidOperation:
        raise typer.BadParameter(f"Invalid weight: {value}") from None
    if not weight.is_finite() or weight <= 0:
        raise typer.BadParameter(f"Weight must be a positive number, got {value}")
    return unit.to_kg(weight)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO-8601 date option."""
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date (expected YYYY-MM-DD): {value}") from None


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse an HH:MM[:SS] time option."""
    if value is None:
        return None
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid time (expected HH:MM): {value}") from None


def resolve_range(
    start_str: Optional[str], end_str: Optional[str], days: Optional[int], month: bool = False
) -> DateRange:
    """Build a date range from --start/--end/--days/--month options."""
    if month:
        return DateRange.current_month()

    days = days or get_settings().defaults.history_days
    start = parse_date(start_str)
    end = parse_date(end_str)

    if start is None and end is None:
        return DateRange.last_days(days)
    if start is None:
        return DateRange(end - timedelta(days=days), end)  # type: ignore[operator]
    return DateRange(start, end or date.today())


def resolve_user(conn, user_id: Optional[int], command: str, json_output: bool) -> UserProfile:
    """Load the requested profile, or the default one."""
    if user_id is not None:
        profile = UserQueries.get_user(conn, user_id)
    else:
        profile = UserQueries.get_default_user(conn)

    if profile is None:
        fail(
            command,
            "No user profile found",
            json_output,
            ["Create a profile with: weightlog user create --name <name> --goal <weight>"],
        )
    return profile


def build_analytics() -> TrendAnalytics:
    """Create TrendAnalytics over the configured database."""
    config = get_settings().analytics
    return TrendAnalytics(
        SqliteSampleStore(get_db()),
        regression_window_days=config.regression_window_days,
        projection_horizon_days=config.projection_horizon_days,
        max_goal_horizon_days=config.max_goal_horizon_days,
    )


def configure_logging(verbose: bool) -> None:
    """Send weightlog's log records to stderr through Rich."""
    package_logger = logging.getLogger("weightlog")
    package_logger.handlers = [RichHandler(console=err_console, show_path=False)]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging and ensure tables exist before any command."""
    configure_logging(verbose)
    get_db().initialize_schema()


# ============================================================================
# User Profile Commands
# ============================================================================


@user_app.command("create")
def user_create(
    name: str = typer.Option(..., "--name", help="Display name"),
    height: Optional[float] = typer.Option(None, "--height", help="Height in cm"),
    goal: Optional[str] = typer.Option(None, "--goal", help="Goal weight (in --unit)"),
    unit: Optional[WeightUnit] = typer.Option(None, "--unit", help="Preferred unit (kg/lb)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create a user profile."""
    unit = unit or get_settings().defaults.unit
    goal_kg = parse_weight(goal, unit) if goal is not None else None

    try:
        profile = UserProfile(
            user_id=None,
            name=name,
            height_cm=height,
            goal_weight_kg=goal_kg,
            preferred_unit=unit,
        )
    except ValueError as exc:
        fail("user create", str(exc), json_output)

    with get_db().get_connection() as conn:
        profile.user_id = UserQueries.create_user(conn, profile)

    if json_output:
        output_json({
            "success": True,
            "command": "user create",
            "data": serialize_user(profile),
            "human_summary": f"Created user profile (ID: {profile.user_id})",
        })
    else:
        console.print(f"[green]Created user profile (ID: {profile.user_id})[/green]")


@user_app.command("show")
def user_show(
    user_id: Optional[int] = typer.Option(None, "--id", help="User ID (default: first user)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show user profile."""
    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "user show", json_output)

    unit = profile.preferred_unit
    if json_output:
        output_json({
            "success": True,
            "command": "user show",
            "data": serialize_user(profile),
            "human_summary": f"User {profile.user_id}: {profile.name}",
        })
    else:
        console.print(f"[bold]User Profile (ID: {profile.user_id})[/bold]")
        console.print(f"  Name: {profile.name}")
        if profile.height_cm:
            console.print(f"  Height: {profile.height_cm} cm")
        console.print(f"  Unit: {unit.value}")
        if profile.starting_weight_kg is not None:
            console.print(f"  Starting weight: {format_weight(profile.starting_weight_kg, unit)}")
        if profile.goal_weight_kg is not None:
            console.print(f"  Goal weight: {format_weight(profile.goal_weight_kg, unit)}")


@user_app.command("update")
def user_update(
    user_id: Optional[int] = typer.Option(None, "--id", help="User ID (default: first user)"),
    name: Optional[str] = typer.Option(None, "--name", help="Update display name"),
    goal: Optional[str] = typer.Option(None, "--goal", help="Update goal weight (in --unit)"),
    clear_goal: bool = typer.Option(False, "--clear-goal", help="Remove the goal weight"),
    unit: Optional[WeightUnit] = typer.Option(None, "--unit", help="Update preferred unit"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Update user profile."""
    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "user update", json_output)

        if unit is not None:
            profile.preferred_unit = unit
        if name is not None:
            if not name.strip():
                fail("user update", "name must not be empty", json_output)
            profile.name = name
        if clear_goal:
            profile.goal_weight_kg = None
        elif goal is not None:
            profile.goal_weight_kg = parse_weight(goal, profile.preferred_unit)

        UserQueries.update_user(conn, profile)

    if json_output:
        output_json({
            "success": True,
            "command": "user update",
            "data": serialize_user(profile),
            "human_summary": "Profile updated",
        })
    else:
        console.print("[green]Profile updated[/green]")


# ============================================================================
# Weight Commands
# ============================================================================


@weight_app.command("add")
def weight_add(
    weight: str = typer.Argument(..., help="Weight (in --unit, default: profile unit)"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    time_str: Optional[str] = typer.Option(None, "--time", "-t", help="Time (HH:MM, default: now)"),
    note: Optional[str] = typer.Option(None, "--note", "-n", help="Optional note"),
    unit: Optional[WeightUnit] = typer.Option(None, "--unit", help="Unit of WEIGHT (kg/lb)"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID (default: first user)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Add a weight entry (trend vs. previous entry computed automatically)."""
    measured_at = parse_date(date_str) or date.today()
    time_of_day = parse_time(time_str) or datetime.now().time().replace(microsecond=0)

    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "weight add", json_output)
        unit = unit or profile.preferred_unit
        weight_kg = parse_weight(weight, unit)
        sample = WeightQueries.add_weight(
            conn, profile.user_id, weight_kg, measured_at, time_of_day, note  # type: ignore[arg-type]
        )

    if json_output:
        output_json({
            "success": True,
            "command": "weight add",
            "data": serialize_sample(sample),
            "human_summary": f"Logged {format_weight(sample.weight_kg, unit)} ({sample.trend.value})",  # type: ignore[union-attr]
        })
    else:
        console.print(f"[green]Logged:[/green] {format_weight(sample.weight_kg, unit)} on {measured_at}")
        console.print(f"[blue]Trend:[/blue] {sample.trend.value}")  # type: ignore[union-attr]


@weight_app.command("list")
def weight_list(
    limit: int = typer.Option(30, "--limit", "-n", min=1, help="Number of most recent entries to show"),
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Show every entry from the last N days instead"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List weight history with per-entry trends."""
    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "weight list", json_output)
        if days:
            history = WeightQueries.get_samples_in_range(
                conn, profile.user_id, DateRange.last_days(days)  # type: ignore[arg-type]
            )
        else:
            history = WeightQueries.get_weight_history(conn, profile.user_id, limit=limit)  # type: ignore[arg-type]

    if json_output:
        output_json({
            "success": True,
            "command": "weight list",
            "data": {"entries": [serialize_sample(s) for s in history]},
            "human_summary": f"{len(history)} entries",
        })
        return

    if not history:
        console.print("No weight entries found")
        return

    unit = profile.preferred_unit
    span = f"last {days} days" if days else f"last {len(history)} entries"
    table = Table(title=f"Weight History ({span})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Time")
    table.add_column("Weight", justify="right")
    table.add_column("Trend", style="blue")
    table.add_column("Note")

    for sample in history:
        table.add_row(
            str(sample.log_id),
            sample.measured_at.isoformat(),
            sample.time_of_day.strftime("%H:%M"),
            format_weight(sample.weight_kg, unit),
            sample.trend.value if sample.trend else "",
            sample.note or "",
        )

    console.print(table)


@weight_app.command("update")
def weight_update(
    log_id: int = typer.Argument(..., help="Entry ID (see: weightlog weight list)"),
    weight: str = typer.Argument(..., help="New weight"),
    date_str: Optional[str] = typer.Option(None, "--date", "-d", help="New date (YYYY-MM-DD)"),
    time_str: Optional[str] = typer.Option(None, "--time", "-t", help="New time (HH:MM)"),
    note: Optional[str] = typer.Option(None, "--note", "-n", help="New note"),
    clear_note: bool = typer.Option(False, "--clear-note", help="Remove the note"),
    unit: Optional[WeightUnit] = typer.Option(None, "--unit", help="Unit of WEIGHT (kg/lb)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Edit a weight entry and recompute its trend."""
    measured_at = parse_date(date_str)
    time_of_day = parse_time(time_str)

    try:
        with get_db().get_connection() as conn:
            existing = WeightQueries.get_sample(conn, log_id)
            owner = UserQueries.get_user(conn, existing.user_id) if existing else None  # type: ignore[arg-type]
            unit = unit or (owner.preferred_unit if owner else get_settings().defaults.unit)
            weight_kg = parse_weight(weight, unit)
            sample = WeightQueries.update_weight(
                conn, log_id, weight_kg, measured_at, time_of_day, note, clear_note=clear_note
            )
    except WeightLogError as exc:
        fail("weight update", str(exc), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "weight update",
            "data": serialize_sample(sample),
            "human_summary": f"Updated entry {log_id}",
        })
    else:
        console.print(f"[green]Updated entry {log_id}:[/green] {format_weight(sample.weight_kg, unit)}")


@weight_app.command("delete")
def weight_delete(
    log_id: int = typer.Argument(..., help="Entry ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete a weight entry."""
    try:
        with get_db().get_connection() as conn:
            WeightQueries.delete_weight(conn, log_id)
    except WeightLogError as exc:
        fail("weight delete", str(exc), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "weight delete",
            "data": {"log_id": log_id},
            "human_summary": f"Deleted entry {log_id}",
        })
    else:
        console.print(f"[green]Deleted entry {log_id}[/green]")


# ============================================================================
# Analytics Commands
# ============================================================================


@app.command()
def stats(
    start_str: Optional[str] = typer.Option(None, "--start", help="Start date (YYYY-MM-DD)"),
    end_str: Optional[str] = typer.Option(None, "--end", help="End date (YYYY-MM-DD, default: today)"),
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Days to cover when --start is omitted"),
    month: bool = typer.Option(False, "--month", help="Cover the current calendar month"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show summary statistics for a date range."""
    date_range = resolve_range(start_str, end_str, days, month)

    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "stats", json_output)

    try:
        result = build_analytics().get_stats(
            profile.user_id, date_range.start_date, date_range.end_date  # type: ignore[arg-type]
        )
    except WeightLogError as exc:
        fail("stats", str(exc), json_output)

    unit = profile.preferred_unit
    if json_output:
        output_json({
            "success": True,
            "command": "stats",
            "data": serialize_stats(result),
            "human_summary": (
                f"{result.record_count} entries over {date_range.days_in_range} days, "
                f"change {format_change(result.total_change, unit)}"
            ),
        })
    else:
        console.print(format_stats_report(result, unit))


@app.command()
def trend(
    start_str: Optional[str] = typer.Option(None, "--start", help="Start date (YYYY-MM-DD)"),
    end_str: Optional[str] = typer.Option(None, "--end", help="End date (YYYY-MM-DD, default: today)"),
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Days to cover when --start is omitted"),
    month: bool = typer.Option(False, "--month", help="Cover the current calendar month"),
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the overall trend and average rate of change for a date range."""
    date_range = resolve_range(start_str, end_str, days, month)

    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "trend", json_output)

    try:
        analysis = build_analytics().get_trend_analysis(
            profile.user_id, date_range.start_date, date_range.end_date  # type: ignore[arg-type]
        )
    except WeightLogError as exc:
        fail("trend", str(exc), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "trend",
            "data": serialize_trend_analysis(analysis),
            "human_summary": f"Trend: {analysis.range_trend.value} over {len(analysis.data_points)} entries",
        })
    else:
        console.print(format_trend_report(analysis, profile.preferred_unit))


@app.command()
def projection(
    user_id: Optional[int] = typer.Option(None, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Project weight forward and estimate when the goal is reached."""
    with get_db().get_connection() as conn:
        profile = resolve_user(conn, user_id, "projection", json_output)

    try:
        result = build_analytics().get_projection(profile.user_id)  # type: ignore[arg-type]
    except WeightLogError as exc:
        fail("projection", str(exc), json_output)

    if json_output:
        summary = (
            f"On track, goal around {result.estimated_goal_date}"
            if result.is_on_track
            else "Not on track"
        )
        output_json({
            "success": True,
            "command": "projection",
            "data": serialize_projection(result),
            "human_summary": summary,
        })
    else:
        console.print(format_projection_report(result, profile.preferred_unit))


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the settings in effect."""
    data = get_settings().to_dict()

    if json_output:
        output_json({
            "success": True,
            "command": "config show",
            "data": data,
            "human_summary": f"Database at {data['database']['path']}",
        })
        return

    for section, values in data.items():
        console.print(f"[bold]{section}[/bold]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Write a config.yaml with default settings."""
    path = path or default_config_path()
    if path.exists() and not force:
        fail("config init", f"{path} already exists", json_output, ["Use --force to overwrite it"])

    Settings().save(path)
    settings = reload_settings(path)

    if json_output:
        output_json({
            "success": True,
            "command": "config init",
            "data": {"path": str(path), **settings.to_dict()},
            "human_summary": f"Wrote {path}",
        })
    else:
        console.print(f"[green]Wrote {path}[/green]")


if __name__ == "__main__":
    app()
