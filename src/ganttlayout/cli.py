"""Typer CLI for ganttlayout."""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ganttlayout import dates
from ganttlayout.engine import TimelineEngine
from ganttlayout.models import ChartOptions, RawTask, ViewMode
from ganttlayout.modes import VIEW_DESCRIPTORS
from ganttlayout.normalize import SequentialIdProvider
from ganttlayout.render import TerminalRenderer
from ganttlayout.taskfile import TaskFile, load_options

app = typer.Typer(
    name="ganttlayout",
    help="Timeline (Gantt) layout engine for the command line.",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="More log output (-v info, -vv debug)")] = 0,
) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _parse_mode(value: str | None) -> ViewMode | None:
    if value is None:
        return None
    mode = ViewMode.lookup(value)
    if mode is None:
        choices = ", ".join(m.value for m in ViewMode)
        console.print(f"[red]Unknown view mode '{value}'. Use one of: {choices}[/red]")
        raise typer.Exit(1)
    return mode


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = dates.parse(value)
    if parsed is None:
        console.print(f"[red]Invalid date '{value}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)
    return parsed


def _load(
    file: str,
    config: str | None,
    view_mode: str | None,
    language: str | None,
) -> tuple[ChartOptions, list[RawTask]]:
    overrides: dict = {}
    mode = _parse_mode(view_mode)
    if mode is not None:
        overrides["view_mode"] = mode
    if language:
        overrides["language"] = language

    try:
        file_options, tasks = TaskFile(file).load()
        options = load_options(config) if config else (file_options or ChartOptions())
        if overrides:
            options = dataclasses.replace(options, **overrides)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    return options, tasks


def _build_engine(options: ChartOptions, tasks: list[RawTask], now: datetime | None, **kwargs) -> TimelineEngine:
    clock = (lambda: now) if now is not None else None
    return TimelineEngine(tasks, options, id_provider=SequentialIdProvider(), clock=clock, **kwargs)


FileArg = Annotated[str, typer.Argument(help="JSON task file, or - for stdin")]
ModeOpt = Annotated[Optional[str], typer.Option("--view-mode", "-m", help="Quarter Day, Half Day, Day, Week, Month or Year")]
ConfigOpt = Annotated[Optional[str], typer.Option("--config", "-c", help="JSON file with chart options")]
LanguageOpt = Annotated[Optional[str], typer.Option("--language", "-l", help="Locale for header labels (e.g. en, de, fr)")]
NowOpt = Annotated[Optional[str], typer.Option("--now", help="Pretend today is this date (YYYY-MM-DD)")]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def modes() -> None:
    """List the view modes and their column scale."""
    table = Table(title="View modes")
    table.add_column("Mode")
    table.add_column("Hours / column", justify="right")
    table.add_column("Column width (px)", justify="right")
    table.add_column("Snap unit (px)", justify="right")

    for mode, d in VIEW_DESCRIPTORS.items():
        table.add_row(
            mode.value,
            f"{d.scale.hours_per_column:g}",
            f"{d.scale.column_width_px:g}",
            f"{d.scale.column_width_px / d.snap_divisor:.2f}",
        )
    console.print(table)


@app.command()
def layout(
    file: FileArg,
    view_mode: ModeOpt = None,
    config: ConfigOpt = None,
    language: LanguageOpt = None,
    now: NowOpt = None,
    ticks: Annotated[bool, typer.Option("--ticks", help="Also list every tick and its labels")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the layout as JSON")] = False,
) -> None:
    """Compute and print rows, bars and the date grid for a task file."""
    options, tasks = _load(file, config, view_mode, language)
    engine = _build_engine(options, tasks, _parse_now(now))
    result = engine.layout

    if as_json:
        console.print_json(json.dumps(_layout_to_dict(engine), default=str))
        return

    if not tasks:
        console.print("No tasks found.")
        return

    if result.is_empty:
        console.print("[yellow]Not enough date spread to lay out a grid.[/yellow]")
    else:
        console.print(
            f"[bold]{result.mode.value}[/bold] view: "
            f"{result.date_range.start:%Y-%m-%d} → {result.date_range.end:%Y-%m-%d}, "
            f"{len(result.ticks)} columns, grid {result.grid_width:g}×{result.grid_height:g}px"
        )

    rows = Table(title="Rows")
    rows.add_column("#", justify="right")
    rows.add_column("Employee")
    rows.add_column("Periods", justify="right")
    rows.add_column("Y", justify="right")
    rows.add_column("Height", justify="right")
    for row, geo in zip(engine.model.rows, result.rows):
        rows.add_row(
            str(row.index),
            row.employee_name or str(row.employee_id or "-"),
            str(len(row.working_periods)),
            f"{geo.y_offset:g}",
            f"{geo.height:g}",
        )
    console.print(rows)

    if result.bars:
        bars = Table(title="Bars")
        bars.add_column("#", justify="right")
        bars.add_column("ID")
        bars.add_column("Name")
        bars.add_column("Start")
        bars.add_column("End")
        bars.add_column("X", justify="right")
        bars.add_column("Y", justify="right")
        bars.add_column("Width", justify="right")
        bars.add_column("Flags")
        for bar in result.bars:
            period = engine.model.working_periods[bar.bar_index]
            bars.add_row(
                str(bar.bar_index),
                period.id,
                period.name,
                period.start.strftime("%b %d, %H:%M"),
                period.end.strftime("%b %d, %H:%M"),
                f"{bar.x:.1f}",
                f"{bar.y:g}",
                f"{bar.width:.1f}",
                "INVALID" if bar.invalid else "-",
                style="dim" if bar.invalid else None,
            )
        console.print(bars)

    if ticks and result.ticks:
        grid = Table(title="Ticks")
        grid.add_column("#", justify="right")
        grid.add_column("Date")
        grid.add_column("Upper")
        grid.add_column("Lower")
        for tick, label in zip(result.ticks, result.labels):
            grid.add_row(
                str(tick.column_index),
                tick.date.strftime("%Y-%m-%d %H:%M"),
                label.upper_text or "-",
                label.lower_text or "-",
            )
        console.print(grid)


@app.command()
def chart(
    file: FileArg,
    view_mode: ModeOpt = None,
    config: ConfigOpt = None,
    language: LanguageOpt = None,
    now: NowOpt = None,
    width: Annotated[Optional[int], typer.Option("--width", "-w", help="Maximum chart width in characters")] = None,
    no_scroll: Annotated[bool, typer.Option("--no-scroll", help="Start at the left edge of the grid")] = False,
) -> None:
    """Draw the chart in the terminal."""
    options, tasks = _load(file, config, view_mode, language)
    renderer = TerminalRenderer(
        console,
        max_width=width or console.width,
        scroll=not no_scroll,
    )
    _build_engine(options, tasks, _parse_now(now), renderer=renderer)


@app.command()
def snap(
    dx: Annotated[float, typer.Argument(help="Drag offset in pixels")],
    view_mode: ModeOpt = None,
) -> None:
    """Round a drag offset to the grid of a view mode."""
    mode = _parse_mode(view_mode) or ViewMode.DAY
    engine = TimelineEngine(options=ChartOptions(view_mode=mode))
    console.print(f"{engine.snap(dx):g}")


def _layout_to_dict(engine: TimelineEngine) -> dict:
    result = engine.layout
    return {
        "view_mode": result.mode.value,
        "scale": dataclasses.asdict(result.scale),
        "range": dataclasses.asdict(result.date_range) if result.date_range else None,
        "rows": [
            {**row.to_dict(), "geometry": dataclasses.asdict(geo)}
            for row, geo in zip(engine.model.rows, result.rows)
        ],
        "bars": [dataclasses.asdict(b) for b in result.bars],
        "ticks": [
            {**dataclasses.asdict(t), **dataclasses.asdict(label)}
            for t, label in zip(result.ticks, result.labels)
        ],
        "today_x": result.today_x,
        "scroll_x": result.scroll_x,
        "grid": {"width": result.grid_width, "height": result.grid_height},
    }


if __name__ == "__main__":
    app()
