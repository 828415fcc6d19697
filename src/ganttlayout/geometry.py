"""Pixel geometry for rows, bars, grid lines and markers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from ganttlayout import dates
from ganttlayout.grouping import GroupedTasks
from ganttlayout.models import (
    BarGeometry,
    ChartOptions,
    DateRange,
    EmployeeRow,
    RowGeometry,
    ScaleParams,
    Tick,
    ViewMode,
)
from ganttlayout.modes import ViewDescriptor, descriptor_for


@dataclass(frozen=True)
class TickLine:
    x: float
    thick: bool


@dataclass(frozen=True)
class Highlight:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class NameLabel:
    text: str
    row_index: int
    y: float


def _content_top(options: ChartOptions) -> float:
    return options.header_height + options.padding / 2


# ---------------------------------------------------------------------------
# Rows and bars
# ---------------------------------------------------------------------------


def row_geometry(rows: list[EmployeeRow], options: ChartOptions) -> list[RowGeometry]:
    """Stack rows top to bottom; a row is as tall as its periods."""
    result: list[RowGeometry] = []
    offset = 0.0
    for row in rows:
        height = len(row.working_periods) * options.row_pitch
        result.append(
            RowGeometry(row_index=row.index, y_offset=_content_top(options) + offset, height=height)
        )
        offset += height
    return result


def x_for(instant: datetime, date_range: DateRange, scale: ScaleParams) -> float:
    """Horizontal pixel position of *instant* on the grid."""
    hours = dates.hours_between(instant, date_range.start)
    return hours / scale.hours_per_column * scale.column_width_px


def width_for(start: datetime, end: datetime, scale: ScaleParams, min_width: float = 0) -> float:
    hours = dates.hours_between(end, start)
    return max(hours / scale.hours_per_column * scale.column_width_px, min_width)


def bar_geometry(
    grouped: GroupedTasks,
    date_range: DateRange,
    scale: ScaleParams,
    options: ChartOptions,
) -> list[BarGeometry]:
    """One bar per working period, numbered across all rows."""
    top = _content_top(options)
    bars: list[BarGeometry] = []
    for j, period in enumerate(grouped.working_periods):
        bars.append(
            BarGeometry(
                task_id=period.id,
                row_index=period.index,
                bar_index=j,
                x=x_for(period.start, date_range, scale),
                y=top + j * options.row_pitch,
                width=width_for(period.start, period.end, scale, options.min_bar_width),
                height=options.bar_height,
                invalid=period.invalid,
            )
        )
    return bars


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------


def today_x(date_range: DateRange, scale: ScaleParams, now: datetime | None = None) -> float:
    return x_for(now or dates.now(), date_range, scale)


def today_highlight(
    date_range: DateRange,
    scale: ScaleParams,
    options: ChartOptions,
    period_count: int,
    today: datetime | None = None,
) -> Highlight:
    """Column-wide band over today's column, header included."""
    day = today or dates.today()
    return Highlight(
        x=x_for(day, date_range, scale),
        y=0,
        width=scale.column_width_px,
        height=period_count * options.row_pitch + _content_top(options),
    )


def scroll_position(grouped: GroupedTasks, date_range: DateRange, scale: ScaleParams) -> float:
    """Left scroll offset that brings the earliest period into view."""
    if not grouped.working_periods:
        return 0.0
    oldest = min(p.start for p in grouped.working_periods)
    return max(0.0, x_for(oldest, date_range, scale) - scale.column_width_px)


def snap(dx: float, mode: ViewMode | ViewDescriptor | str, column_width: float) -> float:
    """Round a drag offset to the nearest column subdivision of *mode*.

    Remainders of at most half a unit round down, larger ones round up.
    """
    descriptor = mode if isinstance(mode, ViewDescriptor) else descriptor_for(mode)
    divisor = descriptor.snap_divisor if descriptor is not None else 1
    unit = column_width / divisor
    if unit <= 0:
        return dx
    base = math.floor(dx / unit) * unit
    rem = dx - base
    return base if rem <= unit / 2 else base + unit


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------


def grid_width(ticks: list[Tick], scale: ScaleParams) -> float:
    return len(ticks) * scale.column_width_px


def grid_height(period_count: int, options: ChartOptions) -> float:
    return options.header_height + options.padding + period_count * options.row_pitch


def tick_lines(
    ticks: list[Tick], descriptor: ViewDescriptor, scale: ScaleParams | None = None
) -> list[TickLine]:
    """Vertical column lines; calendar modes follow the real month length."""
    column_width = (scale or descriptor.scale).column_width_px
    lines: list[TickLine] = []
    x = 0.0
    for tick in ticks:
        lines.append(TickLine(x=x, thick=descriptor.thick(tick.date)))
        if descriptor.calendar_columns:
            x += dates.days_in_month(tick.date) * column_width / 30
        else:
            x += column_width
    return lines


def name_labels(rows: list[EmployeeRow], options: ChartOptions) -> list[NameLabel]:
    """Employee names, aligned with the first bar of each row."""
    labels: list[NameLabel] = []
    for geometry, row in zip(row_geometry(rows, options), rows):
        labels.append(
            NameLabel(
                text=row.employee_name or str(row.employee_id or ""),
                row_index=row.index,
                y=geometry.y_offset + options.bar_height,
            )
        )
    return labels
