"""Visible date range, tick columns and tick labels."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from ganttlayout import dates
from ganttlayout.models import DateRange, EmployeeRow, ScaleParams, Tick, TickLabel, ViewMode
from ganttlayout.modes import PadRule, ViewDescriptor, descriptor_for

logger = logging.getLogger(__name__)

# Distance between the lower and the upper header label.
UPPER_LABEL_RISE = 25

# Padding is clamped to these days.
FIRST_DAY = datetime.min
LAST_DAY = datetime.max.replace(hour=0, minute=0, second=0, microsecond=0)


def _descriptor(mode: ViewMode | ViewDescriptor | str) -> ViewDescriptor:
    if isinstance(mode, ViewDescriptor):
        return mode
    # Unlisted modes fall through to the Day rules.
    return descriptor_for(mode) or descriptor_for(ViewMode.DAY)


def raw_bounds(rows: Iterable[EmployeeRow]) -> DateRange | None:
    """Earliest start and latest end of all periods, truncated to the day."""
    start: datetime | None = None
    end: datetime | None = None
    for row in rows:
        for period in row.working_periods:
            if start is None or period.start < start:
                start = period.start
            if end is None or period.end > end:
                end = period.end
    if start is None or end is None:
        return None
    return DateRange(start=dates.start_of(start, "day"), end=dates.start_of(end, "day"))


def compute_range(
    rows: Iterable[EmployeeRow], mode: ViewMode | ViewDescriptor | str
) -> DateRange | None:
    """The padded range the chart shows, or None when there are no periods."""
    bounds = raw_bounds(rows)
    if bounds is None:
        return None
    descriptor = _descriptor(mode)
    return DateRange(
        start=_clamped(descriptor.pad_start, bounds.start, FIRST_DAY),
        end=_clamped(descriptor.pad_end, bounds.end, LAST_DAY),
    )


def _clamped(rule: PadRule, dt: datetime, limit: datetime) -> datetime:
    try:
        return rule(dt)
    except (OverflowError, ValueError):
        logger.info("Padding %s runs past the calendar, clamping to %s", dt.date(), limit.date())
        return limit


def generate_ticks(
    date_range: DateRange,
    mode: ViewMode | ViewDescriptor | str,
    scale: ScaleParams | None = None,
) -> list[Tick]:
    """Column boundaries from ``range.start`` up to the first one at or past ``range.end``."""
    descriptor = _descriptor(mode)
    scale = scale or descriptor.scale
    if scale.hours_per_column <= 0:
        raise ValueError("hours_per_column must be positive")

    ticks = [Tick(date=date_range.start, column_index=0)]
    current = date_range.start
    while current < date_range.end:
        try:
            current = descriptor.step(current, scale)
        except (OverflowError, ValueError):
            logger.info("Tick after %s is past the calendar, stopping", current)
            break
        ticks.append(Tick(date=current, column_index=len(ticks)))
    return ticks


def label_for(
    tick: Tick,
    previous: Tick | datetime | None,
    mode: ViewMode | ViewDescriptor | str,
    *,
    scale: ScaleParams | None = None,
    header_height: float = 50,
    locale: str | None = None,
) -> TickLabel:
    """Header texts and positions for one tick.

    A field is only printed when it differs from the previous tick. The
    first tick is compared with the instant exactly one year before it.
    """
    descriptor = _descriptor(mode)
    column_width = (scale or descriptor.scale).column_width_px

    if previous is None:
        try:
            prev = dates.subtract(tick.date, 1, "year")
        except (OverflowError, ValueError):
            prev = FIRST_DAY
    elif isinstance(previous, Tick):
        prev = previous.date
    else:
        prev = previous

    x = tick.column_index * column_width
    return TickLabel(
        upper_text=descriptor.upper_text(tick.date, prev, locale),
        lower_text=descriptor.lower_text(tick.date, prev, locale),
        upper_x=x + descriptor.upper_x_offset * column_width,
        lower_x=x + descriptor.lower_x_offset * column_width,
        upper_y=header_height - UPPER_LABEL_RISE,
        lower_y=header_height,
    )


def labels_for(
    ticks: list[Tick],
    mode: ViewMode | ViewDescriptor | str,
    *,
    scale: ScaleParams | None = None,
    header_height: float = 50,
    locale: str | None = None,
) -> list[TickLabel]:
    labels: list[TickLabel] = []
    previous: Tick | None = None
    for tick in ticks:
        labels.append(
            label_for(tick, previous, mode, scale=scale, header_height=header_height, locale=locale)
        )
        previous = tick
    return labels
