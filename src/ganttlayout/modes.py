"""Per view-mode descriptors: scale, range padding, stepping and label rules.

Every mode-dependent decision of the layout lives in one ``ViewDescriptor``
so that the range, tick, label, snap and grid-line code paths never branch
on the mode themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ganttlayout import dates
from ganttlayout.models import ScaleParams, ViewMode

logger = logging.getLogger(__name__)

LabelRule = Callable[[datetime, datetime, str], str]
PadRule = Callable[[datetime], datetime]


@dataclass(frozen=True)
class ViewDescriptor:
    mode: ViewMode
    scale: ScaleParams
    pad_start: PadRule
    pad_end: PadRule
    step: Callable[[datetime, ScaleParams], datetime]
    lower_text: LabelRule
    upper_text: LabelRule
    lower_x_offset: float  # in columns
    upper_x_offset: float  # in columns
    snap_divisor: int = 1
    thick: Callable[[datetime], bool] = lambda _d: False
    calendar_columns: bool = False  # grid lines follow month lengths


# ---------------------------------------------------------------------------
# Padding rules
# ---------------------------------------------------------------------------


def _back(qty: int, unit: str) -> PadRule:
    return lambda d: dates.subtract(d, qty, unit)


def _forward(qty: int, unit: str) -> PadRule:
    return lambda d: dates.add(d, qty, unit)


def _year_start(d: datetime) -> datetime:
    return dates.start_of(d, "year")


# ---------------------------------------------------------------------------
# Stepping rules
# ---------------------------------------------------------------------------


def _step_hours(current: datetime, scale: ScaleParams) -> datetime:
    return dates.add(current, scale.hours_per_column, "hour")


def _step_month(current: datetime, scale: ScaleParams) -> datetime:
    return dates.add(current, 1, "month")


def _step_year(current: datetime, scale: ScaleParams) -> datetime:
    return dates.add(current, 1, "year")


# ---------------------------------------------------------------------------
# Label rules. Each takes (tick, previous tick, locale).
# ---------------------------------------------------------------------------


def _fmt(pattern: str) -> LabelRule:
    return lambda d, prev, locale: dates.format_date(d, pattern, locale)


def _if_day_changed(pattern: str) -> LabelRule:
    def rule(d: datetime, prev: datetime, locale: str) -> str:
        return dates.format_date(d, pattern, locale) if d.day != prev.day else ""

    return rule


def _if_month_changed(pattern: str, otherwise: str | None = None) -> LabelRule:
    def rule(d: datetime, prev: datetime, locale: str) -> str:
        if d.month != prev.month:
            return dates.format_date(d, pattern, locale)
        return dates.format_date(d, otherwise, locale) if otherwise else ""

    return rule


def _if_year_changed(pattern: str) -> LabelRule:
    def rule(d: datetime, prev: datetime, locale: str) -> str:
        return dates.format_date(d, pattern, locale) if d.year != prev.year else ""

    return rule


def _half_day_upper(d: datetime, prev: datetime, locale: str) -> str:
    if d.day == prev.day:
        return ""
    pattern = "D MMM" if d.month != prev.month else "D"
    return dates.format_date(d, pattern, locale)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


VIEW_DESCRIPTORS: dict[ViewMode, ViewDescriptor] = {
    ViewMode.QUARTER_DAY: ViewDescriptor(
        mode=ViewMode.QUARTER_DAY,
        scale=ScaleParams(hours_per_column=6, column_width_px=38),
        pad_start=_back(7, "day"),
        pad_end=_forward(7, "day"),
        step=_step_hours,
        lower_text=_fmt("HH"),
        upper_text=_if_day_changed("D MMM"),
        lower_x_offset=2,
        upper_x_offset=0,
    ),
    ViewMode.HALF_DAY: ViewDescriptor(
        mode=ViewMode.HALF_DAY,
        scale=ScaleParams(hours_per_column=12, column_width_px=38),
        pad_start=_back(7, "day"),
        pad_end=_forward(7, "day"),
        step=_step_hours,
        lower_text=_fmt("HH"),
        upper_text=_half_day_upper,
        lower_x_offset=1,
        upper_x_offset=0,
    ),
    ViewMode.DAY: ViewDescriptor(
        mode=ViewMode.DAY,
        scale=ScaleParams(hours_per_column=24, column_width_px=38),
        pad_start=_back(1, "month"),
        pad_end=_forward(1, "month"),
        step=_step_hours,
        lower_text=_if_day_changed("D"),
        upper_text=_if_month_changed("MMMM"),
        lower_x_offset=1 / 2,
        upper_x_offset=15,
        thick=lambda d: d.day == 1,
    ),
    ViewMode.WEEK: ViewDescriptor(
        mode=ViewMode.WEEK,
        scale=ScaleParams(hours_per_column=24 * 7, column_width_px=140),
        pad_start=_back(1, "month"),
        pad_end=_forward(1, "month"),
        step=_step_hours,
        lower_text=_if_month_changed("D MMM", otherwise="D"),
        upper_text=_if_month_changed("MMMM"),
        lower_x_offset=0,
        upper_x_offset=2,
        snap_divisor=7,
        thick=lambda d: 1 <= d.day < 8,
    ),
    ViewMode.MONTH: ViewDescriptor(
        mode=ViewMode.MONTH,
        scale=ScaleParams(hours_per_column=24 * 30, column_width_px=120),
        pad_start=_year_start,
        pad_end=_forward(1, "year"),
        step=_step_month,
        lower_text=_fmt("MMMM"),
        upper_text=_if_year_changed("YYYY"),
        lower_x_offset=1 / 2,
        upper_x_offset=6,
        snap_divisor=30,
        thick=lambda d: (d.month - 1) % 3 == 0,
        calendar_columns=True,
    ),
    ViewMode.YEAR: ViewDescriptor(
        mode=ViewMode.YEAR,
        scale=ScaleParams(hours_per_column=24 * 365, column_width_px=120),
        pad_start=_back(2, "year"),
        pad_end=_forward(2, "year"),
        step=_step_year,
        lower_text=_fmt("YYYY"),
        upper_text=_if_year_changed("YYYY"),
        lower_x_offset=1 / 2,
        upper_x_offset=15,
    ),
}


def descriptor_for(mode: object, previous: ViewDescriptor | None = None) -> ViewDescriptor | None:
    """Look up the descriptor of *mode*.

    An unrecognized mode is not an error: the *previous* descriptor is
    returned unchanged (which may be None when there is none yet).
    """
    resolved = ViewMode.lookup(mode)
    if resolved is None:
        logger.warning("Unknown view mode %r, keeping the current scale", mode)
        return previous
    return VIEW_DESCRIPTORS[resolved]


def scale_for(mode: object, previous: ScaleParams | None = None) -> ScaleParams | None:
    """Hours per column and column width for *mode*."""
    descriptor = descriptor_for(mode)
    if descriptor is None:
        return previous
    return descriptor.scale
