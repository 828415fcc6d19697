"""Task, row, grid and chart option definitions."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from typing import Any


class ViewMode(enum.StrEnum):
    QUARTER_DAY = "Quarter Day"
    HALF_DAY = "Half Day"
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"

    @classmethod
    def lookup(cls, value: object) -> ViewMode | None:
        """Resolve 'Quarter Day', 'QUARTER_DAY', 'quarter-day' or 'QuarterDay'."""
        if isinstance(value, ViewMode):
            return value
        if not isinstance(value, str):
            return None
        key = "".join(ch for ch in value.lower() if ch.isalnum())
        for mode in cls:
            if key == "".join(ch for ch in mode.value.lower() if ch.isalnum()):
                return mode
        return None


DateLike = str | date | datetime | None


@dataclass(frozen=True)
class RawTask:
    """A task record exactly as the host handed it over."""

    name: str = ""
    start_date: DateLike = None
    end_date: DateLike = None
    employee_id: str | None = None
    employee_name: str | None = None
    id: str | None = None
    dependencies: str | list[str] | None = None
    progress: float = 0
    custom_class: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, d: dict) -> RawTask:
        known = {f.name for f in fields(cls)} - {"extra"}
        employee_id = d.get("employee_id")
        return cls(
            name=str(d.get("name") or ""),
            start_date=d.get("start_date", d.get("start")),
            end_date=d.get("end_date", d.get("end")),
            employee_id=None if employee_id is None else str(employee_id),
            employee_name=d.get("employee_name"),
            id=str(d["id"]) if d.get("id") not in (None, "") else None,
            dependencies=d.get("dependencies"),
            progress=d.get("progress", 0) or 0,
            custom_class=d.get("custom_class"),
            extra={k: v for k, v in d.items() if k not in known | {"start", "end"}},
        )

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "start_date": _date_text(self.start_date),
            "end_date": _date_text(self.end_date),
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "dependencies": self.dependencies,
            "progress": self.progress,
        }
        if self.custom_class is not None:
            d["custom_class"] = self.custom_class
        d.update(self.extra)
        return d


def _date_text(value: DateLike) -> str | None:
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass
class NormalizedTask:
    """A working period after validation and repair."""

    id: str
    name: str
    start: datetime
    end: datetime
    employee_id: str | None
    employee_name: str | None
    raw: RawTask
    invalid: bool = False
    dependencies: list[str] = field(default_factory=list)
    progress: float = 0
    index: int = 0  # row counter assigned by the grouper
    bar_index: int = 0  # position in the flattened working period list

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "invalid": self.invalid,
            "dependencies": list(self.dependencies),
            "progress": self.progress,
            "index": self.index,
            "bar_index": self.bar_index,
        }


@dataclass
class EmployeeRow:
    """One chart row: every working period of a single employee."""

    employee_id: str | None
    employee_name: str | None
    index: int
    working_periods: list[NormalizedTask] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "index": self.index,
            "working_periods": [p.to_dict() for p in self.working_periods],
        }


@dataclass(frozen=True)
class ScaleParams:
    hours_per_column: float
    column_width_px: float


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Tick:
    date: datetime
    column_index: int


@dataclass(frozen=True)
class TickLabel:
    upper_text: str
    lower_text: str
    upper_x: float
    lower_x: float
    upper_y: float
    lower_y: float


@dataclass(frozen=True)
class RowGeometry:
    row_index: int
    y_offset: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y_offset + self.height


@dataclass(frozen=True)
class BarGeometry:
    task_id: str
    row_index: int
    bar_index: int
    x: float
    y: float
    width: float
    height: float
    invalid: bool = False


@dataclass(frozen=True)
class ChartOptions:
    """Immutable chart settings handed to every layout computation.

    Column widths are not configurable: each view mode fixes its own.
    """

    header_height: float = 50
    bar_height: float = 20
    padding: float = 18
    view_mode: ViewMode = ViewMode.DAY
    view_modes: tuple[ViewMode, ...] = tuple(ViewMode)
    date_format: str = "YYYY-MM-DD"
    language: str = "en"
    min_bar_width: float = 2.0

    def __post_init__(self) -> None:
        for name in ("header_height", "bar_height", "padding", "min_bar_width"):
            value = getattr(self, name)
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Chart option '{name}' must be a number, got {value!r}") from None
            if number < 0:
                raise ValueError(f"Chart option '{name}' must not be negative")
            object.__setattr__(self, name, number)

        modes = []
        for value in self.view_modes:
            mode = ViewMode.lookup(value)
            if mode is None:
                raise ValueError(f"Unknown view mode '{value}' in view_modes")
            if mode not in modes:
                modes.append(mode)
        if not modes:
            raise ValueError("view_modes must name at least one view mode")
        object.__setattr__(self, "view_modes", tuple(modes))

        mode = ViewMode.lookup(self.view_mode)
        if mode is None:
            raise ValueError(f"Unknown view mode '{self.view_mode}'")
        if mode not in self.view_modes:
            raise ValueError(f"View mode '{mode}' is not one of the enabled view_modes")
        object.__setattr__(self, "view_mode", mode)

    @property
    def row_pitch(self) -> float:
        """Vertical space taken by one working period."""
        return self.bar_height + self.padding

    def to_dict(self) -> dict:
        d = asdict(self)
        d["view_mode"] = self.view_mode.value
        d["view_modes"] = [m.value for m in self.view_modes]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> ChartOptions:
        defaults = cls()
        modes = d.get("view_modes") or defaults.view_modes
        if isinstance(modes, str):
            modes = [modes]
        return cls(
            header_height=d.get("header_height", defaults.header_height),
            bar_height=d.get("bar_height", defaults.bar_height),
            padding=d.get("padding", defaults.padding),
            view_mode=d.get("view_mode", defaults.view_mode),
            view_modes=tuple(modes),
            date_format=d.get("date_format", defaults.date_format),
            language=d.get("language", d.get("locale", defaults.language)),
            min_bar_width=d.get("min_bar_width", defaults.min_bar_width),
        )
