"""MCP server for ganttlayout: exposes the layout engine to AI assistants."""

from __future__ import annotations

import json
from datetime import datetime

from mcp.server.fastmcp import FastMCP

from ganttlayout import dates
from ganttlayout.engine import Layout, TimelineEngine
from ganttlayout.models import ChartOptions, ViewMode
from ganttlayout.modes import VIEW_DESCRIPTORS
from ganttlayout.normalize import SequentialIdProvider

mcp = FastMCP(
    "ganttlayout",
    instructions="""\
ganttlayout computes the layout of a timeline (Gantt) chart. Each task is a \
working period of one employee; every employee gets one row and the periods \
of that row are stacked inside it.

Key concepts:
- **View mode**: Quarter Day, Half Day, Day, Week, Month or Year. It decides \
how many hours one column covers and how wide a column is in pixels.
- **Ticks**: the column boundaries of the visible date range. The range is \
padded around the tasks depending on the view mode.
- **Invalid tasks**: tasks with missing or unreadable dates are repaired so \
they can still be drawn, and flagged "invalid".
- **Snap**: drag offsets are rounded to a day (Day view), a seventh of a \
column (Week) or a thirtieth of a column (Month).

Typical workflow:
1. Use list_view_modes to see the scales.
2. Use layout_timeline with a JSON list of tasks to get rows, bars and ticks.
3. Use snap_offset while moving a bar to keep it on the grid.\
""",
)


def _mode(view_mode: str) -> ViewMode:
    mode = ViewMode.lookup(view_mode)
    if mode is None:
        raise ValueError(f"Unknown view mode '{view_mode}'")
    return mode


def _layout_to_dict(engine: TimelineEngine, layout: Layout) -> dict:
    """Convert a layout to a JSON-friendly dict."""
    d: dict = {
        "view_mode": layout.mode.value,
        "hours_per_column": layout.scale.hours_per_column,
        "column_width": layout.scale.column_width_px,
        "empty": layout.is_empty,
        "rows": [
            {
                "employee_id": row.employee_id,
                "employee_name": row.employee_name,
                "y": geo.y_offset,
                "height": geo.height,
                "periods": [p.id for p in row.working_periods],
            }
            for row, geo in zip(engine.model.rows, layout.rows)
        ],
        "bars": [
            {
                "id": bar.task_id,
                "name": engine.model.working_periods[bar.bar_index].name,
                "start": engine.model.working_periods[bar.bar_index].start.isoformat(),
                "end": engine.model.working_periods[bar.bar_index].end.isoformat(),
                "x": round(bar.x, 2),
                "y": bar.y,
                "width": round(bar.width, 2),
                "invalid": bar.invalid,
            }
            for bar in layout.bars
        ],
    }
    if layout.date_range is not None:
        d["range"] = {
            "start": layout.date_range.start.isoformat(),
            "end": layout.date_range.end.isoformat(),
        }
        d["ticks"] = [
            {
                "date": tick.date.isoformat(),
                "upper": label.upper_text,
                "lower": label.lower_text,
            }
            for tick, label in zip(layout.ticks, layout.labels)
        ]
        d["scroll_x"] = round(layout.scroll_x, 2)
        d["grid_width"] = layout.grid_width
    d["grid_height"] = layout.grid_height
    return d


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def list_view_modes() -> str:
    """List every view mode with its hours per column and column width."""
    return json.dumps(
        [
            {
                "view_mode": mode.value,
                "hours_per_column": d.scale.hours_per_column,
                "column_width": d.scale.column_width_px,
            }
            for mode, d in VIEW_DESCRIPTORS.items()
        ],
        indent=2,
    )


@mcp.tool()
def layout_timeline(
    tasks_json: str,
    view_mode: str = "Day",
    language: str = "en",
    today: str | None = None,
) -> str:
    """Lay out a timeline chart.

    Args:
        tasks_json: JSON array of tasks. Each task may have: id, name,
            start_date, end_date (YYYY-MM-DD or ISO date-time), employee_id,
            employee_name, dependencies (list or comma-separated string).
        view_mode: Quarter Day, Half Day, Day, Week, Month or Year
        language: Locale for header labels (e.g. en, de, fr)
        today: Date to treat as today (YYYY-MM-DD), defaults to the real date
    """
    try:
        data = json.loads(tasks_json)
    except json.JSONDecodeError as e:
        return f"Error: invalid JSON: {e}"
    if isinstance(data, dict):
        data = data.get("tasks")
    if not isinstance(data, list) or not all(isinstance(t, dict) for t in data):
        return 'Error: tasks_json must be a JSON array of task objects (or {"tasks": [...]}).'

    try:
        options = ChartOptions(view_mode=_mode(view_mode), language=language)
    except ValueError as e:
        return f"Error: {e}"

    now: datetime | None = None
    if today:
        now = dates.parse(today)
        if now is None:
            return "Error: today must be in YYYY-MM-DD format."

    engine = TimelineEngine(
        data,
        options,
        id_provider=SequentialIdProvider(),
        clock=(lambda: now) if now is not None else None,
    )
    return json.dumps(_layout_to_dict(engine, engine.layout), indent=2)


@mcp.tool()
def snap_offset(dx: float, view_mode: str = "Day") -> str:
    """Round a horizontal drag offset (pixels) to the grid of a view mode.

    Args:
        dx: Drag offset in pixels (may be negative)
        view_mode: Quarter Day, Half Day, Day, Week, Month or Year
    """
    try:
        mode = _mode(view_mode)
    except ValueError as e:
        return f"Error: {e}"
    engine = TimelineEngine(options=ChartOptions(view_mode=mode))
    return f"{engine.snap(dx):g}"


def main():
    """Entry point for the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
