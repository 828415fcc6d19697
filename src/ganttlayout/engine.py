"""Timeline layout engine: tasks + view mode -> model, ticks, labels, geometry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Mapping, Protocol

from ganttlayout import dates, geometry, grid
from ganttlayout.grouping import GroupedTasks, group
from ganttlayout.models import (
    BarGeometry,
    ChartOptions,
    DateRange,
    NormalizedTask,
    RawTask,
    RowGeometry,
    ScaleParams,
    Tick,
    TickLabel,
    ViewMode,
)
from ganttlayout.modes import ViewDescriptor, descriptor_for
from ganttlayout.normalize import IdProvider, RandomIdProvider, normalize

logger = logging.getLogger(__name__)

VIEW_CHANGE = "view_change"

Listener = Callable[..., object]


class Renderer(Protocol):
    def render(self, layout: Layout) -> object: ...


@dataclass
class Layout:
    """Everything a renderer needs to draw one state of the chart."""

    mode: ViewMode
    scale: ScaleParams
    model: GroupedTasks
    date_range: DateRange | None = None
    ticks: list[Tick] = field(default_factory=list)
    labels: list[TickLabel] = field(default_factory=list)
    rows: list[RowGeometry] = field(default_factory=list)
    bars: list[BarGeometry] = field(default_factory=list)
    tick_lines: list[geometry.TickLine] = field(default_factory=list)
    name_labels: list[geometry.NameLabel] = field(default_factory=list)
    today_x: float | None = None
    today_highlight: geometry.Highlight | None = None
    scroll_x: float = 0.0
    grid_width: float = 0.0
    grid_height: float = 0.0

    @property
    def is_empty(self) -> bool:
        """True when there is no grid to draw (no or degenerate periods)."""
        return not self.ticks


def compute_layout(
    grouped: GroupedTasks,
    mode: ViewMode | ViewDescriptor | str,
    options: ChartOptions,
    *,
    now: datetime | None = None,
) -> Layout:
    """Pure layout pass over an already grouped model."""
    descriptor = mode if isinstance(mode, ViewDescriptor) else descriptor_for(mode)
    if descriptor is None:
        descriptor = descriptor_for(options.view_mode)
    scale = descriptor.scale
    layout = Layout(
        mode=descriptor.mode,
        scale=scale,
        model=grouped,
        rows=geometry.row_geometry(grouped.rows, options),
        name_labels=geometry.name_labels(grouped.rows, options),
        grid_height=geometry.grid_height(len(grouped), options),
    )

    bounds = grid.raw_bounds(grouped.rows)
    if bounds is None:
        logger.info("No working periods, skipping the date grid")
        return layout
    if bounds.start == bounds.end:
        logger.info("All working periods fall on %s, skipping the date grid", bounds.start.date())
        return layout

    date_range = grid.compute_range(grouped.rows, descriptor)
    ticks = grid.generate_ticks(date_range, descriptor, scale)
    current = now or dates.now()

    layout.date_range = date_range
    layout.ticks = ticks
    layout.labels = grid.labels_for(
        ticks,
        descriptor,
        scale=scale,
        header_height=options.header_height,
        locale=options.language,
    )
    layout.bars = geometry.bar_geometry(grouped, date_range, scale, options)
    layout.tick_lines = geometry.tick_lines(ticks, descriptor, scale)
    layout.today_x = geometry.today_x(date_range, scale, current)
    if descriptor.mode == ViewMode.DAY:
        layout.today_highlight = geometry.today_highlight(
            date_range, scale, options, len(grouped), dates.start_of(current, "day")
        )
    layout.scroll_x = geometry.scroll_position(grouped, date_range, scale)
    layout.grid_width = geometry.grid_width(ticks, scale)
    return layout


class TimelineEngine:
    """Owns the current chart state and rebuilds it wholesale on every change.

    Nothing is updated in place: ``refresh`` and ``change_view_mode`` each
    produce a brand new ``Layout``.
    """

    def __init__(
        self,
        tasks: Iterable[RawTask | NormalizedTask | Mapping] = (),
        options: ChartOptions | None = None,
        *,
        renderer: Renderer | None = None,
        id_provider: IdProvider | None = None,
        on_view_change: Listener | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        if renderer is not None and not callable(getattr(renderer, "render", None)):
            raise TypeError(
                "renderer must provide a render(layout) method, "
                f"got {type(renderer).__name__}"
            )
        self.options = options or ChartOptions()
        self.renderer = renderer
        self.id_provider = id_provider or RandomIdProvider()
        self.clock = clock or dates.now
        self._listeners: dict[str, list[Listener]] = {}
        if on_view_change is not None:
            self.on(VIEW_CHANGE, on_view_change)

        self.descriptor: ViewDescriptor = descriptor_for(self.options.view_mode)
        self.tasks: list[NormalizedTask] = []
        self.model = GroupedTasks()
        self.layout: Layout | None = None

        self.setup_tasks(tasks)
        self.change_view_mode()

    # -- events -------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def trigger_event(self, event: str, *args: object) -> None:
        for listener in self._listeners.get(event, []):
            listener(*args)

    # -- state --------------------------------------------------------------

    @property
    def view_mode(self) -> ViewMode:
        return self.descriptor.mode

    @property
    def scale(self) -> ScaleParams:
        return self.descriptor.scale

    def view_is(self, *modes: ViewMode | str) -> bool:
        return any(ViewMode.lookup(m) == self.view_mode for m in modes)

    def setup_tasks(self, tasks: Iterable[RawTask | NormalizedTask | Mapping]) -> None:
        today = dates.start_of(self.clock(), "day")
        self.tasks = normalize(
            tasks,
            id_provider=self.id_provider,
            today=today,
            date_format=self.options.date_format,
        )
        self.model = group(self.tasks)

    def refresh(self, tasks: Iterable[RawTask | NormalizedTask | Mapping]) -> Layout:
        """Replace the task list and recompute everything."""
        self.setup_tasks(tasks)
        return self.change_view_mode()

    def change_view_mode(self, mode: ViewMode | str | None = None) -> Layout:
        """Switch to *mode* (or re-apply the current one) and rebuild the layout.

        An unknown mode, or one missing from ``options.view_modes``, keeps the
        current scale.
        """
        if mode is not None:
            resolved = ViewMode.lookup(mode)
            if resolved is not None and resolved not in self.options.view_modes:
                logger.warning("View mode %s is not enabled, keeping the current scale", resolved)
            else:
                self.descriptor = descriptor_for(mode, self.descriptor)
        self.layout = compute_layout(self.model, self.descriptor, self.options, now=self.clock())
        logger.debug(
            "Laid out %d periods in %d rows over %d columns (%s)",
            len(self.model),
            len(self.model.rows),
            len(self.layout.ticks),
            self.view_mode,
        )
        if self.renderer is not None:
            self.renderer.render(self.layout)
        self.trigger_event(VIEW_CHANGE, self.view_mode)
        return self.layout

    # -- lookups ------------------------------------------------------------

    def find_task(self, task_id: str) -> NormalizedTask | None:
        return self.model.find_task(task_id)

    def get_bar(self, task_id: str) -> BarGeometry | None:
        if self.layout is None:
            return None
        return next((b for b in self.layout.bars if b.task_id == task_id), None)

    def dependents_of(self, task_id: str) -> list[str]:
        return self.model.dependents_of(task_id)

    def snap(self, dx: float) -> float:
        return geometry.snap(dx, self.descriptor, self.scale.column_width_px)
