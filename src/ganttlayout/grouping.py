"""Partition working periods into per-employee rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import networkx as nx

from ganttlayout.models import EmployeeRow, NormalizedTask

logger = logging.getLogger(__name__)


@dataclass
class GroupedTasks:
    """Employee rows plus the row-major flattened list of their periods."""

    rows: list[EmployeeRow] = field(default_factory=list)
    working_periods: list[NormalizedTask] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._by_id = {p.id: p for p in self.working_periods}

    def __len__(self) -> int:
        return len(self.working_periods)

    def find_task(self, task_id: str) -> NormalizedTask | None:
        return self._by_id.get(task_id)

    def dependency_graph(self) -> nx.DiGraph:
        """Edges point from a dependency to the period that waits on it.

        Dependencies on ids that are not part of the chart are ignored.
        """
        G = nx.DiGraph()
        for period in self.working_periods:
            G.add_node(period.id, bar_index=period.bar_index)
        for period in self.working_periods:
            for dep in period.dependencies:
                if dep in self._by_id and dep != period.id:
                    G.add_edge(dep, period.id)
        return G

    @property
    def dependency_map(self) -> dict[str, list[str]]:
        """{dependency id: [ids of the periods that depend on it]}."""
        mapping: dict[str, list[str]] = {}
        for period in self.working_periods:
            for dep in period.dependencies:
                mapping.setdefault(dep, []).append(period.id)
        return mapping

    def dependents_of(self, task_id: str) -> list[str]:
        """Every period that depends on *task_id*, directly or transitively."""
        G = self.dependency_graph()
        if task_id not in G:
            return []
        found = nx.descendants(G, task_id)
        return [p.id for p in self.working_periods if p.id in found]


def group(tasks: list[NormalizedTask]) -> GroupedTasks:
    """Group periods by employee id in order of first appearance.

    Each period's ``index`` becomes its row counter and ``bar_index`` its
    position in the flattened, row-major period list.
    """
    buckets: dict[str | None, list[NormalizedTask]] = {}
    for task in tasks:
        buckets.setdefault(task.employee_id, []).append(task)

    rows: list[EmployeeRow] = []
    for row_index, (employee_id, periods) in enumerate(buckets.items()):
        for period in periods:
            period.index = row_index
        rows.append(
            EmployeeRow(
                employee_id=employee_id,
                employee_name=periods[0].employee_name,
                index=row_index,
                working_periods=list(periods),
            )
        )

    flat: list[NormalizedTask] = []
    for row in rows:
        for period in row.working_periods:
            period.bar_index = len(flat)
            flat.append(period)

    logger.debug("Grouped %d working periods into %d rows", len(flat), len(rows))
    return GroupedTasks(rows=rows, working_periods=flat)
