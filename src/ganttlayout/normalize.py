"""Validation and repair of raw task records."""

from __future__ import annotations

import itertools
import logging
import random
import string
from datetime import datetime
from typing import Callable, Iterable, Mapping

from ganttlayout import dates
from ganttlayout.models import NormalizedTask, RawTask

logger = logging.getLogger(__name__)

IdProvider = Callable[[RawTask], str]

# Longest period (in whole years) accepted before the end date is dropped.
MAX_DURATION_YEARS = 10
# Length given to periods that are missing one or both dates.
DEFAULT_SPAN_DAYS = 2

_ID_ALPHABET = string.digits + string.ascii_lowercase


class RandomIdProvider:
    """``<name>_<10 random base-36 chars>``. Best effort, collisions possible."""

    def __init__(self, rng: random.Random | None = None, length: int = 10):
        self._rng = rng or random.Random()
        self._length = length

    def __call__(self, raw: RawTask) -> str:
        suffix = "".join(self._rng.choice(_ID_ALPHABET) for _ in range(self._length))
        return f"{raw.name}_{suffix}"


class SequentialIdProvider:
    """``<prefix>-1``, ``<prefix>-2``, ... for reproducible ids."""

    def __init__(self, prefix: str = "task", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self, raw: RawTask) -> str:
        return f"{self.prefix}-{next(self._counter)}"


def parse_dependencies(value: object) -> list[str]:
    """Split a comma-separated string into trimmed ids.

    Lists and tuples are kept as-is, any other single value becomes a
    one-element list.
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(dep) for dep in value]
    return [str(value)]


def _as_raw(task: RawTask | NormalizedTask | Mapping) -> tuple[RawTask, str | None]:
    if isinstance(task, NormalizedTask):
        return task.raw, task.id
    if isinstance(task, RawTask):
        return task, task.id
    raw = RawTask.from_dict(dict(task))
    return raw, raw.id


def _repair(
    raw: RawTask,
    start: datetime | None,
    end: datetime | None,
    today: datetime | None,
) -> tuple[datetime, datetime]:
    end_given = end is not None

    if start is None and end is None:
        start = dates.start_of(today, "day") if today is not None else dates.today()
        end = dates.add(start, DEFAULT_SPAN_DAYS, "day")
    elif end is None:
        end = dates.add(start, DEFAULT_SPAN_DAYS, "day")
    elif start is None:
        start = dates.subtract(end, DEFAULT_SPAN_DAYS, "day")

    # A bare end date means the whole of that day is included.
    if end_given and dates.is_midnight(end):
        end = dates.add(end, 24, "hour")

    if end <= start:
        logger.debug("Task %r ends before it starts, giving it a %d day span", raw.name, DEFAULT_SPAN_DAYS)
        end = dates.add(start, DEFAULT_SPAN_DAYS, "day")
    return start, end


def normalize_task(
    task: RawTask | NormalizedTask | Mapping,
    *,
    id_provider: IdProvider | None = None,
    today: datetime | None = None,
    date_format: str | None = None,
) -> NormalizedTask:
    """Repair a single record into a renderable working period.

    Never raises for bad dates: problems only show up as ``invalid=True``.
    An already normalized task is re-derived from its original record and
    keeps its id, so running this twice gives the same dates.
    """
    raw, task_id = _as_raw(task)
    start = dates.parse(raw.start_date, date_format)
    end = dates.parse(raw.end_date, date_format)

    if start is not None and end is not None and dates.diff(end, start, "year") > MAX_DURATION_YEARS:
        logger.debug("Task %r spans more than %d years, dropping its end date", raw.name, MAX_DURATION_YEARS)
        end = None

    invalid = start is None or end is None
    try:
        start, end = _repair(raw, start, end, today)
    except (OverflowError, ValueError):
        # Repairs ran off the end of the calendar.
        logger.debug("Task %r has dates at the edge of the calendar, treating them as missing", raw.name)
        invalid = True
        start, end = _repair(raw, None, None, today)

    if invalid:
        logger.debug("Task %r has missing or unreadable dates", raw.name)

    if not task_id:
        task_id = (id_provider or RandomIdProvider())(raw)

    return NormalizedTask(
        id=task_id,
        name=raw.name,
        start=start,
        end=end,
        employee_id=raw.employee_id,
        employee_name=raw.employee_name,
        raw=raw,
        invalid=invalid,
        dependencies=parse_dependencies(raw.dependencies),
        progress=raw.progress,
    )


def normalize(
    tasks: Iterable[RawTask | NormalizedTask | Mapping],
    *,
    id_provider: IdProvider | None = None,
    today: datetime | None = None,
    date_format: str | None = None,
) -> list[NormalizedTask]:
    """Normalize every record, preserving input order."""
    provider = id_provider or RandomIdProvider()
    result = [
        normalize_task(t, id_provider=provider, today=today, date_format=date_format)
        for t in tasks
    ]
    for i, task in enumerate(result):
        task.index = i
    return result
