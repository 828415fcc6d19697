"""Reading task lists (and optional chart options) from JSON."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from ganttlayout.models import ChartOptions, RawTask

DEFAULT_TASK_FILE = "tasks.json"


class TaskFile:
    """Reads the JSON document a chart is built from.

    ``-`` reads standard input.
    """

    def __init__(self, path: str | Path = DEFAULT_TASK_FILE):
        self.path = path if str(path) == "-" else Path(path)

    def read_text(self) -> str:
        if str(self.path) == "-":
            return sys.stdin.read()
        if not self.path.is_file():
            raise ValueError(f"File not found: {self.path}")
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ValueError(f"Cannot read {self.path}: {e}") from e

    def load(self) -> tuple[ChartOptions | None, list[RawTask]]:
        """Return (options_or_None, [RawTask, ...])."""
        try:
            raw = json.loads(self.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e

        # {"options": {...}, "tasks": [...]} or just [...]
        options = None
        if isinstance(raw, dict):
            if isinstance(raw.get("options"), dict):
                options = ChartOptions.from_dict(raw["options"])
            entries = raw.get("tasks")
        else:
            entries = raw

        if not isinstance(entries, list):
            raise ValueError('JSON must be a list of tasks or have a "tasks" array.')

        tasks: list[RawTask] = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ValueError(f"Task at index {i} is not an object.")
            tasks.append(RawTask.from_dict(entry))
        return options, tasks


def load_options(path: str | Path) -> ChartOptions:
    """Chart options from a standalone JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ValueError(f"File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Chart options must be a JSON object.")
    return ChartOptions.from_dict(data)
