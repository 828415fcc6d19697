import json

import pytest

from ganttlayout.models import ViewMode
from ganttlayout.taskfile import TaskFile, load_options


def test_load_a_plain_list(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([{"name": "a", "start": "2024-01-01"}, {"name": "b"}]))
    options, tasks = TaskFile(path).load()
    assert options is None
    assert [t.name for t in tasks] == ["a", "b"]
    assert tasks[0].start_date == "2024-01-01"


def test_load_with_options(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"options": {"view_mode": "Month", "padding": 10}, "tasks": [{"name": "a"}]}))
    options, tasks = TaskFile(path).load()
    assert options.view_mode is ViewMode.MONTH
    assert options.padding == 10
    assert len(tasks) == 1


def test_load_errors(tmp_path):
    with pytest.raises(ValueError, match="File not found"):
        TaskFile(tmp_path / "missing.json").load()

    path = tmp_path / "tasks.json"
    path.write_text("{broken")
    with pytest.raises(ValueError, match="Invalid JSON"):
        TaskFile(path).load()

    path.write_text(json.dumps({"items": []}))
    with pytest.raises(ValueError, match="tasks"):
        TaskFile(path).load()

    path.write_text(json.dumps([{"name": "a"}, "b"]))
    with pytest.raises(ValueError, match="index 1"):
        TaskFile(path).load()


def test_load_options(tmp_path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"view_mode": "Half Day", "locale": "fr"}))
    options = load_options(path)
    assert options.view_mode is ViewMode.HALF_DAY
    assert options.language == "fr"

    path.write_text("[]")
    with pytest.raises(ValueError):
        load_options(path)
    with pytest.raises(ValueError):
        load_options(tmp_path / "missing.json")


def test_directories_are_rejected(tmp_path):
    with pytest.raises(ValueError, match="File not found"):
        TaskFile(tmp_path).load()
    with pytest.raises(ValueError, match="Cannot read"):
        load_options(tmp_path)
