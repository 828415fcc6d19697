from datetime import datetime

import pytest

from ganttlayout import grid
from ganttlayout.grouping import group
from ganttlayout.models import DateRange, ScaleParams, Tick, ViewMode
from ganttlayout.normalize import SequentialIdProvider, normalize


def _rows(*periods):
    tasks = normalize(
        [
            {"name": f"t{i}", "start_date": s, "end_date": e, "employee_id": "E1"}
            for i, (s, e) in enumerate(periods)
        ],
        id_provider=SequentialIdProvider(),
    )
    return group(tasks).rows


ROWS = _rows(("2024-03-05 10:00", "2024-03-12"), ("2024-03-10", "2024-03-19"))


def _ticks(*values):
    return [Tick(date=d, column_index=i) for i, d in enumerate(values)]


# ---------------------------------------------------------------------------
# Range
# ---------------------------------------------------------------------------


def test_raw_bounds_are_truncated_to_the_day():
    bounds = grid.raw_bounds(ROWS)
    assert bounds == DateRange(datetime(2024, 3, 5), datetime(2024, 3, 20))


@pytest.mark.parametrize(
    "mode, start, end",
    [
        (ViewMode.QUARTER_DAY, datetime(2024, 2, 27), datetime(2024, 3, 27)),
        (ViewMode.HALF_DAY, datetime(2024, 2, 27), datetime(2024, 3, 27)),
        (ViewMode.DAY, datetime(2024, 2, 5), datetime(2024, 4, 20)),
        (ViewMode.WEEK, datetime(2024, 2, 5), datetime(2024, 4, 20)),
        (ViewMode.MONTH, datetime(2024, 1, 1), datetime(2025, 3, 20)),
        (ViewMode.YEAR, datetime(2022, 3, 5), datetime(2026, 3, 20)),
    ],
)
def test_range_padding_per_mode(mode, start, end):
    assert grid.compute_range(ROWS, mode) == DateRange(start, end)


def test_range_of_nothing_is_none():
    assert grid.compute_range([], ViewMode.DAY) is None
    assert grid.raw_bounds([]) is None


def test_unknown_mode_uses_day_padding():
    assert grid.compute_range(ROWS, "Fortnight") == grid.compute_range(ROWS, ViewMode.DAY)


# ---------------------------------------------------------------------------
# Ticks
# ---------------------------------------------------------------------------


def test_day_ticks_include_both_ends():
    r = DateRange(datetime(2024, 1, 1), datetime(2024, 1, 11))
    ticks = grid.generate_ticks(r, ViewMode.DAY)
    assert len(ticks) == 11
    assert ticks[0].date == r.start
    assert ticks[-1].date == r.end
    assert [t.column_index for t in ticks] == list(range(11))


def test_month_ticks_follow_the_calendar():
    r = DateRange(datetime(2024, 1, 1), datetime(2024, 4, 15))
    ticks = grid.generate_ticks(r, ViewMode.MONTH)
    assert [t.date for t in ticks] == [datetime(2024, m, 1) for m in range(1, 6)]


def test_week_ticks():
    r = DateRange(datetime(2024, 1, 1), datetime(2024, 1, 20))
    ticks = grid.generate_ticks(r, ViewMode.WEEK)
    assert [t.date.day for t in ticks] == [1, 8, 15, 22]


def test_year_ticks():
    r = DateRange(datetime(2022, 3, 5), datetime(2026, 3, 20))
    ticks = grid.generate_ticks(r, ViewMode.YEAR)
    assert [t.date.year for t in ticks] == [2022, 2023, 2024, 2025, 2026, 2027]
    assert all(t.date.month == 3 and t.date.day == 5 for t in ticks)


@pytest.mark.parametrize("mode", list(ViewMode))
def test_ticks_increase_and_cover_the_range(mode):
    r = grid.compute_range(ROWS, mode)
    ticks = grid.generate_ticks(r, mode)
    assert ticks[0].date == r.start
    assert ticks[-1].date >= r.end
    assert ticks[-2].date < r.end
    assert all(a.date < b.date for a, b in zip(ticks, ticks[1:]))


def test_ticks_need_a_positive_scale():
    r = DateRange(datetime(2024, 1, 1), datetime(2024, 1, 11))
    with pytest.raises(ValueError):
        grid.generate_ticks(r, ViewMode.DAY, ScaleParams(hours_per_column=0, column_width_px=38))


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def test_day_labels():
    ticks = _ticks(datetime(2024, 1, 30), datetime(2024, 1, 31), datetime(2024, 2, 1))
    labels = grid.labels_for(ticks, ViewMode.DAY)
    # the first tick is compared with the same day one year earlier
    assert (labels[0].lower_text, labels[0].upper_text) == ("", "")
    assert (labels[1].lower_text, labels[1].upper_text) == ("31", "")
    assert (labels[2].lower_text, labels[2].upper_text) == ("1", "February")
    assert labels[2].lower_x == 95
    assert labels[2].upper_x == 646
    assert labels[2].lower_y == 50
    assert labels[2].upper_y == 25


def test_week_labels():
    ticks = _ticks(datetime(2024, 1, 22), datetime(2024, 1, 29), datetime(2024, 2, 5))
    labels = grid.labels_for(ticks, ViewMode.WEEK)
    assert [label.lower_text for label in labels] == ["22", "29", "5 Feb"]
    assert [label.upper_text for label in labels] == ["", "", "February"]
    assert labels[2].lower_x == 280
    assert labels[2].upper_x == 560


def test_month_labels():
    ticks = _ticks(datetime(2024, 1, 1), datetime(2024, 2, 1))
    labels = grid.labels_for(ticks, ViewMode.MONTH)
    assert [label.lower_text for label in labels] == ["January", "February"]
    assert [label.upper_text for label in labels] == ["2024", ""]
    assert labels[1].lower_x == 180
    assert labels[1].upper_x == 840


def test_quarter_day_labels():
    ticks = _ticks(*(datetime(2024, 1, 1, h) for h in (0, 6, 12, 18)), datetime(2024, 1, 2))
    labels = grid.labels_for(ticks, ViewMode.QUARTER_DAY)
    assert [label.lower_text for label in labels] == ["00", "06", "12", "18", "00"]
    assert [label.upper_text for label in labels] == ["", "", "", "", "2 Jan"]
    assert labels[1].lower_x == 38 + 76


def test_half_day_labels():
    ticks = _ticks(
        datetime(2024, 1, 31, 12),
        datetime(2024, 2, 1),
        datetime(2024, 2, 1, 12),
        datetime(2024, 2, 2),
    )
    labels = grid.labels_for(ticks, ViewMode.HALF_DAY)
    assert [label.lower_text for label in labels] == ["12", "00", "12", "00"]
    assert [label.upper_text for label in labels] == ["", "1 Feb", "", "2"]
    assert labels[1].lower_x == 38 + 38


def test_year_labels():
    ticks = _ticks(datetime(2022, 3, 5), datetime(2023, 3, 5))
    labels = grid.labels_for(ticks, ViewMode.YEAR)
    assert [label.lower_text for label in labels] == ["2022", "2023"]
    assert [label.upper_text for label in labels] == ["2022", "2023"]


def test_labels_are_localized():
    ticks = _ticks(datetime(2024, 1, 1), datetime(2024, 2, 1))
    labels = grid.labels_for(ticks, ViewMode.MONTH, locale="de")
    assert [label.lower_text for label in labels] == ["Januar", "Februar"]


def test_label_for_accepts_a_previous_date():
    tick = Tick(date=datetime(2024, 2, 1), column_index=3)
    label = grid.label_for(tick, datetime(2024, 1, 31), ViewMode.DAY, header_height=80)
    assert label.upper_text == "February"
    assert label.lower_y == 80
    assert label.upper_y == 55


# ---------------------------------------------------------------------------
# Calendar edges
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("mode", list(ViewMode))
def test_padding_is_clamped_at_the_first_day(mode):
    rows = _rows(("0001-01-01", "0001-01-05"))
    r = grid.compute_range(rows, mode)
    assert r.start == datetime(1, 1, 1)
    assert r.end > datetime(1, 1, 6)
    ticks = grid.generate_ticks(r, mode)
    assert ticks[0].date == r.start
    labels = grid.labels_for(ticks, mode)
    assert len(labels) == len(ticks)


@pytest.mark.parametrize("mode", list(ViewMode))
def test_padding_is_clamped_at_the_last_day(mode):
    rows = _rows(("9999-12-20", "9999-12-25"))
    r = grid.compute_range(rows, mode)
    assert r.end == datetime(9999, 12, 31)
    assert r.start < datetime(9999, 12, 20)
    ticks = grid.generate_ticks(r, mode)
    assert all(a.date < b.date for a, b in zip(ticks, ticks[1:]))
    assert ticks[-1].date <= r.end


def test_day_ticks_reach_the_last_day():
    r = DateRange(datetime(9999, 12, 1), datetime(9999, 12, 31))
    ticks = grid.generate_ticks(r, ViewMode.DAY)
    assert ticks[-1].date == datetime(9999, 12, 31)
    assert len(ticks) == 31
