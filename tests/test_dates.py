from datetime import date, datetime

from ganttlayout import dates


def test_parse_accepts_dates_and_datetimes():
    assert dates.parse("2024-01-05") == datetime(2024, 1, 5)
    assert dates.parse("2024-01-05 10:30") == datetime(2024, 1, 5, 10, 30)
    assert dates.parse("2024-01-05T10:30:15") == datetime(2024, 1, 5, 10, 30, 15)
    assert dates.parse(date(2024, 1, 5)) == datetime(2024, 1, 5)
    assert dates.parse(datetime(2024, 1, 5, 8)) == datetime(2024, 1, 5, 8)


def test_parse_falls_back_to_the_date_format():
    assert dates.parse("05/01/2024", "DD/MM/YYYY") == datetime(2024, 1, 5)


def test_parse_returns_none_for_missing_or_garbage():
    assert dates.parse(None) is None
    assert dates.parse("") is None
    assert dates.parse("   ") is None
    assert dates.parse("not a date") is None
    assert dates.parse("not a date", "YYYY-MM-DD") is None
    assert dates.parse(42) is None


def test_add_is_calendar_aware_for_months_and_years():
    assert dates.add(datetime(2024, 1, 31), 1, "month") == datetime(2024, 2, 29)
    assert dates.add(datetime(2024, 2, 29), 1, "year") == datetime(2025, 2, 28)
    assert dates.subtract(datetime(2024, 3, 31), 1, "month") == datetime(2024, 2, 29)
    assert dates.add(datetime(2024, 1, 1), 6, "hour") == datetime(2024, 1, 1, 6)
    assert dates.add(datetime(2024, 1, 1), 2, "days") == datetime(2024, 1, 3)


def test_diff_counts_whole_units():
    assert dates.diff(datetime(2040, 1, 1), datetime(2024, 1, 1), "year") == 16
    assert dates.diff(datetime(2024, 3, 15), datetime(2024, 1, 20), "month") == 1
    assert dates.diff(datetime(2024, 1, 2, 6), datetime(2024, 1, 1), "hour") == 30
    assert dates.diff(datetime(2024, 1, 1), datetime(2024, 1, 3), "day") == -2


def test_hours_between_is_fractional():
    assert dates.hours_between(datetime(2024, 1, 1, 1, 30), datetime(2024, 1, 1)) == 1.5


def test_start_of_truncates():
    dt = datetime(2024, 3, 15, 10, 30, 5)
    assert dates.start_of(dt, "day") == datetime(2024, 3, 15)
    assert dates.start_of(dt, "month") == datetime(2024, 3, 1)
    assert dates.start_of(dt, "year") == datetime(2024, 1, 1)
    assert dates.start_of(dt, "hour") == datetime(2024, 3, 15, 10)


def test_midnight_and_month_length():
    assert dates.is_midnight(datetime(2024, 1, 5))
    assert not dates.is_midnight(datetime(2024, 1, 5, 0, 0, 1))
    assert dates.days_in_month(datetime(2024, 2, 10)) == 29
    assert dates.days_in_month(datetime(2023, 2, 10)) == 28


def test_format_date_tokens():
    dt = datetime(2024, 1, 5, 6)
    assert dates.format_date(dt, "HH") == "06"
    assert dates.format_date(dt, "D") == "5"
    assert dates.format_date(dt, "D MMM") == "5 Jan"
    assert dates.format_date(dt, "MMMM") == "January"
    assert dates.format_date(dt, "YYYY") == "2024"


def test_format_date_uses_the_locale():
    assert dates.format_date(datetime(2024, 1, 5), "MMMM", "de") == "Januar"
    assert dates.format_date(datetime(2024, 1, 5), "MMMM", "fr") == "janvier"


def test_unknown_locale_falls_back_to_english():
    assert dates.resolve_locale(None) == "en"
    assert dates.resolve_locale("de") == "de"
    assert dates.resolve_locale("xx-YY") == "en"
    assert dates.format_date(datetime(2024, 1, 5), "MMMM", "xx-YY") == "January"
