"""Calendar arithmetic on naive local wall-clock datetimes."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from functools import lru_cache

import pendulum

logger = logging.getLogger(__name__)

# Units understood by add(), diff() and start_of().
UNITS = ("microsecond", "second", "minute", "hour", "day", "week", "month", "year")

_FIXED_UNITS = {
    "microsecond": timedelta(microseconds=1),
    "second": timedelta(seconds=1),
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
}

DEFAULT_LOCALE = "en"


def _unit(unit: str) -> str:
    u = unit.lower()
    if u.endswith("s"):
        u = u[:-1]
    if u not in UNITS:
        raise ValueError(f"Unknown calendar unit '{unit}'")
    return u


def _to_pendulum(dt: datetime) -> pendulum.DateTime:
    # Work in UTC so month/year arithmetic never hits a DST gap.
    return pendulum.instance(dt.replace(tzinfo=None), tz="UTC")


def _to_naive(dt: pendulum.DateTime) -> datetime:
    return datetime(
        dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, dt.microsecond
    )


# ---------------------------------------------------------------------------
# Construction / parsing
# ---------------------------------------------------------------------------


def today() -> datetime:
    """Midnight of the current local day."""
    return datetime.combine(date.today(), time())


def now() -> datetime:
    return datetime.now().replace(tzinfo=None)


def parse(value: object, date_format: str | None = None) -> datetime | None:
    """Turn a date-ish value into a naive datetime, or None if it can't be read.

    Strings are tried as ISO 8601 first (``2024-01-05``, ``2024-01-05 10:30``,
    ``2024-01-05T10:30:00``), then against *date_format* using pendulum tokens.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        pass

    if date_format:
        try:
            return _to_naive(pendulum.from_format(text, date_format))
        except ValueError:
            pass

    logger.debug("Could not parse date value %r", value)
    return None


def get_date_values(dt: datetime) -> tuple[int, int, int, int, int, int, int]:
    """(year, month, day, hour, minute, second, microsecond)."""
    return (dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, dt.microsecond)


def is_midnight(dt: datetime) -> bool:
    return all(v == 0 for v in get_date_values(dt)[3:])


def days_in_month(dt: datetime) -> int:
    return _to_pendulum(dt).days_in_month


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


def add(dt: datetime, qty: float, unit: str) -> datetime:
    """Add *qty* units to *dt*. Months and years are calendar-aware."""
    u = _unit(unit)
    if u in _FIXED_UNITS:
        return dt + _FIXED_UNITS[u] * qty
    moved = _to_pendulum(dt).add(**{f"{u}s": int(qty)})
    return _to_naive(moved)


def subtract(dt: datetime, qty: float, unit: str) -> datetime:
    return add(dt, -qty, unit)


def diff(a: datetime, b: datetime, unit: str = "day") -> int:
    """Whole *unit*s elapsed from *b* to *a* (negative when a < b)."""
    u = _unit(unit)
    if u in _FIXED_UNITS:
        elapsed = (a - b) / _FIXED_UNITS[u]
        return int(elapsed)
    interval = _to_pendulum(b).diff(_to_pendulum(a), False)
    return interval.in_years() if u == "year" else interval.in_months()


def hours_between(a: datetime, b: datetime) -> float:
    """Fractional hours from *b* to *a*."""
    return (a - b).total_seconds() / 3600


def start_of(dt: datetime, unit: str) -> datetime:
    """Truncate *dt* to the start of its *unit*."""
    u = _unit(unit)
    if u == "microsecond":
        return dt
    return _to_naive(_to_pendulum(dt).start_of(u))


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


@lru_cache(maxsize=32)
def resolve_locale(tag: str | None) -> str:
    """Map a locale tag like ``en-US`` or ``pt_BR`` onto a pendulum locale."""
    if not tag:
        return DEFAULT_LOCALE
    candidate = tag.replace("-", "_").lower()
    for option in (candidate, candidate.split("_")[0]):
        try:
            pendulum.locale(option)
        except ValueError:
            continue
        return option
    logger.warning("Locale '%s' is not available, using '%s'", tag, DEFAULT_LOCALE)
    return DEFAULT_LOCALE


def format_date(dt: datetime, pattern: str, locale: str | None = None) -> str:
    """Format *dt* with pendulum tokens (``HH``, ``D``, ``D MMM``, ``MMMM``, ``YYYY``)."""
    return _to_pendulum(dt).format(pattern, locale=resolve_locale(locale))
