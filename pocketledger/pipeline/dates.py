from __future__ import annotations

import calendar
import re
from datetime import date

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# The Gregorian calendar repeats every 400 years.
DAYS_PER_400_YEARS = 146097


def is_iso_date(value) -> bool:
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_iso_date(iso: str) -> tuple[int, int, int]:
    y, m, d = (int(part) for part in iso.split("-"))
    return y, m, d


def format_iso_date(y: int, m: int, d: int) -> str:
    return f"{y:04d}-{m:02d}-{d:02d}"


def days_in_month(y: int, m: int) -> int:
    if m == 2 and calendar.isleap(y):
        return 29
    return calendar.mdays[m]


def month_index(iso: str) -> int:
    """Months since year 0, so month distances are plain subtraction."""
    y, m, _ = parse_iso_date(iso)
    return y * 12 + (m - 1)


def month_key(iso: str) -> str:
    return iso[:7]


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    total = year * 12 + (month - 1) + months
    return total // 12, total % 12 + 1


def month_start(year: int, month: int) -> str:
    return format_iso_date(year, month, 1)


def _to_ordinal(iso: str) -> int:
    # Overflowing months and days roll forward, so "2025-02-30" is 2025-03-02.
    y, m, d = parse_iso_date(iso)
    y, m = shift_month(y, 1, m - 1)
    cycles, y = divmod(y - 1, 400)
    return cycles * DAYS_PER_400_YEARS + date(y + 1, m, 1).toordinal() + d - 1


def _from_ordinal(ordinal: int) -> str:
    cycles, ordinal = divmod(ordinal - 1, DAYS_PER_400_YEARS)
    day = date.fromordinal(ordinal + 1)
    return format_iso_date(day.year + cycles * 400, day.month, day.day)


def add_days(iso: str, days: int) -> str:
    return _from_ordinal(_to_ordinal(iso) + days)


def add_months_clamped(iso: str, months: int, target_day: int | None = None) -> str:
    """Whole-month step; the day is capped at the target month's length.

    ``target_day`` overrides the day of ``iso`` so repeated steps keep aiming at the
    anchor's day-of-month: 01-31 -> 02-28 -> 03-31, not 03-28.
    """
    y, m, d = parse_iso_date(iso)
    next_y, next_m = shift_month(y, m, months)
    day = min(target_day if target_day is not None else d, days_in_month(next_y, next_m))
    return format_iso_date(next_y, next_m, day)


def add_years_clamped(iso: str, years: int, target_day: int | None = None) -> str:
    y, m, d = parse_iso_date(iso)
    next_y = y + years
    day = min(target_day if target_day is not None else d, days_in_month(next_y, m))
    return format_iso_date(next_y, m, day)


def diff_days(a_iso: str, b_iso: str) -> int:
    """Signed number of days from ``a_iso`` to ``b_iso``."""
    return _to_ordinal(b_iso) - _to_ordinal(a_iso)


def compare_iso(a_iso: str, b_iso: str) -> int:
    a, b = parse_iso_date(a_iso), parse_iso_date(b_iso)
    if a == b:
        return 0
    return -1 if a < b else 1
