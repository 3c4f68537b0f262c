from __future__ import annotations

from datetime import MAXYEAR
from typing import Iterator

import structlog

from .dates import (
    add_days,
    add_months_clamped,
    add_years_clamped,
    compare_iso,
    diff_days,
    month_index,
    parse_iso_date,
)
from .models import Frequency, LedgerEntry, RecurrenceRule

log = structlog.get_logger()

# Hard bound on every enumeration loop, whatever the rule looks like.
SAFETY_CAP = 500


def normalize_rule(rule: RecurrenceRule) -> RecurrenceRule:
    if rule.times_per_period and rule.times_per_period > 1:
        log.warning(
            "recurrence_times_per_period_unsupported",
            times_per_period=rule.times_per_period,
            frequency=rule.frequency.value,
        )
    return RecurrenceRule(
        frequency=rule.frequency,
        interval=rule.interval if rule.interval and rule.interval > 0 else 1,
        times_per_period=1,
    )


def advance(iso: str, rule: RecurrenceRule, target_day: int | None = None) -> str:
    if rule.frequency == Frequency.WEEKLY:
        return add_days(iso, 7 * rule.interval)
    if rule.frequency == Frequency.MONTHLY:
        return add_months_clamped(iso, rule.interval, target_day)
    return add_years_clamped(iso, rule.interval, target_day)


def next_occurrence(anchor: str, rule: RecurrenceRule, from_date: str) -> str:
    """First occurrence of ``rule`` anchored at ``anchor`` that falls on or after ``from_date``."""
    return _next_occurrence(anchor, normalize_rule(rule), from_date)


def _next_occurrence(anchor: str, rule: RecurrenceRule, from_date: str) -> str:
    interval = rule.interval

    if compare_iso(from_date, anchor) <= 0:
        return anchor

    if rule.frequency == Frequency.WEEKLY:
        period_days = 7 * interval
        jumps = -(-diff_days(anchor, from_date) // period_days)
        return add_days(anchor, jumps * period_days)

    _, _, target_day = parse_iso_date(anchor)
    if rule.frequency == Frequency.MONTHLY:
        months_diff = max(0, month_index(from_date) - month_index(anchor))
        candidate = add_months_clamped(anchor, (months_diff // interval) * interval, target_day)
    else:
        years_diff = max(0, parse_iso_date(from_date)[0] - parse_iso_date(anchor)[0])
        candidate = add_years_clamped(anchor, (years_diff // interval) * interval, target_day)

    steps = 0
    while compare_iso(candidate, from_date) < 0 and steps < SAFETY_CAP:
        candidate = advance(candidate, rule, target_day)
        steps += 1
    return candidate


def iter_occurrences(anchor: str, rule: RecurrenceRule, from_date: str, limit: int = SAFETY_CAP) -> Iterator[str]:
    """Yields successive occurrences starting at ``next_occurrence``.

    Never more than ``SAFETY_CAP``, and nothing past the last ISO year.
    """
    rule = normalize_rule(rule)
    _, _, target_day = parse_iso_date(anchor)
    cursor = _next_occurrence(anchor, rule, from_date)
    for _ in range(min(limit, SAFETY_CAP)):
        if parse_iso_date(cursor)[0] > MAXYEAR:
            return
        yield cursor
        cursor = advance(cursor, rule, target_day)


def generate_occurrences(anchor: str, rule: RecurrenceRule, from_date: str, count: int) -> list[str]:
    if count <= 0:
        return []
    return list(iter_occurrences(anchor, rule, from_date, limit=count))


def next_occurrence_for_entry(entry: LedgerEntry, from_date: str) -> str | None:
    if not entry.active:
        return None
    if not entry.is_recurring:
        return entry.start_date if compare_iso(entry.start_date, from_date) >= 0 else None
    return next_occurrence(entry.start_date, entry.rule, from_date)


def list_occurrences_in_range(entry: LedgerEntry, from_date: str, to_date: str) -> list[str]:
    if not entry.active:
        return []
    if not entry.is_recurring:
        if compare_iso(entry.start_date, from_date) >= 0 and compare_iso(entry.start_date, to_date) <= 0:
            return [entry.start_date]
        return []

    dates = []
    for occ in iter_occurrences(entry.start_date, entry.rule, from_date):
        if compare_iso(occ, to_date) > 0:
            return dates
        dates.append(occ)
    if len(dates) < SAFETY_CAP:
        return dates
    log.warning("recurrence_safety_cap_hit", entry_id=entry.id, from_date=from_date, to_date=to_date, collected=len(dates))
    return dates
