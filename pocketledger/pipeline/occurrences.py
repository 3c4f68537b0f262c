from __future__ import annotations

from typing import Iterable

from ..config import settings
from ..utils import today_local_iso
from .dates import compare_iso
from .models import LedgerEntry, Occurrence, OccurrenceType
from .recurrence import iter_occurrences, list_occurrences_in_range, next_occurrence_for_entry


def _today() -> str:
    return today_local_iso(settings.local_tz, settings.daily_cutover)


def _occurrence(entry: LedgerEntry, occ_type: OccurrenceType, on: str) -> Occurrence:
    return Occurrence(
        date=on,
        type=occ_type,
        amount=entry.amount,
        name=entry.name,
        note=entry.note,
        entry_id=entry.id,
    )


def _entry_occurrences(entry: LedgerEntry, occ_type: OccurrenceType, count: int, from_date: str) -> list[Occurrence]:
    if not entry.active:
        return []
    if not entry.is_recurring:
        if compare_iso(entry.start_date, from_date) >= 0:
            return [_occurrence(entry, occ_type, entry.start_date)]
        return []
    return [_occurrence(entry, occ_type, on) for on in iter_occurrences(entry.start_date, entry.rule, from_date, limit=count)]


def _merge(occurrences: list[Occurrence], count: int) -> list[Occurrence]:
    # sorted() is stable: same-day occurrences keep income-then-expense input order
    return sorted(occurrences, key=lambda occ: occ.date)[:count]


def upcoming_occurrences(
    income_entries: Iterable[LedgerEntry],
    expense_entries: Iterable[LedgerEntry],
    count: int,
    from_date: str | None = None,
) -> list[Occurrence]:
    """Next ``count`` cash-flow events across all active entries, earliest first."""
    if count <= 0:
        return []
    from_date = from_date or _today()
    occurrences = []
    for entry in income_entries:
        occurrences.extend(_entry_occurrences(entry, OccurrenceType.INCOME, count, from_date))
    for entry in expense_entries:
        occurrences.extend(_entry_occurrences(entry, OccurrenceType.EXPENSE, count, from_date))
    return _merge(occurrences, count)


def next_occurrences_for_entries(
    income_entries: Iterable[LedgerEntry],
    expense_entries: Iterable[LedgerEntry],
    count: int,
    from_date: str | None = None,
) -> list[Occurrence]:
    """Like ``upcoming_occurrences`` but with at most one event per entry."""
    if count <= 0:
        return []
    from_date = from_date or _today()
    occurrences = []
    for occ_type, entries in ((OccurrenceType.INCOME, income_entries), (OccurrenceType.EXPENSE, expense_entries)):
        for entry in entries:
            on = next_occurrence_for_entry(entry, from_date)
            if on:
                occurrences.append(_occurrence(entry, occ_type, on))
    return _merge(occurrences, count)


def occurrences_in_range(
    income_entries: Iterable[LedgerEntry],
    expense_entries: Iterable[LedgerEntry],
    from_date: str,
    to_date: str,
) -> list[Occurrence]:
    occurrences = []
    for occ_type, entries in ((OccurrenceType.INCOME, income_entries), (OccurrenceType.EXPENSE, expense_entries)):
        for entry in entries:
            for on in list_occurrences_in_range(entry, from_date, to_date):
                occurrences.append(_occurrence(entry, occ_type, on))
    return sorted(occurrences, key=lambda occ: occ.date)
