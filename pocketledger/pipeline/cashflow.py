from __future__ import annotations

from typing import Iterable

from .dates import add_days, month_start, parse_iso_date, shift_month
from .models import CashflowMonth, CategoryRow, ExpenseCategory, LedgerEntry, MonthlyTotals
from .recurrence import list_occurrences_in_range

UNCATEGORIZED_LABEL = "Uncategorized"

PALETTE = ("#9B7BFF", "#5C9DFF", "#F6C177", "#66D19E", "#C084FC", "#FF8FAB", "#6EE7B7", "#94A3B8")


def month_range(year: int, month: int) -> tuple[str, str]:
    next_year, next_month = shift_month(year, month, 1)
    return month_start(year, month), add_days(month_start(next_year, next_month), -1)


def _entries_total(entries: Iterable[LedgerEntry], start: str, end: str) -> float:
    return sum((len(list_occurrences_in_range(entry, start, end)) * entry.amount for entry in entries), 0.0)


def totals_for_month(
    incomes: Iterable[LedgerEntry],
    expenses: Iterable[LedgerEntry],
    year: int,
    month: int,
) -> MonthlyTotals:
    start, end = month_range(year, month)
    income = _entries_total(incomes, start, end)
    expense = _entries_total(expenses, start, end)
    return MonthlyTotals(income=income, expense=expense, net=income - expense)


def average_monthly_totals(
    incomes: Iterable[LedgerEntry],
    expenses: Iterable[LedgerEntry],
    year: int,
    month: int,
    months: int,
) -> MonthlyTotals:
    """Mean over the ``months`` calendar months ending with (year, month)."""
    if months <= 0:
        return MonthlyTotals(income=0.0, expense=0.0, net=0.0)
    incomes, expenses = list(incomes), list(expenses)
    income = 0.0
    expense = 0.0
    for offset in range(months):
        y, m = shift_month(year, month, -offset)
        totals = totals_for_month(incomes, expenses, y, m)
        income += totals.income
        expense += totals.expense
    return MonthlyTotals(income=income / months, expense=expense / months, net=income / months - expense / months)


def cashflow_months(
    incomes: Iterable[LedgerEntry],
    expenses: Iterable[LedgerEntry],
    today: str,
    months: int = 6,
) -> list[CashflowMonth]:
    incomes, expenses = list(incomes), list(expenses)
    year, month, _ = parse_iso_date(today)
    rows = []
    for offset in reversed(range(max(0, months))):
        y, m = shift_month(year, month, -offset)
        totals = totals_for_month(incomes, expenses, y, m)
        rows.append(CashflowMonth(month=f"{y:04d}-{m:02d}", income=totals.income, expense=totals.expense))
    return rows


def category_breakdown(
    expenses: Iterable[LedgerEntry],
    categories: Iterable[ExpenseCategory],
    today: str,
) -> list[CategoryRow]:
    """Current-month expense totals per category, largest first."""
    year, month, _ = parse_iso_date(today)
    start, end = month_range(year, month)
    by_id = {cat.id: cat for cat in categories}

    totals: dict[int | None, float] = {}
    for entry in expenses:
        dates = list_occurrences_in_range(entry, start, end)
        if not dates:
            continue
        totals[entry.category_id] = totals.get(entry.category_id, 0.0) + len(dates) * entry.amount

    grand_total = sum(totals.values(), 0.0)
    rows = []
    for index, (category_id, value) in enumerate(totals.items()):
        cat = by_id.get(category_id)
        label = cat.name if cat else UNCATEGORIZED_LABEL
        rows.append(
            CategoryRow(
                id=f"{label}-{index}",
                label=label,
                value=value,
                color=(cat.color if cat and cat.color else PALETTE[index % len(PALETTE)]),
                pct=0.0 if grand_total == 0 else value / grand_total,
            )
        )
    return sorted(rows, key=lambda row: row.value, reverse=True)
