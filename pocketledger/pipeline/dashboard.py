from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ..config import settings
from ..utils import today_local_iso
from .cashflow import PALETTE, average_monthly_totals, cashflow_months, category_breakdown
from .dates import parse_iso_date
from .kpi import available_ranges, build_kpi_delta_for_range
from .models import (
    Breakdown,
    CashflowSummary,
    DashboardData,
    DistributionItem,
    ExpenseCategory,
    KpiDeltaResult,
    KpiItem,
    KpiRange,
    LedgerEntry,
    OccurrenceType,
    RecurrenceRow,
    Snapshot,
    Wallet,
    WalletBalanceLine,
)
from .occurrences import upcoming_occurrences
from .series import build_monthly_series
from .totals import breakdown_by_wallet, totals_by_wallet_type
from .wallets import order_wallets_for_ui

log = structlog.get_logger()

INCOME_LABEL = "Income"
EXPENSE_LABEL = "Expense"
MIN_CHART_POINTS = 3
MAX_CHART_POINTS = 12


@dataclass(frozen=True)
class DashboardInput:
    snapshots: list[Snapshot]
    snapshot_lines: dict[int, list[WalletBalanceLine]]
    income_entries: list[LedgerEntry] = field(default_factory=list)
    expense_entries: list[LedgerEntry] = field(default_factory=list)
    expense_categories: list[ExpenseCategory] = field(default_factory=list)
    wallets: list[Wallet] = field(default_factory=list)
    latest_lines: list[WalletBalanceLine] | None = None
    chart_points: int | None = None


def latest_lines_for(snapshots: list[Snapshot], snapshot_lines: dict[int, list[WalletBalanceLine]]) -> list[WalletBalanceLine]:
    if not snapshots:
        return []
    latest = max(snapshots, key=lambda snap: snap.date)
    return list(snapshot_lines.get(latest.id, []))


def clamp_chart_points(value: int | None) -> int:
    if value is None:
        value = settings.chart_points
    return min(MAX_CHART_POINTS, max(MIN_CHART_POINTS, int(value)))


def _sorted_breakdown(lines: list[WalletBalanceLine]) -> tuple[Breakdown, ...]:
    items = [item for item in breakdown_by_wallet(lines) if item.label]
    return tuple(sorted(items, key=lambda item: item.value, reverse=True))


def build_kpis(latest_lines: list[WalletBalanceLine], delta: KpiDeltaResult) -> list[KpiItem]:
    totals = totals_by_wallet_type(latest_lines)
    liquidity_lines = [line for line in latest_lines if not line.is_invest]
    invest_lines = [line for line in latest_lines if line.is_invest]
    rows = (
        ("liquidity", "Liquidity", totals.liquidity, delta.deltas.liquidity, PALETTE[0], liquidity_lines),
        ("investments", "Investments", totals.investments, delta.deltas.investments, PALETTE[1], invest_lines),
        ("netWorth", "Net worth", totals.net_worth, delta.deltas.total, PALETTE[3], latest_lines),
    )
    return [
        KpiItem(
            id=kpi_id,
            label=label,
            value=value,
            delta_value=kpi_delta.delta_abs,
            delta_pct=kpi_delta.delta_pct,
            delta_status=delta.status,
            accent=accent,
            breakdown=_sorted_breakdown(lines),
        )
        for kpi_id, label, value, kpi_delta, accent, lines in rows
    ]


def build_distribution(latest_lines: list[WalletBalanceLine]) -> list[DistributionItem]:
    items = sorted(breakdown_by_wallet(latest_lines), key=lambda item: item.value, reverse=True)
    return [
        DistributionItem(id=f"{item.label}-{index}", label=item.label, value=item.value, color=PALETTE[index % len(PALETTE)])
        for index, item in enumerate(items)
    ]


def build_recurrences(
    income_entries: list[LedgerEntry],
    expense_entries: list[LedgerEntry],
    categories: list[ExpenseCategory],
    count: int,
    today: str,
) -> list[RecurrenceRow]:
    categories_by_id = {cat.id: cat for cat in categories}
    incomes_by_id = {entry.id: entry for entry in income_entries}
    expenses_by_id = {entry.id: entry for entry in expense_entries}
    rows = []
    for index, occ in enumerate(upcoming_occurrences(income_entries, expense_entries, count, today)):
        if occ.type == OccurrenceType.INCOME:
            entry = incomes_by_id.get(occ.entry_id)
            category, color = INCOME_LABEL, None
        else:
            entry = expenses_by_id.get(occ.entry_id)
            cat = categories_by_id.get(entry.category_id) if entry else None
            category = cat.name if cat else EXPENSE_LABEL
            color = cat.color if cat else None
        rows.append(
            RecurrenceRow(
                id=f"{occ.entry_id}-{index}",
                entry_id=occ.entry_id,
                date=occ.date,
                type=occ.type,
                category=category,
                category_color=color,
                description=occ.name,
                amount=occ.amount,
                recurring=bool(entry and entry.is_recurring),
            )
        )
    return rows


def build_cashflow(income_entries: list[LedgerEntry], expense_entries: list[LedgerEntry], today: str) -> CashflowSummary:
    months = settings.cashflow_months
    year, month, _ = parse_iso_date(today)
    averages = average_monthly_totals(income_entries, expense_entries, year, month, months)
    return CashflowSummary(
        avg_income=averages.income,
        avg_expense=averages.expense,
        avg_savings=averages.net,
        months=tuple(cashflow_months(income_entries, expense_entries, today, months)),
    )


def build_dashboard_data(
    data: DashboardInput,
    kpi_range: KpiRange | str | None = None,
    today: str | None = None,
) -> DashboardData:
    today = today or today_local_iso(settings.local_tz, settings.daily_cutover)
    kpi_range = KpiRange(kpi_range or settings.kpi_default_range)
    latest_lines = data.latest_lines if data.latest_lines is not None else latest_lines_for(data.snapshots, data.snapshot_lines)

    portfolio = build_monthly_series(
        data.snapshots, data.snapshot_lines, latest_lines, clamp_chart_points(data.chart_points), today
    )
    delta = build_kpi_delta_for_range(kpi_range, data.snapshots, portfolio, data.snapshot_lines)
    ranges = available_ranges(data.snapshots, portfolio, data.snapshot_lines)

    dashboard = DashboardData(
        kpis=tuple(build_kpis(latest_lines, delta)),
        portfolio_series=tuple(portfolio),
        distributions=tuple(build_distribution(latest_lines)),
        cashflow=build_cashflow(data.income_entries, data.expense_entries, today),
        categories=tuple(category_breakdown(data.expense_entries, data.expense_categories, today)),
        recurrences=tuple(
            build_recurrences(data.income_entries, data.expense_entries, data.expense_categories, settings.upcoming_count, today)
        ),
        kpi_range=kpi_range,
        available_ranges=tuple(ranges),
        wallets=tuple(order_wallets_for_ui(data.wallets)),
    )
    log.info(
        "dashboard_built",
        today=today,
        kpi_range=kpi_range.value,
        kpi_status=delta.status.value,
        snapshots=len(data.snapshots),
        series_points=len(portfolio),
        recurrences=len(dashboard.recurrences),
    )
    return dashboard
