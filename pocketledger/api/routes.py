from collections import defaultdict
import structlog
from fastapi import APIRouter, HTTPException
from .schemas import (
    DashboardRequest,
    EntriesData,
    KpiDeltaRequest,
    MonthTotalsRequest,
    RangeRequest,
    SnapshotData,
    UpcomingRequest,
)
from ..config import settings
from ..utils import now_utc_iso, today_local_iso
from ..pipeline.cashflow import average_monthly_totals, totals_for_month
from ..pipeline.dashboard import DashboardInput, build_dashboard_data, latest_lines_for
from ..pipeline.dates import compare_iso, is_iso_date
from ..pipeline.kpi import build_kpi_delta_for_range, delta_highlights, range_label
from ..pipeline.models import ExpenseCategory, KpiRange, LedgerEntry, Snapshot, Wallet, WalletBalanceLine
from ..pipeline.occurrences import occurrences_in_range, upcoming_occurrences
from ..pipeline.series import MAX_SERIES_MONTHS, build_monthly_series
from ..pipeline.validation import validate_entries, validate_snapshots

log = structlog.get_logger()

router = APIRouter()

def _require_iso(value: str | None, name: str):
    if value is not None and not is_iso_date(value):
        raise HTTPException(400, f'{name} must be YYYY-MM-DD')

def _require_range(value: str) -> KpiRange:
    try:
        return KpiRange(value)
    except ValueError:
        raise HTTPException(400, 'range must be ' + '|'.join(r.value for r in KpiRange))

def _reject(endpoint: str, reasons: list[str]):
    log.warning('request_validation_failed', endpoint=endpoint, reasons=reasons)
    raise HTTPException(400, {'errors': reasons})

def _snapshot_rows(req: SnapshotData, endpoint: str):
    snapshots = [Snapshot.from_row(s.model_dump()) for s in req.snapshots]
    lines_by_id = defaultdict(list)
    for line in req.snapshot_lines:
        lines_by_id[line.snapshot_id].append(WalletBalanceLine.from_row(line.model_dump()))
    ok, reasons = validate_snapshots(snapshots, lines_by_id)
    if not ok:
        _reject(endpoint, reasons)
    return snapshots, dict(lines_by_id)

def _entry_rows(req: EntriesData, endpoint: str):
    incomes = [LedgerEntry.from_row(e.model_dump()) for e in req.income_entries]
    expenses = [LedgerEntry.from_row(e.model_dump()) for e in req.expense_entries]
    reasons = validate_entries(incomes, 'income')[1] + validate_entries(expenses, 'expense')[1]
    if reasons:
        _reject(endpoint, reasons)
    return incomes, expenses

@router.get(
    '/health',
    summary="Health check",
    description="Returns service status and the local date used when requests omit one.",
    tags=["Health"],
)
def health():
    return {
        'ok': True,
        'today_local': today_local_iso(settings.local_tz, settings.daily_cutover),
        'checked_at_utc': now_utc_iso(),
    }

@router.post(
    '/dashboard',
    summary="Build dashboard",
    description="Derives KPIs, the monthly portfolio series, distributions, cash flow, categories and upcoming recurrences.",
    tags=["Dashboard"],
)
def dashboard(req: DashboardRequest):
    _require_iso(req.today, 'today')
    kpi_range = _require_range(req.kpi_range) if req.kpi_range else None
    snapshots, lines_by_id = _snapshot_rows(req, 'dashboard')
    incomes, expenses = _entry_rows(req, 'dashboard')
    latest_lines = None
    if req.latest_lines is not None:
        latest_lines = [WalletBalanceLine.from_row(line.model_dump()) for line in req.latest_lines]
    data = DashboardInput(
        snapshots=snapshots,
        snapshot_lines=lines_by_id,
        income_entries=incomes,
        expense_entries=expenses,
        expense_categories=[ExpenseCategory.from_row(c.model_dump()) for c in req.expense_categories],
        wallets=[Wallet.from_row(w.model_dump()) for w in req.wallets],
        latest_lines=latest_lines,
        chart_points=req.chart_points,
    )
    return build_dashboard_data(data, kpi_range, req.today)

@router.post(
    '/kpi-delta',
    summary="KPI delta for a range",
    description="Compares the latest snapshot or month with the baseline chosen for the range. status=NO_DATA when no baseline exists.",
    tags=["Dashboard"],
)
def kpi_delta(req: KpiDeltaRequest):
    _require_iso(req.today, 'today')
    kpi_range = _require_range(req.range)
    snapshots, lines_by_id = _snapshot_rows(req, 'kpi_delta')
    today = req.today or today_local_iso(settings.local_tz, settings.daily_cutover)
    series = build_monthly_series(snapshots, lines_by_id, latest_lines_for(snapshots, lines_by_id), MAX_SERIES_MONTHS, today)
    result = build_kpi_delta_for_range(kpi_range, snapshots, series, lines_by_id)
    return {
        'range': kpi_range.value,
        'label': range_label(kpi_range),
        'result': result,
        'highlights': delta_highlights(result),
    }

@router.post(
    '/occurrences/upcoming',
    summary="Upcoming occurrences",
    description="Next `count` income/expense occurrences on or after from_date (default: local today).",
    tags=["Occurrences"],
)
def upcoming(req: UpcomingRequest):
    _require_iso(req.from_date, 'from_date')
    incomes, expenses = _entry_rows(req, 'upcoming')
    return upcoming_occurrences(incomes, expenses, req.count, req.from_date)

@router.post(
    '/occurrences/range',
    summary="Occurrences in a date range",
    description="Every occurrence between from_date and to_date inclusive.",
    tags=["Occurrences"],
)
def occurrences_range(req: RangeRequest):
    _require_iso(req.from_date, 'from_date')
    _require_iso(req.to_date, 'to_date')
    if compare_iso(req.from_date, req.to_date) > 0:
        raise HTTPException(400, 'from_date must be <= to_date')
    incomes, expenses = _entry_rows(req, 'occurrences_range')
    return occurrences_in_range(incomes, expenses, req.from_date, req.to_date)

@router.post(
    '/cashflow/month',
    summary="Monthly cash-flow totals",
    description="Income, expense and net for a calendar month; months>1 averages the trailing window ending at that month.",
    tags=["Cashflow"],
)
def cashflow_month(req: MonthTotalsRequest):
    incomes, expenses = _entry_rows(req, 'cashflow_month')
    if req.months > 1:
        return average_monthly_totals(incomes, expenses, req.year, req.month, req.months)
    return totals_for_month(incomes, expenses, req.year, req.month)
