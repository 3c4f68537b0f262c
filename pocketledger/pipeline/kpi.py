from __future__ import annotations

from typing import Iterable, Mapping

from .dates import add_days, month_key, parse_iso_date, shift_month
from .models import (
    DeltaStatus,
    KpiDelta,
    KpiDeltaMeta,
    KpiDeltaResult,
    KpiDeltas,
    KpiRange,
    PortfolioPoint,
    Snapshot,
    SnapshotTotals,
    WalletBalanceLine,
)
from .totals import totals_by_wallet_type

# None means "the previous snapshot, however old".
_SNAPSHOT_RANGE_DAYS = {
    KpiRange.ONE_DAY: None,
    KpiRange.SEVEN_DAYS: 7,
    KpiRange.TWENTY_EIGHT_DAYS: 28,
}

_MONTH_RANGE_MONTHS = {
    KpiRange.THREE_MONTHS: 3,
    KpiRange.SIX_MONTHS: 6,
    KpiRange.TWELVE_MONTHS: 12,
}

RANGE_LABELS = {
    KpiRange.ONE_DAY: "Today vs previous",
    KpiRange.SEVEN_DAYS: "Last 7 days",
    KpiRange.TWENTY_EIGHT_DAYS: "Last 28 days",
    KpiRange.THREE_MONTHS: "Last 3 months",
    KpiRange.SIX_MONTHS: "Last 6 months",
    KpiRange.TWELVE_MONTHS: "Last 12 months",
}


def range_label(kpi_range: KpiRange | str) -> str:
    return RANGE_LABELS[KpiRange(kpi_range)]


def compute_delta(start: float, end: float) -> KpiDelta:
    # A zero baseline reports 0%, whatever the direction of the change.
    delta_abs = end - start
    return KpiDelta(delta_abs=delta_abs, delta_pct=0.0 if start == 0 else delta_abs / start)


def _no_data() -> KpiDeltaResult:
    return KpiDeltaResult(status=DeltaStatus.NO_DATA, deltas=KpiDeltas())


def _ok(start: SnapshotTotals, end: SnapshotTotals, start_date: str, end_date: str) -> KpiDeltaResult:
    return KpiDeltaResult(
        status=DeltaStatus.OK,
        deltas=KpiDeltas(
            liquidity=compute_delta(start.liquidity, end.liquidity),
            investments=compute_delta(start.investments, end.investments),
            total=compute_delta(start.net_worth, end.net_worth),
        ),
        meta=KpiDeltaMeta(start_date=start_date, end_date=end_date),
    )


def _point_totals(point: PortfolioPoint) -> SnapshotTotals:
    return SnapshotTotals(liquidity=point.liquidity, investments=point.investments, net_worth=point.total)


def _snapshot_delta(
    days: int | None,
    snapshots: Iterable[Snapshot],
    lines_by_snapshot_id: Mapping[int, list[WalletBalanceLine]],
) -> KpiDeltaResult:
    ordered = sorted(snapshots, key=lambda snap: snap.date, reverse=True)
    if not ordered:
        return _no_data()
    latest = ordered[0]
    if days is None:
        baseline = next((snap for snap in ordered if snap.date < latest.date), None)
    else:
        target = add_days(latest.date, -days)
        baseline = next((snap for snap in ordered if snap.date <= target), None)
    if baseline is None:
        return _no_data()
    return _ok(
        totals_by_wallet_type(lines_by_snapshot_id.get(baseline.id, [])),
        totals_by_wallet_type(lines_by_snapshot_id.get(latest.id, [])),
        baseline.date,
        latest.date,
    )


def _monthly_delta(months: int, portfolio_series: Iterable[PortfolioPoint]) -> KpiDeltaResult:
    series = sorted(portfolio_series, key=lambda point: point.date)
    if len(series) < 2:
        return _no_data()
    latest = series[-1]
    year, month, _ = parse_iso_date(latest.date)
    target_year, target_month = shift_month(year, month, -months)
    target_key = f"{target_year:04d}-{target_month:02d}"

    baseline = next((point for point in reversed(series) if month_key(point.date) <= target_key), None)
    if baseline is None:
        return _no_data()
    return _ok(_point_totals(baseline), _point_totals(latest), baseline.date, latest.date)


def build_kpi_delta_for_range(
    kpi_range: KpiRange | str,
    snapshots: Iterable[Snapshot],
    portfolio_series: Iterable[PortfolioPoint],
    lines_by_snapshot_id: Mapping[int, list[WalletBalanceLine]],
) -> KpiDeltaResult:
    """Deltas of liquidity, investments and net worth against the range's baseline.

    Day ranges compare the latest snapshot with the nearest earlier snapshot on or
    before the cutoff; month ranges do the same over the monthly series. Raises
    ``ValueError`` for an unknown range identifier.
    """
    kpi_range = KpiRange(kpi_range)
    if kpi_range in _SNAPSHOT_RANGE_DAYS:
        return _snapshot_delta(_SNAPSHOT_RANGE_DAYS[kpi_range], snapshots, lines_by_snapshot_id)
    return _monthly_delta(_MONTH_RANGE_MONTHS[kpi_range], portfolio_series)


def available_ranges(
    snapshots: Iterable[Snapshot],
    portfolio_series: Iterable[PortfolioPoint],
    lines_by_snapshot_id: Mapping[int, list[WalletBalanceLine]],
) -> list[KpiRange]:
    snapshots = list(snapshots)
    portfolio_series = list(portfolio_series)
    return [
        kpi_range
        for kpi_range in KpiRange
        if build_kpi_delta_for_range(kpi_range, snapshots, portfolio_series, lines_by_snapshot_id).status == DeltaStatus.OK
    ]


def _format_money(val):
    sign = "-" if val < 0 else "+"
    return f"{sign}{abs(val):.2f}"


def _format_pct(val):
    sign = "-" if val < 0 else "+"
    return f"{sign}{abs(val) * 100:.2f}%"


def delta_highlights(result: KpiDeltaResult) -> list[str]:
    if result.status != DeltaStatus.OK:
        return []
    rows = (
        ("Liquidity", result.deltas.liquidity),
        ("Investments", result.deltas.investments),
        ("Net worth", result.deltas.total),
    )
    return [f"{label} {_format_money(delta.delta_abs)} ({_format_pct(delta.delta_pct)})" for label, delta in rows]
