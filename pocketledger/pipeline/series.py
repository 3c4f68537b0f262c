from __future__ import annotations

from typing import Iterable, Mapping

from ..config import settings
from ..utils import today_local_iso
from .dates import month_key, month_start, parse_iso_date, shift_month
from .models import PortfolioPoint, Snapshot, SnapshotTotals, WalletBalanceLine
from .totals import totals_by_wallet_type

MAX_SERIES_MONTHS = 12


def _month_keys(today: str, limit: int) -> list[str]:
    """Trailing month keys, newest first, current month included."""
    year, month, _ = parse_iso_date(today)
    keys = []
    for offset in range(limit):
        y, m = shift_month(year, month, -offset)
        keys.append(f"{y:04d}-{m:02d}")
    return keys


def latest_snapshot_by_month(snapshots: Iterable[Snapshot]) -> dict[str, Snapshot]:
    by_month: dict[str, Snapshot] = {}
    for snap in snapshots:
        key = month_key(snap.date)
        existing = by_month.get(key)
        if existing is None or snap.date > existing.date:
            by_month[key] = snap
    return by_month


def build_monthly_series(
    snapshots: Iterable[Snapshot],
    lines_by_snapshot_id: Mapping[int, list[WalletBalanceLine]],
    latest_lines: list[WalletBalanceLine],
    limit: int,
    today: str | None = None,
) -> list[PortfolioPoint]:
    """One point per month for the trailing ``limit`` months (clamped to 1..12), oldest first.

    Each month uses its latest snapshot. A month without one is dropped, except the
    current month, which falls back to ``latest_lines`` when those exist.
    """
    today = today or today_local_iso(settings.local_tz, settings.daily_cutover)
    safe_limit = max(1, min(MAX_SERIES_MONTHS, limit))
    keys = _month_keys(today, safe_limit)
    current_key = keys[0]
    by_month = latest_snapshot_by_month(snapshots)

    # scoped to this call; snapshot rows may change between calls
    totals_cache: dict[str, SnapshotTotals | None] = {}

    def _totals_for(key: str) -> SnapshotTotals | None:
        if key in totals_cache:
            return totals_cache[key]
        snap = by_month.get(key)
        if snap is not None:
            totals = totals_by_wallet_type(lines_by_snapshot_id.get(snap.id, []))
        elif key == current_key and latest_lines:
            totals = totals_by_wallet_type(latest_lines)
        else:
            totals = None
        totals_cache[key] = totals
        return totals

    points = []
    for key in reversed(keys):
        totals = _totals_for(key)
        if totals is None:
            continue
        year, month = (int(part) for part in key.split("-"))
        points.append(
            PortfolioPoint(
                date=month_start(year, month),
                total=totals.net_worth,
                liquidity=totals.liquidity,
                investments=totals.investments,
            )
        )
    return points
