from __future__ import annotations

from typing import Iterable, Mapping

from .models import Breakdown, Snapshot, SnapshotPoint, SnapshotTotals, WalletBalanceLine, WalletType

UNKNOWN_WALLET_LABEL = "Unknown"
OTHER_TAG_LABEL = "Other"


def total_from_snapshot(lines: Iterable[WalletBalanceLine]) -> float:
    return sum((line.amount for line in lines), 0.0)


def sum_by_wallet_type(lines: Iterable[WalletBalanceLine], wallet_type: WalletType) -> float:
    return sum((line.amount for line in lines if line.wallet_type == wallet_type), 0.0)


def totals_by_wallet_type(lines: Iterable[WalletBalanceLine]) -> SnapshotTotals:
    # Lines with no wallet type count as liquidity.
    liquidity = 0.0
    investments = 0.0
    for line in lines:
        if line.is_invest:
            investments += line.amount
        else:
            liquidity += line.amount
    return SnapshotTotals(liquidity=liquidity, investments=investments, net_worth=liquidity + investments)


def _grouped(pairs) -> list[Breakdown]:
    # dicts keep first-seen order
    sums: dict[str, float] = {}
    for label, amount in pairs:
        sums[label] = sums.get(label, 0.0) + amount
    return [Breakdown(label=label, value=value) for label, value in sums.items()]


def breakdown_by_wallet(lines: Iterable[WalletBalanceLine]) -> list[Breakdown]:
    return _grouped((line.wallet_name or UNKNOWN_WALLET_LABEL, line.amount) for line in lines)


def breakdown_invest_by_tag(lines: Iterable[WalletBalanceLine]) -> list[Breakdown]:
    return _grouped((line.wallet_tag or OTHER_TAG_LABEL, line.amount) for line in lines if line.is_invest)


def snapshot_series(
    snapshots: Iterable[Snapshot],
    lines_by_snapshot_id: Mapping[int, list[WalletBalanceLine]],
    limit: int = 12,
) -> list[SnapshotPoint]:
    """Per-snapshot totals, oldest first, trimmed to the last ``limit`` points."""
    series = sorted(
        (SnapshotPoint(date=snap.date, total=total_from_snapshot(lines_by_snapshot_id.get(snap.id, []))) for snap in snapshots),
        key=lambda point: point.date,
    )
    if limit <= 0:
        return []
    return series[-limit:]
