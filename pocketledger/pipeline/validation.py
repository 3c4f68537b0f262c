from typing import Iterable, List, Mapping, Tuple

from .dates import is_iso_date
from .models import LedgerEntry, Snapshot, WalletBalanceLine

def validate_snapshots(
    snapshots: Iterable[Snapshot],
    lines_by_snapshot_id: Mapping[int, List[WalletBalanceLine]] | None = None,
) -> Tuple[bool, List[str]]:
    reasons = []
    seen_dates = {}
    ids = set()
    for snap in snapshots:
        ids.add(snap.id)
        if not is_iso_date(snap.date):
            reasons.append(f"snapshot {snap.id}: date {snap.date!r} is not YYYY-MM-DD")
            continue
        if snap.date in seen_dates:
            reasons.append(f"snapshot {snap.id}: date {snap.date} already used by snapshot {seen_dates[snap.date]}")
        else:
            seen_dates[snap.date] = snap.id
    for snapshot_id, lines in (lines_by_snapshot_id or {}).items():
        if snapshot_id not in ids:
            reasons.append(f"lines reference unknown snapshot {snapshot_id}")
            continue
        for line in lines:
            if line.snapshot_id != snapshot_id:
                reasons.append(f"line for wallet {line.wallet_id} filed under snapshot {snapshot_id} but belongs to {line.snapshot_id}")
    return (len(reasons) == 0), reasons

def validate_entries(entries: Iterable[LedgerEntry], kind: str = "entry") -> Tuple[bool, List[str]]:
    reasons = []
    for entry in entries:
        if not is_iso_date(entry.start_date):
            reasons.append(f"{kind} {entry.id}: start_date {entry.start_date!r} is not YYYY-MM-DD")
    return (len(reasons) == 0), reasons
