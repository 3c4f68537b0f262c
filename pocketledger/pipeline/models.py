from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class Frequency(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class WalletType(str, Enum):
    LIQUIDITY = "LIQUIDITY"
    INVEST = "INVEST"


class OccurrenceType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class KpiRange(str, Enum):
    ONE_DAY = "1D"
    SEVEN_DAYS = "7D"
    TWENTY_EIGHT_DAYS = "28D"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    TWELVE_MONTHS = "12M"


class DeltaStatus(str, Enum):
    OK = "OK"
    NO_DATA = "NO_DATA"


def _flag(val) -> bool:
    if isinstance(val, str):
        return val.strip().lower() in ("1", "true", "yes")
    return bool(val)


def _enum_or_none(enum_cls, val):
    if val is None or val == "":
        return None
    if isinstance(val, enum_cls):
        return val
    try:
        return enum_cls(str(val).upper())
    except ValueError:
        return None


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency
    interval: int = 1
    times_per_period: int = 1


@dataclass(frozen=True)
class LedgerEntry:
    """Income or expense row. One-shot or rule-less entries occur once, on ``start_date``."""
    id: int
    name: str
    amount: float
    start_date: str
    rule: Optional[RecurrenceRule] = None
    one_shot: bool = False
    active: bool = True
    note: Optional[str] = None
    category_id: Optional[int] = None
    wallet_id: Optional[int] = None

    @property
    def is_recurring(self) -> bool:
        return self.rule is not None and not self.one_shot

    @classmethod
    def from_row(cls, row: Mapping) -> "LedgerEntry":
        frequency = _enum_or_none(Frequency, row.get("recurrence_frequency"))
        rule = None
        if frequency is not None:
            rule = RecurrenceRule(
                frequency=frequency,
                interval=int(row.get("recurrence_interval") or 1),
                times_per_period=int(row.get("times_per_period") or 1),
            )
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            amount=float(row.get("amount") or 0.0),
            start_date=row["start_date"],
            rule=rule,
            one_shot=_flag(row.get("one_shot", 0)),
            active=_flag(row.get("active", 1)),
            note=row.get("note"),
            category_id=row.get("expense_category_id"),
            wallet_id=row.get("wallet_id"),
        )


@dataclass(frozen=True)
class Occurrence:
    date: str
    type: OccurrenceType
    amount: float
    name: str
    note: Optional[str]
    entry_id: int


@dataclass(frozen=True)
class Snapshot:
    id: int
    date: str

    @classmethod
    def from_row(cls, row: Mapping) -> "Snapshot":
        return cls(id=row["id"], date=row["date"])


@dataclass(frozen=True)
class WalletBalanceLine:
    snapshot_id: int
    wallet_id: int
    amount: float
    wallet_type: Optional[WalletType] = None
    wallet_name: Optional[str] = None
    wallet_tag: Optional[str] = None

    @property
    def is_invest(self) -> bool:
        return self.wallet_type == WalletType.INVEST

    @classmethod
    def from_row(cls, row: Mapping) -> "WalletBalanceLine":
        return cls(
            snapshot_id=row["snapshot_id"],
            wallet_id=row["wallet_id"],
            amount=float(row.get("amount") or 0.0),
            wallet_type=_enum_or_none(WalletType, row.get("wallet_type")),
            wallet_name=row.get("wallet_name"),
            wallet_tag=row.get("wallet_tag"),
        )


@dataclass(frozen=True)
class Wallet:
    id: int
    name: str
    type: WalletType
    currency: str = "EUR"
    tag: Optional[str] = None
    active: bool = True
    color: Optional[str] = None
    sort_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping) -> "Wallet":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            type=_enum_or_none(WalletType, row.get("type")) or WalletType.LIQUIDITY,
            currency=row.get("currency") or "EUR",
            tag=row.get("tag"),
            active=_flag(row.get("active", 1)),
            color=row.get("color"),
            sort_order=int(row.get("sortOrder", row.get("sort_order")) or 0),
        )


@dataclass(frozen=True)
class ExpenseCategory:
    id: int
    name: str
    color: Optional[str] = None
    active: bool = True

    @classmethod
    def from_row(cls, row: Mapping) -> "ExpenseCategory":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            color=row.get("color"),
            active=_flag(row.get("active", 1)),
        )


# --- derived shapes handed to the presentation layer


@dataclass(frozen=True)
class Breakdown:
    label: str
    value: float


@dataclass(frozen=True)
class SnapshotTotals:
    liquidity: float
    investments: float
    net_worth: float


@dataclass(frozen=True)
class SnapshotPoint:
    date: str
    total: float


@dataclass(frozen=True)
class PortfolioPoint:
    date: str
    total: float
    liquidity: float
    investments: float


@dataclass(frozen=True)
class MonthlyTotals:
    income: float
    expense: float
    net: float


@dataclass(frozen=True)
class KpiDelta:
    delta_abs: float = 0.0
    delta_pct: float = 0.0


@dataclass(frozen=True)
class KpiDeltas:
    liquidity: KpiDelta = field(default_factory=KpiDelta)
    investments: KpiDelta = field(default_factory=KpiDelta)
    total: KpiDelta = field(default_factory=KpiDelta)


@dataclass(frozen=True)
class KpiDeltaMeta:
    start_date: str
    end_date: str


@dataclass(frozen=True)
class KpiDeltaResult:
    status: DeltaStatus
    deltas: KpiDeltas
    meta: Optional[KpiDeltaMeta] = None


@dataclass(frozen=True)
class KpiItem:
    id: str
    label: str
    value: float
    delta_value: float
    delta_pct: float
    delta_status: DeltaStatus
    accent: Optional[str] = None
    breakdown: tuple[Breakdown, ...] = ()


@dataclass(frozen=True)
class DistributionItem:
    id: str
    label: str
    value: float
    color: str


@dataclass(frozen=True)
class CashflowMonth:
    month: str
    income: float
    expense: float


@dataclass(frozen=True)
class CashflowSummary:
    avg_income: float
    avg_expense: float
    avg_savings: float
    months: tuple[CashflowMonth, ...] = ()


@dataclass(frozen=True)
class CategoryRow:
    id: str
    label: str
    value: float
    color: str
    pct: float


@dataclass(frozen=True)
class RecurrenceRow:
    id: str
    entry_id: int
    date: str
    type: OccurrenceType
    category: str
    description: str
    amount: float
    recurring: bool
    category_color: Optional[str] = None


@dataclass(frozen=True)
class DashboardData:
    kpis: tuple[KpiItem, ...]
    portfolio_series: tuple[PortfolioPoint, ...]
    distributions: tuple[DistributionItem, ...]
    cashflow: CashflowSummary
    categories: tuple[CategoryRow, ...]
    recurrences: tuple[RecurrenceRow, ...]
    kpi_range: KpiRange
    available_ranges: tuple[KpiRange, ...] = ()
    wallets: tuple[Wallet, ...] = ()
