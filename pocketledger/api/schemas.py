from pydantic import BaseModel, Field
from typing import Optional, Literal

class SnapshotIn(BaseModel):
    id: int
    date: str

class SnapshotLineIn(BaseModel):
    snapshot_id: int
    wallet_id: int
    amount: float
    wallet_name: Optional[str] = None
    wallet_type: Optional[Literal['LIQUIDITY', 'INVEST']] = None
    wallet_tag: Optional[str] = None

class EntryIn(BaseModel):
    id: int
    name: str
    amount: float
    start_date: str
    recurrence_frequency: Optional[Literal['WEEKLY', 'MONTHLY', 'YEARLY']] = None
    recurrence_interval: Optional[int] = None
    times_per_period: Optional[int] = None
    one_shot: int = 0
    active: int = 1
    note: Optional[str] = None
    wallet_id: Optional[int] = None
    expense_category_id: Optional[int] = None

class CategoryIn(BaseModel):
    id: int
    name: str
    color: Optional[str] = None
    active: int = 1

class WalletIn(BaseModel):
    id: int
    name: str
    type: Literal['LIQUIDITY', 'INVEST']
    currency: str = 'EUR'
    tag: Optional[str] = None
    active: int = 1
    color: Optional[str] = None
    sort_order: int = 0

class SnapshotData(BaseModel):
    snapshots: list[SnapshotIn] = Field(default_factory=list)
    snapshot_lines: list[SnapshotLineIn] = Field(default_factory=list)

class EntriesData(BaseModel):
    income_entries: list[EntryIn] = Field(default_factory=list)
    expense_entries: list[EntryIn] = Field(default_factory=list)

class DashboardRequest(SnapshotData, EntriesData):
    expense_categories: list[CategoryIn] = Field(default_factory=list)
    wallets: list[WalletIn] = Field(default_factory=list)
    latest_lines: Optional[list[SnapshotLineIn]] = None
    chart_points: Optional[int] = None
    kpi_range: Optional[str] = None
    today: Optional[str] = None

class KpiDeltaRequest(SnapshotData):
    range: str
    today: Optional[str] = None

class UpcomingRequest(EntriesData):
    count: int = 8
    from_date: Optional[str] = None

class RangeRequest(EntriesData):
    from_date: str
    to_date: str

class MonthTotalsRequest(EntriesData):
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)
    months: int = Field(default=1, ge=1)
