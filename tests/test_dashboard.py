import unittest

from pocketledger.pipeline.dashboard import (
    DashboardInput,
    build_dashboard_data,
    clamp_chart_points,
    latest_lines_for,
)
from pocketledger.pipeline.models import (
    DeltaStatus,
    ExpenseCategory,
    Frequency,
    KpiRange,
    LedgerEntry,
    OccurrenceType,
    RecurrenceRule,
    Snapshot,
    Wallet,
    WalletBalanceLine,
    WalletType,
)
from pocketledger.pipeline.wallets import group_wallets_by_type, order_wallets_for_ui


def _make_lines(snapshot_id, liquidity, invest):
    return [
        WalletBalanceLine(snapshot_id, 1, liquidity, WalletType.LIQUIDITY, "Cash"),
        WalletBalanceLine(snapshot_id, 2, invest, WalletType.INVEST, "Invest", "ETF"),
    ]


WALLETS = [
    Wallet(2, "Broker", WalletType.INVEST, sort_order=0),
    Wallet(3, "Savings", WalletType.LIQUIDITY, sort_order=1),
    Wallet(1, "Checking", WalletType.LIQUIDITY, sort_order=1),
    Wallet(4, "Pocket", WalletType.LIQUIDITY, sort_order=0),
]


class WalletOrderingTests(unittest.TestCase):
    def test_liquidity_first_then_sort_order_then_id(self):
        self.assertEqual([w.id for w in order_wallets_for_ui(WALLETS)], [4, 1, 3, 2])

    def test_grouping(self):
        grouped = group_wallets_by_type(WALLETS)
        self.assertEqual([w.id for w in grouped[WalletType.INVEST]], [2])
        self.assertEqual(len(grouped[WalletType.LIQUIDITY]), 3)


class DashboardTests(unittest.TestCase):
    def setUp(self):
        self.data = DashboardInput(
            snapshots=[Snapshot(3, "2026-01-29"), Snapshot(2, "2026-01-10"), Snapshot(1, "2025-12-31")],
            snapshot_lines={
                3: _make_lines(3, 200.0, 100.0),
                2: _make_lines(2, 180.0, 90.0),
                1: _make_lines(1, 150.0, 80.0),
            },
            income_entries=[
                LedgerEntry(1, "Salary", 2000.0, "2026-01-31", RecurrenceRule(Frequency.MONTHLY, 1)),
            ],
            expense_entries=[
                LedgerEntry(10, "Rent", 800.0, "2025-12-05", RecurrenceRule(Frequency.MONTHLY, 1), category_id=1),
                LedgerEntry(11, "Dentist", 120.0, "2026-02-10", one_shot=True, category_id=42),
            ],
            expense_categories=[ExpenseCategory(1, "Home", "#F97316")],
            wallets=WALLETS,
            chart_points=6,
        )

    def test_kpis_use_selected_range(self):
        dashboard = build_dashboard_data(self.data, "28D", today="2026-01-29")
        self.assertEqual(dashboard.kpi_range, KpiRange.TWENTY_EIGHT_DAYS)
        liquidity, investments, net_worth = dashboard.kpis
        self.assertEqual(net_worth.value, 300.0)
        self.assertEqual(net_worth.delta_value, 70.0)
        self.assertEqual(liquidity.delta_value, 50.0)
        self.assertEqual(investments.delta_value, 20.0)
        self.assertEqual(net_worth.delta_status, DeltaStatus.OK)
        self.assertEqual([b.label for b in net_worth.breakdown], ["Cash", "Invest"])
        self.assertEqual([b.label for b in investments.breakdown], ["Invest"])

    def test_series_and_available_ranges(self):
        dashboard = build_dashboard_data(self.data, "1D", today="2026-01-29")
        self.assertEqual([(p.date, p.total) for p in dashboard.portfolio_series], [("2025-12-01", 230.0), ("2026-01-01", 300.0)])
        self.assertEqual(
            dashboard.available_ranges,
            (KpiRange.ONE_DAY, KpiRange.SEVEN_DAYS, KpiRange.TWENTY_EIGHT_DAYS),
        )
        self.assertEqual(dashboard.kpis[2].delta_value, 30.0)

    def test_month_range_without_baseline_reports_no_data(self):
        dashboard = build_dashboard_data(self.data, "12M", today="2026-01-29")
        self.assertTrue(all(kpi.delta_status == DeltaStatus.NO_DATA for kpi in dashboard.kpis))
        self.assertTrue(all(kpi.delta_value == 0.0 for kpi in dashboard.kpis))

    def test_distribution_recurrences_and_wallets(self):
        dashboard = build_dashboard_data(self.data, "28D", today="2026-01-29")
        self.assertEqual([(d.label, d.value) for d in dashboard.distributions], [("Cash", 200.0), ("Invest", 100.0)])
        first = dashboard.recurrences[:4]
        self.assertEqual(
            [(r.date, r.description, r.category) for r in first],
            [
                ("2026-01-31", "Salary", "Income"),
                ("2026-02-05", "Rent", "Home"),
                ("2026-02-10", "Dentist", "Expense"),
                ("2026-02-28", "Salary", "Income"),
            ],
        )
        self.assertEqual(first[0].type, OccurrenceType.INCOME)
        self.assertTrue(first[1].recurring)
        self.assertFalse(first[2].recurring)
        self.assertLessEqual(len(dashboard.recurrences), 8)
        self.assertEqual([w.id for w in dashboard.wallets], [4, 1, 3, 2])

    def test_cashflow_and_categories(self):
        dashboard = build_dashboard_data(self.data, "28D", today="2026-01-29")
        self.assertEqual([m.month for m in dashboard.cashflow.months][-2:], ["2025-12", "2026-01"])
        self.assertEqual(dashboard.cashflow.months[-1].expense, 800.0)
        self.assertEqual(dashboard.cashflow.months[-1].income, 2000.0)
        self.assertEqual([(c.label, c.pct) for c in dashboard.categories], [("Home", 1.0)])

    def test_helpers(self):
        self.assertEqual(clamp_chart_points(1), 3)
        self.assertEqual(clamp_chart_points(20), 12)
        self.assertEqual(clamp_chart_points(7), 7)
        self.assertEqual(latest_lines_for(self.data.snapshots, self.data.snapshot_lines)[0].amount, 200.0)
        self.assertEqual(latest_lines_for([], {}), [])


if __name__ == "__main__":
    unittest.main()
