import unittest

from pocketledger.pipeline.models import PortfolioPoint, Snapshot, WalletBalanceLine, WalletType
from pocketledger.pipeline.series import build_monthly_series, latest_snapshot_by_month


def _lines(snapshot_id, liquidity, invest):
    return [
        WalletBalanceLine(snapshot_id, 1, liquidity, WalletType.LIQUIDITY, "Cash"),
        WalletBalanceLine(snapshot_id, 2, invest, WalletType.INVEST, "Invest"),
    ]


class MonthlySeriesTests(unittest.TestCase):
    def setUp(self):
        self.snapshots = [
            Snapshot(1, "2025-10-05"),
            Snapshot(2, "2025-10-20"),
            Snapshot(3, "2025-12-31"),
            Snapshot(4, "2024-06-30"),
        ]
        self.lines = {
            1: _lines(1, 50.0, 40.0),
            2: _lines(2, 60.0, 40.0),
            3: _lines(3, 70.0, 50.0),
            4: _lines(4, 10.0, 10.0),
        }
        self.latest = _lines(3, 75.0, 55.0)

    def test_latest_snapshot_per_month_and_live_current_month(self):
        series = build_monthly_series(self.snapshots, self.lines, self.latest, 6, today="2026-01-15")
        self.assertEqual(
            series,
            [
                PortfolioPoint("2025-10-01", 100.0, 60.0, 40.0),
                PortfolioPoint("2025-12-01", 120.0, 70.0, 50.0),
                PortfolioPoint("2026-01-01", 130.0, 75.0, 55.0),
            ],
        )

    def test_current_month_dropped_without_latest_lines(self):
        series = build_monthly_series(self.snapshots, self.lines, [], 6, today="2026-01-15")
        self.assertEqual([p.date for p in series], ["2025-10-01", "2025-12-01"])

    def test_limit_is_clamped(self):
        only_current = build_monthly_series(self.snapshots, self.lines, self.latest, 0, today="2026-01-15")
        self.assertEqual([p.date for p in only_current], ["2026-01-01"])
        year_window = build_monthly_series(self.snapshots, self.lines, self.latest, 50, today="2026-01-15")
        # June 2024 is outside the 12-month window
        self.assertNotIn("2024-06-01", [p.date for p in year_window])
        self.assertEqual(len(year_window), 3)

    def test_same_inputs_same_series(self):
        first = build_monthly_series(self.snapshots, self.lines, self.latest, 12, today="2026-01-15")
        second = build_monthly_series(self.snapshots, self.lines, self.latest, 12, today="2026-01-15")
        self.assertEqual(first, second)

    def test_latest_snapshot_by_month(self):
        by_month = latest_snapshot_by_month(self.snapshots)
        self.assertEqual(by_month["2025-10"].id, 2)
        self.assertEqual(set(by_month), {"2025-10", "2025-12", "2024-06"})


if __name__ == "__main__":
    unittest.main()
