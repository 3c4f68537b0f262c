import unittest

from structlog.testing import capture_logs

from pocketledger.pipeline.models import Frequency, LedgerEntry, RecurrenceRule
from pocketledger.pipeline.recurrence import (
    SAFETY_CAP,
    generate_occurrences,
    list_occurrences_in_range,
    next_occurrence,
    next_occurrence_for_entry,
    normalize_rule,
)

MONTHLY = RecurrenceRule(Frequency.MONTHLY, 1)


def _entry(start_date, rule=None, one_shot=False, active=True, entry_id=1):
    return LedgerEntry(id=entry_id, name="Salary", amount=1000.0, start_date=start_date, rule=rule, one_shot=one_shot, active=active)


class NextOccurrenceTests(unittest.TestCase):
    def test_from_before_anchor_returns_anchor(self):
        self.assertEqual(next_occurrence("2025-03-10", MONTHLY, "2025-01-01"), "2025-03-10")
        self.assertEqual(next_occurrence("2025-03-10", MONTHLY, "2025-03-10"), "2025-03-10")

    def test_weekly_rounds_up_to_next_period(self):
        rule = RecurrenceRule(Frequency.WEEKLY, 2)
        self.assertEqual(next_occurrence("2025-01-01", rule, "2025-01-10"), "2025-01-15")
        self.assertEqual(next_occurrence("2025-01-01", rule, "2025-01-15"), "2025-01-15")
        self.assertEqual(next_occurrence("2025-01-01", rule, "2025-01-16"), "2025-01-29")

    def test_monthly_interval_closes_clamping_gap(self):
        rule = RecurrenceRule(Frequency.MONTHLY, 3)
        self.assertEqual(next_occurrence("2025-01-31", rule, "2025-05-01"), "2025-07-31")
        self.assertEqual(next_occurrence("2025-01-31", rule, "2025-04-30"), "2025-04-30")

    def test_yearly_leap_day_anchor(self):
        rule = RecurrenceRule(Frequency.YEARLY, 1)
        self.assertEqual(next_occurrence("2024-02-29", rule, "2025-03-01"), "2026-02-28")
        self.assertEqual(next_occurrence("2024-02-29", rule, "2027-06-01"), "2028-02-29")


class NormalizeRuleTests(unittest.TestCase):
    def test_non_positive_interval_becomes_one(self):
        self.assertEqual(normalize_rule(RecurrenceRule(Frequency.WEEKLY, 0)).interval, 1)
        self.assertEqual(normalize_rule(RecurrenceRule(Frequency.WEEKLY, -3)).interval, 1)

    def test_times_per_period_is_coerced_with_warning(self):
        with capture_logs() as logs:
            rule = normalize_rule(RecurrenceRule(Frequency.MONTHLY, 1, times_per_period=3))
        self.assertEqual(rule.times_per_period, 1)
        self.assertTrue(any(entry["event"] == "recurrence_times_per_period_unsupported" for entry in logs))


class OccurrencesInRangeTests(unittest.TestCase):
    def test_monthly_clamped_end_of_month(self):
        entry = _entry("2025-01-31", MONTHLY)
        self.assertEqual(list_occurrences_in_range(entry, "2025-02-01", "2025-03-31"), ["2025-02-28", "2025-03-31"])

    def test_end_of_month_does_not_drift(self):
        entry = _entry("2025-01-31", MONTHLY)
        dates = list_occurrences_in_range(entry, "2025-01-01", "2025-06-30")
        self.assertEqual(dates, ["2025-01-31", "2025-02-28", "2025-03-31", "2025-04-30", "2025-05-31", "2025-06-30"])

    def test_one_shot_in_range(self):
        entry = _entry("2025-06-15", one_shot=True)
        self.assertEqual(list_occurrences_in_range(entry, "2025-06-01", "2025-06-30"), ["2025-06-15"])
        self.assertEqual(list_occurrences_in_range(entry, "2025-07-01", "2025-07-31"), [])

    def test_one_shot_flag_wins_over_rule(self):
        entry = _entry("2025-06-15", MONTHLY, one_shot=True)
        self.assertEqual(list_occurrences_in_range(entry, "2025-01-01", "2025-12-31"), ["2025-06-15"])

    def test_inactive_entry_has_no_occurrences(self):
        entry = _entry("2025-01-31", MONTHLY, active=False)
        self.assertEqual(list_occurrences_in_range(entry, "2025-01-01", "2025-12-31"), [])

    def test_weekly_range(self):
        entry = _entry("2025-01-06", RecurrenceRule(Frequency.WEEKLY, 1))
        self.assertEqual(
            list_occurrences_in_range(entry, "2025-01-01", "2025-01-31"),
            ["2025-01-06", "2025-01-13", "2025-01-20", "2025-01-27"],
        )

    def test_iteration_is_capped(self):
        entry = _entry("2000-01-01", RecurrenceRule(Frequency.WEEKLY, 1))
        dates = list_occurrences_in_range(entry, "2000-01-01", "2100-01-01")
        self.assertEqual(len(dates), SAFETY_CAP)
        self.assertEqual(dates[0], "2000-01-01")

    def test_hitting_the_cap_is_logged(self):
        entry = _entry("2000-01-01", RecurrenceRule(Frequency.WEEKLY, 1))
        with capture_logs() as logs:
            list_occurrences_in_range(entry, "2000-01-01", "2100-01-01")
        self.assertTrue(any(log["event"] == "recurrence_safety_cap_hit" for log in logs))
        with capture_logs() as logs:
            list_occurrences_in_range(entry, "2000-01-01", "2000-12-31")
        self.assertFalse(any(log["event"] == "recurrence_safety_cap_hit" for log in logs))

    def test_huge_interval_stays_inside_range(self):
        entry = _entry("2025-01-31", RecurrenceRule(Frequency.MONTHLY, 100000))
        self.assertEqual(list_occurrences_in_range(entry, "2025-01-01", "2025-12-31"), ["2025-01-31"])
        self.assertEqual(list_occurrences_in_range(entry, "2025-02-01", "9999-12-31"), [])

    def test_huge_weekly_interval_stops_at_year_9999(self):
        entry = _entry("2025-01-01", RecurrenceRule(Frequency.WEEKLY, 100000))
        dates = list_occurrences_in_range(entry, "2025-06-01", "9999-12-31")
        self.assertEqual(len(dates), 4)
        self.assertEqual(generate_occurrences("2025-01-01", entry.rule, "2025-06-01", 8), dates)


class EntryHelperTests(unittest.TestCase):
    def test_generate_occurrences(self):
        self.assertEqual(
            generate_occurrences("2025-01-31", MONTHLY, "2025-01-01", 3),
            ["2025-01-31", "2025-02-28", "2025-03-31"],
        )
        self.assertEqual(generate_occurrences("2025-01-31", MONTHLY, "2025-01-01", 0), [])

    def test_next_occurrence_for_entry(self):
        self.assertEqual(next_occurrence_for_entry(_entry("2025-01-31", MONTHLY), "2025-02-01"), "2025-02-28")
        self.assertIsNone(next_occurrence_for_entry(_entry("2025-01-10", one_shot=True), "2025-02-01"))
        self.assertEqual(next_occurrence_for_entry(_entry("2025-03-10"), "2025-02-01"), "2025-03-10")
        self.assertIsNone(next_occurrence_for_entry(_entry("2025-03-10", MONTHLY, active=False), "2025-02-01"))


if __name__ == "__main__":
    unittest.main()
