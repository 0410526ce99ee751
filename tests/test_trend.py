"""
Unit tests for trend projection and monthly subtotals.
"""
import pytest

from conftest import expense, income
from ledger_reports.core.aggregator import aggregate
from ledger_reports.core.trend import monthly_totals, project, round_percent


class TestProject:
    """Tests for one account's share of its classification."""

    def test_share_of_income(self):
        """Sales 1000 of 4000 income is 25%."""
        series = aggregate([
            income("2024-01-05", "Sales", 1000),
            income("2024-01-06", "Fees", 3000),
            expense("2024-01-07", "Rent", 9999),
        ])
        points = project(series, "Sales")

        assert len(points) == 1
        assert points[0].month == "2024-01"
        assert points[0].absolute_value == 1000.0
        assert points[0].percent_of_class_total == 25.0

    def test_expense_values_are_positive(self):
        """Expense projections report magnitudes."""
        series = aggregate([
            expense("2024-01-05", "Rent", 600),
            expense("2024-01-06", "Food", 400),
        ])
        point = project(series, "Rent")[0]
        assert point.absolute_value == 600.0
        assert point.percent_of_class_total == 60.0

    def test_percentages_sum_to_100(self):
        """Shares of every account in a class add up to 100 within rounding."""
        series = aggregate([
            income("2024-01-01", "A", 1),
            income("2024-01-01", "B", 1),
            income("2024-01-01", "C", 1),
        ])
        total = sum(project(series, name)[0].percent_of_class_total for name in ["A", "B", "C"])
        assert total == pytest.approx(100.0, abs=0.1 * 3)

    def test_month_without_class_activity_is_zero(self):
        """A gap month reports 0 value and 0 percent."""
        series = aggregate([
            income("2024-01-01", "Sales", 100),
            income("2024-03-01", "Sales", 100),
        ])
        points = project(series, "Sales")
        assert [p.month for p in points] == ["2024-01", "2024-02", "2024-03"]
        assert points[1].absolute_value == 0.0
        assert points[1].percent_of_class_total == 0.0
        assert points[2].percent_of_class_total == 100.0

    def test_unknown_account_returns_empty(self, sample_records):
        assert project(aggregate(sample_records), "Nope") == []

    def test_empty_series(self):
        assert project(aggregate([]), "Sales") == []


class TestRounding:
    """Tests for half-up percentage rounding."""

    @pytest.mark.parametrize("value,expected", [
        (12.25, 12.3),
        (12.24, 12.2),
        (33.33333, 33.3),
        (66.66666, 66.7),
        (0.05, 0.1),
        (100.0, 100.0),
    ])
    def test_round_percent(self, value, expected):
        assert round_percent(value) == expected


class TestMonthlyTotals:
    """Tests for income/expense subtotals."""

    def test_totals(self):
        """Income 1080, expense 500, net 580."""
        series = aggregate([
            income("2024-03-05", "Sales", 1000, tax=80),
            expense("2024-03-20", "Supplies", 500),
        ])
        totals = monthly_totals(series)
        assert len(totals) == 1
        assert totals[0].income == 1080.0
        assert totals[0].expense == 500.0
        assert totals[0].net == 580.0

    def test_one_total_per_bucket(self, sample_records):
        series = aggregate(sample_records)
        assert [t.month for t in monthly_totals(series)] == series.months

    def test_gap_month_totals_are_zero(self):
        series = aggregate([
            income("2024-01-05", "Sales", 100),
            expense("2024-03-05", "Rent", 40),
        ])
        totals = monthly_totals(series)
        assert [t.month for t in totals] == ["2024-01", "2024-02", "2024-03"]
        assert (totals[1].income, totals[1].expense, totals[1].net) == (0.0, 0.0, 0.0)
        assert totals[2].net == -40.0

    def test_empty_series(self):
        assert monthly_totals(aggregate([])) == []
