"""Tests for the pure financial aggregator."""

from datetime import date

import pytest

from finova.analytics import aggregator
from finova.models.finance import ExpenseBreakdownEntry, ExpenseEntry, FinancialData
from finova.models.insights import TrendDirection


def _expenses(*amounts):
    return [
        ExpenseEntry(date=date(2024, 1, index + 1), amount=amount, category="Other")
        for index, amount in enumerate(amounts)
    ]


class TestRatios:
    """Tests for savings rate and emergency fund coverage."""

    def test_budget_summary_example(self):
        """Test income 2000 / expenses 500 gives 75.0% and 1500 saved."""
        data = FinancialData(monthly_income=2000, monthly_expenses=500)
        summary = aggregator.budget_summary(data)
        assert summary.savings_rate == "75.0"
        assert summary.monthly_savings == 1500

    @pytest.mark.parametrize("income,expenses", [(3000, 1000), (1000, 1250), (7, 3)])
    def test_savings_rate_formula(self, income, expenses):
        data = FinancialData(monthly_income=income, monthly_expenses=expenses)
        assert aggregator.savings_rate(data) == pytest.approx((income - expenses) / income * 100)

    def test_zero_income_is_undefined(self):
        """Test zero income yields None and renders as n/a."""
        data = FinancialData(monthly_income=0, monthly_expenses=500)
        assert aggregator.savings_rate(data) is None
        assert aggregator.budget_summary(data).savings_rate is None
        assert aggregator.format_rate(aggregator.savings_rate(data)) == "n/a"

    def test_zero_expenses_emergency_fund_is_undefined(self):
        data = FinancialData(total_balance=100, monthly_expenses=0)
        assert aggregator.emergency_fund_months(data) is None
        assert aggregator.format_months(None) == "n/a"

    def test_emergency_fund_months(self):
        data = FinancialData(total_balance=3000, monthly_expenses=500)
        assert aggregator.emergency_fund_months(data) == 6


class TestBreakdown:
    """Tests for category grouping."""

    def test_category_breakdown_sums_per_category(self):
        data = FinancialData(expense_breakdown=[
            ExpenseBreakdownEntry(category="Travel", amount=100, date=date(2024, 1, 1)),
            ExpenseBreakdownEntry(category="Food & Dining", amount=40, date=date(2024, 1, 1)),
            ExpenseBreakdownEntry(category="Travel", amount=50, date=date(2024, 1, 2)),
        ])
        assert aggregator.category_breakdown(data) == {"Travel": 150, "Food & Dining": 40}

    def test_category_breakdown_is_idempotent(self):
        data = FinancialData(expense_breakdown=[
            ExpenseBreakdownEntry(category="Travel", amount=100, date=date(2024, 1, 1)),
        ])
        assert aggregator.category_breakdown(data) == aggregator.category_breakdown(data)
        assert len(data.expense_breakdown) == 1

    def test_largest_category_tie_keeps_first(self):
        data = FinancialData(expense_breakdown=[
            ExpenseBreakdownEntry(category="A", amount=10, date=date(2024, 1, 1)),
            ExpenseBreakdownEntry(category="B", amount=10, date=date(2024, 1, 1)),
        ])
        assert aggregator.largest_category(data) == ("A", 10)
        assert aggregator.largest_category(FinancialData()) is None


class TestTrend:
    """Tests for the three-entry trend window."""

    def test_needs_two_entries(self):
        assert aggregator.expense_trend(FinancialData(expense_history=_expenses(100))) is None

    def test_increase(self):
        data = FinancialData(expense_history=_expenses(100, 100, 100, 200, 200, 200))
        assert aggregator.expense_trend(data) == TrendDirection.INCREASED

    def test_decrease(self):
        data = FinancialData(expense_history=_expenses(200, 200, 200, 100, 100, 100))
        assert aggregator.expense_trend(data) == TrendDirection.DECREASED

    def test_stable(self):
        data = FinancialData(expense_history=_expenses(100, 100, 100, 105, 100, 100))
        assert aggregator.expense_trend(data) == TrendDirection.STABLE

    def test_short_history_counts_as_increase(self):
        """Test two entries compare against an empty older window."""
        data = FinancialData(expense_history=_expenses(50, 60))
        assert aggregator.expense_trend(data) == TrendDirection.INCREASED


class TestSpendingInsights:
    """Tests for heuristic insights."""

    def test_low_emergency_fund_anomaly(self):
        """Test balance 1000 with expenses 500 flags the emergency fund."""
        data = FinancialData(total_balance=1000, monthly_income=2000, monthly_expenses=500)
        insights = aggregator.spending_insights(data)
        assert any("emergency fund" in a for a in insights.anomalies)

    def test_enough_emergency_fund(self):
        data = FinancialData(total_balance=1500, monthly_income=2000, monthly_expenses=500)
        assert aggregator.spending_insights(data).anomalies == []

    def test_savings_rate_bands(self):
        low = aggregator.spending_insights(
            FinancialData(total_balance=99999, monthly_income=1000, monthly_expenses=950)
        )
        high = aggregator.spending_insights(
            FinancialData(total_balance=99999, monthly_income=1000, monthly_expenses=500)
        )
        assert any("at least 10%" in r for r in low.recommendations)
        assert any("Excellent savings rate" in t for t in high.trends)

    def test_zero_income_skips_savings_advice(self):
        data = FinancialData(total_balance=99999, monthly_income=0, monthly_expenses=0)
        assert aggregator.spending_insights(data).is_empty

    def test_largest_category_flag(self):
        data = FinancialData(
            total_balance=99999,
            monthly_income=1000,
            monthly_expenses=500,
            expense_breakdown=[
                ExpenseBreakdownEntry(category="Travel", amount=300, date=date(2024, 1, 1)),
            ],
        )
        insights = aggregator.spending_insights(data)
        assert any(r.startswith("Travel is your largest") for r in insights.recommendations)


class TestFormatting:
    """Tests for money and rate formatting."""

    def test_format_money(self):
        assert aggregator.format_money(1234.5) == "$1,234.50"
        assert aggregator.format_money(-20, "EUR") == "-€20.00"
        assert aggregator.format_money(5, "CHF") == "CHF 5.00"
        assert aggregator.format_money(None) == "n/a"

    def test_format_rate(self):
        assert aggregator.format_rate(75) == "75.0"
