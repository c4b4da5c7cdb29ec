"""Financial aggregation over FinancialData snapshots."""

from finova.analytics.aggregator import (
    budget_summary,
    category_breakdown,
    emergency_fund_months,
    expense_trend,
    financial_health,
    format_money,
    format_months,
    format_rate,
    has_low_emergency_fund,
    largest_category,
    monthly_savings,
    savings_rate,
    spending_insights,
)

__all__ = [
    "budget_summary",
    "category_breakdown",
    "emergency_fund_months",
    "expense_trend",
    "financial_health",
    "format_money",
    "format_months",
    "format_rate",
    "has_low_emergency_fund",
    "largest_category",
    "monthly_savings",
    "savings_rate",
    "spending_insights",
]
