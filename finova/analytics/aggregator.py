"""
Financial Aggregator

DESIGN DECISION: Every function here is PURE. It reads a FinancialData
snapshot and returns a derived value; nothing is stored and nothing is
mutated. The thresholds are fixed heuristics, not statistics, and are
kept as named module constants.

Rates whose denominator is zero are None ("undefined"), never NaN or
infinity. ``format_rate`` and ``format_money`` render None as "n/a".
"""

from typing import Optional

from finova.models.finance import FinancialData
from finova.models.insights import (
    BudgetSummary,
    FinancialHealth,
    SpendingInsights,
    TrendDirection,
)


# Savings-rate bands (percent of income)
LOW_SAVINGS_RATE = 10.0
HIGH_SAVINGS_RATE = 20.0

# Trend comparison of the last TREND_WINDOW expenses against the window before
TREND_WINDOW = 3
TREND_INCREASE_FACTOR = 1.1
TREND_DECREASE_FACTOR = 0.9
MIN_TREND_ENTRIES = 2

# Emergency fund, in months of expenses
EMERGENCY_FUND_MIN_MONTHS = 3
EMERGENCY_FUND_TARGET_MONTHS = 6

# A single category above this share of monthly expenses gets flagged
LARGEST_CATEGORY_SHARE = 0.4

UNDEFINED = "n/a"

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}


# =============================================================================
# RATIOS
# =============================================================================

def monthly_savings(data: FinancialData) -> float:
    return data.monthly_income - data.monthly_expenses


def savings_rate(data: FinancialData) -> Optional[float]:
    """(income - expenses) / income * 100, or None when income is 0."""
    if data.monthly_income == 0:
        return None
    return monthly_savings(data) / data.monthly_income * 100


def emergency_fund_months(data: FinancialData) -> Optional[float]:
    """Balance expressed in months of expenses, or None when expenses are 0."""
    if data.monthly_expenses == 0:
        return None
    return data.total_balance / data.monthly_expenses


def has_low_emergency_fund(data: FinancialData) -> bool:
    return data.total_balance < data.monthly_expenses * EMERGENCY_FUND_MIN_MONTHS


# =============================================================================
# BREAKDOWNS AND TRENDS
# =============================================================================

def category_breakdown(data: FinancialData) -> dict[str, float]:
    """Sum of expense breakdown amounts per category."""
    breakdown: dict[str, float] = {}
    for entry in data.expense_breakdown:
        breakdown[entry.category] = breakdown.get(entry.category, 0.0) + entry.amount
    return breakdown


def largest_category(data: FinancialData) -> Optional[tuple[str, float]]:
    """Biggest category by amount; the first one seen wins a tie."""
    breakdown = category_breakdown(data)
    if not breakdown:
        return None
    return sorted(breakdown.items(), key=lambda item: -item[1])[0]


def expense_trend(data: FinancialData) -> Optional[TrendDirection]:
    """
    Compare the average of the last three expenses with the three before.

    Both windows are divided by three even when they hold fewer entries.
    Returns None with fewer than two history entries.
    """
    history = data.expense_history
    if len(history) < MIN_TREND_ENTRIES:
        return None

    recent = history[-TREND_WINDOW:]
    older = history[-2 * TREND_WINDOW:-TREND_WINDOW]
    recent_avg = sum(e.amount for e in recent) / TREND_WINDOW
    older_avg = sum(e.amount for e in older) / TREND_WINDOW

    if recent_avg > older_avg * TREND_INCREASE_FACTOR:
        return TrendDirection.INCREASED
    if recent_avg < older_avg * TREND_DECREASE_FACTOR:
        return TrendDirection.DECREASED
    return TrendDirection.STABLE


# =============================================================================
# REPORTS
# =============================================================================

def budget_summary(data: FinancialData) -> BudgetSummary:
    rate = savings_rate(data)
    return BudgetSummary(
        monthly_income=data.monthly_income,
        monthly_expenses=data.monthly_expenses,
        monthly_savings=monthly_savings(data),
        savings_rate=f"{rate:.1f}" if rate is not None else None,
        category_breakdown=category_breakdown(data),
        total_balance=data.total_balance,
    )


def spending_insights(data: FinancialData) -> SpendingInsights:
    """Heuristic trends, anomalies and recommendations for a snapshot."""
    insights = SpendingInsights()

    trend = expense_trend(data)
    if trend == TrendDirection.INCREASED:
        insights.trends.append("Your spending has increased by over 10% in recent months.")
        insights.recommendations.append(
            "Review your recent expenses to identify areas where you can cut back."
        )
    elif trend == TrendDirection.DECREASED:
        insights.trends.append("Great job! Your spending has decreased recently.")

    rate = savings_rate(data)
    if rate is not None:
        if rate < LOW_SAVINGS_RATE:
            insights.recommendations.append(
                "Consider increasing your savings rate to at least 10% of your income."
            )
        elif rate >= HIGH_SAVINGS_RATE:
            insights.trends.append(
                "Excellent savings rate! You're saving 20% or more of your income."
            )

    biggest = largest_category(data)
    if biggest and biggest[1] > data.monthly_expenses * LARGEST_CATEGORY_SHARE:
        insights.recommendations.append(
            f"{biggest[0]} is your largest expense category. "
            "Consider reviewing it for optimization opportunities."
        )

    if has_low_emergency_fund(data):
        insights.anomalies.append(
            "Your emergency fund is below 3 months of expenses. Consider building it up."
        )
        insights.recommendations.append(
            "Aim to have 3-6 months of expenses saved as an emergency fund."
        )

    return insights


def financial_health(data: FinancialData) -> FinancialHealth:
    return FinancialHealth(
        monthly_income=data.monthly_income,
        monthly_expenses=data.monthly_expenses,
        monthly_savings=monthly_savings(data),
        total_balance=data.total_balance,
        savings_rate=savings_rate(data),
        emergency_fund_months=emergency_fund_months(data),
    )


# =============================================================================
# FORMATTING
# =============================================================================

def currency_symbol(currency: str) -> str:
    code = (currency or "USD").upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_money(amount: Optional[float], currency: str = "USD") -> str:
    """Format with the currency symbol, thousands separators and 2 decimals."""
    if amount is None:
        return UNDEFINED
    symbol = currency_symbol(currency)
    if amount < 0:
        return f"-{symbol}{abs(amount):,.2f}"
    return f"{symbol}{amount:,.2f}"


def format_rate(rate: Optional[float]) -> str:
    """One-decimal percentage value without the % sign."""
    if rate is None:
        return UNDEFINED
    return f"{rate:.1f}"


def format_months(months: Optional[float]) -> str:
    if months is None:
        return UNDEFINED
    return f"{months:.1f}"
