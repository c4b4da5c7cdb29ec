"""
Data-Driven Advice

Replies that read the user's FinancialData through the aggregator:
budget and insight reports, strategy advice and direct answers to
"how much / what is my" questions.

Money is formatted with the context currency and rounded to 2 decimals.
Undefined ratios (zero income or zero expenses) render as "n/a" and
skip the band commentary that depends on them.
"""

from typing import Optional

from finova.analytics import aggregator
from finova.models.finance import DemographicType
from finova.models.insights import AdviceContext, BudgetSummary, SpendingInsights, Tone


BULLET = "•"


def _money(ctx: AdviceContext, amount: Optional[float]) -> str:
    return aggregator.format_money(amount, ctx.currency)


# =============================================================================
# REPORTS
# =============================================================================

def budget_report(ctx: AdviceContext, summary: Optional[BudgetSummary] = None) -> str:
    summary = summary or aggregator.budget_summary(ctx.data)
    header = (
        "Here is your budget summary:"
        if ctx.tone in (Tone.CASUAL, Tone.PROFESSIONAL)
        else "Your budget overview:"
    )

    response = f"{header}\n\n"
    response += f"Monthly Income: {_money(ctx, summary.monthly_income)}\n"
    response += f"Monthly Expenses: {_money(ctx, summary.monthly_expenses)}\n"
    response += f"Monthly Savings: {_money(ctx, summary.monthly_savings)}\n"
    response += f"Savings Rate: {aggregator.format_rate(summary.savings_rate_value)}%\n\n"

    if ctx.is_detailed:
        response += f"Current Balance: {_money(ctx, summary.total_balance)}\n"
        if summary.category_breakdown:
            response += "\nExpense Categories:\n"
            for category, amount in summary.category_breakdown.items():
                share = (
                    amount / summary.monthly_expenses * 100
                    if summary.monthly_expenses
                    else None
                )
                response += (
                    f"  {BULLET} {category}: {_money(ctx, amount)} "
                    f"({aggregator.format_rate(share)}%)\n"
                )

    rate = summary.savings_rate_value
    if rate is not None and rate < aggregator.LOW_SAVINGS_RATE:
        response += (
            "\nTip: Try to save at least 10% of your income each month for "
            "better financial health."
        )

    return response


def insights_report(ctx: AdviceContext, insights: Optional[SpendingInsights] = None) -> str:
    insights = insights or aggregator.spending_insights(ctx.data)
    response = "Here are your spending insights!\n\n" if ctx.is_casual else "Spending Analysis:\n\n"

    if insights.trends:
        response += "Trends:\n"
        response += "".join(f"  {BULLET} {trend}\n" for trend in insights.trends)
        response += "\n"

    if insights.anomalies:
        response += "Items to Review:\n"
        response += "".join(f"  {BULLET} {anomaly}\n" for anomaly in insights.anomalies)
        response += "\n"

    if insights.recommendations:
        response += "Recommendations:\n"
        response += "".join(f"  {BULLET} {rec}\n" for rec in insights.recommendations)

    if insights.is_empty:
        response += "Nothing stands out in your spending right now. Keep tracking your expenses!"

    return response


# =============================================================================
# STRATEGY ADVICE
# =============================================================================

def savings_advice(ctx: AdviceContext) -> str:
    rate = aggregator.savings_rate(ctx.data)
    response = "Here is some savings advice!\n\n" if ctx.is_casual else "Savings Recommendations:\n\n"

    if rate is None:
        response += (
            "I can't work out a savings rate until you record some income. "
            "The general recommendation is to save at least 10-20% of your income."
        )
    elif rate < aggregator.LOW_SAVINGS_RATE:
        response += (
            f"Your current savings rate is {rate:.1f}%. The general recommendation "
            "is to save at least 10-20% of your income."
        )
    elif rate < aggregator.HIGH_SAVINGS_RATE:
        response += (
            f"Good job! You are saving {rate:.1f}% of your income. Consider "
            "increasing it to 20% for better financial security."
        )
    else:
        response += (
            f"Excellent! You are saving {rate:.1f}% of your income. Keep up the great work!"
        )

    response += (
        f"\n\nYou are currently saving {_money(ctx, aggregator.monthly_savings(ctx.data))} per month."
    )

    if ctx.is_detailed:
        response += "\n\nHere are some strategies to boost your savings:\n"
        response += "1. Automate your savings transfers\n"
        response += "2. Review and reduce unnecessary expenses\n"
        response += "3. Create a separate savings account for goals\n"
        response += "4. Track your spending to identify opportunities"

    return response


def savings_suggestions(ctx: AdviceContext) -> list[str]:
    """Short follow-up actions shown next to a savings reply."""
    suggestions = []
    rate = aggregator.savings_rate(ctx.data)
    if rate is not None and rate < aggregator.LOW_SAVINGS_RATE:
        suggestions.append("Set up automatic transfers to savings")
        suggestions.append("Review subscription services and cancel unused ones")
        suggestions.append("Create a budget to track expenses")
    suggestions.append("Build an emergency fund (3-6 months of expenses)")
    suggestions.append("Consider high-yield savings accounts")
    return suggestions


def investment_advice(ctx: AdviceContext) -> str:
    response = "Investment advice!\n\n" if ctx.is_casual else "Investment Recommendations:\n\n"
    response += "Before investing, ensure you have:\n"
    response += "1. An emergency fund (3-6 months of expenses)\n"
    response += "2. High-interest debt paid off\n"
    response += "3. A stable income source\n\n"

    data = ctx.data
    if data.total_balance < data.monthly_expenses * aggregator.EMERGENCY_FUND_TARGET_MONTHS:
        response += "I recommend building your emergency fund first before investing."
    else:
        response += "Consider starting with:\n"
        response += f"{BULLET} Index funds or ETFs for diversification\n"
        response += f"{BULLET} 401(k) or similar retirement accounts if available\n"
        response += f"{BULLET} Dollar-cost averaging strategy\n\n"
        if ctx.is_detailed:
            response += (
                "Remember: All investments carry risk. Consider your risk "
                "tolerance and time horizon."
            )

    return response


def tax_advice(ctx: AdviceContext) -> str:
    response = "Tax tips!\n\n" if ctx.is_casual else "Tax Planning Advice:\n\n"
    response += "General tax-saving strategies:\n\n"
    response += "1. Maximize retirement contributions (401(k), IRA)\n"
    response += "2. Keep receipts for deductible expenses\n"
    response += "3. Consider tax-loss harvesting for investments\n"
    response += "4. Take advantage of tax credits and deductions\n\n"

    if ctx.demographic_type == DemographicType.STUDENT:
        response += (
            "As a student, you may qualify for education credits and deductions. "
            "Keep track of tuition and education expenses."
        )
    elif ctx.demographic_type == DemographicType.PROFESSIONAL:
        response += (
            "As a professional, consider contributing to retirement accounts and "
            "keeping track of work-related expenses."
        )

    response += (
        "\n\nNote: I am providing general advice. Consult a tax professional for "
        "personalized guidance."
    )
    return response


def goals_advice(ctx: AdviceContext) -> str:
    response = "Let us talk about goals!\n\n" if ctx.is_casual else "Financial Goal Planning:\n\n"
    response += "Setting and achieving financial goals:\n\n"
    response += "1. Make goals SMART (Specific, Measurable, Achievable, Relevant, Time-bound)\n"
    response += "2. Break large goals into smaller milestones\n"
    response += "3. Track progress regularly\n"
    response += "4. Adjust goals as your situation changes\n\n"

    goals = ctx.user.financial_goals if ctx.user else []
    if goals:
        response += "Your current goals:\n"
        response += "".join(f"{index}. {goal}\n" for index, goal in enumerate(goals, start=1))
    else:
        response += "You have not set any financial goals yet. Would you like help creating some?"

    return response


def debt_advice(ctx: AdviceContext) -> str:
    response = (
        "Let us talk about debt management!\n\n"
        if ctx.is_casual
        else "Debt Management Advice:\n\n"
    )
    response += "Effective debt management strategies:\n\n"
    response += "1. List all your debts with interest rates\n"
    response += "2. Prioritize high-interest debt (debt avalanche method)\n"
    response += "3. Or pay off smallest debts first (debt snowball method)\n"
    response += "4. Consider debt consolidation if applicable\n"
    response += "5. Make minimum payments on all debts\n"
    response += "6. Allocate extra funds to priority debt\n\n"

    data = ctx.data
    if data.monthly_expenses > data.monthly_income * 0.5:
        response += (
            "Based on your current expenses, you may want to review your spending "
            "to free up money for debt repayment."
        )
    else:
        response += (
            f"You have about {_money(ctx, aggregator.monthly_savings(data))} available "
            "monthly that could go toward debt repayment."
        )

    return response


def retirement_advice(ctx: AdviceContext) -> str:
    response = (
        "Retirement planning! Let us get you set up.\n\n"
        if ctx.is_casual
        else "Retirement Planning Advice:\n\n"
    )
    response += "Key retirement planning steps:\n\n"
    response += "1. Start saving early - time is your biggest advantage\n"
    response += "2. Contribute to employer-sponsored plans (401k, 403b) with matching\n"
    response += "3. Open an IRA (Traditional or Roth)\n"
    response += "4. Aim to save 10-15% of your income for retirement\n"
    response += "5. Diversify your investments\n"
    response += "6. Consider your retirement timeline\n\n"

    if ctx.demographic_type == DemographicType.STUDENT:
        response += (
            "As a student, starting early gives you a huge advantage. Even small "
            "amounts now compound significantly over time."
        )
    elif ctx.demographic_type == DemographicType.PROFESSIONAL:
        response += (
            "With your current savings rate, you are setting a good foundation. "
            "Consider increasing contributions to retirement accounts."
        )

    return response


def health_check(ctx: AdviceContext) -> str:
    health = aggregator.financial_health(ctx.data)
    response = (
        "Let us check your financial health!\n\n"
        if ctx.is_casual
        else "Financial Health Assessment:\n\n"
    )

    response += "Here is how you are doing:\n\n"
    response += f"Monthly Income: {_money(ctx, health.monthly_income)}\n"
    response += f"Monthly Expenses: {_money(ctx, health.monthly_expenses)}\n"
    response += (
        f"Monthly Savings: {_money(ctx, health.monthly_savings)} "
        f"({aggregator.format_rate(health.savings_rate)}%)\n"
    )
    response += f"Current Balance: {_money(ctx, health.total_balance)}\n"
    response += (
        f"Emergency Fund: {aggregator.format_months(health.emergency_fund_months)} "
        "months of expenses\n\n"
    )

    rate = health.savings_rate
    if rate is None:
        response += "Record your income so I can assess your savings rate.\n"
    elif rate >= aggregator.HIGH_SAVINGS_RATE:
        response += "Excellent! You are saving 20% or more, which is outstanding.\n"
    elif rate >= aggregator.LOW_SAVINGS_RATE:
        response += "Good! You are saving 10% or more, which is a solid foundation.\n"
    else:
        response += "Your savings rate is below 10%. Consider increasing it gradually.\n"

    months = health.emergency_fund_months
    if months is None:
        response += "You have no recorded expenses, so your balance covers them indefinitely.\n"
    elif months >= aggregator.EMERGENCY_FUND_TARGET_MONTHS:
        response += "Great emergency fund! You have 6+ months covered.\n"
    elif months >= aggregator.EMERGENCY_FUND_MIN_MONTHS:
        response += "Good emergency fund. Aim for 6 months for better security.\n"
    else:
        response += "Build your emergency fund to 3-6 months of expenses.\n"

    return response


# =============================================================================
# DIRECT DATA QUESTIONS
# =============================================================================

def answer_data_question(message: str, ctx: AdviceContext) -> Optional[str]:
    """
    Answer "how much do I spend / what is my balance" style questions.

    ``message`` must already be lower-cased. Returns None when the
    question is not about a figure we hold.
    """
    data = ctx.data

    if "how much" in message and "spend" in message:
        return f"You are currently spending {_money(ctx, data.monthly_expenses)} per month."

    if "how much" in message and ("earn" in message or "income" in message):
        return f"Your monthly income is {_money(ctx, data.monthly_income)}."

    if "how much" in message and ("save" in message or "left" in message):
        rate = aggregator.savings_rate(data)
        saving = f"You are saving {_money(ctx, aggregator.monthly_savings(data))} per month"
        if rate is None:
            return f"{saving}."
        return f"{saving}, which is {aggregator.format_rate(rate)}% of your income."

    if "what is my" in message and "balance" in message:
        return f"Your current balance is {_money(ctx, data.total_balance)}."

    if "what is my" in message and "savings rate" in message:
        rate = aggregator.savings_rate(data)
        response = f"Your savings rate is {aggregator.format_rate(rate)}%. "
        if rate is None:
            response += "Add your income so I can calculate it."
        elif rate < aggregator.LOW_SAVINGS_RATE:
            response += "Consider aiming for at least 10-20% for better financial health."
        elif rate < aggregator.HIGH_SAVINGS_RATE:
            response += "That is good! Consider increasing to 20% for optimal savings."
        else:
            response += "Excellent! You are saving at an optimal rate."
        return response

    return None
