"""
Data Models Package

This package contains all Pydantic models used in FINOVA.
All data flowing through the system must conform to these schemas.
"""

from finova.models.finance import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    ChatMessage,
    ChatRole,
    Demographic,
    DemographicType,
    ExpenseBreakdownEntry,
    ExpenseEntry,
    FinancialData,
    IncomeEntry,
    NotificationPreferences,
    SavingsGoal,
    Theme,
    Transaction,
    TransactionType,
    User,
    UserPreferences,
)
from finova.models.forms import (
    GoalDraft,
    SignUpForm,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from finova.models.insights import (
    AdviceContext,
    AssistantResponse,
    BudgetSummary,
    Complexity,
    FinancialHealth,
    Persona,
    ResponseSource,
    SpendingInsights,
    Tone,
    TrendDirection,
)
from finova.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "ChatMessage",
    "ChatRole",
    "Demographic",
    "DemographicType",
    "ExpenseBreakdownEntry",
    "ExpenseEntry",
    "FinancialData",
    "IncomeEntry",
    "NotificationPreferences",
    "SavingsGoal",
    "Theme",
    "Transaction",
    "TransactionType",
    "User",
    "UserPreferences",
    # Forms
    "GoalDraft",
    "SignUpForm",
    "TransactionDraft",
    "ValidationIssue",
    "ValidationResult",
    # Derived views
    "AdviceContext",
    "AssistantResponse",
    "BudgetSummary",
    "Complexity",
    "FinancialHealth",
    "Persona",
    "ResponseSource",
    "SpendingInsights",
    "Tone",
    "TrendDirection",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
