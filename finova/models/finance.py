"""
Core Data Models for FINOVA

These models define the schemas for everything the store persists:
users, their financial snapshot, savings goals, chat messages and
preferences. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to JSON text for the key-value store
4. Keep every entity scoped to exactly one owning user

DESIGN DECISION: Money is held as float. Every aggregation in the
analytics layer works on floats and rounds only when formatting.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate a prefixed identifier such as ``goal_3f2a9c1b7d4e``."""
    return f"{prefix}_{uuid4().hex[:12]}"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class DemographicType(str, Enum):
    """
    Coarse user category.

    Only used to pick the assistant's tone and verbosity.
    """
    STUDENT = "student"
    PROFESSIONAL = "professional"
    RETIREE = "retiree"
    ENTREPRENEUR = "entrepreneur"


class TransactionType(str, Enum):
    """Direction of a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"


class ChatRole(str, Enum):
    """Author of a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


INCOME_CATEGORIES: tuple[str, ...] = (
    "Salary",
    "Freelance",
    "Investment",
    "Bonus",
    "Other",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Bills & Utilities",
    "Entertainment",
    "Healthcare",
    "Education",
    "Travel",
    "Other",
)


# =============================================================================
# USERS
# =============================================================================

class Demographic(BaseModel):
    """Optional demographic profile attached to a user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: DemographicType
    age: Optional[int] = Field(default=None, ge=0, le=130)
    location: Optional[str] = Field(default=None, max_length=200)
    occupation: Optional[str] = Field(default=None, max_length=200)


class User(BaseModel):
    """
    A registered user.

    NOTE: The store enforces uniqueness of ``id`` only. Email uniqueness
    is checked by the account flow at sign-up time.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=lambda: new_id("user"),
        description="Unique user ID"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Login email"
    )
    full_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    password: Optional[str] = Field(
        default=None,
        description="Optional password (stored as given)"
    )
    demographic: Optional[Demographic] = None
    financial_goals: list[str] = Field(
        default_factory=list,
        description="Free-text financial goals"
    )
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator('financial_goals')
    @classmethod
    def drop_blank_goals(cls, v: list[str]) -> list[str]:
        return [goal.strip() for goal in v if goal and goal.strip()]

    @property
    def first_name(self) -> str:
        return self.full_name.split(" ")[0] if self.full_name else ""


# =============================================================================
# FINANCIAL SNAPSHOT
# =============================================================================

class ExpenseBreakdownEntry(BaseModel):
    """Amount spent in one category on one date."""

    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0)
    date: date


class IncomeEntry(BaseModel):
    """One income transaction."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: new_id("inc"))
    date: date
    amount: float = Field(..., ge=0)
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class ExpenseEntry(BaseModel):
    """One expense transaction."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: new_id("exp"))
    date: date
    amount: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class FinancialData(BaseModel):
    """
    Per-user financial snapshot.

    ``monthly_income`` and ``monthly_expenses`` are the sums of the
    respective histories. They are stored for convenience but every
    ledger mutation rewrites them through ``recalculate_totals`` so they
    cannot drift from the histories.
    """

    total_balance: float = 0.0
    monthly_income: float = Field(default=0.0, ge=0)
    monthly_expenses: float = Field(default=0.0, ge=0)
    expense_breakdown: list[ExpenseBreakdownEntry] = Field(default_factory=list)
    income_history: list[IncomeEntry] = Field(default_factory=list)
    expense_history: list[ExpenseEntry] = Field(default_factory=list)

    @classmethod
    def default(cls) -> "FinancialData":
        """Snapshot shown to a user who has never saved anything."""
        return cls(
            total_balance=10000.0,
            monthly_income=2000.0,
            monthly_expenses=500.0,
        )

    @classmethod
    def empty(cls) -> "FinancialData":
        """All-zero snapshot written at sign-up."""
        return cls()

    def recalculate_totals(self) -> "FinancialData":
        """Rewrite the monthly totals from the raw histories (in place)."""
        self.monthly_income = sum(entry.amount for entry in self.income_history)
        self.monthly_expenses = sum(entry.amount for entry in self.expense_history)
        return self


class Transaction(BaseModel):
    """Flattened ledger row, income and expense alike."""

    id: str
    type: TransactionType
    amount: float
    category: Optional[str] = None
    description: Optional[str] = None
    date: date


# =============================================================================
# GOALS
# =============================================================================

class SavingsGoal(BaseModel):
    """
    A savings target.

    DESIGN DECISION: ``current_amount`` may exceed ``target_amount``.
    Progress is reported unclamped; UI progress bars clamp themselves.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: new_id("goal"))
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(default=0.0, ge=0)
    deadline: Optional[date] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def progress_percent(self) -> float:
        return self.current_amount / self.target_amount * 100

    @property
    def remaining_amount(self) -> float:
        return max(self.target_amount - self.current_amount, 0.0)

    @property
    def is_complete(self) -> bool:
        return self.current_amount >= self.target_amount


# =============================================================================
# CHAT
# =============================================================================

class ChatMessage(BaseModel):
    """A single chat turn, optionally tagged with its owning user."""

    id: str = Field(default_factory=lambda: new_id("msg"))
    role: ChatRole
    content: str
    created_at: datetime = Field(default_factory=utcnow)
    user_id: Optional[str] = Field(
        default=None,
        description="Owner, used to filter a shared message log"
    )


# =============================================================================
# PREFERENCES
# =============================================================================

class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True
    budget_alerts: bool = True
    goal_reminders: bool = True


class UserPreferences(BaseModel):
    """Application preferences saved from the settings page."""

    theme: Theme = Theme.SYSTEM
    notifications: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )
    currency: str = Field(default="USD", min_length=3, max_length=3)
    language: str = Field(default="en", min_length=2, max_length=10)

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()
