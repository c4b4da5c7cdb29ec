"""
Derived Financial Views and Assistant Replies

Everything in this module is COMPUTED from a FinancialData snapshot
(or produced by the assistant) and never persisted on its own.

DESIGN DECISION: Ratios whose denominator is zero are None, never
NaN or infinity. Formatters render None as "n/a".
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from finova.models.finance import ChatMessage, DemographicType, FinancialData, User


class Tone(str, Enum):
    CASUAL = "casual"
    PROFESSIONAL = "professional"
    FORMAL = "formal"
    FRIENDLY = "friendly"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    DETAILED = "detailed"


class Persona(BaseModel):
    """Phrasing style picked from the user's demographic type."""

    tone: Tone = Tone.FRIENDLY
    complexity: Complexity = Complexity.MODERATE

    @classmethod
    def for_demographic(cls, demographic_type: Optional[DemographicType]) -> "Persona":
        """Map a demographic type to tone and complexity."""
        if demographic_type == DemographicType.STUDENT:
            return cls(tone=Tone.CASUAL, complexity=Complexity.SIMPLE)
        if demographic_type in (DemographicType.PROFESSIONAL, DemographicType.ENTREPRENEUR):
            return cls(tone=Tone.PROFESSIONAL, complexity=Complexity.DETAILED)
        if demographic_type == DemographicType.RETIREE:
            return cls(tone=Tone.FORMAL, complexity=Complexity.SIMPLE)
        return cls()


class TrendDirection(str, Enum):
    INCREASED = "increased"
    DECREASED = "decreased"
    STABLE = "stable"


class BudgetSummary(BaseModel):
    """Budget overview rendered in charts and budget replies."""

    monthly_income: float
    monthly_expenses: float
    monthly_savings: float
    savings_rate: Optional[str] = Field(
        default=None,
        description="Savings rate to one decimal (e.g. '75.0'); None when income is 0"
    )
    category_breakdown: dict[str, float] = Field(default_factory=dict)
    total_balance: float

    @property
    def savings_rate_value(self) -> Optional[float]:
        return float(self.savings_rate) if self.savings_rate is not None else None


class SpendingInsights(BaseModel):
    """Heuristic observations about a snapshot."""

    trends: list[str] = Field(default_factory=list)
    anomalies: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.trends or self.anomalies or self.recommendations)


class FinancialHealth(BaseModel):
    """Inputs to the financial health check reply."""

    monthly_income: float
    monthly_expenses: float
    monthly_savings: float
    total_balance: float
    savings_rate: Optional[float] = None
    emergency_fund_months: Optional[float] = Field(
        default=None,
        description="Balance / monthly expenses; None when expenses are 0"
    )


class ResponseSource(str, Enum):
    """Which engine produced an assistant reply."""
    REMOTE = "remote"
    RULES = "rules"


class AssistantResponse(BaseModel):
    """
    A reply from the assistant.

    ``budget_summary`` and ``insights`` are side-channel attachments the
    presentation layer can chart; ``content`` is always non-empty.
    """

    content: str = Field(..., min_length=1)
    suggestions: list[str] = Field(default_factory=list)
    budget_summary: Optional[BudgetSummary] = None
    insights: Optional[SpendingInsights] = None
    source: ResponseSource = ResponseSource.RULES
    model: Optional[str] = Field(
        default=None,
        description="Hosted model that produced the text, for remote replies"
    )


class AdviceContext(BaseModel):
    """
    Everything the assistant may draw on for one reply.

    Built by the chat flow from the store; the engines never read the
    store themselves.
    """

    user: Optional[User] = None
    data: FinancialData = Field(default_factory=FinancialData.default)
    persona: Persona = Field(default_factory=Persona)
    currency: str = "USD"
    history: list[ChatMessage] = Field(
        default_factory=list,
        description="Most recent turns, oldest first"
    )

    @classmethod
    def build(
        cls,
        user: Optional[User],
        data: FinancialData,
        currency: str = "USD",
        history: Optional[list[ChatMessage]] = None,
    ) -> "AdviceContext":
        demographic_type = user.demographic.type if user and user.demographic else None
        return cls(
            user=user,
            data=data,
            persona=Persona.for_demographic(demographic_type),
            currency=currency,
            history=history or [],
        )

    @property
    def tone(self) -> Tone:
        return self.persona.tone

    @property
    def complexity(self) -> Complexity:
        return self.persona.complexity

    @property
    def is_casual(self) -> bool:
        return self.persona.tone == Tone.CASUAL

    @property
    def is_detailed(self) -> bool:
        return self.persona.complexity == Complexity.DETAILED

    @property
    def demographic_type(self) -> Optional[DemographicType]:
        if self.user and self.user.demographic:
            return self.user.demographic.type
        return None
