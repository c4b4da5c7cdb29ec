"""
Form Drafts and Validation Results

Drafts hold what the user typed, before validation. Every field is
loose (amounts may still be strings) because the validator, not the
model, decides what is acceptable and explains why.

Only validated drafts become store entities.
"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finova.models.finance import DemographicType, TransactionType, utcnow


AmountInput = Union[str, float, int, None]


class TransactionDraft(BaseModel):
    """Raw transaction form input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType = TransactionType.EXPENSE
    amount: AmountInput = None
    category: Optional[str] = None
    description: Optional[str] = None
    transaction_date: Optional[date] = None


class GoalDraft(BaseModel):
    """Raw savings goal form input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    target_amount: AmountInput = None
    current_amount: AmountInput = None
    deadline: Optional[date] = None


class SignUpForm(BaseModel):
    """Raw sign-up form input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[str] = None
    full_name: Optional[str] = None
    password: Optional[str] = None
    demographic_type: DemographicType = DemographicType.PROFESSIONAL


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Outcome of validating one form submission.

    Errors block the submission; warnings are shown but don't block.
    """

    form: str = Field(
        ...,
        description="Which form was validated"
    )
    validated_at: datetime = Field(default_factory=utcnow)
    issues: list[ValidationIssue] = Field(default_factory=list)

    # Parsed values, filled in when the raw input was usable
    parsed: dict = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]
