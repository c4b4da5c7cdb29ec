"""
Form Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Number parsing (amounts arrive as typed text)
- Format checks (email shape)
- Length limits (read from the entity models so the two cannot drift)

STAGE 2 - SEMANTIC VALIDATION:
- Business rules (amount > 0, target > 0, expenses need a category)
- Suspicious values (future dates, very large amounts)
- Duplicate detection (email already registered)

Stage 2 only runs for fields that survived stage 1.

IMPORTANT: Validation NEVER raises for bad input and NEVER silently
fixes it. Problems come back as ValidationIssues that the UI shows
inline next to the offending field.
"""

import math
import re
from datetime import date
from typing import Optional

from pydantic import BaseModel

from finova.models.finance import (
    ExpenseEntry,
    IncomeEntry,
    SavingsGoal,
    TransactionType,
    User,
)
from finova.models.forms import (
    AmountInput,
    GoalDraft,
    SignUpForm,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from finova.services.storage.store import FinanceStore


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Amounts above this are accepted with a warning
LARGE_AMOUNT_WARNING = 1_000_000


def max_length_of(model: type[BaseModel], field_name: str) -> Optional[int]:
    """Read the ``max_length`` constraint declared on a model field."""
    for constraint in model.model_fields[field_name].metadata:
        limit = getattr(constraint, "max_length", None)
        if limit is not None:
            return limit
    return None


class FormValidator:
    """
    Validates user-entered forms before they become store entities.

    Each ``validate_*`` method returns a ValidationResult whose ``parsed``
    dict holds the cleaned values when the result is valid.
    """

    def __init__(self, store: Optional[FinanceStore] = None):
        """
        Initialize validator.

        Args:
            store: Used to detect an already registered email.
                   If None, duplicate checking is skipped.
        """
        self._store = store

    # ------------------------------------------------------------------
    # Stage 1 helpers
    # ------------------------------------------------------------------

    def _parse_amount(
        self,
        value: AmountInput,
        field: str,
        label: str,
        issues: list[ValidationIssue],
        required: bool = True,
    ) -> Optional[float]:
        """Parse a typed amount; record an issue and return None on failure."""
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{label} is required",
                    severity="error",
                    suggested_fix=f"Enter the {label.lower()}",
                ))
            return None

        try:
            if isinstance(value, bool):
                raise ValueError("boolean is not an amount")
            if isinstance(value, str):
                value = value.replace(",", "").strip()
            amount = float(value)
        except (TypeError, ValueError):
            amount = math.nan

        if not math.isfinite(amount):
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a number",
                severity="error",
                suggested_fix="Use digits only, e.g. 1250.50",
            ))
            return None

        return amount

    def _require_text(
        self,
        value: Optional[str],
        field: str,
        label: str,
        issues: list[ValidationIssue],
    ) -> Optional[str]:
        if not value or not value.strip():
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
                severity="error",
            ))
            return None
        return value.strip()

    def check_length(
        self,
        value: Optional[str],
        model: type[BaseModel],
        model_field: str,
        field: str,
        label: str,
        issues: list[ValidationIssue],
    ) -> bool:
        """Record a ``too_long`` error when ``value`` exceeds the model's limit."""
        limit = max_length_of(model, model_field)
        if value is None or limit is None or len(value) <= limit:
            return True
        issues.append(ValidationIssue(
            field=field,
            issue_type="too_long",
            message=f"{label} must be at most {limit} characters",
            severity="error",
            suggested_fix=f"Shorten it by {len(value) - limit} characters",
        ))
        return False

    def _check_large_amount(
        self,
        amount: float,
        field: str,
        issues: list[ValidationIssue],
    ) -> None:
        if amount > LARGE_AMOUNT_WARNING:
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_amount",
                message=f"Amount {amount:,.2f} is unusually large",
                severity="warning",
                suggested_fix="Double-check the number of digits",
            ))

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def validate_transaction(self, draft: TransactionDraft) -> ValidationResult:
        """Validate an income or expense entry."""
        issues: list[ValidationIssue] = []

        # Stage 1
        amount = self._parse_amount(draft.amount, "amount", "Amount", issues)

        category = draft.category.strip() if draft.category else None
        if draft.type == TransactionType.EXPENSE and not category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required for expenses",
                severity="error",
                suggested_fix="Pick a category such as Food & Dining",
            ))

        entry_model = ExpenseEntry if draft.type == TransactionType.EXPENSE else IncomeEntry
        description = draft.description or None
        self.check_length(category, entry_model, "category", "category", "Category", issues)
        self.check_length(
            description, entry_model, "description", "description", "Description", issues
        )

        if draft.transaction_date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))

        # Stage 2
        if amount is not None:
            if amount <= 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                ))
            else:
                self._check_large_amount(amount, "amount", issues)

        if draft.transaction_date and draft.transaction_date > date.today():
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date {draft.transaction_date.isoformat()} is in the future",
                severity="warning",
                suggested_fix="Check the date; future entries still count toward totals",
            ))

        return ValidationResult(
            form="transaction",
            issues=issues,
            parsed={
                "type": draft.type,
                "amount": amount,
                "category": category,
                "description": description,
                "date": draft.transaction_date,
            },
        )

    def validate_goal(self, draft: GoalDraft) -> ValidationResult:
        """Validate a savings goal form."""
        issues: list[ValidationIssue] = []

        name = self._require_text(draft.name, "name", "Goal name", issues)
        self.check_length(name, SavingsGoal, "name", "name", "Goal name", issues)
        target = self._parse_amount(draft.target_amount, "target_amount", "Target amount", issues)
        current = self._parse_amount(
            draft.current_amount,
            "current_amount",
            "Current amount",
            issues,
            required=False,
        )
        if current is None and not any(i.field == "current_amount" for i in issues):
            current = 0.0

        if target is not None:
            if target <= 0:
                issues.append(ValidationIssue(
                    field="target_amount",
                    issue_type="invalid_value",
                    message="Target amount must be greater than zero",
                    severity="error",
                ))
            else:
                self._check_large_amount(target, "target_amount", issues)

        if current is not None and current < 0:
            issues.append(ValidationIssue(
                field="current_amount",
                issue_type="invalid_value",
                message="Current amount cannot be negative",
                severity="error",
            ))

        if target and current is not None and target > 0 and current >= target:
            issues.append(ValidationIssue(
                field="current_amount",
                issue_type="goal_reached",
                message="This goal is already reached",
                severity="info",
            ))

        if draft.deadline and draft.deadline < date.today():
            issues.append(ValidationIssue(
                field="deadline",
                issue_type="past_date",
                message=f"Deadline {draft.deadline.isoformat()} has already passed",
                severity="warning",
            ))

        return ValidationResult(
            form="goal",
            issues=issues,
            parsed={
                "name": name,
                "target_amount": target,
                "current_amount": current,
                "deadline": draft.deadline,
            },
        )

    def validate_email(
        self,
        email: Optional[str],
        issues: list[ValidationIssue],
        exclude_user_id: Optional[str] = None,
    ) -> Optional[str]:
        """Shape check plus duplicate check against registered users."""
        value = self._require_text(email, "email", "Email", issues)
        if value is None or not self.check_length(value, User, "email", "email", "Email", issues):
            return None

        if not EMAIL_PATTERN.match(value):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message=f"'{value}' is not a valid email address",
                severity="error",
                suggested_fix="Use the form name@example.com",
            ))
            return None

        if self._store is not None:
            existing = self._store.get_user_by_email(value)
            if existing and existing.id != exclude_user_id:
                issues.append(ValidationIssue(
                    field="email",
                    issue_type="duplicate",
                    message="An account with this email already exists",
                    severity="error",
                    suggested_fix="Sign in instead, or use another email",
                ))

        return value

    def validate_sign_up(self, form: SignUpForm) -> ValidationResult:
        issues: list[ValidationIssue] = []

        email = self.validate_email(form.email, issues)
        full_name = self._require_text(form.full_name, "full_name", "Full name", issues)
        self.check_length(full_name, User, "full_name", "full_name", "Full name", issues)
        password = self._require_text(form.password, "password", "Password", issues)

        return ValidationResult(
            form="sign_up",
            issues=issues,
            parsed={
                "email": email,
                "full_name": full_name,
                "password": password,
                "demographic_type": form.demographic_type,
            },
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the form.
        """
        warnings = [i for i in result.issues if i.severity == "warning"]
        if result.is_valid and not warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     Tip: {issue.suggested_fix}")

        if warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for issue in warnings:
                lines.append(f"   • {issue.message}")

        if not result.has_errors:
            lines.append("")
            lines.append("You can still save, but please double-check.")

        return "\n".join(lines)
