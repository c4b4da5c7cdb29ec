"""Tests for form validation."""

from datetime import date, timedelta

import pytest

from finova.models.finance import ExpenseEntry, SavingsGoal, TransactionType, User
from finova.models.forms import GoalDraft, SignUpForm, TransactionDraft
from finova.validation import FormValidator
from finova.validation.validator import max_length_of


@pytest.fixture
def validator(store):
    return FormValidator(store)


def _issue_types(result, field):
    return [i.issue_type for i in result.issues if i.field == field]


class TestTransactionValidation:
    """Tests for income / expense drafts."""

    def test_valid_expense(self, validator):
        draft = TransactionDraft(
            type=TransactionType.EXPENSE,
            amount="1,250.50",
            category="Travel",
            transaction_date=date(2024, 5, 1),
        )
        result = validator.validate_transaction(draft)
        assert result.is_valid
        assert result.parsed["amount"] == 1250.5
        assert result.parsed["category"] == "Travel"

    def test_missing_amount(self, validator):
        result = validator.validate_transaction(
            TransactionDraft(category="Travel", transaction_date=date(2024, 5, 1))
        )
        assert _issue_types(result, "amount") == ["missing"]

    @pytest.mark.parametrize("amount", ["abc", "nan", "inf", "12abc"])
    def test_unparseable_amount(self, validator, amount):
        result = validator.validate_transaction(
            TransactionDraft(amount=amount, category="Travel", transaction_date=date(2024, 5, 1))
        )
        assert _issue_types(result, "amount") == ["invalid_format"]

    @pytest.mark.parametrize("amount", [0, "-5"])
    def test_non_positive_amount(self, validator, amount):
        result = validator.validate_transaction(
            TransactionDraft(amount=amount, category="Travel", transaction_date=date(2024, 5, 1))
        )
        assert _issue_types(result, "amount") == ["invalid_value"]

    def test_expense_needs_category(self, validator):
        result = validator.validate_transaction(
            TransactionDraft(amount=10, transaction_date=date(2024, 5, 1))
        )
        assert _issue_types(result, "category") == ["missing"]

    def test_income_category_is_optional(self, validator):
        result = validator.validate_transaction(
            TransactionDraft(
                type=TransactionType.INCOME,
                amount=10,
                transaction_date=date(2024, 5, 1),
            )
        )
        assert result.is_valid

    def test_missing_date(self, validator):
        result = validator.validate_transaction(TransactionDraft(amount=10, category="Other"))
        assert _issue_types(result, "date") == ["missing"]

    def test_future_date_is_a_warning(self, validator):
        result = validator.validate_transaction(
            TransactionDraft(
                amount=10,
                category="Other",
                transaction_date=date.today() + timedelta(days=3),
            )
        )
        assert result.is_valid
        assert _issue_types(result, "date") == ["future_date"]

    def test_large_amount_is_a_warning(self, validator):
        result = validator.validate_transaction(
            TransactionDraft(amount=5_000_000, category="Other", transaction_date=date(2024, 5, 1))
        )
        assert result.is_valid
        assert _issue_types(result, "amount") == ["suspicious_amount"]


class TestGoalValidation:
    """Tests for savings goal drafts."""

    def test_valid_goal_defaults_current_to_zero(self, validator):
        result = validator.validate_goal(GoalDraft(name="Car", target_amount="5000"))
        assert result.is_valid
        assert result.parsed["current_amount"] == 0.0
        assert result.parsed["target_amount"] == 5000.0

    def test_name_and_target_required(self, validator):
        result = validator.validate_goal(GoalDraft())
        assert _issue_types(result, "name") == ["missing"]
        assert _issue_types(result, "target_amount") == ["missing"]

    def test_negative_current(self, validator):
        result = validator.validate_goal(
            GoalDraft(name="Car", target_amount=100, current_amount=-1)
        )
        assert _issue_types(result, "current_amount") == ["invalid_value"]

    def test_reached_goal_is_info(self, validator):
        result = validator.validate_goal(
            GoalDraft(name="Car", target_amount=100, current_amount=150)
        )
        assert result.is_valid
        assert _issue_types(result, "current_amount") == ["goal_reached"]

    def test_past_deadline_is_a_warning(self, validator):
        result = validator.validate_goal(
            GoalDraft(name="Car", target_amount=100, deadline=date(2000, 1, 1))
        )
        assert result.is_valid
        assert _issue_types(result, "deadline") == ["past_date"]


class TestSignUpValidation:
    """Tests for the sign-up form."""

    def test_valid(self, validator):
        result = validator.validate_sign_up(
            SignUpForm(email="asha@example.com", full_name="Asha", password="pw")
        )
        assert result.is_valid

    def test_bad_email(self, validator):
        result = validator.validate_sign_up(SignUpForm(email="asha", full_name="Asha", password="pw"))
        assert _issue_types(result, "email") == ["invalid_format"]

    def test_duplicate_email_is_case_insensitive(self, validator, store):
        store.add_user(User(email="asha@example.com", full_name="Asha"))
        result = validator.validate_sign_up(
            SignUpForm(email="ASHA@example.com", full_name="Other", password="pw")
        )
        assert _issue_types(result, "email") == ["duplicate"]

    def test_no_store_skips_duplicate_check(self):
        result = FormValidator().validate_sign_up(
            SignUpForm(email="asha@example.com", full_name="Asha", password="pw")
        )
        assert result.is_valid


class TestUserFriendlySummary:
    """Tests for the inline summary text."""

    def test_all_passed(self, validator):
        result = validator.validate_goal(GoalDraft(name="Car", target_amount=100))
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_and_tips(self, validator):
        result = validator.validate_transaction(TransactionDraft(category="Other"))
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("Please fix the following:")
        assert "   • Amount is required" in summary
        assert "     Tip: Enter the amount" in summary

    def test_warnings_only(self, validator):
        result = validator.validate_goal(
            GoalDraft(name="Car", target_amount=100, deadline=date(2000, 1, 1))
        )
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("Please verify the following:")
        assert summary.endswith("You can still save, but please double-check.")


class TestLengthLimits:
    """Text longer than the entity models allow is an inline error."""

    def test_limits_come_from_the_models(self):
        assert max_length_of(ExpenseEntry, "description") == 500
        assert max_length_of(ExpenseEntry, "category") == 100
        assert max_length_of(SavingsGoal, "name") == 200
        assert max_length_of(User, "full_name") == 200
        assert max_length_of(SavingsGoal, "deadline") is None

    def test_long_description(self, validator):
        result = validator.validate_transaction(TransactionDraft(
            amount=10,
            category="Other",
            description="x" * 600,
            transaction_date=date(2024, 5, 1),
        ))
        assert not result.is_valid
        assert _issue_types(result, "description") == ["too_long"]

    def test_long_category(self, validator):
        result = validator.validate_transaction(TransactionDraft(
            type=TransactionType.INCOME,
            amount=10,
            category="c" * 101,
            transaction_date=date(2024, 5, 1),
        ))
        assert _issue_types(result, "category") == ["too_long"]

    def test_description_at_limit_is_fine(self, validator):
        result = validator.validate_transaction(TransactionDraft(
            amount=10,
            category="Other",
            description="x" * 500,
            transaction_date=date(2024, 5, 1),
        ))
        assert result.is_valid

    def test_long_goal_name(self, validator):
        result = validator.validate_goal(GoalDraft(name="g" * 250, target_amount=100))
        assert _issue_types(result, "name") == ["too_long"]
        assert "at most 200 characters" in result.messages[0]

    def test_long_sign_up_fields(self, validator):
        result = validator.validate_sign_up(SignUpForm(
            email="a" * 320 + "@example.com",
            full_name="n" * 250,
            password="pw",
        ))
        assert _issue_types(result, "email") == ["too_long"]
        assert _issue_types(result, "full_name") == ["too_long"]
