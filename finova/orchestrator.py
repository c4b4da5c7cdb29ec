"""
Main Orchestrator for FINOVA

This module ties together all the components and defines the
end-to-end flows for:
1. Accounts (sign up → session → profile → preferences → clear)
2. Ledger (form → validate → apply to snapshot → recalculate → save)
3. Savings goals (form → validate → save)
4. Chat (message → persist → assistant → persist reply)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No form data persists without passing validation
- The assistant never reads the store; it gets an AdviceContext
- Every user action is audited

This is the "glue" a presentation layer calls into.
"""

from typing import NamedTuple, Optional, Union

import requests
import structlog

from finova.agents import RemoteAssistant, RuleBasedAssistant
from finova.audit import AuditLogger, create_correlation_id
from finova.config import get_settings
from finova.config.settings import AppSettings, Settings
from finova.models.audit import AuditEventType
from finova.models.finance import (
    ChatMessage,
    ChatRole,
    Demographic,
    ExpenseBreakdownEntry,
    ExpenseEntry,
    FinancialData,
    IncomeEntry,
    SavingsGoal,
    Transaction,
    TransactionType,
    User,
    UserPreferences,
    new_id,
)
from finova.models.forms import (
    GoalDraft,
    SignUpForm,
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)
from finova.models.insights import AdviceContext, AssistantResponse
from finova.services.inference import HuggingFaceInferenceClient
from finova.services.storage import (
    FinanceStore,
    KeyValueAuditStorage,
    KeyValueBackend,
    create_backend,
)
from finova.validation import FormValidator


logger = structlog.get_logger(__name__)

Assistant = Union[RemoteAssistant, RuleBasedAssistant]


def _not_found(form: str, field: str, message: str) -> ValidationResult:
    return ValidationResult(
        form=form,
        issues=[ValidationIssue(
            field=field,
            issue_type="not_found",
            message=message,
            severity="error",
        )],
    )


class AccountFlow:
    """
    Orchestrates sign-up, sign-in and profile management.

    Sign-up always writes a zeroed FinancialData record for the new user,
    so a fresh account never shows the demo snapshot.
    """

    def __init__(
        self,
        store: FinanceStore,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or FormValidator(store)
        self._audit_logger = audit_logger

    @property
    def current_user(self) -> Optional[User]:
        return self._store.get_current_user()

    def sign_up(self, form: SignUpForm) -> tuple[Optional[User], ValidationResult]:
        """
        Register a user and open a session for them.

        Returns:
            (user, validation_result). user is None when validation failed.
        """
        result = self._validator.validate_sign_up(form)
        if not result.is_valid:
            return None, result

        values = result.parsed
        user = User(
            email=values["email"],
            full_name=values["full_name"],
            password=values["password"],
            demographic=Demographic(type=values["demographic_type"]),
        )
        self._store.add_user(user)
        self._store.set_active_user(user.id)
        self._store.save_financial_data(FinancialData.empty())

        logger.info("user_signed_up", user_id=user.id)
        if self._audit_logger:
            self._audit_logger.log_user_signed_up(user.id, user.email)

        return user, result

    def sign_in(self, email: str, password: Optional[str] = None) -> Optional[User]:
        """
        Open a session for an existing user.

        Accounts created without a password accept any password.
        """
        user = self._store.get_user_by_email(email)
        if user is None or (user.password and user.password != password):
            logger.info("user_sign_in_failed")
            if self._audit_logger:
                self._audit_logger.log_user_sign_in_failed(email)
            return None

        self._store.set_active_user(user.id)
        if self._audit_logger:
            self._audit_logger.log_user_signed_in(user.id)
        return user

    def sign_out(self) -> None:
        user_id = self._store.get_active_user_id()
        self._store.set_active_user(None)
        if user_id and self._audit_logger:
            self._audit_logger.log_user_signed_out(user_id)

    def update_profile(
        self,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        demographic: Optional[Demographic] = None,
        financial_goals: Optional[list[str]] = None,
    ) -> tuple[Optional[User], ValidationResult]:
        """Update the signed-in user's profile. Only passed fields change."""
        user_id = self._store.get_active_user_id()
        if not user_id:
            return None, _not_found("profile", "user", "Nobody is signed in")

        issues: list[ValidationIssue] = []
        updates: dict = {}

        if full_name is not None:
            if full_name.strip():
                if self._validator.check_length(
                    full_name.strip(), User, "full_name", "full_name", "Full name", issues
                ):
                    updates["full_name"] = full_name.strip()
            else:
                issues.append(ValidationIssue(
                    field="full_name",
                    issue_type="missing",
                    message="Full name is required",
                    severity="error",
                ))
        if email is not None:
            cleaned = self._validator.validate_email(email, issues, exclude_user_id=user_id)
            if cleaned:
                updates["email"] = cleaned
        if demographic is not None:
            updates["demographic"] = demographic.model_dump()
        if financial_goals is not None:
            updates["financial_goals"] = financial_goals

        result = ValidationResult(form="profile", issues=issues, parsed=updates)
        if not result.is_valid:
            return None, result

        user = self._store.update_user(updates)
        if user and self._audit_logger:
            self._audit_logger.log_profile_updated(user.id, sorted(updates))
        return user, result

    def add_financial_goal(self, goal: str) -> Optional[User]:
        user = self._store.get_current_user()
        if user is None or not goal or not goal.strip():
            return None
        return self._store.update_user(
            {"financial_goals": [*user.financial_goals, goal.strip()]}
        )

    def remove_financial_goal(self, index: int) -> Optional[User]:
        user = self._store.get_current_user()
        if user is None or not 0 <= index < len(user.financial_goals):
            return None
        goals = [g for i, g in enumerate(user.financial_goals) if i != index]
        return self._store.update_user({"financial_goals": goals})

    def save_preferences(self, preferences: UserPreferences) -> None:
        self._store.save_preferences(preferences)
        if self._audit_logger:
            self._audit_logger.log_preferences_saved(
                self._store.get_active_user_id(),
                preferences.currency,
            )

    def clear_all_data(self) -> None:
        """
        Wipe the signed-in user's data, every account and the session.

        IRREVERSIBLE. The audit log survives.
        """
        user_id = self._store.get_active_user_id()
        self._store.clear_all()
        logger.warning("all_data_cleared", user_id=user_id)
        if self._audit_logger:
            self._audit_logger.log_all_data_cleared(user_id)


class LedgerFlow:
    """
    Orchestrates income and expense entries.

    Every mutation goes through the same steps:
    1. Validate the draft
    2. Apply (or reverse) the entry's effect on balance and breakdown
    3. Recalculate monthly totals from the histories
    4. Save the snapshot in one write
    """

    def __init__(
        self,
        store: FinanceStore,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or FormValidator(store)
        self._audit_logger = audit_logger

    # ------------------------------------------------------------------
    # Snapshot arithmetic
    # ------------------------------------------------------------------

    @staticmethod
    def _apply(data: FinancialData, transaction: Transaction) -> None:
        if transaction.type == TransactionType.INCOME:
            data.income_history.append(IncomeEntry(
                id=transaction.id,
                date=transaction.date,
                amount=transaction.amount,
                category=transaction.category,
                description=transaction.description,
            ))
            data.total_balance += transaction.amount
            return

        data.expense_history.append(ExpenseEntry(
            id=transaction.id,
            date=transaction.date,
            amount=transaction.amount,
            category=transaction.category,
            description=transaction.description,
        ))
        data.total_balance -= transaction.amount

        for entry in data.expense_breakdown:
            if entry.category == transaction.category and entry.date == transaction.date:
                entry.amount += transaction.amount
                break
        else:
            data.expense_breakdown.append(ExpenseBreakdownEntry(
                category=transaction.category,
                amount=transaction.amount,
                date=transaction.date,
            ))

    @staticmethod
    def _reverse(data: FinancialData, transaction: Transaction) -> None:
        if transaction.type == TransactionType.INCOME:
            data.income_history = [e for e in data.income_history if e.id != transaction.id]
            data.total_balance -= transaction.amount
            return

        data.expense_history = [e for e in data.expense_history if e.id != transaction.id]
        data.total_balance += transaction.amount

        remaining = []
        for entry in data.expense_breakdown:
            if entry.category == transaction.category and entry.date == transaction.date:
                amount = entry.amount - transaction.amount
                if amount <= 0:
                    continue
                entry = entry.model_copy(update={"amount": amount})
            remaining.append(entry)
        data.expense_breakdown = remaining

    @staticmethod
    def _rows(data: FinancialData) -> list[Transaction]:
        rows = [
            Transaction(
                id=e.id,
                type=TransactionType.INCOME,
                amount=e.amount,
                category=e.category,
                description=e.description,
                date=e.date,
            )
            for e in data.income_history
        ]
        rows.extend(
            Transaction(
                id=e.id,
                type=TransactionType.EXPENSE,
                amount=e.amount,
                category=e.category,
                description=e.description,
                date=e.date,
            )
            for e in data.expense_history
        )
        return rows

    def _find(self, data: FinancialData, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._rows(data) if t.id == transaction_id), None)

    @staticmethod
    def _from_result(result: ValidationResult, **extra) -> Transaction:
        values = result.parsed
        return Transaction(
            type=values["type"],
            amount=values["amount"],
            category=values["category"],
            description=values["description"],
            date=values["date"],
            **extra,
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def list_transactions(self) -> list[Transaction]:
        """Income and expense rows merged, newest first."""
        rows = self._rows(self._store.get_financial_data())
        return sorted(rows, key=lambda t: t.date, reverse=True)

    def add_transaction(
        self,
        draft: TransactionDraft,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        result = self._validator.validate_transaction(draft)
        if not result.is_valid:
            return None, result

        prefix = "inc" if result.parsed["type"] == TransactionType.INCOME else "exp"
        transaction = self._from_result(result, id=new_id(prefix))

        data = self._store.get_financial_data()
        self._apply(data, transaction)
        data.recalculate_totals()
        self._store.save_financial_data(data)

        logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=transaction.amount,
        )
        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                user_id=self._store.get_active_user_id(),
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=transaction.amount,
            )

        return transaction, result

    def update_transaction(
        self,
        transaction_id: str,
        draft: TransactionDraft,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """Replace an entry, keeping its id. The type may change."""
        data = self._store.get_financial_data()
        old = self._find(data, transaction_id)
        if old is None:
            return None, _not_found("transaction", "id", f"Transaction {transaction_id} not found")

        result = self._validator.validate_transaction(draft)
        if not result.is_valid:
            return None, result

        updated = self._from_result(result, id=old.id)
        self._reverse(data, old)
        self._apply(data, updated)
        data.recalculate_totals()
        self._store.save_financial_data(data)

        if self._audit_logger:
            self._audit_logger.log_transaction_updated(
                user_id=self._store.get_active_user_id(),
                transaction_id=updated.id,
                old_amount=old.amount,
                new_amount=updated.amount,
            )

        return updated, result

    def delete_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Remove an entry. Returns the removed row, or None if unknown."""
        data = self._store.get_financial_data()
        old = self._find(data, transaction_id)
        if old is None:
            return None

        self._reverse(data, old)
        data.recalculate_totals()
        self._store.save_financial_data(data)

        if self._audit_logger:
            self._audit_logger.log_transaction_deleted(
                user_id=self._store.get_active_user_id(),
                transaction_id=old.id,
                amount=old.amount,
            )

        return old


class GoalFlow:
    """Orchestrates savings goal CRUD."""

    def __init__(
        self,
        store: FinanceStore,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or FormValidator(store)
        self._audit_logger = audit_logger

    def _audit(self, event_type: AuditEventType, goal: SavingsGoal) -> None:
        if self._audit_logger:
            self._audit_logger.log_goal_changed(
                event_type,
                self._store.get_active_user_id(),
                goal.id,
                goal.name,
            )

    def list_goals(self) -> list[SavingsGoal]:
        return self._store.get_savings_goals()

    def create_goal(self, draft: GoalDraft) -> tuple[Optional[SavingsGoal], ValidationResult]:
        result = self._validator.validate_goal(draft)
        if not result.is_valid:
            return None, result

        goal = self._store.add_savings_goal(SavingsGoal(**result.parsed))
        self._audit(AuditEventType.GOAL_CREATED, goal)
        return goal, result

    def update_goal(
        self,
        goal_id: str,
        draft: GoalDraft,
    ) -> tuple[Optional[SavingsGoal], ValidationResult]:
        result = self._validator.validate_goal(draft)
        if not result.is_valid:
            return None, result

        goal = self._store.update_savings_goal(goal_id, result.parsed)
        if goal is None:
            return None, _not_found("goal", "id", f"Goal {goal_id} not found")

        self._audit(AuditEventType.GOAL_UPDATED, goal)
        return goal, result

    def delete_goal(self, goal_id: str) -> bool:
        goal = next((g for g in self._store.get_savings_goals() if g.id == goal_id), None)
        if goal is None:
            return False

        self._store.delete_savings_goal(goal_id)
        self._audit(AuditEventType.GOAL_DELETED, goal)
        return True


class ChatFlow:
    """
    Orchestrates one conversation turn.

    Flow:
    1. Ignore blank input
    2. Read the last ``history_window`` stored messages
    3. Persist the user's message
    4. Ask the assistant with an AdviceContext built from the store
    5. Persist and return the reply
    """

    def __init__(
        self,
        store: FinanceStore,
        assistant: Assistant,
        app_settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._assistant = assistant
        self._settings = app_settings or get_settings().app
        self._audit_logger = audit_logger

    def _currency(self) -> str:
        if self._store.has_preferences():
            return self._store.get_preferences().currency
        return self._settings.default_currency

    def build_context(self, history: Optional[list[ChatMessage]] = None) -> AdviceContext:
        return AdviceContext.build(
            user=self._store.get_current_user(),
            data=self._store.get_financial_data(),
            currency=self._currency(),
            history=history,
        )

    def history(self) -> list[ChatMessage]:
        return self._store.get_chat_history(self._store.get_active_user_id())

    def clear_history(self) -> None:
        user_id = self._store.get_active_user_id()
        self._store.clear_chat_history(user_id)
        if self._audit_logger:
            self._audit_logger.log_chat_history_cleared(user_id)

    def _save(self, role: ChatRole, content: str, user_id: Optional[str], correlation_id) -> None:
        message = ChatMessage(role=role, content=content, user_id=user_id)
        self._store.save_chat_message(message)
        if self._audit_logger:
            self._audit_logger.log_chat_message_saved(
                user_id=user_id,
                message_id=message.id,
                role=role.value,
                correlation_id=correlation_id,
            )

    async def send_message(self, text: str) -> Optional[AssistantResponse]:
        if not text or not text.strip():
            return None

        message = text.strip()
        correlation_id = create_correlation_id()
        user_id = self._store.get_active_user_id()

        window = self._settings.history_window
        history = self._store.get_chat_messages(user_id)[-window:]

        self._save(ChatRole.USER, message, user_id, correlation_id)

        ctx = self.build_context(history)
        response = await self._assistant.generate(message, ctx)

        self._save(ChatRole.ASSISTANT, response.content, user_id, correlation_id)

        logger.info(
            "assistant_responded",
            source=response.source.value,
            model=response.model,
            correlation_id=str(correlation_id),
        )
        if self._audit_logger:
            self._audit_logger.log_assistant_responded(
                user_id=user_id,
                source=response.source.value,
                model=response.model,
                correlation_id=correlation_id,
            )

        return response


class AppComponents(NamedTuple):
    store: FinanceStore
    accounts: AccountFlow
    ledger: LedgerFlow
    goals: GoalFlow
    chat: ChatFlow
    audit_logger: AuditLogger


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[KeyValueBackend] = None,
    session: Optional[requests.Session] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to get_settings().
        backend: Key-value backend. Defaults to the one configured by
                 FINOVA_STORAGE_PATH (in-memory when unset).
        session: HTTP session for the hosted model. Pass a mock in tests.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    backend = backend or create_backend(app_settings.storage_path)
    audit_logger = AuditLogger(KeyValueAuditStorage(backend, app_settings.key_prefix))

    store = FinanceStore(backend, key_prefix=app_settings.key_prefix)
    store.set_parse_error_handler(audit_logger.log_storage_parse_error)

    validator = FormValidator(store)
    rules = RuleBasedAssistant(thinking_delay_seconds=app_settings.thinking_delay_seconds)

    assistant: Assistant = rules
    if app_settings.remote_assistant_enabled:
        client = HuggingFaceInferenceClient(settings.inference, session=session)
        assistant = RemoteAssistant(
            client,
            rules,
            history_window=app_settings.history_window,
            on_failure=audit_logger.log_remote_model_failed,
        )

    logger.info(
        "app_components_created",
        environment=app_settings.app_environment,
        remote_assistant=app_settings.remote_assistant_enabled,
        persistent=app_settings.storage_path is not None,
    )

    return AppComponents(
        store=store,
        accounts=AccountFlow(store, validator, audit_logger),
        ledger=LedgerFlow(store, validator, audit_logger),
        goals=GoalFlow(store, validator, audit_logger),
        chat=ChatFlow(store, assistant, app_settings, audit_logger),
        audit_logger=audit_logger,
    )
