"""Tests for the key-value backends, FinanceStore and audit persistence."""

import json
from datetime import date
from uuid import uuid4

import pytest

from finova.audit import AuditLogger
from finova.models.audit import AuditEventBuilder
from finova.models.finance import (
    ChatMessage,
    ChatRole,
    ExpenseBreakdownEntry,
    FinancialData,
    SavingsGoal,
    User,
    UserPreferences,
)
from finova.services.storage import (
    ChangeNotifier,
    DuplicateError,
    FinanceStore,
    JsonFileBackend,
    KeyValueAuditStorage,
    MemoryBackend,
    StorageError,
    StorageParseError,
    create_backend,
)


class TestBackends:
    """Tests for the raw key-value backends."""

    def test_memory_backend(self):
        backend = MemoryBackend()
        backend.set_item("a", "1")
        assert backend.get_item("a") == "1"
        backend.remove_item("a")
        backend.remove_item("a")
        assert backend.get_item("a") is None

    def test_json_file_backend_persists(self, tmp_path):
        """Test that values survive a new backend instance."""
        path = tmp_path / "data" / "store.json"
        JsonFileBackend(path).set_item("finova_users", "[]")

        reopened = JsonFileBackend(path)
        assert reopened.get_item("finova_users") == "[]"
        assert list(reopened.keys()) == ["finova_users"]

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        path = tmp_path / "store.json"

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("finova.services.storage.backends.os.replace", broken_replace)
        with pytest.raises(StorageError):
            JsonFileBackend(path).set_item("finova_users", "[]")
        assert list(tmp_path.iterdir()) == []

    def test_create_backend(self, tmp_path):
        assert isinstance(create_backend(None), MemoryBackend)
        assert isinstance(create_backend(str(tmp_path / "s.json")), JsonFileBackend)


class TestFinanceStore:
    """Tests for user-scoped storage."""

    def test_financial_data_round_trip(self, store):
        """Test save followed by get returns an equal snapshot."""
        store.set_active_user("user_a")
        data = FinancialData(
            total_balance=1234.5,
            monthly_income=2000,
            monthly_expenses=500,
            expense_breakdown=[
                ExpenseBreakdownEntry(category="Travel", amount=500, date=date(2024, 3, 1)),
            ],
        )
        store.save_financial_data(data)
        assert store.get_financial_data() == data

    def test_default_when_nothing_saved(self, store):
        assert store.get_financial_data() == FinancialData.default()

    def test_user_scoping(self, store, backend):
        """Test that data saved for user A is invisible to user B."""
        store.set_active_user("user_a")
        store.save_financial_data(FinancialData(total_balance=1))
        store.add_savings_goal(SavingsGoal(name="Car", target_amount=100))

        store.set_active_user("user_b")
        assert store.get_financial_data() == FinancialData.default()
        assert store.get_savings_goals() == []
        store.save_financial_data(FinancialData(total_balance=2))

        store.set_active_user("user_a")
        assert store.get_financial_data().total_balance == 1
        assert backend.get_item("finova_financial_data_user_a") is not None
        assert backend.get_item("finova_financial_data_user_b") is not None

    def test_unscoped_key_without_session(self, store, backend):
        store.save_financial_data(FinancialData(total_balance=5))
        assert backend.get_item("finova_financial_data") is not None

    def test_users(self, store):
        user = User(email="Asha@Example.com", full_name="Asha")
        store.add_user(user)
        assert store.get_user(user.id) == user
        assert store.get_user_by_email("asha@example.com") == user
        with pytest.raises(DuplicateError):
            store.add_user(user)

    def test_update_user_requires_session(self, store):
        store.add_user(User(email="a@b.co", full_name="Asha"))
        assert store.update_user({"full_name": "Someone"}) is None

    def test_update_user(self, store):
        user = User(email="a@b.co", full_name="Asha")
        store.add_user(user)
        store.set_active_user(user.id)
        updated = store.update_user({"full_name": "Asha Rao", "id": "forged"})
        assert updated.full_name == "Asha Rao"
        assert updated.id == user.id
        assert store.get_current_user().full_name == "Asha Rao"

    def test_savings_goal_crud(self, store):
        goal = store.add_savings_goal(SavingsGoal(name="Car", target_amount=1000))
        updated = store.update_savings_goal(goal.id, {"current_amount": 400})
        assert updated.current_amount == 400
        assert store.update_savings_goal("missing", {"current_amount": 1}) is None
        assert store.delete_savings_goal(goal.id) is True
        assert store.delete_savings_goal(goal.id) is False
        assert store.get_savings_goals() == []

    def test_chat_messages(self, store):
        store.set_active_user("user_a")
        store.save_chat_message(ChatMessage(role=ChatRole.USER, content="hi", user_id="user_a"))
        store.save_chat_message(ChatMessage(role=ChatRole.USER, content="stray", user_id="other"))

        assert [m.content for m in store.get_chat_messages("user_a")] == ["hi"]
        history = store.get_chat_history("user_a")
        assert history[0].user_id is None

        store.clear_chat_history("user_a")
        assert [m.content for m in store.get_chat_messages()] == ["stray"]
        store.clear_chat_history()
        assert store.get_chat_messages() == []

    def test_preferences(self, store):
        assert store.has_preferences() is False
        assert store.get_preferences() == UserPreferences()
        store.save_preferences(UserPreferences(currency="inr"))
        assert store.has_preferences() is True
        assert store.get_preferences().currency == "INR"

    def test_clear_all(self, store, backend):
        """Test clear_all removes the active user's keys, users and session."""
        user = User(email="a@b.co", full_name="Asha")
        store.add_user(user)
        store.set_active_user(user.id)
        store.save_financial_data(FinancialData.empty())
        store.add_savings_goal(SavingsGoal(name="Car", target_amount=10))
        backend.set_item("finova_financial_data_someone_else", "{}")

        store.clear_all()

        assert store.has_session() is False
        assert store.list_users() == []
        assert backend.get_item(f"finova_financial_data_{user.id}") is None
        assert backend.get_item(f"finova_savings_goals_{user.id}") is None
        assert backend.get_item("finova_financial_data_someone_else") == "{}"

    def test_corrupted_value_falls_back_to_default(self, backend):
        """Test parse errors are reported and replaced by the default."""
        errors = []
        store = FinanceStore(backend, on_parse_error=errors.append)
        backend.set_item("finova_users", "{not json")
        backend.set_item("finova_financial_data", json.dumps({"total_balance": "lots"}))

        assert store.list_users() == []
        assert store.get_financial_data() == FinancialData.default()
        assert [e.key for e in errors] == ["finova_users", "finova_financial_data"]
        assert all(isinstance(e, StorageParseError) for e in errors)

    def test_custom_prefix(self, backend):
        store = FinanceStore(backend, key_prefix="demo")
        store.save_preferences(UserPreferences())
        assert backend.get_item("demo_settings") is not None


class TestChangeNotifications:
    """Tests for subscribe / notify behavior."""

    def test_listener_called_after_each_mutation(self, store):
        calls = []
        store.subscribe(lambda: calls.append(1))
        store.set_active_user("user_a")
        store.save_financial_data(FinancialData.empty())
        store.save_preferences(UserPreferences())
        assert len(calls) == 3

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda: calls.append(1))
        unsubscribe()
        unsubscribe()
        store.set_active_user("user_a")
        assert calls == []

    def test_listener_writing_to_store_does_not_recurse(self, store):
        """Test a write inside a listener schedules one more round instead of recursing."""
        depth = {"current": 0, "max": 0}
        calls = []

        def listener():
            depth["current"] += 1
            depth["max"] = max(depth["max"], depth["current"])
            calls.append(1)
            if len(calls) == 1:
                store.save_preferences(UserPreferences(currency="EUR"))
            depth["current"] -= 1

        store.subscribe(listener)
        store.set_active_user("user_a")

        assert depth["max"] == 1
        assert len(calls) == 2
        assert store.get_preferences().currency == "EUR"

    def test_always_writing_listener_is_bounded(self):
        notifier = ChangeNotifier()
        calls = []

        def listener():
            calls.append(1)
            notifier.notify()

        notifier.subscribe(listener)
        notifier.notify()
        assert len(calls) == ChangeNotifier.MAX_ROUNDS

    def test_failing_listener_does_not_stop_others(self, store):
        calls = []

        def broken():
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(lambda: calls.append(1))
        store.set_active_user("user_a")
        assert calls == [1]


class TestAuditStorage:
    """Tests for the audit log kept in the key-value backend."""

    def test_append_and_query(self, audit_storage):
        correlation_id = uuid4()
        audit_storage.append_event(AuditEventBuilder.user_signed_in("user_a"))
        audit_storage.append_event(AuditEventBuilder.remote_model_failed(
            model="m", error_message="e", correlation_id=correlation_id,
        ))

        assert len(audit_storage.get_events_by_user("user_a")) == 1
        assert len(audit_storage.get_events_by_correlation_id(correlation_id)) == 1
        recent = audit_storage.get_recent_events(limit=1)
        assert recent[0].correlation_id == correlation_id

    def test_capped(self, backend):
        storage = KeyValueAuditStorage(backend, max_events=3)
        for index in range(5):
            storage.append_event(AuditEventBuilder.user_signed_in(f"user_{index}"))
        users = [e.user_id for e in storage.get_recent_events()]
        assert sorted(users) == ["user_2", "user_3", "user_4"]

    def test_audit_logger_persists(self, audit_logger, audit_storage):
        audit_logger.log_user_signed_up("user_a", "a@b.co")
        assert audit_storage.get_events_by_user("user_a")[0].event_type.value == "user_signed_up"

    def test_audit_logger_survives_storage_failure(self):
        class BrokenStorage(KeyValueAuditStorage):
            def append_event(self, event):
                raise RuntimeError("disk full")

        logger = AuditLogger(BrokenStorage(MemoryBackend()))
        assert logger.log(AuditEventBuilder.user_signed_in("user_a")) is False

    def test_parse_error_hook(self, backend, audit_logger, audit_storage):
        store = FinanceStore(backend, on_parse_error=audit_logger.log_storage_parse_error)
        backend.set_item("finova_savings_goals", "garbage")
        assert store.get_savings_goals() == []
        events = audit_storage.get_recent_events()
        assert events[0].event_type.value == "storage_parse_error"
