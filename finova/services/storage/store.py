"""
Persistent Store

Synchronous, user-namespaced storage of users, financial snapshots,
savings goals, chat logs and preferences on top of a KeyValueBackend.

Key layout (prefix defaults to "finova"):

    <prefix>_users                     global list of users
    <prefix>_session_user              active user id
    <prefix>_settings                  preferences
    <prefix>_financial_data_<uid>      per user
    <prefix>_savings_goals_<uid>       per user
    <prefix>_chat_messages_<uid>       per user

With no active user the scoped keys fall back to the bare base key.

DESIGN DECISION: The store is an explicit object that owns both the
"active user" pointer and the observer registry. Nothing here is a
process-wide singleton; components receive the store they work on.

There is no atomicity across keys. Each save is one backend write
followed by one change notification.
"""

from typing import Any, Callable, Optional, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from finova.models.finance import (
    ChatMessage,
    FinancialData,
    SavingsGoal,
    User,
    UserPreferences,
)
from finova.services.storage.interface import (
    DuplicateError,
    KeyValueBackend,
    StorageParseError,
)


logger = structlog.get_logger(__name__)

Listener = Callable[[], None]
ParseErrorHandler = Callable[[StorageParseError], None]

T = TypeVar("T")

_USERS = TypeAdapter(list[User])
_GOALS = TypeAdapter(list[SavingsGoal])
_MESSAGES = TypeAdapter(list[ChatMessage])


class ChangeNotifier:
    """
    Observer registry for store mutations.

    Listeners run synchronously, in subscription order, after every
    mutating call. A listener that writes to the store while being
    notified does not recurse: the write schedules one more round that
    runs after the current one finishes.
    """

    MAX_ROUNDS = 10

    def __init__(self):
        self._listeners: list[Listener] = []
        self._notifying = False
        self._pending = False

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a handle that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def notify(self) -> None:
        if self._notifying:
            self._pending = True
            return

        self._notifying = True
        try:
            rounds = 0
            while True:
                self._pending = False
                rounds += 1
                for listener in list(self._listeners):
                    try:
                        listener()
                    except Exception as e:
                        # One failing listener must not starve the rest
                        logger.error(
                            "store_listener_failed",
                            listener=repr(listener),
                            error=str(e),
                        )
                if not self._pending:
                    break
                if rounds >= self.MAX_ROUNDS:
                    logger.warning("store_notify_rounds_exhausted", rounds=rounds)
                    break
        finally:
            self._notifying = False
            self._pending = False


class FinanceStore:
    """
    Key-value store for one application instance.

    Reads never raise on corrupted data: a value that cannot be decoded
    is replaced by the default and reported to ``on_parse_error``.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        key_prefix: str = "finova",
        on_parse_error: Optional[ParseErrorHandler] = None,
    ):
        self._backend = backend
        self._prefix = key_prefix
        self._notifier = ChangeNotifier()
        self._on_parse_error = on_parse_error

        self.users_key = f"{key_prefix}_users"
        self.session_key = f"{key_prefix}_session_user"
        self.settings_key = f"{key_prefix}_settings"
        self.financial_data_key = f"{key_prefix}_financial_data"
        self.savings_goals_key = f"{key_prefix}_savings_goals"
        self.chat_messages_key = f"{key_prefix}_chat_messages"

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def set_parse_error_handler(self, handler: Optional[ParseErrorHandler]) -> None:
        self._on_parse_error = handler

    # ------------------------------------------------------------------
    # Change subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every mutation. Returns an unsubscribe handle."""
        return self._notifier.subscribe(listener)

    def _notify_change(self) -> None:
        self._notifier.notify()

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------

    def _read(self, key: str, decode: Callable[[str], T], default: Callable[[], T]) -> T:
        raw = self._backend.get_item(key)
        if raw is None:
            return default()
        try:
            return decode(raw)
        except (ValidationError, ValueError) as e:
            error = StorageParseError(key, str(e))
            logger.warning("store_parse_failed", key=key, error=str(e))
            if self._on_parse_error:
                self._on_parse_error(error)
            return default()

    def _write(self, key: str, text: str) -> None:
        self._backend.set_item(key, text)
        self._notify_change()

    def _user_scoped_key(self, base_key: str) -> str:
        user_id = self.get_active_user_id()
        return f"{base_key}_{user_id}" if user_id else base_key

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        return self._read(self.users_key, _USERS.validate_json, list)

    def _save_all_users(self, users: list[User]) -> None:
        self._write(self.users_key, _USERS.dump_json(users).decode("utf-8"))

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.list_users() if u.id == user_id), None)

    def get_current_user(self) -> Optional[User]:
        user_id = self.get_active_user_id()
        if not user_id:
            return None
        return self.get_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = (email or "").strip().lower()
        return next(
            (u for u in self.list_users() if u.email.lower() == wanted),
            None,
        )

    def add_user(self, user: User) -> None:
        """
        Append a user to the global list.

        Raises:
            DuplicateError: If a user with the same id already exists
        """
        users = self.list_users()
        if any(u.id == user.id for u in users):
            raise DuplicateError(f"User {user.id} already exists")
        users.append(user)
        self._save_all_users(users)

    def update_user(self, updates: dict[str, Any]) -> Optional[User]:
        """
        Merge ``updates`` into the active user.

        Returns the updated user, or None when nobody is signed in.
        """
        user_id = self.get_active_user_id()
        if not user_id:
            return None

        users = self.list_users()
        for index, user in enumerate(users):
            if user.id == user_id:
                merged = {**user.model_dump(), **updates, "id": user.id}
                users[index] = User.model_validate(merged)
                self._save_all_users(users)
                return users[index]
        return None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def has_session(self) -> bool:
        return bool(self.get_active_user_id())

    def get_active_user_id(self) -> Optional[str]:
        return self._backend.get_item(self.session_key) or None

    def set_active_user(self, user_id: Optional[str]) -> None:
        """Switch the key namespace to ``user_id`` (None signs out)."""
        if user_id:
            self._backend.set_item(self.session_key, user_id)
        else:
            self._backend.remove_item(self.session_key)
        self._notify_change()

    # ------------------------------------------------------------------
    # Financial data
    # ------------------------------------------------------------------

    def get_financial_data(self) -> FinancialData:
        key = self._user_scoped_key(self.financial_data_key)
        return self._read(key, FinancialData.model_validate_json, FinancialData.default)

    def save_financial_data(self, data: FinancialData) -> None:
        key = self._user_scoped_key(self.financial_data_key)
        self._write(key, data.model_dump_json())

    def update_financial_data(self, updates: dict[str, Any]) -> FinancialData:
        current = self.get_financial_data()
        updated = FinancialData.model_validate({**current.model_dump(), **updates})
        self.save_financial_data(updated)
        return updated

    # ------------------------------------------------------------------
    # Savings goals
    # ------------------------------------------------------------------

    def get_savings_goals(self) -> list[SavingsGoal]:
        key = self._user_scoped_key(self.savings_goals_key)
        return self._read(key, _GOALS.validate_json, list)

    def save_savings_goals(self, goals: list[SavingsGoal]) -> None:
        key = self._user_scoped_key(self.savings_goals_key)
        self._write(key, _GOALS.dump_json(goals).decode("utf-8"))

    def add_savings_goal(self, goal: SavingsGoal) -> SavingsGoal:
        goals = self.get_savings_goals()
        goals.append(goal)
        self.save_savings_goals(goals)
        return goal

    def update_savings_goal(self, goal_id: str, updates: dict[str, Any]) -> Optional[SavingsGoal]:
        goals = self.get_savings_goals()
        for index, goal in enumerate(goals):
            if goal.id == goal_id:
                merged = {**goal.model_dump(), **updates, "id": goal.id}
                goals[index] = SavingsGoal.model_validate(merged)
                self.save_savings_goals(goals)
                return goals[index]
        return None

    def delete_savings_goal(self, goal_id: str) -> bool:
        goals = self.get_savings_goals()
        remaining = [g for g in goals if g.id != goal_id]
        self.save_savings_goals(remaining)
        return len(remaining) != len(goals)

    # ------------------------------------------------------------------
    # Chat messages
    # ------------------------------------------------------------------

    def get_chat_messages(self, user_id: Optional[str] = None) -> list[ChatMessage]:
        key = self._user_scoped_key(self.chat_messages_key)
        messages = self._read(key, _MESSAGES.validate_json, list)
        if user_id:
            return [m for m in messages if m.user_id == user_id]
        return messages

    def save_chat_message(self, message: ChatMessage) -> None:
        messages = self.get_chat_messages()
        messages.append(message)
        key = self._user_scoped_key(self.chat_messages_key)
        self._write(key, _MESSAGES.dump_json(messages).decode("utf-8"))

    def get_chat_history(self, user_id: Optional[str] = None) -> list[ChatMessage]:
        """Messages without their owner tag."""
        return [
            m.model_copy(update={"user_id": None})
            for m in self.get_chat_messages(user_id)
        ]

    def clear_chat_history(self, user_id: Optional[str] = None) -> None:
        key = self._user_scoped_key(self.chat_messages_key)
        if user_id:
            remaining = [m for m in self.get_chat_messages() if m.user_id != user_id]
            self._backend.set_item(key, _MESSAGES.dump_json(remaining).decode("utf-8"))
        else:
            self._backend.remove_item(key)
        self._notify_change()

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def has_preferences(self) -> bool:
        return self._backend.get_item(self.settings_key) is not None

    def get_preferences(self) -> UserPreferences:
        return self._read(self.settings_key, UserPreferences.model_validate_json, UserPreferences)

    def save_preferences(self, preferences: UserPreferences) -> None:
        self._write(self.settings_key, preferences.model_dump_json())

    # ------------------------------------------------------------------
    # Destructive
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """
        Remove the active user's data plus the global users and session keys.

        IRREVERSIBLE. Other users' scoped keys are left in place.
        """
        user_id = self.get_active_user_id()
        if user_id:
            for base_key in (
                self.financial_data_key,
                self.savings_goals_key,
                self.chat_messages_key,
            ):
                self._backend.remove_item(f"{base_key}_{user_id}")
        self._backend.remove_item(self.users_key)
        self._backend.remove_item(self.session_key)
        self._notify_change()
