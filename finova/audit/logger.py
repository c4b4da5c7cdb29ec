"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of account, ledger, goal and chat changes
2. Debugging capability when the remote assistant falls back
3. User can see history of their interactions

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finova.models.audit import AuditEvent, AuditEventBuilder, AuditEventType, AuditSeverity
from finova.services.storage.interface import AuditStorageInterface, StorageParseError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit key in local storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_user_signed_up(self, user_id: str, email: str) -> None:
        self.log(AuditEventBuilder.user_signed_up(user_id, email))

    def log_user_signed_in(self, user_id: str) -> None:
        self.log(AuditEventBuilder.user_signed_in(user_id))

    def log_user_sign_in_failed(self, email: str) -> None:
        self.log(AuditEventBuilder.user_sign_in_failed(email))

    def log_user_signed_out(self, user_id: str) -> None:
        self.log(AuditEventBuilder.user_signed_out(user_id))

    def log_profile_updated(self, user_id: str, fields: list[str]) -> None:
        self.log(AuditEventBuilder.profile_updated(user_id, fields))

    def log_preferences_saved(self, user_id: Optional[str], currency: str) -> None:
        self.log(AuditEventBuilder.preferences_saved(user_id, currency))

    def log_transaction_added(
        self,
        user_id: Optional[str],
        transaction_id: str,
        transaction_type: str,
        amount: float,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            user_id=user_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
        ))

    def log_transaction_updated(
        self,
        user_id: Optional[str],
        transaction_id: str,
        old_amount: float,
        new_amount: float,
    ) -> None:
        self.log(AuditEventBuilder.transaction_updated(
            user_id=user_id,
            transaction_id=transaction_id,
            old_amount=old_amount,
            new_amount=new_amount,
        ))

    def log_transaction_deleted(
        self,
        user_id: Optional[str],
        transaction_id: str,
        amount: float,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(user_id, transaction_id, amount))

    def log_goal_changed(
        self,
        event_type: AuditEventType,
        user_id: Optional[str],
        goal_id: str,
        name: str,
    ) -> None:
        self.log(AuditEventBuilder.goal_changed(event_type, user_id, goal_id, name))

    def log_chat_message_saved(
        self,
        user_id: Optional[str],
        message_id: str,
        role: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.chat_message_saved(
            user_id=user_id,
            message_id=message_id,
            role=role,
            correlation_id=correlation_id,
        ))

    def log_assistant_responded(
        self,
        user_id: Optional[str],
        source: str,
        model: Optional[str],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.assistant_responded(
            user_id=user_id,
            source=source,
            model=model,
            correlation_id=correlation_id,
        ))

    def log_chat_history_cleared(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.chat_history_cleared(user_id))

    def log_all_data_cleared(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.all_data_cleared(user_id))

    def log_storage_parse_error(self, error: StorageParseError) -> None:
        """Hook for FinanceStore.on_parse_error."""
        self.log(AuditEventBuilder.storage_parse_error(error.key, str(error)))

    def log_remote_model_failed(
        self,
        model: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.remote_model_failed(
            model=model,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., sending a chat message).
    Pass it through all subsequent operations.
    """
    return uuid4()
