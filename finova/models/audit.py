"""
Audit Models for FINOVA

Every significant user action is logged for audit purposes.
This provides:
1. Traceability of account, ledger, goal and chat changes
2. Debugging information when the remote assistant misbehaves
3. A history the user can inspect

DESIGN DECISION: Audit logs are append-only. We never delete or modify them,
not even on "clear all data".
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finova.models.finance import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    USER_SIGNED_UP = "user_signed_up"
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGN_IN_FAILED = "user_sign_in_failed"
    USER_SIGNED_OUT = "user_signed_out"
    PROFILE_UPDATED = "profile_updated"
    PREFERENCES_SAVED = "preferences_saved"

    # Ledger
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Chat
    CHAT_MESSAGE_SAVED = "chat_message_saved"
    ASSISTANT_RESPONDED = "assistant_responded"
    CHAT_HISTORY_CLEARED = "chat_history_cleared"

    # Data lifecycle
    ALL_DATA_CLEARED = "all_data_cleared"

    # System events
    STORAGE_PARSE_ERROR = "storage_parse_error"
    REMOTE_MODEL_FAILED = "remote_model_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'transaction', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Active user when the event happened"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one chat exchange)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_signed_up(user_id, email)
        event = AuditEventBuilder.transaction_added(user_id, txn_id, "expense", 42.0)
    """

    @staticmethod
    def user_signed_up(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_UP,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"User signed up: {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def user_signed_in(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="User signed in",
            is_user_action=True,
        )

    @staticmethod
    def user_sign_in_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGN_IN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description="Sign in failed: invalid credentials",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def user_signed_out(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def profile_updated(user_id: str, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"Profile updated: {', '.join(fields) or 'no changes'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def preferences_saved(user_id: Optional[str], currency: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_SAVED,
            entity_type="preferences",
            user_id=user_id,
            description="Preferences saved",
            details={"currency": currency},
            is_user_action=True,
        )

    @staticmethod
    def transaction_added(
        user_id: Optional[str],
        transaction_id: str,
        transaction_type: str,
        amount: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            description=f"{transaction_type.capitalize()} added: {amount:,.2f}",
            details={"type": transaction_type, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def transaction_updated(
        user_id: Optional[str],
        transaction_id: str,
        old_amount: float,
        new_amount: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            description=f"Transaction updated: {old_amount:,.2f} -> {new_amount:,.2f}",
            details={"old_amount": old_amount, "new_amount": new_amount},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        user_id: Optional[str],
        transaction_id: str,
        amount: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            description=f"Transaction deleted: {amount:,.2f}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def goal_changed(
        event_type: AuditEventType,
        user_id: Optional[str],
        goal_id: str,
        name: str,
    ) -> AuditEvent:
        verb = {
            AuditEventType.GOAL_CREATED: "created",
            AuditEventType.GOAL_UPDATED: "updated",
            AuditEventType.GOAL_DELETED: "deleted",
        }.get(event_type, "changed")
        return AuditEvent(
            event_type=event_type,
            entity_type="goal",
            entity_id=goal_id,
            user_id=user_id,
            description=f"Savings goal {verb}: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def chat_message_saved(
        user_id: Optional[str],
        message_id: str,
        role: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_MESSAGE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="chat_message",
            entity_id=message_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Chat message saved ({role})",
            details={"role": role},
            is_user_action=role == "user",
        )

    @staticmethod
    def assistant_responded(
        user_id: Optional[str],
        source: str,
        model: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSISTANT_RESPONDED,
            entity_type="chat",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Assistant responded via {source}",
            details={"source": source, "model": model},
        )

    @staticmethod
    def chat_history_cleared(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_HISTORY_CLEARED,
            entity_type="chat",
            user_id=user_id,
            description="Chat history cleared",
            is_user_action=True,
        )

    @staticmethod
    def all_data_cleared(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALL_DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description="All local data cleared",
            is_user_action=True,
        )

    @staticmethod
    def storage_parse_error(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_PARSE_ERROR,
            severity=AuditSeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            description=f"Stored value unreadable, default used: {key}",
            error_message=error_message,
        )

    @staticmethod
    def remote_model_failed(
        model: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_MODEL_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="model",
            entity_id=model,
            correlation_id=correlation_id,
            description=f"Remote model unavailable: {model}",
            error_message=error_message,
            details={"model": model},
        )
