"""
Audit log persistence on the key-value backend.

Events live under a single key ``<prefix>_audit_log`` as a JSON list,
oldest first. The log is append-only from the application's point of
view; the oldest entries are dropped once ``max_events`` is reached so
the file does not grow without bound.
"""

from uuid import UUID

import structlog
from pydantic import TypeAdapter, ValidationError

from finova.models.audit import AuditEvent
from finova.services.storage.interface import (
    AuditStorageInterface,
    KeyValueBackend,
    StorageError,
)


logger = structlog.get_logger(__name__)

_EVENTS = TypeAdapter(list[AuditEvent])

DEFAULT_MAX_EVENTS = 1000


class KeyValueAuditStorage(AuditStorageInterface):
    """Audit events stored next to the application data."""

    def __init__(
        self,
        backend: KeyValueBackend,
        key_prefix: str = "finova",
        max_events: int = DEFAULT_MAX_EVENTS,
    ):
        self._backend = backend
        self._key = f"{key_prefix}_audit_log"
        self._max_events = max_events

    @property
    def key(self) -> str:
        return self._key

    def _load(self) -> list[AuditEvent]:
        raw = self._backend.get_item(self._key)
        if not raw:
            return []
        try:
            return _EVENTS.validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning("audit_log_unreadable", key=self._key, error=str(e))
            return []

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        events = self._load()
        events.append(event)
        if len(events) > self._max_events:
            events = events[-self._max_events:]
        try:
            self._backend.set_item(self._key, _EVENTS.dump_json(events).decode("utf-8"))
        except StorageError as e:
            # Audit logging should not break the main flow
            logger.warning("audit_event_write_failed", error=str(e))
            return False
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        events = [e for e in self._load() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_events_by_user(self, user_id: str) -> list[AuditEvent]:
        events = [e for e in self._load() if e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._load()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
