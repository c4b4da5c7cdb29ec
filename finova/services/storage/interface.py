"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the raw key-value
backend. This allows us to:
1. Swap the JSON file for another durable backend later
2. Use in-memory storage for testing
3. Keep the store's namespacing logic independent of where bytes live

The interface is intentionally tiny - text values under string keys,
the same contract as browser local storage.
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional
from uuid import UUID

from finova.models.audit import AuditEvent


class KeyValueBackend(ABC):
    """
    Abstract interface for durable, synchronous key-value storage.

    Values are opaque text; serialization is the caller's job.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Returns:
            The stored text, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over every stored key."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one chat exchange).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_user(
        self,
        user_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events recorded while a user was active.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageParseError(StorageError):
    """Persisted text could not be decoded into the expected model."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Could not parse value under {key!r}: {message}")
