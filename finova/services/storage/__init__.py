"""
Storage Services Package

Provides the abstract key-value interface, its concrete backends, the
user-namespaced FinanceStore built on top of them, and audit persistence.
"""

from finova.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    KeyValueBackend,
    StorageError,
    StorageParseError,
)
from finova.services.storage.backends import (
    JsonFileBackend,
    MemoryBackend,
    create_backend,
)
from finova.services.storage.store import ChangeNotifier, FinanceStore
from finova.services.storage.audit_store import KeyValueAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueBackend",
    # Exceptions
    "DuplicateError",
    "StorageError",
    "StorageParseError",
    # Backends
    "JsonFileBackend",
    "MemoryBackend",
    "create_backend",
    # Store
    "ChangeNotifier",
    "FinanceStore",
    "KeyValueAuditStorage",
]
