"""Services package."""

from finova.services.inference import (
    EmptyGenerationError,
    HuggingFaceInferenceClient,
    InferenceError,
    InferenceHTTPError,
    ModelLoadingError,
)
from finova.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    FinanceStore,
    JsonFileBackend,
    KeyValueAuditStorage,
    KeyValueBackend,
    MemoryBackend,
    StorageError,
    StorageParseError,
    create_backend,
)

__all__ = [
    # Inference
    "EmptyGenerationError",
    "HuggingFaceInferenceClient",
    "InferenceError",
    "InferenceHTTPError",
    "ModelLoadingError",
    # Storage
    "AuditStorageInterface",
    "DuplicateError",
    "FinanceStore",
    "JsonFileBackend",
    "KeyValueAuditStorage",
    "KeyValueBackend",
    "MemoryBackend",
    "StorageError",
    "StorageParseError",
    "create_backend",
]
