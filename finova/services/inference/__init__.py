"""Hosted inference services."""

from finova.services.inference.decoding import (
    DecodedResponse,
    ResponseShape,
    clean_generated_text,
    decode_response,
)
from finova.services.inference.huggingface import (
    EmptyGenerationError,
    GenerationResult,
    HuggingFaceInferenceClient,
    InferenceError,
    InferenceHTTPError,
    ModelLoadingError,
)

__all__ = [
    "DecodedResponse",
    "ResponseShape",
    "clean_generated_text",
    "decode_response",
    "EmptyGenerationError",
    "GenerationResult",
    "HuggingFaceInferenceClient",
    "InferenceError",
    "InferenceHTTPError",
    "ModelLoadingError",
]
