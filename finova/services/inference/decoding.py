"""
Decoding of hosted text-generation responses.

The inference endpoint answers in several shapes depending on the model
and its state. Each known shape has its own decoder; decoders are tried
in order and the first one that recognizes the payload wins. Anything
left over becomes the UNRECOGNIZED variant.

Known shapes:
    [{"generated_text": "..."}]    list of objects (also summary_text)
    ["..."]                        list of strings
    {"generated_text": "..."}      single object (also summary_text, text)
    {"error": "..."}               error object, e.g. model still loading
    "..."                          bare string
"""

from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel


class ResponseShape(str, Enum):
    OBJECT_LIST = "object_list"
    STRING_LIST = "string_list"
    OBJECT = "object"
    ERROR = "error"
    BARE_STRING = "bare_string"
    UNRECOGNIZED = "unrecognized"


class DecodedResponse(BaseModel):
    """One variant of the decoded payload."""

    shape: ResponseShape
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text)


LIST_TEXT_FIELDS = ("generated_text", "summary_text")
OBJECT_TEXT_FIELDS = ("generated_text", "summary_text", "text")


def _first_text(obj: dict, fields: tuple[str, ...]) -> Optional[str]:
    for field in fields:
        value = obj.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def decode_error_object(payload: Any) -> Optional[DecodedResponse]:
    if isinstance(payload, dict) and payload.get("error"):
        return DecodedResponse(shape=ResponseShape.ERROR, error=str(payload["error"]))
    return None


def decode_object_list(payload: Any) -> Optional[DecodedResponse]:
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        text = _first_text(payload[0], LIST_TEXT_FIELDS)
        if text:
            return DecodedResponse(shape=ResponseShape.OBJECT_LIST, text=text)
    return None


def decode_string_list(payload: Any) -> Optional[DecodedResponse]:
    if isinstance(payload, list) and payload and isinstance(payload[0], str):
        return DecodedResponse(shape=ResponseShape.STRING_LIST, text=payload[0].strip())
    return None


def decode_object(payload: Any) -> Optional[DecodedResponse]:
    if isinstance(payload, dict):
        text = _first_text(payload, OBJECT_TEXT_FIELDS)
        if text:
            return DecodedResponse(shape=ResponseShape.OBJECT, text=text)
    return None


def decode_bare_string(payload: Any) -> Optional[DecodedResponse]:
    if isinstance(payload, str):
        return DecodedResponse(shape=ResponseShape.BARE_STRING, text=payload.strip())
    return None


# Order matters: an error object must never be read as text
DECODERS: list[Callable[[Any], Optional[DecodedResponse]]] = [
    decode_error_object,
    decode_object_list,
    decode_string_list,
    decode_object,
    decode_bare_string,
]


def decode_response(payload: Any) -> DecodedResponse:
    """Decode a parsed JSON body into exactly one variant."""
    for decoder in DECODERS:
        decoded = decoder(payload)
        if decoded is not None:
            return decoded
    return DecodedResponse(shape=ResponseShape.UNRECOGNIZED)


SPECIAL_TOKENS = ("<|system|>", "<|user|>", "<|assistant|>", "<|end|>")


def clean_generated_text(text: str) -> str:
    """
    Strip chat-template tokens and echoed prompt context from model output.

    Keeps the text after an echoed "Assistant Response:" or "FINOVA:"
    marker and drops anything from a following "User:" turn onwards.
    """
    cleaned = text or ""
    for token in SPECIAL_TOKENS:
        cleaned = cleaned.replace(token, "")
    cleaned = cleaned.strip()

    for marker in ("Assistant Response:", "FINOVA:"):
        if marker in cleaned:
            tail = cleaned.split(marker)[1].strip()
            cleaned = tail or cleaned

    if "User:" in cleaned:
        cleaned = cleaned.split("User:")[0].strip()

    return cleaned
