"""
Hosted Text Generation via the Hugging Face Inference API

DESIGN DECISION: This client is a thin HTTP passthrough. It:
1. POSTs a prompt with fixed generation parameters
2. Retries ONCE on a smaller model when the primary is still loading
3. Decodes whichever response shape comes back
4. Strips template tokens from the generated text

It RAISES on every failure. Deciding what to do about a failure (fall
back to the rule-based engine) belongs to the caller, not to this client.
"""

import asyncio
from typing import Any, Optional

import requests
import structlog
from pydantic import BaseModel
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from finova.config import InferenceSettings, get_settings
from finova.services.inference.decoding import (
    ResponseShape,
    clean_generated_text,
    decode_response,
)


logger = structlog.get_logger(__name__)


class InferenceError(Exception):
    """Base exception for hosted inference errors."""
    pass


class ModelLoadingError(InferenceError):
    """The endpoint reported that the model is still loading."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Model {model} is loading")


class InferenceHTTPError(InferenceError):
    """Non-2xx response other than the model-loading status."""

    def __init__(self, status_code: int, model: str):
        self.status_code = status_code
        self.model = model
        super().__init__(f"Model {model} answered HTTP {status_code}")


class EmptyGenerationError(InferenceError):
    """The model answered, but with no usable text."""
    pass


class GenerationResult(BaseModel):
    """Cleaned text plus where it came from."""

    text: str
    model: str
    shape: ResponseShape


class HuggingFaceInferenceClient:
    """
    Client for the hosted text-generation endpoint.

    The primary model is tried first. If it answers with the
    model-loading status, the fallback model is tried exactly once.
    """

    def __init__(
        self,
        settings: Optional[InferenceSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().inference
        self._session = session or requests.Session()

    @property
    def settings(self) -> InferenceSettings:
        return self._settings

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.token:
            headers["Authorization"] = f"Bearer {self._settings.token}"
        return headers

    def _payload(self, prompt: str, max_new_tokens: int) -> dict[str, Any]:
        return {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": max_new_tokens,
                "temperature": self._settings.temperature,
                "top_p": self._settings.top_p,
                "do_sample": self._settings.do_sample,
                "return_full_text": self._settings.return_full_text,
            },
        }

    def _post(self, model: str, prompt: str, max_new_tokens: int) -> Any:
        """
        POST one generation request and return the parsed JSON body.

        Raises:
            ModelLoadingError: The endpoint answered with the loading status
            InferenceHTTPError: Any other non-2xx status
            InferenceError: Network failure or a body that is not JSON
        """
        try:
            response = self._session.post(
                self._settings.model_url(model),
                json=self._payload(prompt, max_new_tokens),
                headers=self._headers(),
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise InferenceError(f"Request to {model} failed: {e}")

        if response.status_code == self._settings.model_loading_status:
            raise ModelLoadingError(model)
        if not response.ok:
            raise InferenceHTTPError(response.status_code, model)

        try:
            return response.json()
        except ValueError as e:
            raise InferenceError(f"Malformed response from {model}: {e}")

    def _log_fallback(self, retry_state: RetryCallState) -> None:
        logger.info(
            "primary_model_loading",
            primary=self._settings.primary_model,
            fallback=self._settings.fallback_model,
        )

    def generate(self, prompt: str) -> GenerationResult:
        """
        Generate a reply for ``prompt``.

        Raises:
            InferenceError: On any failure, including a reply too short to use
        """
        candidates = [
            (self._settings.primary_model, self._settings.max_new_tokens),
            (self._settings.fallback_model, self._settings.fallback_max_new_tokens),
        ]

        model = candidates[0][0]
        payload: Any = None
        for attempt in Retrying(
            stop=stop_after_attempt(len(candidates)),
            retry=retry_if_exception_type(ModelLoadingError),
            before_sleep=self._log_fallback,
            reraise=True,
        ):
            with attempt:
                model, max_new_tokens = candidates[attempt.retry_state.attempt_number - 1]
                payload = self._post(model, prompt, max_new_tokens)

        decoded = decode_response(payload)
        if decoded.shape == ResponseShape.ERROR:
            raise InferenceError(f"Model {model} returned an error: {decoded.error}")
        if decoded.shape == ResponseShape.UNRECOGNIZED:
            raise InferenceError(f"Unrecognized response shape from {model}")

        text = clean_generated_text(decoded.text or "")
        if len(text) < self._settings.min_response_length:
            raise EmptyGenerationError(f"Model {model} returned too little text")

        logger.debug("generation_succeeded", model=model, shape=decoded.shape.value)
        return GenerationResult(text=text, model=model, shape=decoded.shape)

    async def agenerate(self, prompt: str) -> GenerationResult:
        """Async wrapper; the blocking HTTP call runs in a worker thread."""
        return await asyncio.to_thread(self.generate, prompt)
