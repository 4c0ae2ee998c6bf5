"""Abstract base class for completion-service providers and shared logic."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

from resume_ranker.core.errors import (
    MalformedModelOutput,
    ModelError,
    ModelQuotaExceeded,
    ModelRateLimited,
    ModelUnavailable,
)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_code_fences(raw_text: str) -> str:
    """Remove a surrounding ```json ... ``` wrapper, if any."""
    cleaned = _FENCE_OPEN.sub("", raw_text.strip())
    return _FENCE_CLOSE.sub("", cleaned).strip()


def parse_json_object(raw_text: str | None, what: str = "LLM response") -> dict[str, Any]:
    """Parse a model response that must contain exactly one JSON object.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.

    Raises:
        MalformedModelOutput: If the text is empty, not JSON, or not an object.
    """
    if raw_text is None or not raw_text.strip():
        msg = f"{what} was empty"
        raise MalformedModelOutput(msg)

    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse {what} as JSON: {e}"
        raise MalformedModelOutput(msg) from e

    if not isinstance(data, dict):
        msg = f"{what} must be a JSON object, got {type(data).__name__}"
        raise MalformedModelOutput(msg)
    return data


def error_for_status(status_code: int | None, detail: str) -> ModelError:
    """Map an HTTP status from the completion service to an error kind."""
    if status_code == 429:
        return ModelRateLimited("Rate limit exceeded. Please try again later.")
    if status_code == 402:
        return ModelQuotaExceeded("AI credits depleted. Please add credits to continue.")
    if status_code is None:
        return ModelUnavailable(f"AI service unavailable: {detail}")
    return ModelUnavailable(f"AI service error ({status_code}): {detail}")


def require_content(content: str | None, provider_id: str) -> str:
    """Reject empty completions before they reach a parser."""
    if not content:
        msg = f"No content in {provider_id} response"
        raise MalformedModelOutput(msg)
    return content


class LLMProvider(ABC):
    """Base class that every completion-service provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @abstractmethod
    def complete(
        self,
        user_message: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send one system + user exchange and return the raw response text.

        Args:
            user_message: Content of the user message.
            model: Override the provider's default model. None uses default.
            system: System prompt. None sends no custom instruction.

        Returns:
            Raw text response from the model (expected to be JSON).

        Raises:
            ModelRateLimited: The service answered 429.
            ModelQuotaExceeded: The service answered 402.
            ModelUnavailable: Any other service or connection failure.
            MalformedModelOutput: The service answered with no content.
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
