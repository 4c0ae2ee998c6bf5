"""Anthropic Claude provider."""

import logging
import os

from resume_ranker.core.errors import ModelUnavailable
from resume_ranker.profile.llm.base import LLMProvider, error_for_status, require_content

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Provider using the Anthropic Claude API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        user_message: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ModelUnavailable(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for the Anthropic provider. "
                "Install with: pip install 'resume-ranker[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.Anthropic(api_key=api_key)
        use_model = model or self.default_model
        kwargs = {"system": system} if system is not None else {}

        logger.info("Sending request to Anthropic API (%s)...", use_model)
        try:
            message = client.messages.create(
                model=use_model,
                max_tokens=2048,
                messages=[{"role": "user", "content": user_message}],
                **kwargs,
            )
        except anthropic.APIStatusError as e:
            logger.error("anthropic returned HTTP %s", e.status_code)
            raise error_for_status(e.status_code, str(e)) from e
        except anthropic.APIError as e:
            logger.error("anthropic request failed: %s", e)
            raise error_for_status(None, str(e)) from e

        text = message.content[0].text if message.content else None  # type: ignore[union-attr]
        return require_content(text, self.provider_id)
