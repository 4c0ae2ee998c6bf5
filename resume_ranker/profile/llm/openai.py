"""OpenAI provider, plus the chat-completions call shared by compatible endpoints."""

import logging
import os
from typing import Any

from resume_ranker.core.errors import ModelUnavailable
from resume_ranker.profile.llm.base import LLMProvider, error_for_status, require_content

logger = logging.getLogger(__name__)


def import_openai(purpose: str) -> Any:
    try:
        import openai
    except ImportError:
        msg = (
            f"openai is required for {purpose}. "
            "Install with: pip install 'resume-ranker[openai]'"
        )
        raise ImportError(msg) from None
    return openai


def build_messages(user_message: str, system: str | None) -> list[dict[str, str]]:
    messages: list[dict[str, str]] = []
    if system is not None:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": user_message})
    return messages


def chat_completion(
    openai: Any,
    client: Any,
    *,
    provider_id: str,
    model: str,
    user_message: str,
    system: str | None,
) -> str:
    """Run one chat completion, translating SDK errors into pipeline errors."""
    try:
        response = client.chat.completions.create(
            model=model,
            messages=build_messages(user_message, system),
        )
    except openai.APIStatusError as e:
        logger.error("%s returned HTTP %s", provider_id, e.status_code)
        raise error_for_status(e.status_code, str(e)) from e
    except openai.APIError as e:
        logger.error("%s request failed: %s", provider_id, e)
        raise error_for_status(None, str(e)) from e

    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices else None
    return require_content(content, provider_id)


class OpenAIProvider(LLMProvider):
    """Provider using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def complete(
        self,
        user_message: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ModelUnavailable(msg)

        openai = import_openai("the OpenAI provider")
        client = openai.OpenAI(api_key=api_key)
        use_model = model or self.default_model

        logger.info("Sending request to OpenAI API (%s)...", use_model)
        return chat_completion(
            openai,
            client,
            provider_id=self.provider_id,
            model=use_model,
            user_message=user_message,
            system=system,
        )
