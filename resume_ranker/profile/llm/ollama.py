"""Ollama local provider (OpenAI-compatible API)."""

import logging
import os

from resume_ranker.profile.llm.base import LLMProvider
from resume_ranker.profile.llm.openai import chat_completion, import_openai

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """Provider using a local Ollama instance via OpenAI-compatible API."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

    def complete(
        self,
        user_message: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        openai = import_openai("Ollama (OpenAI-compatible API)")

        base_url = os.environ.get("OLLAMA_BASE_URL", _OLLAMA_BASE_URL)
        client = openai.OpenAI(base_url=base_url, api_key="ollama")
        use_model = model or self.default_model

        logger.info("Sending request to Ollama (%s)...", use_model)
        return chat_completion(
            openai,
            client,
            provider_id=self.provider_id,
            model=use_model,
            user_message=user_message,
            system=system,
        )
