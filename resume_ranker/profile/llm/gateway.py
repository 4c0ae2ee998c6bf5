"""Hosted AI gateway provider (OpenAI-compatible chat completions).

The gateway fronts several model vendors behind one endpoint and signals
throttling with HTTP 429 and exhausted credits with HTTP 402.
"""

import logging
import os

from resume_ranker.core.errors import ModelUnavailable
from resume_ranker.profile.llm.base import LLMProvider
from resume_ranker.profile.llm.openai import chat_completion, import_openai

logger = logging.getLogger(__name__)


class GatewayProvider(LLMProvider):
    """Provider for an OpenAI-compatible AI gateway."""

    @property
    def provider_id(self) -> str:
        return "gateway"

    @property
    def default_model(self) -> str:
        return "google/gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "LLM_GATEWAY_API_KEY"

    @property
    def base_url_env_var(self) -> str:
        return "LLM_GATEWAY_BASE_URL"

    def complete(
        self,
        user_message: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get(self.env_var)
        if not api_key:
            msg = f"{self.env_var} environment variable is required"
            raise ModelUnavailable(msg)
        base_url = os.environ.get(self.base_url_env_var)
        if not base_url:
            msg = f"{self.base_url_env_var} environment variable is required"
            raise ModelUnavailable(msg)

        openai = import_openai("the AI gateway provider")
        client = openai.OpenAI(api_key=api_key, base_url=base_url)
        use_model = model or self.default_model

        logger.info("Sending request to AI gateway (%s)...", use_model)
        return chat_completion(
            openai,
            client,
            provider_id=self.provider_id,
            model=use_model,
            user_message=user_message,
            system=system,
        )
