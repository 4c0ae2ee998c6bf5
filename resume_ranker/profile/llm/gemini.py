"""Google Gemini provider (google-genai SDK)."""

import logging
import os

from resume_ranker.core.errors import ModelUnavailable
from resume_ranker.profile.llm.base import LLMProvider, error_for_status, require_content

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    def complete(
        self,
        user_message: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GOOGLE_API_KEY environment variable is required"
            raise ModelUnavailable(msg)

        try:
            import httpx
            from google import genai
            from google.genai import errors as genai_errors
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for the Gemini provider. "
                "Install with: pip install 'resume-ranker[gemini]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model

        logger.info("Sending request to Gemini API (%s)...", use_model)
        client = genai.Client(api_key=api_key)
        try:
            response = client.models.generate_content(
                model=use_model,
                contents=user_message,
                config=genai_types.GenerateContentConfig(
                    system_instruction=system,
                    temperature=0.3,
                ),
            )
        except genai_errors.APIError as e:
            logger.error("gemini returned HTTP %s", e.code)
            raise error_for_status(e.code, str(e)) from e
        except httpx.HTTPError as e:
            logger.error("gemini request failed: %s", e)
            raise error_for_status(None, str(e)) from e

        return require_content(response.text, self.provider_id)
