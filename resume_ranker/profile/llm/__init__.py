"""Completion-service provider registry with lazy loading.

Usage:
    from resume_ranker.profile.llm import get_provider, parse_json_object

    provider = get_provider("gateway")
    raw = provider.complete(user_message, system=SYSTEM_PROMPT)
    data = parse_json_object(raw)
"""

from resume_ranker.profile.llm.base import LLMProvider, parse_json_object, strip_code_fences

__all__ = [
    "LLMProvider",
    "available_providers",
    "get_provider",
    "parse_json_object",
    "strip_code_fences",
]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("resume_ranker.profile.llm.anthropic", "AnthropicProvider"),
    "gateway": ("resume_ranker.profile.llm.gateway", "GatewayProvider"),
    "gemini": ("resume_ranker.profile.llm.gemini", "GeminiProvider"),
    "ollama": ("resume_ranker.profile.llm.ollama", "OllamaProvider"),
    "openai": ("resume_ranker.profile.llm.openai", "OpenAIProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return a provider by name.

    Args:
        name: Provider identifier (anthropic, gateway, gemini, ollama, openai).

    Returns:
        An LLMProvider instance.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]

    import importlib

    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
