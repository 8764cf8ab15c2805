"""LLM configuration management."""

import logging
import os
from dataclasses import dataclass
from typing import Literal, TypeAlias

from declutter.exceptions import ConfigurationError, generate_correlation_id

LOGGER = logging.getLogger(__name__)

LLMProvider: TypeAlias = Literal["ollama", "openai", "anthropic", "gemini", "openrouter"]

PROVIDERS: tuple[str, ...] = ("gemini", "anthropic", "openai", "openrouter", "ollama")

DEFAULT_BASE_URLS: dict[LLMProvider, str] = {
    "ollama": "http://localhost:11434",
    "openai": "https://api.openai.com",
    "anthropic": "https://api.anthropic.com",
    "gemini": "https://generativelanguage.googleapis.com",
    "openrouter": "https://openrouter.ai/api",
}

DEFAULT_MODELS: dict[LLMProvider, str] = {
    "gemini": "gemini-2.5-flash",
    "anthropic": "claude-haiku-4-5",
    "openai": "gpt-4o-mini",
    "openrouter": "google/gemini-2.0-flash-exp:free",
    "ollama": "deepseek-r1:7b",
}

API_KEY_ENV_VARS: dict[LLMProvider, str] = {
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

# Ollama's default context is too small for a full page of markdown
OLLAMA_CONTEXT_WINDOW = 30000


@dataclass(frozen=True)
class LLMConfig:
    """Immutable LLM configuration."""

    provider: LLMProvider
    model: str
    base_url: str
    api_key: str | None = None
    num_ctx: int = OLLAMA_CONTEXT_WINDOW

    def __post_init__(self) -> None:
        """Validate configuration after initialisation."""
        if self.provider in API_KEY_ENV_VARS and not self.api_key:
            correlation_id = generate_correlation_id()
            env_var = API_KEY_ENV_VARS[self.provider]
            raise ConfigurationError(
                f"{env_var} is required for {self.provider} provider",
                correlation_id=correlation_id,
                context={"provider": self.provider},
            )


def resolve_llm_config(
    provider: str | None = None,
    model: str | None = None,
    gemini_key: str | None = None,
    openai_key: str | None = None,
    openrouter_key: str | None = None,
    anthropic_key: str | None = None,
) -> LLMConfig:
    """
    Pick a provider and model from explicit choices and available API keys.

    An explicit provider must come with its key (Ollama needs none). Without
    one, the first key present wins in the order gemini, openai, openrouter,
    anthropic; with no key at all a local Ollama model is assumed.

    Args:
        provider: Explicit provider name, if any.
        model: Model name; defaults to the provider's entry in DEFAULT_MODELS.
        gemini_key: Google Gemini API key.
        openai_key: OpenAI API key.
        openrouter_key: OpenRouter API key.
        anthropic_key: Anthropic API key.

    Returns:
        LLMConfig with validated settings.

    Raises:
        ConfigurationError: If the provider is unknown or its key is missing.
    """
    correlation_id = generate_correlation_id()
    keys: dict[LLMProvider, str | None] = {
        "gemini": gemini_key,
        "openai": openai_key,
        "openrouter": openrouter_key,
        "anthropic": anthropic_key,
    }

    resolved: LLMProvider
    if provider:
        provider = provider.lower()
        if provider not in PROVIDERS:
            raise ConfigurationError(
                f"provider can only be one of : {', '.join(PROVIDERS)}",
                correlation_id=correlation_id,
                context={"provider": provider},
            )
        resolved = provider  # type: ignore[assignment]
        if resolved != "ollama" and not keys[resolved]:
            raise ConfigurationError(
                f"provider set to {resolved} but no API key provided",
                correlation_id=correlation_id,
                context={"provider": resolved},
            )
    else:
        resolved = next((name for name, key in keys.items() if key), "ollama")
        if resolved == "ollama":
            LOGGER.warning("No provider could be resolved, assuming ollama with local ollama model")

    if resolved == "ollama":
        base_url = os.getenv("OLLAMA_HOST") or DEFAULT_BASE_URLS["ollama"]
    else:
        base_url = DEFAULT_BASE_URLS[resolved]

    return LLMConfig(
        provider=resolved,
        model=model or DEFAULT_MODELS[resolved],
        base_url=base_url,
        api_key=keys.get(resolved),
    )
