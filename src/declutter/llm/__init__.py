"""LLM integration package for declutter."""

from declutter.llm.client import LLMClient, TextStream
from declutter.llm.config import (
    DEFAULT_MODELS,
    PROVIDERS,
    LLMConfig,
    resolve_llm_config,
)

__all__ = [
    "DEFAULT_MODELS",
    "PROVIDERS",
    "LLMClient",
    "LLMConfig",
    "TextStream",
    "resolve_llm_config",
]
