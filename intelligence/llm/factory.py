"""
LLM Factory
Builds the configured LLM instance
"""
from typing import Optional
import logging

from config import LLMSettings, get_llm_settings

from .base import BaseLLM
from .openai_llm import OpenAILLM
from .anthropic_llm import AnthropicLLM


logger = logging.getLogger(__name__)


DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-3-5-sonnet-latest",
}


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[LLMSettings] = None,
    **kwargs,
) -> BaseLLM:
    """
    Build an LLM from settings, with optional overrides.

    Example:
        llm = get_llm()
        llm = get_llm(provider="anthropic", temperature=0.5)
    """
    settings = settings or get_llm_settings()
    provider = (provider or settings.provider).lower()

    if model is None:
        # the configured model name belongs to the configured provider
        model = settings.model_name if provider == settings.provider else DEFAULT_MODELS.get(provider)

    api_keys = {
        "openai": settings.openai_api_key,
        "anthropic": settings.anthropic_api_key,
    }
    api_key = kwargs.pop("api_key", None) or api_keys.get(provider)

    kwargs.setdefault("temperature", settings.temperature)
    kwargs.setdefault("max_tokens", settings.max_tokens)
    kwargs.setdefault("timeout", settings.timeout)

    logger.debug(f"Building LLM provider={provider} model={model}")

    if provider == "openai":
        return OpenAILLM(
            model=model,
            api_key=api_key,
            base_url=kwargs.pop("base_url", None),
            **kwargs,
        )
    elif provider == "anthropic":
        return AnthropicLLM(model=model, api_key=api_key, **kwargs)
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")
