"""Provider factory: turns a provider configuration into a handle."""

from __future__ import annotations

import importlib
from typing import Dict, Optional, Tuple, Type, cast

from aistudio.core.config import LLMProviders, ProviderSettings
from aistudio.core.providers.base import NoProvider, ProviderHandle
from aistudio.utils.log import AIStudioLogger, get_logger

# provider -> (module below aistudio.core.providers, class name)
PROVIDER_CLASSES: Dict[LLMProviders, Tuple[str, str]] = {
    LLMProviders.OPEN_AI: ("openai", "ProviderOpenAI"),
    LLMProviders.ANTHROPIC: ("anthropic", "ProviderAnthropic"),
    LLMProviders.MISTRAL: ("openai", "ProviderMistral"),
    LLMProviders.GOOGLE: ("gemini", "ProviderGoogle"),
    LLMProviders.GROQ: ("openai", "ProviderGroq"),
    LLMProviders.FIREWORKS: ("openai", "ProviderFireworks"),
    LLMProviders.SELF_HOSTED: ("openai", "ProviderSelfHosted"),
}


def _load_provider_class(module: str, cls: str) -> Type[ProviderHandle]:
    """Import a provider module lazily so one broken vendor SDK only affects its own providers."""
    mod = importlib.import_module(f"aistudio.core.providers.{module}")
    provider_cls = getattr(mod, cls, None)
    if provider_cls is None:
        raise ImportError(f"{cls} not found in {module}")
    return cast(Type[ProviderHandle], provider_cls)


def create_provider(
    provider_settings: Optional[ProviderSettings],
    logger: Optional[AIStudioLogger] = None,
) -> ProviderHandle:
    """Create the handle for a provider configuration.

    Never raises: unselected or unknown providers and any construction
    failure yield a ``NoProvider``.
    """
    logger = logger or get_logger()
    if provider_settings is None:
        return NoProvider(logger)

    entry = PROVIDER_CLASSES.get(provider_settings.used_provider)
    if entry is None:
        return NoProvider(logger)

    try:
        provider_cls = _load_provider_class(*entry)
        if provider_settings.used_provider == LLMProviders.SELF_HOSTED:
            return provider_cls(  # type: ignore[call-arg]
                logger, provider_settings.instance_name, provider_settings
            )
        return provider_cls(logger, provider_settings.instance_name)
    except Exception as e:
        logger.error(
            f"Failed to create provider: {e}",
            extra={
                "provider": provider_settings.used_provider.value,
                "instance_name": provider_settings.instance_name,
            },
        )
        return NoProvider(logger)


__all__ = ["NoProvider", "PROVIDER_CLASSES", "ProviderHandle", "create_provider"]
