"""Trust and privacy descriptors for LLM providers."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict

from aistudio.core.config import ConfidenceLevel, LLMProviders, SettingsManager


class ConfidenceCategory(str, Enum):
    NONE = "none"
    UNKNOWN = "unknown"
    SELF_HOSTED = "self_hosted"
    USA_NOT_TRUSTED = "usa_not_trusted"
    USA_NO_TRAINING = "usa_no_training"
    GDPR_NO_TRAINING = "gdpr_no_training"


_DESCRIPTIONS: Dict[ConfidenceCategory, str] = {
    ConfidenceCategory.NONE: (
        "No provider selected. Please select a provider to see its confidence level."
    ),
    ConfidenceCategory.UNKNOWN: (
        "The trust level of this provider has not yet been thoroughly investigated "
        "and evaluated. We do not know if your data is safe."
    ),
    ConfidenceCategory.SELF_HOSTED: (
        "You or your organization operate the LLM locally or within your trusted "
        "network. In terms of data processing and security, this is the best possible way."
    ),
    ConfidenceCategory.USA_NOT_TRUSTED: (
        "The provider operates its service from the USA and is subject to U.S. "
        "jurisdiction. In case of suspicion, authorities in the USA can access your data. "
        "Please inform yourself about the use of your data. We do not know if your data is safe."
    ),
    ConfidenceCategory.USA_NO_TRAINING: (
        "The provider operates its service from the USA and is subject to U.S. "
        "jurisdiction. In case of suspicion, authorities in the USA can access your data. "
        "The provider's terms of service state that your data is not used for training."
    ),
    ConfidenceCategory.GDPR_NO_TRAINING: (
        "The provider is located in the EU and is subject to the GDPR (General Data "
        "Protection Regulation). Additionally, the provider states that your data is "
        "not used for training."
    ),
}

_BASE_LEVELS: Dict[ConfidenceCategory, ConfidenceLevel] = {
    ConfidenceCategory.NONE: ConfidenceLevel.NONE,
    ConfidenceCategory.UNKNOWN: ConfidenceLevel.UNKNOWN,
    ConfidenceCategory.SELF_HOSTED: ConfidenceLevel.HIGH,
    ConfidenceCategory.USA_NOT_TRUSTED: ConfidenceLevel.UNTRUSTED,
    ConfidenceCategory.USA_NO_TRAINING: ConfidenceLevel.MODERATE,
    ConfidenceCategory.GDPR_NO_TRAINING: ConfidenceLevel.MEDIUM,
}


class Confidence(BaseModel):
    """Immutable trust descriptor; the ``with_*`` methods return new instances."""

    model_config = ConfigDict(frozen=True)

    category: ConfidenceCategory
    description: str
    region: str = ""
    sources: Tuple[str, ...] = ()
    level: ConfidenceLevel = ConfidenceLevel.UNKNOWN

    @classmethod
    def for_category(cls, category: ConfidenceCategory) -> "Confidence":
        return cls(
            category=category,
            description=_DESCRIPTIONS[category],
            level=_BASE_LEVELS[category],
        )

    def with_region(self, region: str) -> "Confidence":
        return self.model_copy(update={"region": region})

    def with_sources(self, *sources: str) -> "Confidence":
        return self.model_copy(update={"sources": tuple(sources)})

    def with_level(self, level: ConfidenceLevel) -> "Confidence":
        return self.model_copy(update={"level": level})


NO_PROVIDER = Confidence.for_category(ConfidenceCategory.NONE)
UNKNOWN = Confidence.for_category(ConfidenceCategory.UNKNOWN)

_USA = "America, U.S."

# Factual baseline per provider. Only the level is replaced by user configuration.
BASELINES: Dict[LLMProviders, Confidence] = {
    LLMProviders.FIREWORKS: Confidence.for_category(ConfidenceCategory.USA_NOT_TRUSTED)
    .with_region(_USA)
    .with_sources("https://fireworks.ai/terms-of-service"),
    LLMProviders.OPEN_AI: Confidence.for_category(ConfidenceCategory.USA_NO_TRAINING)
    .with_region(_USA)
    .with_sources(
        "https://platform.openai.com/docs/models/default-usage-policies-by-endpoint",
        "https://openai.com/policies/terms-of-use/",
        "https://help.openai.com/en/articles/5722486-how-your-data-is-used-to-improve-model-performance",
        "https://openai.com/enterprise-privacy/",
    ),
    LLMProviders.GOOGLE: Confidence.for_category(ConfidenceCategory.USA_NO_TRAINING)
    .with_region(_USA)
    .with_sources("https://ai.google.dev/gemini-api/terms"),
    LLMProviders.GROQ: Confidence.for_category(ConfidenceCategory.USA_NO_TRAINING)
    .with_region(_USA)
    .with_sources("https://wow.groq.com/terms-of-use/"),
    LLMProviders.ANTHROPIC: Confidence.for_category(ConfidenceCategory.USA_NO_TRAINING)
    .with_region(_USA)
    .with_sources("https://www.anthropic.com/legal/commercial-terms"),
    LLMProviders.MISTRAL: Confidence.for_category(ConfidenceCategory.GDPR_NO_TRAINING)
    .with_region("Europe, France")
    .with_sources("https://mistral.ai/terms/#terms-of-service-la-plateforme"),
    LLMProviders.SELF_HOSTED: Confidence.for_category(ConfidenceCategory.SELF_HOSTED),
}


def get_confidence(provider: LLMProviders, configured_level: ConfidenceLevel) -> Confidence:
    """Return the trust descriptor of a provider with the user's level applied."""
    if provider == LLMProviders.NONE:
        return NO_PROVIDER
    return BASELINES.get(provider, UNKNOWN).with_level(configured_level)


def provider_confidence(provider: LLMProviders, settings_manager: SettingsManager) -> Confidence:
    """Resolve the configured level from settings and look up the descriptor."""
    return get_confidence(provider, settings_manager.get_configured_confidence_level(provider))
