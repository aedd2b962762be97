"""Tests for provider confidence descriptors."""

from __future__ import annotations

import pytest

from aistudio.core.confidence import (
    BASELINES,
    NO_PROVIDER,
    ConfidenceCategory,
    get_confidence,
    provider_confidence,
)
from aistudio.core.config import ConfidenceLevel, ConfidenceSchemes, LLMProviders


@pytest.mark.parametrize("level", list(ConfidenceLevel))
def test_none_provider_always_reports_no_provider(level):
    confidence = get_confidence(LLMProviders.NONE, level)
    assert confidence is NO_PROVIDER
    assert confidence.category == ConfidenceCategory.NONE
    assert confidence.level == ConfidenceLevel.NONE


def test_every_real_provider_has_a_baseline():
    assert set(BASELINES) == {p for p in LLMProviders if p != LLMProviders.NONE}


@pytest.mark.parametrize("provider", [p for p in LLMProviders if p != LLMProviders.NONE])
def test_configured_level_replaces_only_the_level(provider):
    result = get_confidence(provider, ConfidenceLevel.LOW)
    baseline = BASELINES[provider]

    assert result.level == ConfidenceLevel.LOW
    assert result.category == baseline.category
    assert result.description == baseline.description
    assert result.region == baseline.region
    assert result.sources == baseline.sources


def test_baselines_are_not_mutated_by_lookups():
    before = BASELINES[LLMProviders.MISTRAL].level
    get_confidence(LLMProviders.MISTRAL, ConfidenceLevel.UNTRUSTED)
    assert BASELINES[LLMProviders.MISTRAL].level == before


def test_vendor_facts():
    mistral = BASELINES[LLMProviders.MISTRAL]
    assert mistral.category == ConfidenceCategory.GDPR_NO_TRAINING
    assert mistral.region == "Europe, France"

    fireworks = BASELINES[LLMProviders.FIREWORKS]
    assert fireworks.category == ConfidenceCategory.USA_NOT_TRUSTED
    assert fireworks.sources == ("https://fireworks.ai/terms-of-service",)

    assert len(BASELINES[LLMProviders.OPEN_AI].sources) == 4
    self_hosted = BASELINES[LLMProviders.SELF_HOSTED]
    assert self_hosted.category == ConfidenceCategory.SELF_HOSTED
    assert self_hosted.region == ""
    assert self_hosted.sources == ()


def test_provider_confidence_uses_the_active_scheme(settings_manager):
    with settings_manager.edit() as data:
        data.llm_providers.confidence_scheme = ConfidenceSchemes.TRUST_EUROPE

    assert provider_confidence(LLMProviders.MISTRAL, settings_manager).level == ConfidenceLevel.MEDIUM
    assert provider_confidence(LLMProviders.OPEN_AI, settings_manager).level == ConfidenceLevel.LOW
    assert provider_confidence(LLMProviders.SELF_HOSTED, settings_manager).level == ConfidenceLevel.HIGH


@pytest.mark.parametrize(
    "provider",
    [p for p in LLMProviders if p not in (LLMProviders.NONE, LLMProviders.SELF_HOSTED)],
)
def test_cloud_providers_report_region_and_sources(provider):
    first = get_confidence(provider, ConfidenceLevel.MODERATE)
    assert first.region
    assert first.sources
    assert get_confidence(provider, ConfidenceLevel.MODERATE) == first


@pytest.mark.parametrize("level", list(ConfidenceLevel))
def test_fireworks_facts_do_not_depend_on_the_level(level):
    confidence = get_confidence(LLMProviders.FIREWORKS, level)
    assert confidence.region == "America, U.S."
    assert "https://fireworks.ai/terms-of-service" in confidence.sources
    assert confidence.level == level
