"""Threat classification: AI-backed with a keyword-rule fallback."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from raidwatch.classify.llm import LLMClassifier
from raidwatch.classify.rules import RuleClassifier
from raidwatch.classify.text import normalize, strip_footer

if TYPE_CHECKING:
    from raidwatch.config.schema import Config
    from raidwatch.core.ports import ClassifierPort
    from raidwatch.providers.base import LLMProvider


def build_classifier(config: "Config", provider: "LLMProvider | None" = None) -> "ClassifierPort":
    """Pick the classifier once at startup from the presence of an API key."""
    rules = RuleClassifier(
        city_variants=config.alert.city_variants,
        other_cities=config.alert.other_cities,
    )
    settings = config.classifier
    if not settings.enabled and provider is None:
        logger.info("ai classifier disabled (no api key), using keyword rules")
        return rules

    if provider is None:
        from raidwatch.providers.litellm_provider import LiteLLMProvider

        provider = LiteLLMProvider(
            api_key=settings.api_key.strip(),
            api_base=settings.api_base,
            default_model=settings.model,
            extra_headers=settings.extra_headers,
        )
    return LLMClassifier(
        provider=provider,
        monitored_city=config.alert.monitored_city,
        fallback=rules,
        model=settings.model,
        batch_size=settings.batch_size,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


__all__ = [
    "LLMClassifier",
    "RuleClassifier",
    "build_classifier",
    "normalize",
    "strip_footer",
]
