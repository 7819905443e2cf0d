"""Keyword rules for the offline threat classifier."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from loguru import logger

from raidwatch.classify.text import normalize
from raidwatch.config.defaults import DEFAULT_CITY_VARIANTS, DEFAULT_OTHER_CITIES
from raidwatch.core.models import StreamItem, ThreatAssessment, ThreatLevel

_RED = [
    re.compile(r"червон"),
    re.compile(r"красн"),
    re.compile(r"критич"),
    re.compile(r"над (?:город|міст)"),
]

_ORANGE = [
    re.compile(r"помаранчев"),
    re.compile(r"оранжев"),
]

_PURPLE = [
    re.compile(r"фіолетов"),
    re.compile(r"фиолетов"),
    re.compile(r"(?<!\w)бб(?!\w)"),
    re.compile(r"баліст"),
    re.compile(r"баллист"),
]

_STAND_DOWN = [
    re.compile(r"відбій"),
    re.compile(r"отбой"),
    re.compile(r"скасов"),
    re.compile(r"отмен"),
]

# Checked in order; the first family that matches decides the level.
_FAMILIES: tuple[tuple[ThreatLevel, list[re.Pattern[str]], int, str], ...] = (
    (ThreatLevel.RED, _RED, 70, "red code for the city (keyword rules)"),
    (ThreatLevel.ORANGE, _ORANGE, 70, "orange code for the city (keyword rules)"),
    (ThreatLevel.PURPLE, _PURPLE, 70, "ballistic / purple code for the city (keyword rules)"),
    (ThreatLevel.NONE, _STAND_DOWN, 80, "all clear for the city"),
)


def _prefix_patterns(names: Iterable[str]) -> list[re.Pattern[str]]:
    patterns = []
    for name in names:
        cleaned = " ".join(name.split()).strip().lower()
        if cleaned:
            patterns.append(re.compile(rf"(?<!\w){re.escape(cleaned)}"))
    return patterns


def _match_any(patterns: list[re.Pattern[str]], text: str) -> bool:
    return any(p.search(text) for p in patterns)


class RuleClassifier:
    """Deterministic classifier used when no AI credential is configured.

    Another city's name is masked out before looking for the monitored
    city, so "Дніпрорудне" does not count as a mention of "Дніпро".
    """

    def __init__(
        self,
        *,
        city_variants: Sequence[str] = DEFAULT_CITY_VARIANTS,
        other_cities: Sequence[str] = DEFAULT_OTHER_CITIES,
    ) -> None:
        self._city = _prefix_patterns(city_variants)
        self._others = _prefix_patterns(other_cities)
        if not self._city:
            raise ValueError("city_variants must contain at least one name")

    async def classify(self, items: Sequence[StreamItem]) -> list[ThreatAssessment]:
        return [self.assess_text(item.text) for item in items]

    def assess_text(self, text: str) -> ThreatAssessment:
        """Classify one post body."""
        lowered = normalize(text)
        masked = lowered
        for pattern in self._others:
            masked = pattern.sub(" ", masked)

        if not _match_any(self._city, masked):
            reason = "other city only" if masked != lowered else "city not mentioned"
            return ThreatAssessment.for_level(
                ThreatLevel.NONE,
                confidence=80,
                reason=reason,
                city_mentioned=False,
            )

        for level, patterns, confidence, reason in _FAMILIES:
            if _match_any(patterns, masked):
                logger.debug("rule match level={} text={!r}", level.value, masked[:80])
                return ThreatAssessment.for_level(
                    level,
                    confidence=confidence,
                    reason=reason,
                    city_mentioned=True,
                )

        return ThreatAssessment.for_level(
            ThreatLevel.YELLOW,
            confidence=60,
            reason="city mentioned without a clear threat (keyword rules)",
            city_mentioned=True,
        )
