"""LLM-backed threat classifier with keyword-rule fallback.

Posts are sent in small batches and the model must return one verdict per
post, in order. Any failure for a batch (transport error, empty reply,
malformed JSON, wrong number of verdicts) is recovered locally by running the
rule classifier on that batch, so callers never see a classification error.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from raidwatch.classify.rules import RuleClassifier
from raidwatch.classify.text import strip_footer
from raidwatch.config.defaults import DEFAULT_AI_BATCH_SIZE
from raidwatch.core.models import StreamItem, ThreatAssessment, ThreatLevel
from raidwatch.errors import ClassificationError
from raidwatch.providers.base import LLMProvider

_SYSTEM_PROMPT = """\
You analyse Ukrainian air-raid alert channel posts for exactly one city: "{city}".

Threat levels:
- "red": critical danger for {city}. A missile, drone or guided bomb is 5-10 \
minutes away or already over the city; the post says "{city} червоний/красный", \
"ракета над {city}", "КАБ по {city}". Shelter is mandatory.
- "orange": a threat 10-20 minutes away, or a target moving towards or past \
{city}; "{city} помаранчевий/оранжевый", "ракета йде на {city}".
- "purple": ballistic threat ("ББ", "баліст", "фіолетовий/фиолетовый") \
for {city}; may turn red.
- "yellow": an alert exists but the danger to {city} is unlikely or unclear.
- "none": {city} is not mentioned, the post is an all-clear ("відбій", \
"отбой"), or it is about other cities.

Rules:
1. Match the city name exactly, including its declined forms. A different \
settlement whose name merely starts with or resembles "{city}" is NOT a match.
2. Ignore link footers, channel names and promo lines at the end of a post.
3. If only the surrounding region or oblast is mentioned and the city itself \
is not clearly affected, use "yellow".
4. Judge every post on its own.

Return ONLY a JSON object, no markdown fences, no prose:
{{"analyses": [{{"level": "red"|"orange"|"purple"|"yellow"|"none", \
"confidence": 0-100, "reason": "short explanation", "city_mentioned": true|false}}]}}
The "analyses" list must contain exactly one entry per post, in input order.\
"""

_MAX_POST_CHARS = 1500
_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class _VerdictPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: Literal["red", "orange", "purple", "yellow", "none"]
    confidence: int = Field(ge=0, le=100)
    reason: str = ""
    city_mentioned: bool = False


class _BatchPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    analyses: list[_VerdictPayload]


class LLMClassifier:
    """Async LLM classifier for channel posts."""

    def __init__(
        self,
        *,
        provider: LLMProvider,
        monitored_city: str,
        fallback: RuleClassifier,
        model: str | None = None,
        batch_size: int = DEFAULT_AI_BATCH_SIZE,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> None:
        self._provider = provider
        self._fallback = fallback
        self._model = (model or provider.get_default_model()).strip()
        self._batch_size = max(1, min(DEFAULT_AI_BATCH_SIZE, int(batch_size)))
        self._temperature = float(temperature)
        self._max_tokens = int(max_tokens)
        self._system_prompt = _SYSTEM_PROMPT.format(city=monitored_city)
        logger.info("ai classifier ready  model={} batch_size={}", self._model, self._batch_size)

    async def classify(self, items: Sequence[StreamItem]) -> list[ThreatAssessment]:
        results: list[ThreatAssessment] = []
        for start in range(0, len(items), self._batch_size):
            batch = items[start : start + self._batch_size]
            try:
                verdicts = await self._classify_batch(batch)
            except ClassificationError as exc:
                logger.warning("ai classification failed, using keyword rules: {}", exc)
                verdicts = await self._fallback.classify(batch)
            results.extend(verdicts)
        return results

    async def classify_one(self, item: StreamItem) -> ThreatAssessment:
        """Convenience wrapper around the batch contract."""
        return (await self.classify([item]))[0]

    async def _classify_batch(self, batch: Sequence[StreamItem]) -> list[ThreatAssessment]:
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": _render_batch(batch)},
        ]
        try:
            response = await self._provider.chat(
                messages=messages,
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                response_format={"type": "json_object"},
            )
        except Exception as exc:
            raise ClassificationError(f"request failed: {exc}") from exc

        content = (response.content or "").strip()
        if not content:
            raise ClassificationError("empty response")

        verdicts = _parse_response(content)
        if len(verdicts) != len(batch):
            raise ClassificationError(f"expected {len(batch)} verdicts, got {len(verdicts)}")

        for idx, verdict in enumerate(verdicts, start=1):
            logger.info(
                "ai verdict post {}: {} ({}%) - {}",
                idx,
                verdict.level.value,
                verdict.confidence,
                verdict.reason,
            )
        return verdicts


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _render_batch(batch: Sequence[StreamItem]) -> str:
    blocks = []
    for idx, item in enumerate(batch, start=1):
        body = strip_footer(item.text)[:_MAX_POST_CHARS] or "[empty]"
        blocks.append(f"Post {idx}:\n{body}")
    return "\n---\n".join(blocks)


def _parse_response(content: str) -> list[ThreatAssessment]:
    """Parse the model's JSON reply into assessments."""
    payload = _extract_json(content)
    if payload is None:
        logger.debug("classifier returned non-JSON: {}", content[:200])
        raise ClassificationError("response is not a JSON object")
    try:
        batch = _BatchPayload.model_validate(payload)
    except ValidationError as exc:
        raise ClassificationError(f"response failed validation: {exc.error_count()} errors") from exc

    return [
        ThreatAssessment.for_level(
            ThreatLevel(v.level),
            confidence=v.confidence,
            reason=v.reason[:256],
            city_mentioned=v.city_mentioned,
        )
        for v in batch.analyses
    ]


def _extract_json(text: str) -> dict[str, Any] | None:
    """First JSON object in the reply: bare, inside a code fence, or wrapped in prose."""
    stripped = text.strip()
    candidates = [stripped, *(chunk.strip() for chunk in _FENCE.findall(stripped))]
    start, end = stripped.find("{"), stripped.rfind("}")
    if 0 <= start < end:
        candidates.append(stripped[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None
