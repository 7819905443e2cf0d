"""Default values shared by the config schema and the rule classifier."""

from __future__ import annotations

DEFAULT_MONITORED_CITY = "Дніпро"

# Lowercase prefixes; declined forms ("Дніпрі", "Днепра") start with these.
DEFAULT_CITY_VARIANTS: tuple[str, ...] = (
    "дніпро",
    "днепр",
    "днипро",
    "дніпр",
    "dnipro",
)

# Cities that share regional feeds with the monitored one. A post naming one of
# these without the monitored city is treated as not concerning us.
DEFAULT_OTHER_CITIES: tuple[str, ...] = (
    "дніпрорудн",
    "днепрорудн",
    "запоріж",
    "запорож",
    "харків",
    "харьков",
    "кривий ріг",
    "кривого рогу",
    "кривой рог",
    "кривого рога",
    "павлоград",
    "кам'янськ",
    "каменск",
    "нікопол",
    "никопол",
    "новомосковськ",
    "самар",
    "полтав",
    "сумы",
    "суми",
    "одес",
    "київ",
    "киев",
)

DEFAULT_CHANNEL = "-1001699010379"
DEFAULT_CLASSIFIER_MODEL = "openrouter/openai/gpt-4o-mini"
DEFAULT_CLASSIFIER_API_BASE = "https://openrouter.ai/api/v1"

DEFAULT_CALLS = {
    "max_retries": 3,
    "retry_interval_s": 120.0,
    "call_timeout_s": 40.0,
}

DEFAULT_MAX_SEEN_IDS = 1000
DEFAULT_FETCH_LIMIT = 20
DEFAULT_POLL_INTERVAL_S = 60.0
DEFAULT_AI_BATCH_SIZE = 5
