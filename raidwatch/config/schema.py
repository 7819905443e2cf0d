"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from raidwatch.config.defaults import (
    DEFAULT_AI_BATCH_SIZE,
    DEFAULT_CALLS,
    DEFAULT_CHANNEL,
    DEFAULT_CITY_VARIANTS,
    DEFAULT_CLASSIFIER_API_BASE,
    DEFAULT_CLASSIFIER_MODEL,
    DEFAULT_FETCH_LIMIT,
    DEFAULT_MAX_SEEN_IDS,
    DEFAULT_MONITORED_CITY,
    DEFAULT_OTHER_CITIES,
    DEFAULT_POLL_INTERVAL_S,
)
from raidwatch.utils.helpers import get_state_path


def _peer_text(value: object) -> object:
    # numeric ids are often written as JSON numbers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class TelegramConfig(BaseModel):
    """Telegram user-client credentials and the channel to watch."""

    model_config = ConfigDict(extra="ignore")

    api_id: int = 0  # from my.telegram.org
    api_hash: str = ""
    session_path: str = ""  # default: <home>/secrets/telegram
    channel: str = DEFAULT_CHANNEL  # numeric id or @username
    fetch_limit: int = Field(default=DEFAULT_FETCH_LIMIT, ge=1, le=100)
    connection_retries: int = 5

    @field_validator("channel", mode="before")
    @classmethod
    def channel_as_text(cls, value: object) -> object:
        return _peer_text(value)

    @property
    def session_file(self) -> Path:
        if self.session_path.strip():
            return Path(self.session_path).expanduser()
        return get_state_path("secrets") / "telegram"


class AlertConfig(BaseModel):
    """Who gets notified and which city matters."""

    model_config = ConfigDict(extra="ignore")

    monitored_city: str = DEFAULT_MONITORED_CITY
    city_variants: list[str] = Field(default_factory=lambda: list(DEFAULT_CITY_VARIANTS))
    other_cities: list[str] = Field(default_factory=lambda: list(DEFAULT_OTHER_CITIES))
    recipient_id: str = ""  # Telegram user id or @username

    @field_validator("recipient_id", mode="before")
    @classmethod
    def recipient_as_text(cls, value: object) -> object:
        return _peer_text(value)


class ScheduleConfig(BaseModel):
    """Poll cadence."""

    model_config = ConfigDict(extra="ignore")

    poll_interval_s: float = Field(default=DEFAULT_POLL_INTERVAL_S, gt=0)


class CallsConfig(BaseModel):
    """Call campaign limits."""

    model_config = ConfigDict(extra="ignore")

    max_retries: int = Field(default=int(DEFAULT_CALLS["max_retries"]), ge=1)
    retry_interval_s: float = Field(default=float(DEFAULT_CALLS["retry_interval_s"]), ge=0)
    call_timeout_s: float = Field(default=float(DEFAULT_CALLS["call_timeout_s"]), gt=0)


class ClassifierConfig(BaseModel):
    """AI classifier settings. An empty api_key selects the rule classifier."""

    model_config = ConfigDict(extra="ignore")

    api_key: str = ""
    api_base: str | None = DEFAULT_CLASSIFIER_API_BASE
    model: str = DEFAULT_CLASSIFIER_MODEL
    batch_size: int = Field(default=DEFAULT_AI_BATCH_SIZE, ge=1, le=DEFAULT_AI_BATCH_SIZE)
    temperature: float = 0.3
    max_tokens: int = 2000
    extra_headers: dict[str, str] | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key.strip())


class StorageConfig(BaseModel):
    """Cursor persistence."""

    model_config = ConfigDict(extra="ignore")

    cursor_path: str = ""  # default: <home>/data/cursor.json
    max_seen_ids: int = Field(default=DEFAULT_MAX_SEEN_IDS, ge=1)

    @property
    def cursor_file(self) -> Path:
        if self.cursor_path.strip():
            return Path(self.cursor_path).expanduser()
        return get_state_path("data") / "cursor.json"


class LoggingConfig(BaseModel):
    """Log sink settings."""

    model_config = ConfigDict(extra="ignore")

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"] = "INFO"
    file_enabled: bool = False
    rotation: str = "10 MB"
    retention: str = "14 days"


class Config(BaseSettings):
    """Root configuration for raidwatch."""

    model_config = SettingsConfigDict(
        env_prefix="RAIDWATCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    alert: AlertConfig = Field(default_factory=AlertConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    calls: CallsConfig = Field(default_factory=CallsConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def missing_required(self) -> list[str]:
        """Names of required settings that are still unset."""
        missing: list[str] = []
        if not self.telegram.api_id:
            missing.append("telegram.apiId")
        if not self.telegram.api_hash.strip():
            missing.append("telegram.apiHash")
        if not self.alert.recipient_id.strip():
            missing.append("alert.recipientId")
        return missing
