import json
from pathlib import Path

import pytest

from raidwatch.classify import LLMClassifier, RuleClassifier, build_classifier
from raidwatch.config import Config, load_config, validate_startup
from raidwatch.config.loader import camel_to_snake, convert_keys, save_config, snake_to_camel
from raidwatch.errors import ConfigurationError


def _complete_config(**extra) -> Config:
    return Config(
        telegram={"api_id": 123, "api_hash": "abc"},
        alert={"recipient_id": "42"},
        **extra,
    )


def test_key_case_conversion() -> None:
    assert camel_to_snake("pollIntervalS") == "poll_interval_s"
    assert snake_to_camel("retry_interval_s") == "retryIntervalS"
    assert convert_keys({"alert": {"recipientId": "1", "otherCities": ["A"]}}) == {
        "alert": {"recipient_id": "1", "other_cities": ["A"]}
    }


def test_defaults() -> None:
    config = Config()
    assert config.calls.max_retries == 3
    assert config.calls.retry_interval_s == 120
    assert config.calls.call_timeout_s == 40
    assert config.schedule.poll_interval_s == 60
    assert config.storage.max_seen_ids == 1000
    assert config.telegram.fetch_limit == 20
    assert config.classifier.batch_size == 5
    assert config.alert.monitored_city == "Дніпро"


def test_load_camel_case_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "telegram": {"apiId": 777, "apiHash": "hash", "channel": "@alerts"},
                "alert": {"recipientId": "@me"},
                "calls": {"maxRetries": 5, "retryIntervalS": 30},
                "classifier": {"apiKey": "sk-test"},
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.telegram.api_id == 777
    assert config.telegram.channel == "@alerts"
    assert config.alert.recipient_id == "@me"
    assert config.calls.max_retries == 5
    assert config.calls.retry_interval_s == 30
    assert config.calls.call_timeout_s == 40
    assert config.classifier.enabled


def test_invalid_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    config = load_config(path)

    assert config.telegram.api_id == 0


def test_environment_overrides_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAIDWATCH_CALLS__MAX_RETRIES", "7")
    monkeypatch.setenv("RAIDWATCH_ALERT__RECIPIENT_ID", "99")

    config = load_config(tmp_path / "missing.json")

    assert config.calls.max_retries == 7
    assert config.alert.recipient_id == "99"


def test_save_round_trips_camel_case(tmp_path: Path) -> None:
    path = tmp_path / "out" / "config.json"
    save_config(_complete_config(), path)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["telegram"]["apiId"] == 123
    assert raw["alert"]["recipientId"] == "42"
    assert load_config(path).telegram.api_hash == "abc"


def test_missing_credentials_are_listed() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        validate_startup(Config(telegram={"api_id": 1}))

    assert exc_info.value.missing == ["telegram.apiHash", "alert.recipientId"]


def test_complete_config_validates() -> None:
    validate_startup(_complete_config())


def test_rule_classifier_without_api_key() -> None:
    assert isinstance(build_classifier(_complete_config()), RuleClassifier)


def test_ai_classifier_with_api_key() -> None:
    config = _complete_config(classifier={"api_key": "sk-test"})
    assert isinstance(build_classifier(config), LLMClassifier)


def test_default_paths_follow_home_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RAIDWATCH_HOME", str(tmp_path))

    config = Config()

    assert config.storage.cursor_file == tmp_path / "data" / "cursor.json"
    assert config.telegram.session_file == tmp_path / "secrets" / "telegram"


def test_explicit_paths_win(tmp_path: Path) -> None:
    config = Config(storage={"cursor_path": str(tmp_path / "c.json")})
    assert config.storage.cursor_file == tmp_path / "c.json"


def test_numeric_ids_are_accepted(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "telegram": {"apiId": 12345, "apiHash": "abc", "channel": -1001699010379},
                "alert": {"recipientId": 123456789},
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.telegram.api_id == 12345
    assert config.telegram.channel == "-1001699010379"
    assert config.alert.recipient_id == "123456789"
    validate_startup(config)
