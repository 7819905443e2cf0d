"""Reading and writing ``config.json``.

The file uses camelCase keys; the schema uses snake_case. Values come from,
in order of precedence, the file, ``RAIDWATCH_*`` environment variables, and
schema defaults.
"""

import json
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

from raidwatch.config.schema import Config
from raidwatch.errors import ConfigurationError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def get_config_path() -> Path:
    from raidwatch.utils.helpers import get_home_path

    return get_home_path() / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """Build the configuration. An unreadable file is reported and ignored."""
    path = config_path or get_config_path()
    raw = _read_file(path)
    if raw is None:
        return Config()
    try:
        return Config(**convert_keys(raw))
    except ValueError as e:
        logger.warning("Invalid values in {}: {}", path, e)
        logger.warning("Falling back to environment and default configuration.")
        return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Write ``config`` as camelCase JSON, readable by the owner only."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(convert_to_camel(config.model_dump()), indent=2, ensure_ascii=False)

    tmp_path = path.with_name(f".{path.name}.tmp-{os.getpid()}")
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(payload)
    os.replace(tmp_path, path)


def validate_startup(config: Config) -> None:
    """Raise ConfigurationError when credentials needed to run are missing."""
    missing = config.missing_required()
    if missing:
        raise ConfigurationError(missing)
    if not config.classifier.enabled:
        logger.warning("classifier api key not set, using rule-based classification")
    logger.info("config loaded  channel={} city={}", config.telegram.channel, config.alert.monitored_city)


def _read_file(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        logger.debug("no config file at {}", path)
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read config from {}: {}", path, e)
        return None
    if not isinstance(raw, dict):
        logger.warning("Ignoring {}: the top level must be a JSON object", path)
        return None
    return raw


# ── Key style conversion ─────────────────────────────────────────────


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _rekey(data: Any, rename: Callable[[str], str]) -> Any:
    if isinstance(data, dict):
        return {rename(k): _rekey(v, rename) for k, v in data.items()}
    if isinstance(data, list):
        return [_rekey(item, rename) for item in data]
    return data


def convert_keys(data: Any) -> Any:
    """camelCase keys (file) to snake_case (schema), recursively."""
    return _rekey(data, camel_to_snake)


def convert_to_camel(data: Any) -> Any:
    """snake_case keys (schema) to camelCase (file), recursively."""
    return _rekey(data, snake_to_camel)
