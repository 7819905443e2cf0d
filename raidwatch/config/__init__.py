"""Configuration module for raidwatch."""

from raidwatch.config.loader import get_config_path, load_config, validate_startup
from raidwatch.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "validate_startup"]
