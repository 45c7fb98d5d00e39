"""Configuration: YAML + env overlay."""

from issuebot.config.loader import _deep_update, load_config, load_config_with_env
from issuebot.config.schema import Config

__all__ = ["Config", "_deep_update", "load_config", "load_config_with_env"]
