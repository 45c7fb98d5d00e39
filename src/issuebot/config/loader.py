"""Config loading: YAML file, then secrets from the environment (and .env)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from issuebot.core.errors import BotConfigurationError

# env var -> (section, key)
ENV_SECRETS = {
    "ISSUEBOT_GITHUB_TOKEN": ("github", "token"),
    "ISSUEBOT_IRC_PASSWORD": ("irc", "password"),
}


def _deep_update(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path) -> dict[str, Any]:
    """Parse the YAML config file. A missing or empty file yields {}.

    Raises BotConfigurationError for unparsable YAML or a non-mapping document.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise BotConfigurationError(
            f"cannot parse {path}: {exc}",
            code="invalid_yaml",
            details={"path": str(path)},
            original_error=exc,
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BotConfigurationError(
            f"{path} must contain a mapping at the top level",
            code="invalid_structure",
            details={"path": str(path), "type": type(data).__name__},
        )
    return data


def _env_overlay() -> dict[str, Any]:
    overlay: dict[str, Any] = {}
    for env_key, (section, key) in ENV_SECRETS.items():
        value = os.environ.get(env_key)
        if value:
            logger.debug("Using {} from environment", env_key)
            overlay.setdefault(section, {})[key] = value
    return overlay


def load_config_with_env(path: str | Path) -> dict[str, Any]:
    """Load config from YAML and overlay secrets from the environment.

    A .env file in the working directory is read first (python-dotenv); real
    environment variables win over it.
    """
    from dotenv import load_dotenv

    load_dotenv()
    return _deep_update(load_config(path), _env_overlay())
