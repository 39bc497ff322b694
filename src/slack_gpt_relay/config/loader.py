"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .schema import RelayConfig


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path) -> RelayConfig:
    """
    Load configuration from YAML file with environment variable substitution.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated RelayConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open() as f:
        raw_yaml = f.read()

    yaml_with_env = substitute_env_vars(raw_yaml)
    config_dict = yaml.safe_load(yaml_with_env) or {}

    config = RelayConfig.model_validate(config_dict)
    validate_config(config)

    return config


def load_config_from_env(environ: Mapping[str, str] | None = None) -> RelayConfig:
    """
    Build configuration from the flat environment variables a deployment sets.

    Recognised variables: SLACK_BOT_TOKEN, SLACK_SIGNING_SECRET, LLM_PROVIDER,
    OPENAI_API_KEY, OPENAI_MODEL, ANTHROPIC_API_KEY, ANTHROPIC_MODEL,
    SYSTEM_PROMPT, SYSTEM_PROMPT_FILE, FALLBACK_REPLY, HOST, PORT,
    LOG_LEVEL and LOG_FORMAT.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Validated RelayConfig instance

    Raises:
        ValueError: If required variables are missing or config is invalid
    """
    env = os.environ if environ is None else environ

    def require(name: str) -> str:
        value = env.get(name)
        if not value:
            raise ValueError(f"Environment variable {name} not found")
        return value

    provider = env.get("LLM_PROVIDER", "openai").lower()

    llm: dict[str, Any] = {"provider": provider}
    if provider == "openai":
        llm["openai"] = _drop_unset(
            {"api_key": require("OPENAI_API_KEY"), "model": env.get("OPENAI_MODEL")}
        )
    elif provider == "anthropic":
        llm["anthropic"] = _drop_unset(
            {"api_key": require("ANTHROPIC_API_KEY"), "model": env.get("ANTHROPIC_MODEL")}
        )

    config_dict: dict[str, Any] = {
        "slack": {
            "bot_token": require("SLACK_BOT_TOKEN"),
            "signing_secret": require("SLACK_SIGNING_SECRET"),
        },
        "llm": llm,
        "assistant": _drop_unset(
            {
                "system_prompt": env.get("SYSTEM_PROMPT"),
                "system_prompt_file": env.get("SYSTEM_PROMPT_FILE"),
                "fallback_reply": env.get("FALLBACK_REPLY"),
            }
        ),
        "server": _drop_unset({"host": env.get("HOST"), "port": env.get("PORT")}),
        "logging": _drop_unset(
            {
                "level": env.get("LOG_LEVEL", "").upper() or None,
                "format": env.get("LOG_FORMAT", "").lower() or None,
            }
        ),
    }

    config = RelayConfig.model_validate(config_dict)
    validate_config(config)

    return config


def _drop_unset(values: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value was not provided so schema defaults apply."""
    return {k: v for k, v in values.items() if v is not None}


def validate_config(config: RelayConfig) -> None:
    """
    Perform additional cross-field validation.

    Ensures that provider-specific configuration is present when
    a provider is selected.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If provider-specific config is missing
    """
    if config.llm.provider == "openai" and config.llm.openai is None:
        raise ValueError("OpenAI provider selected but openai config missing")
    elif config.llm.provider == "anthropic" and config.llm.anthropic is None:
        raise ValueError("Anthropic provider selected but anthropic config missing")
