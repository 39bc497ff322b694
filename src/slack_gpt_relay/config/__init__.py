"""Configuration loading and validation."""

from .loader import load_config, load_config_from_env
from .schema import (
    AnthropicConfig,
    AssistantConfig,
    HistoryConfig,
    LLMConfig,
    LoggingConfig,
    OpenAIConfig,
    RelayConfig,
    ServerConfig,
    SlackConfig,
)

__all__ = [
    # Loaders
    "load_config",
    "load_config_from_env",
    # Root config
    "RelayConfig",
    # Top-level configs
    "SlackConfig",
    "LLMConfig",
    "AssistantConfig",
    "HistoryConfig",
    "ServerConfig",
    "LoggingConfig",
    # Provider-specific configs
    "OpenAIConfig",
    "AnthropicConfig",
]
