"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
DEFAULT_FALLBACK_REPLY = "Sorry, I encountered an error processing your request."
DEFAULT_GREETING = "Hi! How can I help you today?"


class SlackConfig(BaseModel):
    """Slack-specific configuration."""

    bot_token: str
    signing_secret: str
    replay_window: int = Field(300, ge=1, description="Max request age in seconds")

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate Slack bot token format."""
        if not v.startswith("xoxb-"):
            raise ValueError("Bot token must start with xoxb-")
        return v

    @field_validator("signing_secret")
    @classmethod
    def validate_signing_secret(cls, v: str) -> str:
        """Reject an empty signing secret."""
        if not v.strip():
            raise ValueError("Signing secret must not be empty")
        return v


class OpenAIConfig(BaseModel):
    """OpenAI-specific configuration."""

    api_key: str
    model: str = "gpt-4o"
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    base_url: str | None = None


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    api_key: str
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 4096
    temperature: float = Field(0.7, ge=0.0, le=1.0)


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: Literal["openai", "anthropic"] = "openai"
    openai: OpenAIConfig | None = None
    anthropic: AnthropicConfig | None = None


class AssistantConfig(BaseModel):
    """Assistant behaviour: system instruction and canned replies."""

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    system_prompt_file: Path | None = None
    fallback_reply: str = DEFAULT_FALLBACK_REPLY
    greeting: str = DEFAULT_GREETING

    @model_validator(mode="after")
    def load_system_prompt_file(self) -> "AssistantConfig":
        """Read the system prompt from file when one is configured."""
        if self.system_prompt_file is not None:
            if not self.system_prompt_file.exists():
                raise ValueError(f"System prompt file not found: {self.system_prompt_file}")
            self.system_prompt = self.system_prompt_file.read_text().strip()
        if not self.system_prompt:
            raise ValueError("System prompt must not be empty")
        return self


class HistoryConfig(BaseModel):
    """Thread history fetching."""

    paginate: bool = True
    page_limit: int = Field(200, ge=1, le=1000)
    max_pages: int = Field(10, ge=1, le=100)


class ServerConfig(BaseModel):
    """HTTP listener configuration."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(3000, ge=1, le=65535)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"


class RelayConfig(BaseSettings):
    """Root configuration for the Slack GPT relay."""

    slack: SlackConfig
    llm: LLMConfig
    assistant: AssistantConfig = AssistantConfig()
    history: HistoryConfig = HistoryConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )
