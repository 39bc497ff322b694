"""Utility functions and helpers.

This module provides various utilities for the relay:
- security: Secret redaction
- logging: Structured logging with secret sanitization
- health: Startup health check
"""

from slack_gpt_relay.utils.health import (
    CheckResult,
    HealthChecker,
    HealthReport,
)
from slack_gpt_relay.utils.logging import (
    LogFormat,
    RedactSecrets,
    bind_context,
    clear_context,
    configure_logging,
)
from slack_gpt_relay.utils.security import (
    RedactionError,
    SecretRedactor,
)

__all__ = [
    # Health
    "CheckResult",
    "HealthChecker",
    "HealthReport",
    # Logging
    "LogFormat",
    "RedactSecrets",
    # Security
    "RedactionError",
    "SecretRedactor",
    "bind_context",
    "clear_context",
    "configure_logging",
]
