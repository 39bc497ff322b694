"""structlog setup for the relay.

Both the relay's own structlog calls and plain ``logging`` records (uvicorn,
slack_sdk, the SDK clients) are rendered by one
``structlog.stdlib.ProcessorFormatter`` on a single stderr handler, so every
line carries the same service fields, goes through the same secret
scrubbing, and comes out in the same format.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from enum import StrEnum
from typing import Any

import structlog
from structlog.typing import Processor

from slack_gpt_relay._version import __version__
from slack_gpt_relay.utils.security import SecretRedactor

SERVICE_NAME = "slack-gpt-relay"

# Loggers that install their own handlers; their records are routed to root
_FOREIGN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


class RedactSecrets:
    """Processor that scrubs credentials from every event dict."""

    def __init__(self, redactor: SecretRedactor | None = None) -> None:
        self._redactor = redactor or SecretRedactor()

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        return {key: self._redactor.scrub(value, key=key) for key, value in event_dict.items()}


def add_service(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Stamp the service name and version on each entry."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def _shared_processors() -> list[Processor]:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service,
        RedactSecrets(),
    ]


def build_formatter(log_format: LogFormat | str = LogFormat.JSON) -> logging.Formatter:
    """Create the formatter that renders every record on the handler."""
    log_format = LogFormat(str(log_format).lower())

    final: list[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_format == LogFormat.JSON:
        final += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        final.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=final,
    )


def _level_number(level: str) -> int:
    number = logging.getLevelNamesMapping().get(level.upper())
    if number is None:
        raise ValueError(f"Unknown log level: {level}")
    return number


def configure_logging(
    level: str = "INFO",
    log_format: LogFormat | str = LogFormat.JSON,
) -> None:
    """Route structlog and stdlib logging to stderr through one formatter.

    Safe to call more than once; the CLI calls it before and after the
    configuration file is read.

    Args:
        level: Standard level name, case-insensitive
        log_format: ``json`` for production, ``console`` for development

    Raises:
        ValueError: On an unknown level or format
    """
    number = _level_number(level)
    formatter = build_formatter(log_format)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(number)

    for name in _FOREIGN_LOGGERS:
        foreign = logging.getLogger(name)
        foreign.handlers.clear()
        foreign.propagate = True


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every log line of the current task until cleared."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop all fields bound with bind_context."""
    structlog.contextvars.clear_contextvars()
