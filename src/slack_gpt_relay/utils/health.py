"""Startup health check for the relay's two upstreams.

``--health-check`` asks Slack whether the bot token is valid (auth.test)
and asks the model provider whether the configured model exists. The
relay is healthy only when both answer yes.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from slack_gpt_relay.config.schema import RelayConfig
    from slack_gpt_relay.interfaces.chat import ChatProvider
    from slack_gpt_relay.interfaces.llm import LLMProvider

log = structlog.get_logger()


@dataclass(frozen=True)
class CheckResult:
    """Result of a single health check."""

    name: str
    ok: bool
    message: str
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Outcome of every check at one point in time."""

    checks: list[CheckResult]
    timestamp: datetime

    @property
    def healthy(self) -> bool:
        return all(c.ok for c in self.checks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "healthy": self.healthy,
            "timestamp": self.timestamp.isoformat(),
            "checks": [
                {
                    "name": c.name,
                    "ok": c.ok,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                    "details": c.details,
                }
                for c in self.checks
            ],
        }


async def _timed(call: Callable[[], Awaitable[Any]]) -> tuple[Any, float]:
    start = time.monotonic()
    value = await call()
    return value, (time.monotonic() - start) * 1000


class HealthChecker:
    """Checks that Slack and the model provider accept our credentials.

    Example:
        report = await HealthChecker(config).run_all_checks()
        if not report.healthy:
            print(report.to_dict())
    """

    def __init__(
        self,
        config: RelayConfig,
        chat: ChatProvider | None = None,
        llm: LLMProvider | None = None,
    ) -> None:
        """Initialize the health checker.

        Args:
            config: Application configuration
            chat: Chat provider to check; a SlackAdapter is built when None
            llm: LLM provider to check; built from config when None
        """
        self._config = config
        self._chat = chat
        self._llm = llm

    async def run_all_checks(self) -> HealthReport:
        """Run both checks concurrently and collect a report."""
        log.info("health_check_start")
        timestamp = datetime.now(UTC)

        checks = list(await asyncio.gather(self.check_slack(), self.check_model()))
        report = HealthReport(checks=checks, timestamp=timestamp)

        log.info(
            "health_check_complete",
            healthy=report.healthy,
            failed=[c.name for c in checks if not c.ok],
        )
        return report

    async def check_slack(self) -> CheckResult:
        """Validate the bot token with auth.test."""
        try:
            chat = self._chat
            if chat is None:
                from slack_gpt_relay.adapters.chat.slack import SlackAdapter

                chat = SlackAdapter(self._config.slack)

            payload, latency = await _timed(chat.auth_test)
        except Exception as e:
            return CheckResult(name="slack_auth", ok=False, message=f"Slack auth check failed: {e}")

        return CheckResult(
            name="slack_auth",
            ok=True,
            message="Slack bot token valid",
            latency_ms=latency,
            details={"team": payload.get("team"), "bot_user": payload.get("user")},
        )

    async def check_model(self) -> CheckResult:
        """Confirm the provider knows the configured model."""
        provider = self._config.llm.provider
        try:
            llm = self._llm
            if llm is None:
                from slack_gpt_relay.core.router import create_llm_adapter

                llm = create_llm_adapter(self._config)

            _, latency = await _timed(llm.verify_model)
        except Exception as e:
            return CheckResult(
                name="llm_model",
                ok=False,
                message=f"{provider} model check failed: {e}",
                details={"provider": provider},
            )

        return CheckResult(
            name="llm_model",
            ok=True,
            message=f"{provider} model {llm.model_name} available",
            latency_ms=latency,
            details={"provider": provider, "model": llm.model_name},
        )
