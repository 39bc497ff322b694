"""FastAPI application exposing the Slack events endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from slack_gpt_relay._version import __version__

if TYPE_CHECKING:
    from slack_gpt_relay.config.schema import RelayConfig
    from slack_gpt_relay.core.router import EventRouter

log = structlog.get_logger()

HEALTH_MESSAGE = "Slack GPT relay is running"


def create_app(config: RelayConfig | None = None, router: EventRouter | None = None) -> FastAPI:
    """Build the ASGI application.

    Args:
        config: Application configuration, used to build the router when
            ``router`` is not given
        router: Pre-built event router

    Returns:
        FastAPI application

    Raises:
        ValueError: If neither config nor router is provided
    """
    if router is None:
        if config is None:
            raise ValueError("Either config or router is required")
        from slack_gpt_relay.core.router import create_router

        router = create_router(config)

    app = FastAPI(title="Slack GPT Relay", version=__version__)
    app.state.router = router

    @app.get("/")
    async def health() -> dict[str, str]:
        """Liveness check."""
        return {"status": "ok", "message": HEALTH_MESSAGE}

    @app.post("/slack/events")
    @app.post("/events")
    async def slack_events(request: Request, background_tasks: BackgroundTasks) -> Response:
        """Receive an Events API request and acknowledge it immediately."""
        raw_body = await request.body()
        result = app.state.router.receive(request.headers, raw_body)

        if result.event is not None:
            background_tasks.add_task(app.state.router.dispatch, result.event)

        if result.body is None:
            return Response(status_code=result.status_code)
        return JSONResponse(result.body, status_code=result.status_code)

    return app
